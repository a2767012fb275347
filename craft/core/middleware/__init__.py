# (c) Copyright Datacraft, 2026
"""HTTP middleware."""
from .security import (
	RateLimiter,
	RateLimitMiddleware,
	RequestLogMiddleware,
	SecurityHeadersMiddleware,
)

__all__ = [
	"RateLimiter",
	"RateLimitMiddleware",
	"RequestLogMiddleware",
	"SecurityHeadersMiddleware",
]
