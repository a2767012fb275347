# (c) Copyright Datacraft, 2026
"""Security headers, request logging and Redis backed rate limiting."""
import logging
import time
from dataclasses import dataclass

import redis.asyncio as redis
from fastapi import Request, Response
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from craft.core.config import get_settings
from craft.core.exceptions import RateLimitError, error_response

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class RateLimitTier:
	name: str
	window_seconds: int
	max_requests: int
	message: str


def get_tiers() -> dict[str, RateLimitTier]:
	return {
		"auth": RateLimitTier(
			"auth",
			settings.auth_rate_limit_window_seconds,
			settings.auth_rate_limit_max_requests,
			"Too many authentication attempts, please try again later",
		),
		"api": RateLimitTier(
			"api",
			settings.rate_limit_window_seconds,
			settings.rate_limit_max_requests,
			"Too many requests from this IP, please try again later",
		),
		"strict": RateLimitTier(
			"strict",
			settings.strict_rate_limit_window_seconds,
			settings.strict_rate_limit_max_requests,
			"Too many requests for this operation, please try again later",
		),
	}


_redis: redis.Redis | None = None


def get_redis() -> redis.Redis | None:
	global _redis
	if not settings.redis_url:
		return None
	if _redis is None:
		_redis = redis.from_url(settings.redis_url)
	return _redis


def client_key(request: Request) -> str:
	"""
	Address a request is rate limited under.

	``X-Forwarded-For`` is honoured only when the peer is one of
	``trusted_proxies``; the nearest hop that is not a trusted proxy wins.
	"""
	peer = request.client.host if request.client else "unknown"
	if peer not in settings.trusted_proxies:
		return peer
	hops = [h.strip() for h in request.headers.get("X-Forwarded-For", "").split(",") if h.strip()]
	for hop in reversed(hops):
		if hop not in settings.trusted_proxies:
			return hop
	return hops[0] if hops else peer


async def hit(tier: RateLimitTier, client_id: str, client: redis.Redis) -> int:
	"""Count a request in the fixed window of ``tier`` and return the count."""
	key = f"rate_limit:{tier.name}:{client_id}"
	current_count = await client.incr(key)
	if current_count == 1:
		await client.expire(key, tier.window_seconds)
	return current_count


async def check_rate_limit(tier: RateLimitTier, request: Request) -> None:
	if not settings.rate_limit_enabled:
		return
	client = get_redis()
	if client is None:
		return

	client_id = client_key(request)
	try:
		current_count = await hit(tier, client_id, client)
	except RedisError as e:
		# Redis outages let traffic through
		logger.warning(f"Rate limiting unavailable: {e}")
		return

	if current_count > tier.max_requests:
		logger.warning(f"Rate limit '{tier.name}' exceeded for {client_id}")
		raise RateLimitError(tier.message)


class RateLimiter:
	"""Route dependency enforcing one rate limit tier.

	Usage::

		@router.post("/login", dependencies=[Depends(RateLimiter("auth"))])
	"""

	def __init__(self, tier: str):
		self.tier_name = tier

	async def __call__(self, request: Request) -> None:
		await check_rate_limit(get_tiers()[self.tier_name], request)


class RateLimitMiddleware(BaseHTTPMiddleware):
	"""General ``api`` tier applied to every request."""

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		try:
			await check_rate_limit(get_tiers()["api"], request)
		except RateLimitError as e:
			return error_response(e.status_code, e.message, e.code)
		return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		response = await call_next(request)
		response.headers["X-Content-Type-Options"] = "nosniff"
		response.headers["X-Frame-Options"] = "DENY"
		response.headers["X-XSS-Protection"] = "1; mode=block"
		response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
		response.headers["Content-Security-Policy"] = "default-src 'self'; frame-ancestors 'none'"
		if settings.is_production:
			response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"
		if "server" in response.headers:
			del response.headers["server"]
		return response


class RequestLogMiddleware(BaseHTTPMiddleware):
	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		start = time.perf_counter()
		response = await call_next(request)
		duration = (time.perf_counter() - start) * 1000
		logger.info(f"{request.method} {request.url.path} - {response.status_code} - {duration:.1f}ms")
		return response
