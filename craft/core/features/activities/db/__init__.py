# (c) Copyright Datacraft, 2026
"""Activity database models and operations."""

from .orm import Activity

__all__ = [
	"Activity",
]
