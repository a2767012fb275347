# (c) Copyright Datacraft, 2026
"""Append-only activity audit log."""
from .models import ActivityCategory, ActivityType, ActorType, Severity
from .recorder import record_activity, record_change

__all__ = [
	"ActivityCategory",
	"ActivityType",
	"ActorType",
	"Severity",
	"record_activity",
	"record_change",
]
