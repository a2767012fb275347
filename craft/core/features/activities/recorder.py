# (c) Copyright Datacraft, 2026
"""Helpers that append activities from inside other features."""
import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.features.users.db.orm import User
from craft.core.middleware.security import client_key

from .db.orm import Activity
from .models import ActivityCategory, ActivityType, Severity

logger = logging.getLogger(__name__)


def default_tags(category: str, severity: str) -> list[str]:
	return [category, f"{severity}-priority"]


def record_activity(
	session: AsyncSession,
	actor: User | None,
	*,
	type: ActivityType,
	category: ActivityCategory,
	action: str,
	resource_type: str,
	resource_id: str,
	resource_name: str | None = None,
	description: str,
	severity: Severity = Severity.LOW,
	workspace_id: str | None = None,
	application_id: str | None = None,
	environment_id: str | None = None,
	changes: dict[str, Any] | None = None,
	request: Request | None = None,
	additional_data: dict[str, Any] | None = None,
) -> Activity:
	"""Add an activity to ``session``; the caller's commit persists it."""
	meta: dict[str, Any] = {}
	if changes:
		meta["changes"] = jsonable_encoder(changes)
	if additional_data:
		meta["additional_data"] = jsonable_encoder(additional_data)
	if request is not None:
		meta["ip_address"] = client_key(request)
		meta["user_agent"] = request.headers.get("user-agent")

	activity = Activity(
		type=type.value,
		category=category.value,
		action=action,
		description=description,
		severity=severity.value,
		actor_id=actor.id if actor else "system",
		actor_name=actor.name if actor else "System",
		actor_email=actor.email if actor else None,
		actor_type="user" if actor else "system",
		resource_type=resource_type,
		resource_id=resource_id,
		resource_name=resource_name,
		workspace_id=workspace_id,
		application_id=application_id,
		environment_id=environment_id,
		meta=meta,
		tags=default_tags(category.value, severity.value),
	)
	session.add(activity)
	logger.debug(f"Activity {type.value}/{action} on {resource_type}:{resource_id}")
	return activity


def record_change(
	session: AsyncSession,
	actor: User,
	entity,
	*,
	resource_type: str,
	action: str,
	changes: dict[str, Any] | None = None,
	severity: Severity = Severity.LOW,
	type: ActivityType = ActivityType.RESOURCE_MANAGEMENT,
) -> Activity:
	"""Record a create/update/delete of a workspace scoped ``entity``."""
	name = getattr(entity, "display_name", None) or getattr(entity, "name", None)
	return record_activity(
		session,
		actor,
		type=type,
		category=ActivityCategory.ADMINISTRATION,
		action=action,
		resource_type=resource_type,
		resource_id=entity.id,
		resource_name=name,
		description=f"{resource_type.replace('_', ' ').capitalize()} '{name}' {action}",
		severity=severity,
		workspace_id=getattr(entity, "workspace_id", None),
		application_id=getattr(entity, "application_id", None),
		environment_id=getattr(entity, "environment_id", None),
		changes=changes,
	)
