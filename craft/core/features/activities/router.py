# (c) Copyright Datacraft, 2026
"""FastAPI router for the activity audit log."""
import csv
import io
import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.config import get_settings
from craft.core.db.engine import get_session
from craft.core.exceptions import AuthorizationError, NotFoundError
from craft.core.middleware.security import client_key
from craft.core.features.auth.dependencies import (
	CurrentUser,
	can_access_workspace,
	visible_workspaces,
)
from craft.core.pagination import build_meta
from craft.core.schemas import ApiResponse

from .db import api as db_api
from .db.orm import Activity as ActivityModel
from .models import ExportFormat
from .recorder import default_tags
from .schema import (
	Activity,
	ActivityCreate,
	ActivityExportRequest,
	ActivityParams,
	ActivityStats,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/activities", tags=["activities"])

CSV_HEADER = ["Timestamp", "Type", "Category", "Action", "Actor", "Resource", "Severity", "Description"]


@router.get("", response_model=ApiResponse[list[Activity]])
async def list_activities(
	params: Annotated[ActivityParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""List activities, newest first."""
	items, total = await db_api.list_activities(
		session,
		params.to_filters(),
		visible_workspaces(user),
		page=params.page,
		limit=params.limit,
	)
	return ApiResponse(
		data=[Activity.model_validate(a) for a in items],
		pagination=build_meta(params.page, params.limit, total),
	)


@router.get("/stats", response_model=ApiResponse[ActivityStats])
async def get_activity_stats(
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	stats = await db_api.activity_stats(session, visible_workspaces(user))
	return ApiResponse(data=ActivityStats(**stats))


@router.get("/{activity_id}", response_model=ApiResponse[Activity])
async def get_activity(
	activity_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	activity = await db_api.get_activity(session, activity_id)
	if activity is None:
		raise NotFoundError("Activity")
	if not can_access_workspace(user, activity.workspace_id):
		raise NotFoundError("Activity")
	return ApiResponse(data=Activity.model_validate(activity))


@router.post("", response_model=ApiResponse[Activity], status_code=status.HTTP_201_CREATED)
async def create_activity(
	data: ActivityCreate,
	request: Request,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Append an activity. The actor defaults to the calling user."""
	workspace_id = data.workspace_id
	scope = visible_workspaces(user)
	if workspace_id is None and scope is not None:
		# only system events are logged without a workspace
		if not scope:
			raise AuthorizationError("Users without a workspace cannot record activities")
		workspace_id = sorted(scope)[0]
	if not can_access_workspace(user, workspace_id):
		raise AuthorizationError("Access denied to this workspace")

	actor = data.actor
	meta = data.metadata.model_dump(exclude_none=True, mode="json")
	meta.setdefault("ip_address", client_key(request))
	meta.setdefault("user_agent", request.headers.get("user-agent"))

	activity = ActivityModel(
		type=data.type.value,
		category=data.category.value,
		action=data.action,
		description=data.description,
		severity=data.severity.value,
		actor_id=actor.id if actor else user.id,
		actor_name=actor.name if actor else user.name,
		actor_email=actor.email if actor else user.email,
		actor_type=actor.type.value if actor else "user",
		resource_type=data.resource.type,
		resource_id=data.resource.id,
		resource_name=data.resource.name,
		target=data.target,
		workspace_id=workspace_id,
		application_id=data.application_id,
		environment_id=data.environment_id,
		meta=meta,
		tags=data.tags if data.tags is not None else default_tags(data.category.value, data.severity.value),
	)
	session.add(activity)
	await session.commit()
	return ApiResponse(data=Activity.model_validate(activity), message="Activity recorded")


def _to_csv(rows: list[ActivityModel]) -> io.StringIO:
	buffer = io.StringIO()
	writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL)
	writer.writerow(CSV_HEADER)
	for a in rows:
		writer.writerow([
			a.timestamp.isoformat() if a.timestamp else "",
			a.type,
			a.category,
			a.action,
			a.actor_name,
			a.resource_name or a.resource_id,
			a.severity,
			a.description,
		])
	buffer.seek(0)
	return buffer


@router.post("/export")
async def export_activities(
	data: ActivityExportRequest,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Export filtered activities as CSV or JSON."""
	settings = get_settings()
	rows = await db_api.export_activities(
		session,
		data.filters,
		visible_workspaces(user),
		limit=settings.activity_export_limit,
	)
	logger.info(f"User {user.email} exported {len(rows)} activities as {data.format.value}")

	stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
	if data.format == ExportFormat.CSV:
		return StreamingResponse(
			_to_csv(rows),
			media_type="text/csv",
			headers={
				"Content-Disposition": f"attachment; filename=activities_{stamp}.csv"
			},
		)

	return ApiResponse(data=[Activity.model_validate(a) for a in rows])
