# (c) Copyright Datacraft, 2026
"""Workspace, application and environment endpoints."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db.engine import get_session
from craft.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from craft.core.features.activities import ActivityType, Severity, record_change
from craft.core.features.auth.dependencies import (
	AdminUser,
	CurrentUser,
	can_access_workspace,
	visible_workspaces,
)
from craft.core.features.users.db import api as users_api
from craft.core.features.users.db.orm import User
from craft.core.pagination import PaginationParams, build_meta
from craft.core.schemas import ApiResponse

from .db import api as db_api
from .db.orm import Application as ApplicationModel
from .db.orm import Environment as EnvironmentModel
from .db.orm import Workspace as WorkspaceModel
from .schema import (
	Application,
	ApplicationCreate,
	ApplicationUpdate,
	Environment,
	EnvironmentCreate,
	EnvironmentUpdate,
	Workspace,
	WorkspaceCreate,
	WorkspaceParams,
	WorkspaceStats,
	WorkspaceUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/workspaces", tags=["workspaces"])


async def _visible_workspace(session: AsyncSession, user: User, workspace_id: str) -> WorkspaceModel:
	workspace = await db_api.get_workspace(session, workspace_id)
	if workspace is None or not can_access_workspace(user, workspace_id):
		raise NotFoundError("Workspace")
	return workspace


async def _visible_application(
	session: AsyncSession,
	user: User,
	workspace_id: str,
	application_id: str,
) -> ApplicationModel:
	await _visible_workspace(session, user, workspace_id)
	app = await db_api.get_application(session, workspace_id, application_id)
	if app is None:
		raise NotFoundError("Application")
	return app


# --- Workspaces ---

@router.get("", response_model=ApiResponse[list[Workspace]])
async def list_workspaces(
	params: Annotated[PaginationParams, Depends()],
	filters: Annotated[WorkspaceParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_workspaces(
		session,
		params,
		visible_workspaces(user),
		status=filters.status.value if filters.status else None,
	)
	return ApiResponse(
		data=[Workspace.model_validate(w) for w in items],
		pagination=build_meta(params.page, params.limit, total),
	)


@router.post("", response_model=ApiResponse[Workspace], status_code=status.HTTP_201_CREATED)
async def create_workspace(
	data: WorkspaceCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Create a workspace. Non super admins are assigned to what they create."""
	if await db_api.get_workspace_by_name(session, data.name):
		raise ConflictError("Workspace with this name already exists")

	workspace = WorkspaceModel(
		name=data.name,
		display_name=data.display_name,
		description=data.description,
		status=data.status.value,
		settings=data.settings,
		tags=data.tags,
		owner_id=user.id,
		created_by=user.email,
		last_modified_by=user.email,
	)
	session.add(workspace)
	await session.flush()

	if not user.is_super_admin:
		users_api.assign_workspace(user, workspace.id)

	record_change(
		session, user, workspace,
		resource_type="workspace",
		action="created",
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	await session.commit()
	logger.info(f"Workspace created: {workspace.name} by {user.email}")
	return ApiResponse(data=Workspace.model_validate(workspace), message="Workspace created successfully")


@router.get("/{workspace_id}", response_model=ApiResponse[Workspace])
async def get_workspace(
	workspace_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	workspace = await _visible_workspace(session, user, workspace_id)
	return ApiResponse(data=Workspace.model_validate(workspace))


@router.put("/{workspace_id}", response_model=ApiResponse[Workspace])
async def update_workspace(
	workspace_id: str,
	data: WorkspaceUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	workspace = await _visible_workspace(session, user, workspace_id)
	updates = data.model_dump(exclude_unset=True, mode="json")
	for key, value in updates.items():
		setattr(workspace, key, value)
	workspace.last_modified_by = user.email

	record_change(
		session, user, workspace,
		resource_type="workspace",
		action="updated",
		changes=updates,
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	await session.commit()
	return ApiResponse(data=Workspace.model_validate(workspace), message="Workspace updated successfully")


@router.delete("/{workspace_id}", response_model=ApiResponse[None])
async def delete_workspace(
	workspace_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	workspace = await _visible_workspace(session, user, workspace_id)
	if not user.is_super_admin and workspace.owner_id != user.id:
		raise AuthorizationError("Only the owner or a super admin can delete a workspace")

	apps = await db_api.count_children(session, ApplicationModel.workspace_id, workspace_id)
	if apps:
		raise ConflictError(
			f"Cannot delete workspace with {apps} application(s). Delete applications first."
		)

	record_change(
		session, user, workspace,
		resource_type="workspace",
		action="deleted",
		severity=Severity.MEDIUM,
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	users_api.unassign_workspace(user, workspace_id)
	await session.delete(workspace)
	await session.commit()
	logger.info(f"Workspace deleted: {workspace.name} by {user.email}")
	return ApiResponse(message="Workspace deleted successfully")


@router.get("/{workspace_id}/stats", response_model=ApiResponse[WorkspaceStats])
async def get_workspace_stats(
	workspace_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	await _visible_workspace(session, user, workspace_id)
	stats = await db_api.workspace_stats(session, workspace_id)
	return ApiResponse(data=WorkspaceStats(**stats))


# --- Applications ---

@router.get("/{workspace_id}/applications", response_model=ApiResponse[list[Application]])
async def list_applications(
	workspace_id: str,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	await _visible_workspace(session, user, workspace_id)
	items, total = await db_api.list_applications(session, workspace_id, params)
	return ApiResponse(
		data=[Application.model_validate(a) for a in items],
		pagination=build_meta(params.page, params.limit, total),
	)


@router.post(
	"/{workspace_id}/applications",
	response_model=ApiResponse[Application],
	status_code=status.HTTP_201_CREATED,
)
async def create_application(
	workspace_id: str,
	data: ApplicationCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	await _visible_workspace(session, user, workspace_id)
	if await db_api.get_application_by_name(session, workspace_id, data.name):
		raise ConflictError("Application with this name already exists in the workspace")

	app = ApplicationModel(
		workspace_id=workspace_id,
		name=data.name,
		display_name=data.display_name,
		description=data.description,
		type=data.type.value,
		status=data.status.value,
		owner_id=user.id,
		created_by=user.email,
		last_modified_by=user.email,
	)
	session.add(app)
	await session.flush()
	record_change(
		session, user, app,
		resource_type="application",
		action="created",
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	await session.commit()
	return ApiResponse(data=Application.model_validate(app), message="Application created successfully")


@router.get("/{workspace_id}/applications/{application_id}", response_model=ApiResponse[Application])
async def get_application(
	workspace_id: str,
	application_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	app = await _visible_application(session, user, workspace_id, application_id)
	return ApiResponse(data=Application.model_validate(app))


@router.put("/{workspace_id}/applications/{application_id}", response_model=ApiResponse[Application])
async def update_application(
	workspace_id: str,
	application_id: str,
	data: ApplicationUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	app = await _visible_application(session, user, workspace_id, application_id)
	updates = data.model_dump(exclude_unset=True, mode="json")
	for key, value in updates.items():
		setattr(app, key, value)
	app.last_modified_by = user.email
	record_change(
		session, user, app,
		resource_type="application",
		action="updated",
		changes=updates,
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	await session.commit()
	return ApiResponse(data=Application.model_validate(app), message="Application updated successfully")


@router.delete("/{workspace_id}/applications/{application_id}", response_model=ApiResponse[None])
async def delete_application(
	workspace_id: str,
	application_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	app = await _visible_application(session, user, workspace_id, application_id)
	envs = await db_api.count_children(session, EnvironmentModel.application_id, application_id)
	if envs:
		raise ConflictError(
			f"Cannot delete application with {envs} environment(s). Delete environments first."
		)
	record_change(
		session, user, app,
		resource_type="application",
		action="deleted",
		severity=Severity.MEDIUM,
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	await session.delete(app)
	await session.commit()
	return ApiResponse(message="Application deleted successfully")


# --- Environments ---

@router.get(
	"/{workspace_id}/applications/{application_id}/environments",
	response_model=ApiResponse[list[Environment]],
)
async def list_environments(
	workspace_id: str,
	application_id: str,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	await _visible_application(session, user, workspace_id, application_id)
	items, total = await db_api.list_environments(session, application_id, params)
	return ApiResponse(
		data=[Environment.model_validate(e) for e in items],
		pagination=build_meta(params.page, params.limit, total),
	)


@router.post(
	"/{workspace_id}/applications/{application_id}/environments",
	response_model=ApiResponse[Environment],
	status_code=status.HTTP_201_CREATED,
)
async def create_environment(
	workspace_id: str,
	application_id: str,
	data: EnvironmentCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	await _visible_application(session, user, workspace_id, application_id)
	if await db_api.get_environment_by_name(session, application_id, data.name):
		raise ConflictError("Environment with this name already exists in the application")

	env = EnvironmentModel(
		workspace_id=workspace_id,
		application_id=application_id,
		name=data.name,
		display_name=data.display_name,
		description=data.description,
		type=data.type.value,
		status=data.status.value,
		is_default=data.is_default,
		created_by=user.email,
		last_modified_by=user.email,
	)
	session.add(env)
	await session.flush()
	if env.is_default:
		await db_api.clear_default_environment(session, application_id, keep_id=env.id)
	record_change(
		session, user, env,
		resource_type="environment",
		action="created",
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	await session.commit()
	return ApiResponse(data=Environment.model_validate(env), message="Environment created successfully")


async def _visible_environment(
	session: AsyncSession,
	user: User,
	workspace_id: str,
	application_id: str,
	environment_id: str,
) -> EnvironmentModel:
	await _visible_application(session, user, workspace_id, application_id)
	env = await db_api.get_environment(session, application_id, environment_id)
	if env is None:
		raise NotFoundError("Environment")
	return env


@router.get(
	"/{workspace_id}/applications/{application_id}/environments/{environment_id}",
	response_model=ApiResponse[Environment],
)
async def get_environment(
	workspace_id: str,
	application_id: str,
	environment_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	env = await _visible_environment(session, user, workspace_id, application_id, environment_id)
	return ApiResponse(data=Environment.model_validate(env))


@router.put(
	"/{workspace_id}/applications/{application_id}/environments/{environment_id}",
	response_model=ApiResponse[Environment],
)
async def update_environment(
	workspace_id: str,
	application_id: str,
	environment_id: str,
	data: EnvironmentUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	env = await _visible_environment(session, user, workspace_id, application_id, environment_id)
	updates = data.model_dump(exclude_unset=True, mode="json")
	for key, value in updates.items():
		setattr(env, key, value)
	env.last_modified_by = user.email
	if updates.get("is_default"):
		await db_api.clear_default_environment(session, application_id, keep_id=env.id)
	record_change(
		session, user, env,
		resource_type="environment",
		action="updated",
		changes=updates,
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	await session.commit()
	return ApiResponse(data=Environment.model_validate(env), message="Environment updated successfully")


@router.delete(
	"/{workspace_id}/applications/{application_id}/environments/{environment_id}",
	response_model=ApiResponse[None],
)
async def delete_environment(
	workspace_id: str,
	application_id: str,
	environment_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	env = await _visible_environment(session, user, workspace_id, application_id, environment_id)
	counts = await db_api.count_scoped_entities(session, "environment_id", environment_id)
	in_use = {k: v for k, v in counts.items() if v}
	if in_use:
		raise ConflictError(
			"Cannot delete environment that still holds records",
			details=in_use,
		)
	record_change(
		session, user, env,
		resource_type="environment",
		action="deleted",
		severity=Severity.MEDIUM,
		type=ActivityType.SYSTEM_CONFIGURATION,
	)
	await session.delete(env)
	await session.commit()
	return ApiResponse(message="Environment deleted successfully")
