# (c) Copyright Datacraft, 2026
"""User administration endpoints."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db.engine import get_session
from craft.core.exceptions import ConflictError, NotFoundError, ValidationError
from craft.core.features.activities import ActivityType, Severity, record_change
from craft.core.features.auth.dependencies import SuperAdminUser
from craft.core.features.hierarchy.db.api import get_workspace
from craft.core.pagination import PaginationParams, build_meta
from craft.core.schemas import ApiResponse

from .db import api as db_api
from .db.orm import User as UserModel
from .schema import (
	User,
	UserCreate,
	UserParams,
	UserRoleUpdate,
	UserStats,
	UserUpdate,
	UserWorkspacesUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


async def _get_user(session: AsyncSession, user_id: str) -> UserModel:
	user = await db_api.get_user(session, user_id)
	if user is None:
		raise NotFoundError("User")
	return user


def _record(session: AsyncSession, actor: UserModel, user: UserModel, action: str, **kwargs) -> None:
	record_change(
		session, actor, user,
		resource_type="user",
		action=action,
		type=ActivityType.USER_MANAGEMENT,
		**kwargs,
	)


@router.get("", response_model=ApiResponse[list[User]])
async def list_users(
	params: Annotated[PaginationParams, Depends()],
	filters: Annotated[UserParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	items, total = await db_api.list_users(
		session,
		params,
		role=filters.role.value if filters.role else None,
		active=filters.active,
		department=filters.department,
	)
	return ApiResponse(
		data=[User.model_validate(u) for u in items],
		pagination=build_meta(params.page, params.limit, total),
	)


@router.post("", response_model=ApiResponse[User], status_code=status.HTTP_201_CREATED)
async def create_user(
	data: UserCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	if await db_api.get_user_by_email(session, data.email):
		raise ConflictError("User with this email already exists")
	user = await db_api.create_user(
		session,
		email=data.email,
		name=data.name,
		password=data.password,
		role=data.role.value,
		active=data.active,
		assigned_workspaces=data.assigned_workspaces,
		department=data.department,
	)
	_record(session, current_user, user, "created")
	await session.commit()
	logger.info(f"User created: {user.email} by {current_user.email}")
	return ApiResponse(data=User.model_validate(user), message="User created successfully")


@router.get("/stats", response_model=ApiResponse[UserStats])
async def get_user_stats(
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	stats = await db_api.user_stats(session)
	return ApiResponse(data=UserStats(**stats))


@router.get("/{user_id}", response_model=ApiResponse[User])
async def get_user(
	user_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	return ApiResponse(data=User.model_validate(await _get_user(session, user_id)))


@router.put("/{user_id}", response_model=ApiResponse[User])
async def update_user(
	user_id: str,
	data: UserUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	user = await _get_user(session, user_id)
	updates = {
		key: value
		for key, value in data.model_dump(exclude_unset=True).items()
		if value is not None or key == "department"
	}
	if updates.get("email"):
		updates["email"] = updates["email"].lower()
		existing = await db_api.get_user_by_email(session, updates["email"])
		if existing and existing.id != user.id:
			raise ConflictError("User with this email already exists")
	for key, value in updates.items():
		setattr(user, key, value)
	_record(session, current_user, user, "updated", changes=updates)
	await session.commit()
	return ApiResponse(data=User.model_validate(user), message="User updated successfully")


@router.put("/{user_id}/role", response_model=ApiResponse[User])
async def update_user_role(
	user_id: str,
	data: UserRoleUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	user = await _get_user(session, user_id)
	if user.id == current_user.id:
		raise ValidationError("You cannot change your own role")
	previous = user.role
	user.role = data.role.value
	_record(
		session, current_user, user, "role changed",
		changes={"role": {"from": previous, "to": user.role}},
		severity=Severity.HIGH,
	)
	await session.commit()
	logger.info(f"User {user.email} role {previous} -> {user.role} by {current_user.email}")
	return ApiResponse(data=User.model_validate(user), message="User role updated successfully")


@router.put("/{user_id}/workspaces", response_model=ApiResponse[User])
async def assign_user_workspaces(
	user_id: str,
	data: UserWorkspacesUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	"""Replace the workspaces assigned to a user."""
	user = await _get_user(session, user_id)
	missing = [w for w in data.workspace_ids if await get_workspace(session, w) is None]
	if missing:
		raise NotFoundError("Workspace", details={"missing_ids": missing})
	user.assigned_workspaces = list(dict.fromkeys(data.workspace_ids))
	_record(
		session, current_user, user, "workspaces assigned",
		changes={"assigned_workspaces": user.assigned_workspaces},
		severity=Severity.MEDIUM,
	)
	await session.commit()
	return ApiResponse(data=User.model_validate(user), message="Workspaces assigned successfully")


@router.put("/{user_id}/toggle-status", response_model=ApiResponse[User])
async def toggle_user_status(
	user_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	user = await _get_user(session, user_id)
	if user.id == current_user.id:
		raise ValidationError("You cannot deactivate your own account")
	user.active = not user.active
	_record(
		session, current_user, user,
		"activated" if user.active else "deactivated",
		changes={"active": user.active},
		severity=Severity.MEDIUM,
	)
	await session.commit()
	state = "activated" if user.active else "deactivated"
	return ApiResponse(data=User.model_validate(user), message=f"User {state} successfully")


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
	user_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	current_user: SuperAdminUser,
):
	user = await _get_user(session, user_id)
	if user.id == current_user.id:
		raise ValidationError("You cannot delete your own account")
	_record(session, current_user, user, "deleted", severity=Severity.HIGH)
	await session.delete(user)
	await session.commit()
	logger.info(f"User deleted: {user.email} by {current_user.email}")
	return ApiResponse(message="User deleted successfully")
