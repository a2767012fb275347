# (c) Copyright Datacraft, 2026
"""FastAPI router for policy management."""
import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db.engine import get_session
from craft.core.exceptions import ConflictError, NotFoundError
from craft.core.features.activities import ActivityType, Severity, record_change
from craft.core.features.auth.dependencies import (
	AdminUser,
	CurrentUser,
	can_access_workspace,
	ensure_workspace_access,
	visible_workspaces,
)
from craft.core.features.hierarchy.db.api import validate_hierarchy
from craft.core.features.users.db.orm import User
from craft.core.pagination import PaginationParams, build_meta
from craft.core.schemas import ApiResponse, BulkDeleteResult, BulkIds, BulkUpdateResult

from .db import PolicyDB, PolicyModel
from .models import PolicyEffect, PolicyStatus
from .service import PolicyService
from .views import (
	EvaluateRequest,
	EvaluateResponse,
	Policy,
	PolicyBulkUpdate,
	PolicyCreate,
	PolicyParams,
	PolicyStats,
	PolicyUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/policies", tags=["policies"])


async def _visible_policy(db: PolicyDB, user: User, policy_id: str) -> PolicyModel:
	model = await db.get_policy(policy_id)
	if model is None or not can_access_workspace(user, model.workspace_id):
		raise NotFoundError("Policy")
	return model


def _page(items, params: PaginationParams, total: int) -> ApiResponse[list[Policy]]:
	return ApiResponse(
		data=[Policy.model_validate(p) for p in items],
		pagination=build_meta(params.page, params.limit, total),
	)


# --- Policy CRUD ---

@router.get("", response_model=ApiResponse[list[Policy]])
async def list_policies(
	params: Annotated[PaginationParams, Depends()],
	filters: Annotated[PolicyParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""List policies with optional filters."""
	db = PolicyDB(session)
	items, total = await db.list_policies(params, filters, visible_workspaces(user))
	return _page(items, params, total)


@router.post("", response_model=ApiResponse[Policy], status_code=status.HTTP_201_CREATED)
async def create_policy(
	data: PolicyCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Create a new policy."""
	ensure_workspace_access(user, data.workspace_id)
	await validate_hierarchy(session, data.workspace_id, data.application_id, data.environment_id)

	db = PolicyDB(session)
	if await db.get_policy_by_name(data.environment_id, data.name):
		raise ConflictError("Policy with this name already exists in the environment")
	if data.id and await db.get_policy(data.id):
		raise ConflictError("Policy with this ID already exists")

	model = await db.create_policy(data.model_dump(mode="json"), created_by=user.email)
	record_change(
		session, user, model,
		resource_type="policy",
		action="created",
		type=ActivityType.POLICY_MANAGEMENT,
	)
	await session.commit()
	logger.info(f"Policy created: {model.id} ({model.name}) by {user.email}")
	return ApiResponse(data=Policy.model_validate(model), message="Policy created successfully")


@router.get("/stats", response_model=ApiResponse[PolicyStats])
async def get_policy_stats(
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	stats = await PolicyDB(session).get_stats(visible_workspaces(user))
	return ApiResponse(data=PolicyStats(**stats))


@router.get("/effect/{effect}", response_model=ApiResponse[list[Policy]])
async def get_policies_by_effect(
	effect: PolicyEffect,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Active policies with the given effect."""
	items, total = await PolicyDB(session).get_by_field(
		params,
		visible_workspaces(user),
		effect=effect.value,
		status=PolicyStatus.ACTIVE.value,
	)
	return _page(items, params, total)


@router.get("/status/{policy_status}", response_model=ApiResponse[list[Policy]])
async def get_policies_by_status(
	policy_status: PolicyStatus,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await PolicyDB(session).get_by_field(
		params,
		visible_workspaces(user),
		status=policy_status.value,
	)
	return _page(items, params, total)


@router.post("/evaluate", response_model=ApiResponse[EvaluateResponse])
async def evaluate_policies(
	data: EvaluateRequest,
	request: Request,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Evaluate an access request against the active policies in scope."""
	service = PolicyService(session)
	decision = await service.evaluate(data, user, visible_workspaces(user), request=request)
	await session.commit()
	return ApiResponse(
		data=EvaluateResponse(**decision.to_dict(), evaluated_at=datetime.now(timezone.utc)),
	)


@router.put("/bulk/update", response_model=ApiResponse[BulkUpdateResult])
async def bulk_update_policies(
	data: PolicyBulkUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	db = PolicyDB(session)
	models = await db.get_many(data.ids, visible_workspaces(user))
	updates = data.updates.model_dump(exclude_unset=True, mode="json")
	modified = 0
	for model in models:
		changes = await db.update_policy(model, dict(updates), modified_by=user.email)
		if changes:
			modified += 1
			record_change(
				session, user, model,
				resource_type="policy",
				action="updated",
				changes=changes,
				type=ActivityType.POLICY_MANAGEMENT,
			)
	await session.commit()
	return ApiResponse(
		data=BulkUpdateResult(matched_count=len(models), modified_count=modified),
		message=f"{modified} policies updated",
	)


@router.delete("/bulk/delete", response_model=ApiResponse[BulkDeleteResult])
async def bulk_delete_policies(
	data: BulkIds,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	db = PolicyDB(session)
	models = await db.get_many(data.ids, visible_workspaces(user))
	deletable = [m for m in models if not m.is_system]
	for model in deletable:
		record_change(
			session, user, model,
			resource_type="policy",
			action="deleted",
			severity=Severity.MEDIUM,
			type=ActivityType.POLICY_MANAGEMENT,
		)
	deleted_ids = [m.id for m in deletable]
	deleted = await db.delete_many(deleted_ids)
	await session.commit()
	return ApiResponse(
		data=BulkDeleteResult(
			deleted_count=deleted,
			requested_ids=data.ids,
			deleted_ids=deleted_ids,
			skipped_ids=[i for i in data.ids if i not in deleted_ids],
		),
		message=f"{deleted} policies deleted",
	)


@router.get("/{policy_id}", response_model=ApiResponse[Policy])
async def get_policy(
	policy_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Get a policy by ID."""
	model = await _visible_policy(PolicyDB(session), user, policy_id)
	return ApiResponse(data=Policy.model_validate(model))


@router.put("/{policy_id}", response_model=ApiResponse[Policy])
async def update_policy(
	policy_id: str,
	data: PolicyUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Update a policy."""
	db = PolicyDB(session)
	model = await _visible_policy(db, user, policy_id)

	if data.name and data.name != model.name:
		if await db.get_policy_by_name(model.environment_id, data.name):
			raise ConflictError("Policy with this name already exists in the environment")

	changes = await db.update_policy(
		model,
		data.model_dump(exclude_unset=True, mode="json"),
		modified_by=user.email,
	)
	record_change(
		session, user, model,
		resource_type="policy",
		action="updated",
		changes=changes,
		type=ActivityType.POLICY_MANAGEMENT,
	)
	await session.commit()
	return ApiResponse(data=Policy.model_validate(model), message="Policy updated successfully")


@router.delete("/{policy_id}", response_model=ApiResponse[None])
async def delete_policy(
	policy_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Delete a policy."""
	db = PolicyDB(session)
	model = await _visible_policy(db, user, policy_id)
	record_change(
		session, user, model,
		resource_type="policy",
		action="deleted",
		severity=Severity.MEDIUM,
		type=ActivityType.POLICY_MANAGEMENT,
	)
	await db.delete_policy(model)
	await session.commit()
	logger.info(f"Policy deleted: {policy_id} by {user.email}")
	return ApiResponse(message="Policy deleted successfully")
