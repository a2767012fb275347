# (c) Copyright Datacraft, 2026
"""Action endpoints."""
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db import crud, tree
from craft.core.db.engine import get_session
from craft.core.exceptions import ConflictError, NotFoundError, ValidationError
from craft.core.features.activities import Severity, record_change
from craft.core.features.auth.dependencies import (
	AdminUser,
	CurrentUser,
	can_access_workspace,
	ensure_workspace_access,
	visible_workspaces,
)
from craft.core.features.hierarchy.db.api import validate_hierarchy
from craft.core.features.policies.db import PolicyDB
from craft.core.features.users.db.orm import User
from craft.core.pagination import PaginationParams, build_meta
from craft.core.schemas import ApiResponse, BulkDeleteResult, BulkIds, BulkUpdateResult
from craft.core.utils import in_use_message

from .db import api as db_api
from .db.orm import Action as ActionModel
from .schema import (
	Action,
	ActionBulkUpdate,
	ActionCategory,
	ActionCreate,
	ActionParams,
	ActionStats,
	ActionType,
	ActionUpdate,
	RiskLevel,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/actions", tags=["actions"])


def _dump(action: ActionModel, children: list[str] | None = None) -> dict[str, Any]:
	data = Action.model_validate(action).model_dump()
	data["children"] = children or []
	return data


async def _page(session: AsyncSession, items: list[ActionModel], params: PaginationParams, total: int):
	cmap = await tree.children_map(session, ActionModel, items)
	return ApiResponse(
		data=[_dump(a, cmap[a.id]) for a in items],
		pagination=build_meta(params.page, params.limit, total),
	)


async def _visible_action(session: AsyncSession, user: User, action_id: str) -> ActionModel:
	action = await db_api.get_action(session, action_id)
	if action is None or not can_access_workspace(user, action.workspace_id):
		raise NotFoundError("Action")
	return action


async def _check_composite(session: AsyncSession, action_type: str, composite_ids: list[str]) -> None:
	if action_type != ActionType.COMPOSITE.value:
		return
	if not composite_ids:
		raise ValidationError("Composite actions must list at least one composite action")
	missing = await db_api.missing_ids(session, composite_ids)
	if missing:
		raise NotFoundError("Composite action", details={"missing_ids": missing})


async def _referencing_policies(session: AsyncSession, action: ActionModel) -> int:
	policies = await PolicyDB(session).find_referencing("action", [action.name, action.id])
	return len(policies)


@router.get("", response_model=ApiResponse[list[Action]])
async def list_actions(
	params: Annotated[PaginationParams, Depends()],
	filters: Annotated[ActionParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_actions(session, params, filters, visible_workspaces(user))
	return await _page(session, items, params, total)


@router.post("", response_model=ApiResponse[Action], status_code=status.HTTP_201_CREATED)
async def create_action(
	data: ActionCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	ensure_workspace_access(user, data.workspace_id)
	await validate_hierarchy(session, data.workspace_id, data.application_id, data.environment_id)

	if await db_api.get_action_by_name(session, data.name):
		raise ConflictError("Action with this name already exists")
	if data.id and await db_api.get_action(session, data.id):
		raise ConflictError("Action with this ID already exists")
	await _check_composite(session, data.type.value, data.composite_actions)
	await tree.check_parent(session, ActionModel, None, data.parent_id, "Action", data.workspace_id)

	action = db_api.create_action(session, data.model_dump(mode="json"), created_by=user.email)
	await session.flush()
	record_change(session, user, action, resource_type="action", action="created")
	await session.commit()
	logger.info(f"Action created: {action.name} by {user.email}")
	return ApiResponse(data=_dump(action), message="Action created successfully")


@router.get("/stats", response_model=ApiResponse[ActionStats])
async def get_action_stats(
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	stats = await db_api.action_stats(session, visible_workspaces(user))
	return ApiResponse(data=ActionStats(**stats))


@router.get("/resource/{resource_type}", response_model=ApiResponse[list[Action]])
async def get_actions_for_resource_type(
	resource_type: str,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
	include_generic: bool = Query(True),
):
	items, total = await db_api.list_for_resource_type(
		session, resource_type, include_generic, params, visible_workspaces(user)
	)
	return await _page(session, items, params, total)


@router.get("/category/{category}", response_model=ApiResponse[list[Action]])
async def get_actions_by_category(
	category: ActionCategory,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_by(session, params, visible_workspaces(user), category=category.value)
	return await _page(session, items, params, total)


@router.get("/risk/{risk_level}", response_model=ApiResponse[list[Action]])
async def get_actions_by_risk_level(
	risk_level: RiskLevel,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_by(session, params, visible_workspaces(user), risk_level=risk_level.value)
	return await _page(session, items, params, total)


@router.put("/bulk/update", response_model=ApiResponse[BulkUpdateResult])
async def bulk_update_actions(
	data: ActionBulkUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	actions = await crud.get_many(session, ActionModel, data.ids, visible_workspaces(user))
	updates = data.updates.model_dump(exclude_unset=True, mode="json")
	if updates.get("name") and len(actions) > 1:
		raise ValidationError("Action names are unique and cannot be bulk updated")
	if updates.get("parent_id"):
		for action in actions:
			await tree.check_parent(
				session, ActionModel, action.id, updates["parent_id"], "Action", action.workspace_id
			)

	modified = 0
	for action in actions:
		changes = crud.apply_updates(action, dict(updates), user.email)
		if changes:
			modified += 1
			record_change(session, user, action, resource_type="action", action="updated", changes=changes)
	await session.commit()
	return ApiResponse(
		data=BulkUpdateResult(matched_count=len(actions), modified_count=modified),
		message=f"{modified} actions updated",
	)


@router.delete("/bulk/delete", response_model=ApiResponse[BulkDeleteResult])
async def bulk_delete_actions(
	data: BulkIds,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Delete actions, skipping system actions and those used by policies."""
	actions = await crud.get_many(session, ActionModel, data.ids, visible_workspaces(user))
	deletable = []
	for action in actions:
		if action.is_system or await _referencing_policies(session, action):
			continue
		deletable.append(action)
		record_change(session, user, action, resource_type="action", action="deleted", severity=Severity.MEDIUM)

	deleted_ids = [a.id for a in deletable]
	deleted = await crud.delete_many(session, ActionModel, deleted_ids)
	await session.commit()
	return ApiResponse(
		data=BulkDeleteResult(
			deleted_count=deleted,
			requested_ids=data.ids,
			deleted_ids=deleted_ids,
			skipped_ids=[i for i in data.ids if i not in deleted_ids],
		),
		message=f"{deleted} actions deleted",
	)


@router.get("/{action_id}", response_model=ApiResponse[Action])
async def get_action(
	action_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	action = await _visible_action(session, user, action_id)
	children = await tree.get_children(session, ActionModel, action)
	return ApiResponse(data=_dump(action, [c.id for c in children]))


@router.get("/{action_id}/hierarchy", response_model=ApiResponse[dict])
async def get_action_hierarchy(
	action_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
	depth: int = Query(3, ge=1, le=10),
):
	action = await _visible_action(session, user, action_id)
	data = await tree.build_tree(
		session,
		ActionModel,
		action,
		depth,
		lambda a: Action.model_validate(a).model_dump(mode="json", exclude={"children"}),
	)
	return ApiResponse(data=data)


@router.put("/{action_id}", response_model=ApiResponse[Action])
async def update_action(
	action_id: str,
	data: ActionUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	action = await _visible_action(session, user, action_id)
	updates = data.model_dump(exclude_unset=True, mode="json")

	if updates.get("name") and updates["name"] != action.name:
		if await db_api.get_action_by_name(session, updates["name"]):
			raise ConflictError("Action with this name already exists")
	if "parent_id" in updates:
		await tree.check_parent(
			session, ActionModel, action.id, updates["parent_id"], "Action", action.workspace_id
		)
	await _check_composite(
		session,
		updates.get("type") or action.type,
		updates["composite_actions"] if updates.get("composite_actions") is not None else action.composite_actions,
	)

	changes = crud.apply_updates(action, updates, user.email)
	record_change(session, user, action, resource_type="action", action="updated", changes=changes)
	await session.commit()
	children = await tree.get_children(session, ActionModel, action)
	return ApiResponse(data=_dump(action, [c.id for c in children]), message="Action updated successfully")


@router.delete("/{action_id}", response_model=ApiResponse[None])
async def delete_action(
	action_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	action = await _visible_action(session, user, action_id)
	if action.is_system:
		raise ValidationError("System actions cannot be deleted")

	count = await _referencing_policies(session, action)
	if count:
		raise ConflictError(
			in_use_message(action.display_name, "action", count),
			details={"policy_count": count},
		)

	record_change(session, user, action, resource_type="action", action="deleted", severity=Severity.MEDIUM)
	await session.delete(action)
	await session.commit()
	logger.info(f"Action deleted: {action.name} by {user.email}")
	return ApiResponse(message="Action deleted successfully")
