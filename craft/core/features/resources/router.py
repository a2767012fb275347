# (c) Copyright Datacraft, 2026
"""Resource endpoints."""
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db import crud, tree
from craft.core.db.engine import get_session
from craft.core.exceptions import ConflictError, NotFoundError
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
from .db.orm import Resource as ResourceModel
from .schema import (
	Classification,
	Resource,
	ResourceBulkUpdate,
	ResourceCreate,
	ResourceParams,
	ResourceStats,
	ResourceType,
	ResourceUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/resources", tags=["resources"])

HAS_CHILDREN = "Cannot delete resource with children. Delete or reassign children first."


def _dump(resource: ResourceModel, children: list[str] | None = None) -> dict[str, Any]:
	data = Resource.model_validate(resource).model_dump()
	data["children"] = children or []
	return data


async def _page(session: AsyncSession, items: list[ResourceModel], params: PaginationParams, total: int):
	cmap = await tree.children_map(session, ResourceModel, items)
	return ApiResponse(
		data=[_dump(r, cmap[r.id]) for r in items],
		pagination=build_meta(params.page, params.limit, total),
	)


async def _visible_resource(session: AsyncSession, user: User, resource_id: str) -> ResourceModel:
	resource = await db_api.get_resource(session, resource_id)
	if resource is None or not can_access_workspace(user, resource.workspace_id):
		raise NotFoundError("Resource")
	return resource


async def _referencing_policies(session: AsyncSession, resource: ResourceModel) -> int:
	policies = await PolicyDB(session).find_referencing("resource", [resource.id])
	return len(policies)


@router.get("", response_model=ApiResponse[list[Resource]])
async def list_resources(
	params: Annotated[PaginationParams, Depends()],
	filters: Annotated[ResourceParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_resources(session, params, filters, visible_workspaces(user))
	return await _page(session, items, params, total)


@router.post("", response_model=ApiResponse[Resource], status_code=status.HTTP_201_CREATED)
async def create_resource(
	data: ResourceCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	ensure_workspace_access(user, data.workspace_id)
	await validate_hierarchy(session, data.workspace_id, data.application_id, data.environment_id)

	if await db_api.get_resource(session, data.id):
		raise ConflictError("Resource with this ID already exists")
	await tree.check_parent(session, ResourceModel, None, data.parent_id, "Resource", data.workspace_id)

	resource = db_api.create_resource(session, data.model_dump(mode="json"), created_by=user.email)
	await session.flush()
	record_change(session, user, resource, resource_type="resource", action="created")
	await session.commit()
	logger.info(f"Resource created: {resource.id} by {user.email}")
	return ApiResponse(data=_dump(resource), message="Resource created successfully")


@router.get("/stats", response_model=ApiResponse[ResourceStats])
async def get_resource_stats(
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	stats = await db_api.resource_stats(session, visible_workspaces(user))
	return ApiResponse(data=ResourceStats(**stats))


@router.get("/tree", response_model=ApiResponse[list[dict]])
async def get_resource_tree(
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
	root_id: str | None = Query(None),
	depth: int = Query(5, ge=1, le=10),
	include_permissions: bool = Query(True),
):
	"""
	Resource tree starting at ``root_id``.

	Without ``root_id`` (or with ``root``) every root resource in scope is
	returned with its own subtree.
	"""
	exclude = {"children"} if include_permissions else {"children", "permissions"}

	def serialize(resource: ResourceModel) -> dict:
		return Resource.model_validate(resource).model_dump(mode="json", exclude=exclude)

	if root_id and root_id != "root":
		roots = [await _visible_resource(session, user, root_id)]
	else:
		roots = await db_api.list_roots(session, visible_workspaces(user))
	data = await tree.build_forest(session, roots, ResourceModel, depth, serialize)
	return ApiResponse(data=data)


@router.get("/type/{resource_type}", response_model=ApiResponse[list[Resource]])
async def get_resources_by_type(
	resource_type: ResourceType,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_by(
		session, params, visible_workspaces(user), type=resource_type.value, active=True
	)
	return await _page(session, items, params, total)


@router.get("/classification/{classification}", response_model=ApiResponse[list[Resource]])
async def get_resources_by_classification(
	classification: Classification,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_by(
		session, params, visible_workspaces(user), classification=classification.value, active=True
	)
	return await _page(session, items, params, total)


@router.put("/bulk/update", response_model=ApiResponse[BulkUpdateResult])
async def bulk_update_resources(
	data: ResourceBulkUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	resources = await crud.get_many(session, ResourceModel, data.ids, visible_workspaces(user))
	updates = data.updates.model_dump(exclude_unset=True, mode="json")
	if updates.get("parent_id"):
		for resource in resources:
			await tree.check_parent(
				session, ResourceModel, resource.id, updates["parent_id"], "Resource", resource.workspace_id
			)

	modified = 0
	for resource in resources:
		changes = crud.apply_updates(resource, dict(updates), user.email)
		if changes:
			modified += 1
			record_change(session, user, resource, resource_type="resource", action="updated", changes=changes)
	await session.commit()
	return ApiResponse(
		data=BulkUpdateResult(matched_count=len(resources), modified_count=modified),
		message=f"{modified} resources updated",
	)


@router.delete("/bulk/delete", response_model=ApiResponse[BulkDeleteResult])
async def bulk_delete_resources(
	data: BulkIds,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Delete resources, skipping those with children or policy references."""
	resources = await crud.get_many(session, ResourceModel, data.ids, visible_workspaces(user))
	deletable = []
	for resource in resources:
		if await tree.count_children(session, ResourceModel, resource):
			continue
		if await _referencing_policies(session, resource):
			continue
		deletable.append(resource)
		record_change(session, user, resource, resource_type="resource", action="deleted", severity=Severity.MEDIUM)

	deleted_ids = [r.id for r in deletable]
	deleted = await crud.delete_many(session, ResourceModel, deleted_ids)
	await session.commit()
	return ApiResponse(
		data=BulkDeleteResult(
			deleted_count=deleted,
			requested_ids=data.ids,
			deleted_ids=deleted_ids,
			skipped_ids=[i for i in data.ids if i not in deleted_ids],
		),
		message=f"{deleted} resources deleted",
	)


@router.get("/{resource_id}", response_model=ApiResponse[Resource])
async def get_resource(
	resource_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	resource = await _visible_resource(session, user, resource_id)
	children = await tree.get_children(session, ResourceModel, resource)
	return ApiResponse(data=_dump(resource, [c.id for c in children]))


@router.put("/{resource_id}", response_model=ApiResponse[Resource])
async def update_resource(
	resource_id: str,
	data: ResourceUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	resource = await _visible_resource(session, user, resource_id)
	updates = data.model_dump(exclude_unset=True, mode="json")

	if "parent_id" in updates:
		await tree.check_parent(
			session, ResourceModel, resource.id, updates["parent_id"], "Resource", resource.workspace_id
		)

	changes = crud.apply_updates(resource, updates, user.email)
	record_change(session, user, resource, resource_type="resource", action="updated", changes=changes)
	await session.commit()
	children = await tree.get_children(session, ResourceModel, resource)
	return ApiResponse(data=_dump(resource, [c.id for c in children]), message="Resource updated successfully")


@router.delete("/{resource_id}", response_model=ApiResponse[None])
async def delete_resource(
	resource_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	resource = await _visible_resource(session, user, resource_id)

	children = await tree.count_children(session, ResourceModel, resource)
	if children:
		raise ConflictError(HAS_CHILDREN, details={"children_count": children})

	count = await _referencing_policies(session, resource)
	if count:
		raise ConflictError(
			in_use_message(resource.display_name or resource.name, "resource", count),
			details={"policy_count": count},
		)

	record_change(session, user, resource, resource_type="resource", action="deleted", severity=Severity.MEDIUM)
	await session.delete(resource)
	await session.commit()
	logger.info(f"Resource deleted: {resource_id} by {user.email}")
	return ApiResponse(message="Resource deleted successfully")
