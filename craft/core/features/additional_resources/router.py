# (c) Copyright Datacraft, 2026
"""Additional resource endpoints."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db import crud
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
from craft.core.features.users.db.orm import User
from craft.core.pagination import PaginationParams, build_meta
from craft.core.schemas import ApiResponse, BulkDeleteResult, BulkIds
from craft.core.utils import slugify_id

from .db import api as db_api
from .db.orm import AdditionalResource as AdditionalResourceModel
from .schema import (
	AdditionalResource,
	AdditionalResourceCreate,
	AdditionalResourceParams,
	AdditionalResourceStats,
	AdditionalResourceType,
	AdditionalResourceUpdate,
	AttributesUpdate,
	EvaluateContext,
	EvaluationResult,
	TypedList,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/additional-resources", tags=["additional-resources"])

RESOURCE_TYPE = "additional_resource"


async def _visible(session: AsyncSession, user: User, resource_id: str) -> AdditionalResourceModel:
	resource = await db_api.get_additional_resource(session, resource_id)
	if resource is None or not can_access_workspace(user, resource.workspace_id):
		raise NotFoundError("Additional resource")
	return resource


@router.get("", response_model=ApiResponse[list[AdditionalResource]])
async def list_additional_resources(
	params: Annotated[PaginationParams, Depends()],
	filters: Annotated[AdditionalResourceParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_additional_resources(
		session, params, filters, visible_workspaces(user)
	)
	return ApiResponse(
		data=[AdditionalResource.model_validate(r) for r in items],
		pagination=build_meta(params.page, params.limit, total),
	)


@router.post("", response_model=ApiResponse[AdditionalResource], status_code=status.HTTP_201_CREATED)
async def create_additional_resource(
	data: AdditionalResourceCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	ensure_workspace_access(user, data.workspace_id)
	await validate_hierarchy(session, data.workspace_id, data.application_id, data.environment_id)

	resource_id = slugify_id(data.name)
	if not resource_id:
		raise ValidationError("Name must contain at least one letter or digit")
	if await db_api.find_duplicate(session, data.environment_id, data.name, resource_id):
		raise ConflictError("Additional resource with this name already exists")

	resource = db_api.create_additional_resource(
		session, data.model_dump(mode="json"), created_by=user.email
	)
	await session.flush()
	record_change(session, user, resource, resource_type=RESOURCE_TYPE, action="created")
	await session.commit()
	logger.info(f"Additional resource created: {resource.id} by {user.email}")
	return ApiResponse(
		data=AdditionalResource.model_validate(resource),
		message="Additional resource created successfully",
	)


@router.get("/stats", response_model=ApiResponse[AdditionalResourceStats])
async def get_additional_resource_stats(
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	stats = await db_api.additional_resource_stats(session, visible_workspaces(user))
	return ApiResponse(data=AdditionalResourceStats(**stats))


@router.get("/type/{resource_type}", response_model=TypedList)
async def get_additional_resources_by_type(
	resource_type: AdditionalResourceType,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Active additional resources of one type, unpaginated."""
	items = await db_api.list_by_type(session, resource_type.value, visible_workspaces(user))
	return TypedList(data=[AdditionalResource.model_validate(r) for r in items], count=len(items))


@router.delete("/bulk/delete", response_model=ApiResponse[BulkDeleteResult])
async def bulk_delete_additional_resources(
	data: BulkIds,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	resources = await crud.get_many(session, AdditionalResourceModel, data.ids, visible_workspaces(user))
	deletable = [r for r in resources if not r.is_system]
	for resource in deletable:
		record_change(
			session, user, resource,
			resource_type=RESOURCE_TYPE,
			action="deleted",
			severity=Severity.MEDIUM,
		)
	deleted_ids = [r.id for r in deletable]
	deleted = await crud.delete_many(session, AdditionalResourceModel, deleted_ids)
	await session.commit()
	return ApiResponse(
		data=BulkDeleteResult(
			deleted_count=deleted,
			requested_ids=data.ids,
			deleted_ids=deleted_ids,
			skipped_ids=[i for i in data.ids if i not in deleted_ids],
		),
		message=f"{deleted} additional resources deleted",
	)


@router.get("/{resource_id}", response_model=ApiResponse[AdditionalResource])
async def get_additional_resource(
	resource_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	resource = await _visible(session, user, resource_id)
	return ApiResponse(data=AdditionalResource.model_validate(resource))


@router.put("/{resource_id}", response_model=ApiResponse[AdditionalResource])
async def update_additional_resource(
	resource_id: str,
	data: AdditionalResourceUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	resource = await _visible(session, user, resource_id)
	changes = crud.apply_updates(resource, data.model_dump(exclude_unset=True, mode="json"), user.email)
	record_change(session, user, resource, resource_type=RESOURCE_TYPE, action="updated", changes=changes)
	await session.commit()
	return ApiResponse(
		data=AdditionalResource.model_validate(resource),
		message="Additional resource updated successfully",
	)


@router.patch("/{resource_id}/attributes", response_model=ApiResponse[AdditionalResource])
async def update_additional_resource_attributes(
	resource_id: str,
	data: AttributesUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Merge into or replace the attribute map."""
	resource = await _visible(session, user, resource_id)
	db_api.update_attributes(resource, data.attributes, data.operation.value)
	resource.last_modified_by = user.email
	record_change(
		session, user, resource,
		resource_type=RESOURCE_TYPE,
		action="updated",
		changes={"attributes": data.attributes, "operation": data.operation.value},
	)
	await session.commit()
	return ApiResponse(
		data=AdditionalResource.model_validate(resource),
		message="Attributes updated successfully",
	)


@router.post("/{resource_id}/evaluate", response_model=ApiResponse[EvaluationResult])
async def evaluate_additional_resource(
	resource_id: str,
	data: EvaluateContext,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	resource = await _visible(session, user, resource_id)
	result, rule_results = db_api.evaluate(resource, data.context)
	await session.commit()
	return ApiResponse(
		data=EvaluationResult(
			id=resource.id,
			result=result,
			evaluated_at=resource.last_evaluated_at,
			evaluation_count=resource.evaluation_count,
			rule_results=[r.to_dict() for r in rule_results],
		),
	)


@router.delete("/{resource_id}", response_model=ApiResponse[None])
async def delete_additional_resource(
	resource_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	resource = await _visible(session, user, resource_id)
	if resource.is_system:
		raise ValidationError("System additional resources cannot be deleted")
	record_change(
		session, user, resource,
		resource_type=RESOURCE_TYPE,
		action="deleted",
		severity=Severity.MEDIUM,
	)
	await session.delete(resource)
	await session.commit()
	return ApiResponse(message="Additional resource deleted successfully")
