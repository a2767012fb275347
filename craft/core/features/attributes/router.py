# (c) Copyright Datacraft, 2026
"""Attribute catalog endpoints."""
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
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
from craft.core.features.policies.db import PolicyDB
from craft.core.features.users.db.orm import User
from craft.core.pagination import PaginationParams, build_meta
from craft.core.schemas import ApiResponse, BulkDeleteResult, BulkIds, BulkUpdateResult
from craft.core.utils import in_use_message, slugify_id

from .db import api as db_api
from .db.orm import Attribute as AttributeModel
from .schema import (
	Attribute,
	AttributeBulkUpdate,
	AttributeCategory,
	AttributeCreate,
	AttributeParams,
	AttributeStats,
	AttributeUpdate,
	ValueCheck,
	ValueToValidate,
)
from .validator import check_constraints, json_schema, validate_value

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/attributes", tags=["attributes"])


async def _visible(session: AsyncSession, user: User, attribute_id: str) -> AttributeModel:
	attribute = await db_api.get_attribute(session, attribute_id)
	if attribute is None or not can_access_workspace(user, attribute.workspace_id):
		raise NotFoundError("Attribute")
	return attribute


async def _usage(session: AsyncSession, attributes: list[AttributeModel]) -> dict[tuple[str, str], list]:
	return await PolicyDB(session).attribute_usage((a.workspace_id, a.name) for a in attributes)


def _dump(attribute: AttributeModel, policies: list) -> dict[str, Any]:
	data = Attribute.model_validate(attribute).model_dump()
	data["policy_count"] = len(policies)
	data["used_in_policies"] = [{"id": p.id, "name": p.name} for p in policies]
	return data


async def _one(session: AsyncSession, attribute: AttributeModel) -> dict[str, Any]:
	usage = await _usage(session, [attribute])
	return _dump(attribute, usage[(attribute.workspace_id, attribute.name)])


async def _page(session: AsyncSession, items: list[AttributeModel], params: PaginationParams, total: int):
	usage = await _usage(session, items)
	return ApiResponse(
		data=[_dump(a, usage[(a.workspace_id, a.name)]) for a in items],
		pagination=build_meta(params.page, params.limit, total),
	)


def _check_update(attribute: AttributeModel, updates: dict[str, Any]) -> None:
	if "data_type" not in updates and "constraints" not in updates:
		return
	check_constraints(
		updates.get("data_type") or attribute.data_type,
		updates.get("constraints") or attribute.constraints or {},
	)


@router.get("", response_model=ApiResponse[list[Attribute]])
async def list_attributes(
	params: Annotated[PaginationParams, Depends()],
	filters: Annotated[AttributeParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""List attributes with the policies that use each of them."""
	items, total = await db_api.list_attributes(session, params, filters, visible_workspaces(user))
	return await _page(session, items, params, total)


@router.post("", response_model=ApiResponse[Attribute], status_code=status.HTTP_201_CREATED)
async def create_attribute(
	data: AttributeCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	ensure_workspace_access(user, data.workspace_id)
	await validate_hierarchy(session, data.workspace_id, data.application_id, data.environment_id)

	attribute_id = data.id or slugify_id(data.name)
	if not attribute_id:
		raise ValidationError("Name must contain at least one letter or digit")
	if await db_api.find_duplicate(session, data.environment_id, data.name, attribute_id):
		raise ConflictError("Attribute with this ID or name already exists")

	payload = data.model_dump(mode="json")
	check_constraints(payload["data_type"], payload["constraints"])
	payload["id"] = attribute_id
	attribute = db_api.create_attribute(session, payload, created_by=user.email)
	if attribute.default_value is not None:
		result = validate_value(attribute, attribute.default_value)
		if not result.valid:
			raise ValidationError("Invalid default value", details=result.errors)

	await session.flush()
	record_change(session, user, attribute, resource_type="attribute", action="created")
	await session.commit()
	logger.info(f"Attribute created: {attribute.id} by {user.email}")
	return ApiResponse(data=_dump(attribute, []), message="Attribute created successfully")


@router.get("/stats", response_model=ApiResponse[AttributeStats])
async def get_attribute_stats(
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	stats = await db_api.attribute_stats(session, visible_workspaces(user))
	return ApiResponse(data=AttributeStats(**stats))


@router.get("/category/{category}", response_model=ApiResponse[list[Attribute]])
async def get_attributes_by_category(
	category: AttributeCategory,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Active attributes that apply to ``category``."""
	items, total = await db_api.list_by_category(session, category.value, visible_workspaces(user), params)
	return await _page(session, items, params, total)


@router.get("/schema/{category}", response_model=ApiResponse[dict])
async def get_attribute_schema(
	category: AttributeCategory,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
	environment_id: str | None = Query(None),
):
	"""
	JSON Schema describing the attributes of ``category``.

	Attributes are keyed by name; pass ``environment_id`` when names repeat
	across environments.
	"""
	items, _ = await db_api.list_by_category(
		session, category.value, visible_workspaces(user), environment_id=environment_id
	)
	return ApiResponse(data=json_schema(items))


@router.put("/bulk/update", response_model=ApiResponse[BulkUpdateResult])
async def bulk_update_attributes(
	data: AttributeBulkUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	attributes = await crud.get_many(session, AttributeModel, data.ids, visible_workspaces(user))
	updates = data.updates.model_dump(exclude_unset=True, mode="json")
	for attribute in attributes:
		_check_update(attribute, updates)

	modified = 0
	for attribute in attributes:
		changes = crud.apply_updates(attribute, dict(updates), user.email)
		if changes:
			modified += 1
			record_change(session, user, attribute, resource_type="attribute", action="updated", changes=changes)
	await session.commit()
	logger.info(f"Bulk update of {modified} attributes by {user.email}")
	return ApiResponse(
		data=BulkUpdateResult(matched_count=len(attributes), modified_count=modified),
		message=f"{modified} attributes updated",
	)


@router.delete("/bulk/delete", response_model=ApiResponse[BulkDeleteResult])
async def bulk_delete_attributes(
	data: BulkIds,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Delete attributes, skipping system attributes and those used by policies."""
	attributes = await crud.get_many(session, AttributeModel, data.ids, visible_workspaces(user))
	usage = await _usage(session, attributes)
	deletable = [
		a for a in attributes
		if not a.is_system and not usage[(a.workspace_id, a.name)]
	]
	for attribute in deletable:
		record_change(session, user, attribute, resource_type="attribute", action="deleted", severity=Severity.MEDIUM)

	deleted_ids = [a.id for a in deletable]
	deleted = await crud.delete_many(session, AttributeModel, deleted_ids)
	await session.commit()
	return ApiResponse(
		data=BulkDeleteResult(
			deleted_count=deleted,
			requested_ids=data.ids,
			deleted_ids=deleted_ids,
			skipped_ids=[i for i in data.ids if i not in deleted_ids],
		),
		message=f"{deleted} attributes deleted",
	)


@router.get("/{attribute_id}", response_model=ApiResponse[Attribute])
async def get_attribute(
	attribute_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	attribute = await _visible(session, user, attribute_id)
	return ApiResponse(data=await _one(session, attribute))


@router.put("/{attribute_id}", response_model=ApiResponse[Attribute])
async def update_attribute(
	attribute_id: str,
	data: AttributeUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	attribute = await _visible(session, user, attribute_id)
	updates = data.model_dump(exclude_unset=True, mode="json")

	name = updates.get("name")
	if name and name != attribute.name:
		if await db_api.find_duplicate(session, attribute.environment_id, name, exclude_id=attribute.id):
			raise ConflictError("Attribute with this ID or name already exists")
	_check_update(attribute, updates)

	changes = crud.apply_updates(attribute, updates, user.email)
	record_change(session, user, attribute, resource_type="attribute", action="updated", changes=changes)
	await session.commit()
	return ApiResponse(data=await _one(session, attribute), message="Attribute updated successfully")


@router.post("/{attribute_id}/validate", response_model=ApiResponse[ValueCheck])
async def validate_attribute_value(
	attribute_id: str,
	data: ValueToValidate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Check a value against the data type and constraints of an active attribute."""
	attribute = await _visible(session, user, attribute_id)
	if not attribute.active:
		raise NotFoundError("Attribute")
	result = validate_value(attribute, data.value)
	return ApiResponse(
		data=ValueCheck(valid=result.valid, errors=result.errors, normalized_value=result.normalized_value)
	)


@router.delete("/{attribute_id}", response_model=ApiResponse[None])
async def delete_attribute(
	attribute_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	attribute = await _visible(session, user, attribute_id)
	if attribute.is_system:
		raise ValidationError("Cannot delete system attributes")

	policies = (await _usage(session, [attribute]))[(attribute.workspace_id, attribute.name)]
	if policies:
		raise ConflictError(
			in_use_message(attribute.display_name, "attribute", len(policies)),
			details={"policy_count": len(policies), "policies": [p.name for p in policies]},
		)

	record_change(session, user, attribute, resource_type="attribute", action="deleted", severity=Severity.MEDIUM)
	await session.delete(attribute)
	await session.commit()
	logger.info(f"Attribute deleted: {attribute_id} by {user.email}")
	return ApiResponse(message="Attribute deleted successfully")
