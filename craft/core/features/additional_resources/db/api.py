# (c) Copyright Datacraft, 2026
"""Additional resource database API."""
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db import crud
from craft.core.pagination import (
	PaginationParams,
	json_contains_any,
	paginate,
	search_clause,
	split_csv,
)
from craft.core.utils import slugify_id

from ..evaluator import RuleResult, evaluate_rules
from ..schema import AdditionalResourceParams
from .orm import AdditionalResource

SEARCH_FIELDS = (
	AdditionalResource.name,
	AdditionalResource.display_name,
	AdditionalResource.description,
)


async def get_additional_resource(session: AsyncSession, resource_id: str) -> AdditionalResource | None:
	return await session.get(AdditionalResource, resource_id)


async def find_duplicate(
	session: AsyncSession,
	environment_id: str,
	name: str,
	resource_id: str,
) -> AdditionalResource | None:
	stmt = select(AdditionalResource).where(
		or_(
			AdditionalResource.id == resource_id,
			(AdditionalResource.environment_id == environment_id) & (AdditionalResource.name == name),
		)
	)
	return (await session.execute(stmt.limit(1))).scalar_one_or_none()


async def list_additional_resources(
	session: AsyncSession,
	params: PaginationParams,
	filters: AdditionalResourceParams,
	workspace_ids: set[str] | None,
) -> tuple[list[AdditionalResource], int]:
	stmt = crud.scoped_select(AdditionalResource, workspace_ids)
	stmt = crud.filter_equal(
		stmt, AdditionalResource, filters,
		"type", "active", "priority", "category", *crud.HIERARCHY_FILTERS,
	)
	for clause in (
		json_contains_any(AdditionalResource.tags, split_csv(filters.tags)),
		search_clause(params.search, SEARCH_FIELDS),
	):
		if clause is not None:
			stmt = stmt.where(clause)
	return await paginate(
		session, stmt, AdditionalResource, params,
		default_sort="display_name",
		default_order="asc",
	)


async def list_by_type(
	session: AsyncSession,
	resource_type: str,
	workspace_ids: set[str] | None,
) -> list[AdditionalResource]:
	stmt = (
		crud.scoped_select(AdditionalResource, workspace_ids)
		.where(AdditionalResource.type == resource_type, AdditionalResource.active.is_(True))
		.order_by(AdditionalResource.display_name, AdditionalResource.id)
	)
	return list((await session.execute(stmt)).scalars().all())


def create_additional_resource(
	session: AsyncSession,
	data: dict[str, Any],
	created_by: str,
) -> AdditionalResource:
	meta = data.pop("metadata", None) or {}
	resource = AdditionalResource(
		id=slugify_id(data["name"]),
		**data,
		created_by=created_by,
		last_modified_by=created_by,
	)
	resource.apply_meta(meta)
	session.add(resource)
	return resource


def update_attributes(resource: AdditionalResource, attributes: dict[str, Any], operation: str) -> None:
	"""Merge or replace ``attributes``; on merge a ``None`` value removes the key."""
	if operation == "replace":
		resource.attributes = dict(attributes)
		return
	merged = dict(resource.attributes or {})
	for key, value in attributes.items():
		if value is None:
			merged.pop(key, None)
		else:
			merged[key] = value
	resource.attributes = merged


def evaluate(resource: AdditionalResource, context: dict[str, Any]) -> tuple[bool, list[RuleResult]]:
	"""Evaluate the rules and count the evaluation on ``resource``."""
	resource.evaluation_count = (resource.evaluation_count or 0) + 1
	resource.last_evaluated_at = datetime.now(timezone.utc)
	return evaluate_rules(resource.evaluation_rules or [], context)


async def additional_resource_stats(session: AsyncSession, workspace_ids: set[str] | None) -> dict:
	sub = crud.scoped_select(AdditionalResource, workspace_ids).subquery()
	total = await crud.count_rows(session, sub)
	active = await crud.count_rows(session, sub, sub.c.active.is_(True))
	return {
		"total": total,
		"active": active,
		"inactive": total - active,
		"by_type": await crud.group_counts(session, sub, sub.c.type),
		"by_priority": await crud.group_counts(session, sub, sub.c.priority),
	}
