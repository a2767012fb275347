# (c) Copyright Datacraft, 2026
"""Resource database API."""
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db import crud
from craft.core.pagination import (
	PaginationParams,
	json_contains_any,
	paginate,
	search_clause,
	split_csv,
)

from ..schema import ResourceParams
from .orm import Resource

SEARCH_FIELDS = (
	Resource.name,
	Resource.display_name,
	Resource.description,
	Resource.uri,
	Resource.id,
)


async def get_resource(session: AsyncSession, resource_id: str) -> Resource | None:
	return await session.get(Resource, resource_id)


async def list_resources(
	session: AsyncSession,
	params: PaginationParams,
	filters: ResourceParams,
	workspace_ids: set[str] | None,
) -> tuple[list[Resource], int]:
	stmt = crud.scoped_select(Resource, workspace_ids)
	stmt = crud.filter_equal(
		stmt, Resource, filters,
		"type", "classification", "active", "parent_id", "owner", *crud.HIERARCHY_FILTERS,
	)
	for clause in (
		json_contains_any(Resource.tags, split_csv(filters.tags)),
		search_clause(params.search, SEARCH_FIELDS),
	):
		if clause is not None:
			stmt = stmt.where(clause)
	return await paginate(session, stmt, Resource, params)


async def list_by(
	session: AsyncSession,
	params: PaginationParams,
	workspace_ids: set[str] | None,
	**equals: Any,
) -> tuple[list[Resource], int]:
	stmt = crud.scoped_select(Resource, workspace_ids)
	for key, value in equals.items():
		stmt = stmt.where(getattr(Resource, key) == value)
	return await paginate(session, stmt, Resource, params)


async def list_roots(session: AsyncSession, workspace_ids: set[str] | None) -> list[Resource]:
	stmt = (
		crud.scoped_select(Resource, workspace_ids)
		.where(Resource.parent_id.is_(None))
		.order_by(Resource.name, Resource.id)
	)
	return list((await session.execute(stmt)).scalars().all())


def create_resource(session: AsyncSession, data: dict[str, Any], created_by: str) -> Resource:
	meta = data.pop("metadata", None) or {}
	resource = Resource(**data, created_by=created_by, last_modified_by=created_by)
	resource.apply_meta(meta)
	session.add(resource)
	return resource


async def resource_stats(session: AsyncSession, workspace_ids: set[str] | None) -> dict:
	sub = crud.scoped_select(Resource, workspace_ids).subquery()
	total_size = (
		await session.execute(select(func.coalesce(func.sum(sub.c.size), 0)).select_from(sub))
	).scalar_one()
	return {
		"total": await crud.count_rows(session, sub),
		"active": await crud.count_rows(session, sub, sub.c.active.is_(True)),
		"total_size": int(total_size or 0),
		"by_type": await crud.group_counts(session, sub, sub.c.type),
		"by_classification": await crud.group_counts(session, sub, sub.c.classification),
	}
