# (c) Copyright Datacraft, 2026
"""Attribute database API."""
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

from ..schema import AttributeParams
from .orm import Attribute

SEARCH_FIELDS = (
	Attribute.name,
	Attribute.display_name,
	Attribute.description,
	Attribute.id,
)


async def get_attribute(session: AsyncSession, attribute_id: str) -> Attribute | None:
	return await session.get(Attribute, attribute_id)


async def find_duplicate(
	session: AsyncSession,
	environment_id: str,
	name: str | None,
	attribute_id: str | None = None,
	exclude_id: str | None = None,
) -> Attribute | None:
	"""An attribute with ``attribute_id``, or named ``name`` in the environment."""
	clauses = []
	if attribute_id:
		clauses.append(Attribute.id == attribute_id)
	if name:
		clauses.append((Attribute.environment_id == environment_id) & (Attribute.name == name))
	if not clauses:
		return None
	stmt = select(Attribute).where(or_(*clauses))
	if exclude_id:
		stmt = stmt.where(Attribute.id != exclude_id)
	return (await session.execute(stmt.limit(1))).scalar_one_or_none()


async def list_attributes(
	session: AsyncSession,
	params: PaginationParams,
	filters: AttributeParams,
	workspace_ids: set[str] | None,
) -> tuple[list[Attribute], int]:
	stmt = crud.scoped_select(Attribute, workspace_ids)
	stmt = crud.filter_equal(
		stmt, Attribute, filters,
		"data_type", "scope", "is_required", "active", "is_system", "is_custom",
		*crud.HIERARCHY_FILTERS,
	)
	for clause in (
		json_contains_any(Attribute.categories, split_csv(filters.categories)),
		json_contains_any(Attribute.tags, split_csv(filters.tags)),
		search_clause(params.search, SEARCH_FIELDS),
	):
		if clause is not None:
			stmt = stmt.where(clause)
	return await paginate(session, stmt, Attribute, params, default_sort="name", default_order="asc")


async def list_by_category(
	session: AsyncSession,
	category: str,
	workspace_ids: set[str] | None,
	params: PaginationParams | None = None,
	environment_id: str | None = None,
) -> tuple[list[Attribute], int]:
	"""Active attributes of one category, one page of them when ``params`` is given."""
	stmt = crud.scoped_select(Attribute, workspace_ids).where(
		Attribute.active.is_(True),
		json_contains_any(Attribute.categories, [category]),
	)
	if environment_id:
		stmt = stmt.where(Attribute.environment_id == environment_id)
	if params is None:
		items = list((await session.execute(stmt.order_by(Attribute.name, Attribute.id))).scalars().all())
		return items, len(items)
	return await paginate(session, stmt, Attribute, params, default_sort="name", default_order="asc")


def create_attribute(session: AsyncSession, data: dict[str, Any], created_by: str) -> Attribute:
	meta = data.pop("metadata", None) or {}
	attribute_id = data.pop("id", None) or slugify_id(data["name"])
	attribute = Attribute(
		id=attribute_id,
		**data,
		created_by=created_by,
		last_modified_by=created_by,
	)
	attribute.apply_meta(meta)
	session.add(attribute)
	return attribute


async def attribute_stats(session: AsyncSession, workspace_ids: set[str] | None) -> dict:
	sub = crud.scoped_select(Attribute, workspace_ids).subquery()
	stats: dict[str, Any] = {
		"total": await crud.count_rows(session, sub),
		"active": await crud.count_rows(session, sub, sub.c.active.is_(True)),
		"required": await crud.count_rows(session, sub, sub.c.is_required.is_(True)),
		"custom": await crud.count_rows(session, sub, sub.c.is_custom.is_(True)),
		"system": await crud.count_rows(session, sub, sub.c.is_system.is_(True)),
	}

	# categories is a JSON list, so it is counted here rather than grouped in SQL
	by_category: dict[str, dict[str, int]] = {}
	rows = await session.execute(
		select(sub.c.categories, sub.c.is_required).where(sub.c.active.is_(True))
	)
	for categories, is_required in rows.all():
		for category in categories or []:
			counts = by_category.setdefault(category, {"count": 0, "required": 0})
			counts["count"] += 1
			counts["required"] += int(bool(is_required))
	stats["by_category"] = by_category
	active = select(sub).where(sub.c.active.is_(True)).subquery()
	stats["by_data_type"] = await crud.group_counts(session, active, active.c.data_type)
	return stats
