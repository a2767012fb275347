# (c) Copyright Datacraft, 2026
"""Action database API."""
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db import crud
from craft.core.pagination import (
	PaginationParams,
	json_contains_any,
	paginate,
	search_clause,
	split_csv,
)

from ..schema import ActionParams
from .orm import Action

SEARCH_FIELDS = (
	Action.name,
	Action.display_name,
	Action.description,
	Action.id,
	Action.endpoint,
)


async def get_action(session: AsyncSession, action_id: str) -> Action | None:
	return await session.get(Action, action_id)


async def get_action_by_name(session: AsyncSession, name: str) -> Action | None:
	result = await session.execute(select(Action).where(Action.name == name))
	return result.scalar_one_or_none()


async def missing_ids(session: AsyncSession, ids: Sequence[str]) -> list[str]:
	"""Ids from ``ids`` with no matching action."""
	if not ids:
		return []
	found = set((await session.execute(select(Action.id).where(Action.id.in_(list(ids))))).scalars())
	return [i for i in ids if i not in found]


async def list_actions(
	session: AsyncSession,
	params: PaginationParams,
	filters: ActionParams,
	workspace_ids: set[str] | None,
) -> tuple[list[Action], int]:
	stmt = crud.scoped_select(Action, workspace_ids)
	stmt = crud.filter_equal(
		stmt, Action, filters,
		"category", "risk_level", "type", "active", "http_method", *crud.HIERARCHY_FILTERS,
	)
	for clause in (
		json_contains_any(Action.tags, split_csv(filters.tags)),
		search_clause(params.search, SEARCH_FIELDS),
	):
		if clause is not None:
			stmt = stmt.where(clause)
	return await paginate(session, stmt, Action, params)


async def list_by(
	session: AsyncSession,
	params: PaginationParams,
	workspace_ids: set[str] | None,
	**equals: Any,
) -> tuple[list[Action], int]:
	stmt = crud.scoped_select(Action, workspace_ids).where(Action.active.is_(True))
	for key, value in equals.items():
		stmt = stmt.where(getattr(Action, key) == value)
	return await paginate(session, stmt, Action, params)


async def list_for_resource_type(
	session: AsyncSession,
	resource_type: str,
	include_generic: bool,
	params: PaginationParams,
	workspace_ids: set[str] | None,
) -> tuple[list[Action], int]:
	"""Active actions applicable to ``resource_type``; ``*`` marks generic actions."""
	wanted = [resource_type, "*"] if include_generic else [resource_type]
	stmt = crud.scoped_select(Action, workspace_ids).where(
		Action.active.is_(True),
		json_contains_any(Action.resource_types, wanted),
	)
	return await paginate(session, stmt, Action, params)


def create_action(session: AsyncSession, data: dict[str, Any], created_by: str) -> Action:
	meta = data.pop("metadata", None) or {}
	if not data.get("id"):
		data.pop("id", None)
	action = Action(**data, created_by=created_by, last_modified_by=created_by)
	action.apply_meta(meta)
	session.add(action)
	return action


async def action_stats(session: AsyncSession, workspace_ids: set[str] | None) -> dict:
	sub = crud.scoped_select(Action, workspace_ids).subquery()
	return {
		"total": await crud.count_rows(session, sub),
		"active": await crud.count_rows(session, sub, sub.c.active.is_(True)),
		"custom": await crud.count_rows(session, sub, sub.c.is_custom.is_(True)),
		"system": await crud.count_rows(session, sub, sub.c.is_system.is_(True)),
		"by_category": await crud.group_counts(session, sub, sub.c.category),
		"by_risk_level": await crud.group_counts(session, sub, sub.c.risk_level),
	}
