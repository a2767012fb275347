# (c) Copyright Datacraft, 2026
"""Generic helpers shared by the workspace scoped entity APIs."""
from typing import Any, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.pagination import scope_clause


def apply_updates(model, updates: dict[str, Any], modified_by: str) -> dict[str, Any]:
	"""
	Set ``updates`` on ``model``, return the fields that changed.

	``updates`` is an ``exclude_unset`` dump, so an explicit ``None``
	clears a nullable column. ``None`` for a required column is ignored.
	"""
	changes: dict[str, Any] = {}
	meta = updates.pop("metadata", None)
	columns = model.__table__.columns
	for key, value in updates.items():
		if value is None and (key not in columns or not columns[key].nullable):
			continue
		if getattr(model, key) != value:
			changes[key] = value
		setattr(model, key, value)
	if meta:
		changed_meta = model.apply_meta(meta)
		if changed_meta:
			changes["metadata"] = changed_meta
	model.last_modified_by = modified_by
	return changes


async def get_many(
	session: AsyncSession,
	model,
	ids: Sequence[str],
	workspace_ids: set[str] | None,
) -> list:
	stmt = select(model).where(model.id.in_(list(ids)))
	clause = scope_clause(model.workspace_id, workspace_ids)
	if clause is not None:
		stmt = stmt.where(clause)
	return list((await session.execute(stmt)).scalars().all())


async def delete_many(session: AsyncSession, model, ids: Sequence[str]) -> int:
	if not ids:
		return 0
	result = await session.execute(delete(model).where(model.id.in_(list(ids))))
	return result.rowcount or 0


def scoped_select(model, workspace_ids: set[str] | None):
	stmt = select(model)
	clause = scope_clause(model.workspace_id, workspace_ids)
	if clause is not None:
		stmt = stmt.where(clause)
	return stmt


async def count_rows(session: AsyncSession, sub, *where) -> int:
	stmt = select(func.count()).select_from(sub)
	if where:
		stmt = stmt.where(*where)
	return (await session.execute(stmt)).scalar_one()


async def group_counts(session: AsyncSession, sub, column) -> dict[str, int]:
	"""Row counts per distinct value of ``column`` of subquery ``sub``."""
	stmt = select(column, func.count()).select_from(sub).group_by(column)
	return {
		key: count
		for key, count in (await session.execute(stmt)).all()
		if key is not None
	}


def filter_equal(stmt, model, filters, *names: str):
	"""Add ``model.<name> == filters.<name>`` for each name that is set."""
	for name in names:
		value = getattr(filters, name, None)
		if value is None:
			continue
		stmt = stmt.where(getattr(model, name) == getattr(value, "value", value))
	return stmt


HIERARCHY_FILTERS = ("workspace_id", "application_id", "environment_id")
