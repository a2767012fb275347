# (c) Copyright Datacraft, 2026
"""Activity database API."""
from datetime import datetime, timedelta, timezone

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.pagination import scope_clause, search_clause

from ..schema import ActivityFilters
from .orm import Activity


def _filtered(filters: ActivityFilters, workspace_ids: set[str] | None) -> Select:
	stmt = select(Activity)

	# activities without a workspace are visible to super admins only
	clause = scope_clause(Activity.workspace_id, workspace_ids)
	if clause is not None:
		stmt = stmt.where(clause)

	if filters.workspace_id:
		stmt = stmt.where(Activity.workspace_id == filters.workspace_id)
	if filters.category:
		stmt = stmt.where(Activity.category.in_([c.value for c in filters.category]))
	if filters.severity:
		stmt = stmt.where(Activity.severity.in_([s.value for s in filters.severity]))
	if filters.type:
		stmt = stmt.where(Activity.type.in_([t.value for t in filters.type]))
	if filters.actor:
		stmt = stmt.where(Activity.actor_name.ilike(f"%{filters.actor}%"))
	if filters.start_date:
		stmt = stmt.where(Activity.timestamp >= filters.start_date)
	if filters.end_date:
		stmt = stmt.where(Activity.timestamp <= filters.end_date)

	clause = search_clause(
		filters.search,
		[Activity.description, Activity.action, Activity.actor_name, Activity.resource_name],
	)
	if clause is not None:
		stmt = stmt.where(clause)
	return stmt


async def list_activities(
	session: AsyncSession,
	filters: ActivityFilters,
	workspace_ids: set[str] | None,
	page: int = 1,
	limit: int = 25,
) -> tuple[list[Activity], int]:
	stmt = _filtered(filters, workspace_ids)

	count_stmt = select(func.count()).select_from(stmt.subquery())
	total = (await session.execute(count_stmt)).scalar_one()

	stmt = (
		stmt.order_by(Activity.timestamp.desc(), Activity.id.desc())
		.offset((page - 1) * limit)
		.limit(limit)
	)
	result = await session.execute(stmt)
	return list(result.scalars().all()), total


async def export_activities(
	session: AsyncSession,
	filters: ActivityFilters,
	workspace_ids: set[str] | None,
	limit: int,
) -> list[Activity]:
	stmt = _filtered(filters, workspace_ids).order_by(Activity.timestamp.desc()).limit(limit)
	result = await session.execute(stmt)
	return list(result.scalars().all())


async def get_activity(session: AsyncSession, activity_id: str) -> Activity | None:
	return await session.get(Activity, activity_id)


async def activity_stats(
	session: AsyncSession,
	workspace_ids: set[str] | None,
	now: datetime | None = None,
) -> dict:
	base = _filtered(ActivityFilters(), workspace_ids).subquery()

	total = (await session.execute(select(func.count()).select_from(base))).scalar_one()

	since = (now or datetime.now(timezone.utc)) - timedelta(hours=24)
	recent = (
		await session.execute(
			select(func.count()).select_from(base).where(base.c.timestamp >= since)
		)
	).scalar_one()

	by_category = await session.execute(
		select(base.c.category, func.count()).group_by(base.c.category)
	)
	by_severity = await session.execute(
		select(base.c.severity, func.count()).group_by(base.c.severity)
	)

	return {
		"total": total,
		"recent_count": recent,
		"by_category": {k: v for k, v in by_category.all()},
		"by_severity": {k: v for k, v in by_severity.all()},
	}
