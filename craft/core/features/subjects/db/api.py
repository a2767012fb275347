# (c) Copyright Datacraft, 2026
"""Subject database API."""
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
from craft.core.utils import default_name

from ..schema import SubjectParams
from .orm import Subject

SEARCH_FIELDS = (
	Subject.name,
	Subject.display_name,
	Subject.email,
	Subject.description,
	Subject.id,
	Subject.department,
	Subject.role,
)


async def get_subject(session: AsyncSession, subject_id: str) -> Subject | None:
	return await session.get(Subject, subject_id)


async def find_duplicate(
	session: AsyncSession,
	environment_id: str,
	display_name: str | None,
	email: str | None,
	exclude_id: str | None = None,
) -> Subject | None:
	"""A subject in the environment with the same display name or email."""
	matches = []
	if display_name:
		matches.append(Subject.display_name == display_name)
	if email:
		matches.append(Subject.email == email)
	if not matches:
		return None
	stmt = select(Subject).where(Subject.environment_id == environment_id, or_(*matches))
	if exclude_id:
		stmt = stmt.where(Subject.id != exclude_id)
	return (await session.execute(stmt.limit(1))).scalar_one_or_none()


async def list_subjects(
	session: AsyncSession,
	params: PaginationParams,
	filters: SubjectParams,
	workspace_ids: set[str] | None,
) -> tuple[list[Subject], int]:
	stmt = crud.scoped_select(Subject, workspace_ids)
	stmt = crud.filter_equal(
		stmt, Subject, filters,
		"type", "status", "department", "role", "active", *crud.HIERARCHY_FILTERS,
	)
	for clause in (
		json_contains_any(Subject.tags, split_csv(filters.tags)),
		search_clause(params.search, SEARCH_FIELDS),
	):
		if clause is not None:
			stmt = stmt.where(clause)
	return await paginate(session, stmt, Subject, params)


async def list_by_type(
	session: AsyncSession,
	subject_type: str,
	params: PaginationParams,
	workspace_ids: set[str] | None,
) -> tuple[list[Subject], int]:
	stmt = crud.scoped_select(Subject, workspace_ids).where(
		Subject.type == subject_type,
		Subject.active.is_(True),
	)
	return await paginate(session, stmt, Subject, params)


def create_subject(session: AsyncSession, data: dict[str, Any], created_by: str) -> Subject:
	meta = data.pop("metadata", None) or {}
	if not data.get("id"):
		data.pop("id", None)
	if not data.get("name"):
		data["name"] = default_name(data["display_name"])
	subject = Subject(**data, created_by=created_by, last_modified_by=created_by)
	subject.apply_meta(meta)
	session.add(subject)
	return subject


async def subject_stats(session: AsyncSession, workspace_ids: set[str] | None) -> dict:
	sub = crud.scoped_select(Subject, workspace_ids).subquery()
	return {
		"total": await crud.count_rows(session, sub),
		"active": await crud.count_rows(session, sub, sub.c.active.is_(True)),
		"by_type": await crud.group_counts(session, sub, sub.c.type),
	}
