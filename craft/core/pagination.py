# (c) Copyright Datacraft, 2026
"""
Filter, sort and paginate helpers for list endpoints.

List endpoints build a ``select`` with their filters, then hand it to
:func:`paginate` which counts the filtered rows, applies the sort and
returns one page together with the total.
"""
import json
import math
from typing import Any, Literal, Sequence

from fastapi import Query
from pydantic import BaseModel, field_validator
from sqlalchemy import String, Select, cast, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.config import get_settings
from craft.core.schemas import PaginationMeta

settings = get_settings()


class PaginationParams(BaseModel):
	"""Query parameters common to every list endpoint."""
	page: int = Query(1, description="Page number")
	limit: int = Query(settings.default_page_size, description="Items per page")
	sort_by: str | None = Query(None, description="Sort column")
	sort_order: Literal["asc", "desc"] | None = Query(None, description="Sort direction")
	search: str | None = Query(None, description="Free text search")

	@field_validator("page")
	@classmethod
	def _clamp_page(cls, value: int) -> int:
		return max(1, value)

	@field_validator("limit")
	@classmethod
	def _clamp_limit(cls, value: int) -> int:
		return min(max(1, value), settings.max_page_size)

	@property
	def offset(self) -> int:
		return (self.page - 1) * self.limit


def build_meta(page: int, limit: int, total: int) -> PaginationMeta:
	total_pages = math.ceil(total / limit) if limit else 0
	return PaginationMeta(
		page=page,
		limit=limit,
		total=total,
		total_pages=total_pages,
		has_next=page < total_pages,
		has_prev=page > 1,
	)


def search_clause(term: str | None, columns: Sequence[Any]):
	"""Case-insensitive substring match across ``columns``."""
	if not term or not term.strip():
		return None
	pattern = f"%{term.strip()}%"
	return or_(*[col.ilike(pattern) for col in columns])


def like_literal(text: str) -> str:
	"""Escape LIKE wildcards so ``text`` matches only itself (escape char ``\\``)."""
	return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def json_contains_any(column, values: Sequence[str]):
	"""
	Match rows whose JSON string array holds any of ``values``.

	The stored text is compared against each value as ``json.dumps``
	writes it, so non-ASCII values match their ``\\uXXXX`` escapes.
	"""
	values = [v for v in values if v]
	if not values:
		return None
	text = cast(column, String)
	return or_(*[
		text.like(f"%{like_literal(json.dumps(value))}%", escape="\\")
		for value in values
	])


def split_csv(value: str | list[str] | None) -> list[str]:
	if value is None:
		return []
	if isinstance(value, list):
		items = []
		for v in value:
			items.extend(split_csv(v))
		return items
	return [part.strip() for part in value.split(",") if part.strip()]


def scope_clause(column, workspace_ids: set[str] | None):
	"""Restrict ``column`` to ``workspace_ids``; ``None`` means unrestricted."""
	if workspace_ids is None:
		return None
	if not workspace_ids:
		return false()
	return column.in_(sorted(workspace_ids))


async def paginate(
	session: AsyncSession,
	stmt: Select,
	model,
	params: PaginationParams,
	default_sort: str = "created_at",
	default_order: str | None = None,
) -> tuple[list[Any], int]:
	"""Return one page of ``stmt`` and the total row count."""
	count_stmt = select(func.count()).select_from(stmt.subquery())
	total = (await session.execute(count_stmt)).scalar_one()

	if params.sort_by and params.sort_by in model.__table__.columns:
		sort_column = getattr(model, params.sort_by)
		order = params.sort_order or "desc"
	else:
		sort_column = getattr(model, default_sort)
		order = params.sort_order or default_order or "desc"

	if order == "asc":
		stmt = stmt.order_by(sort_column.asc(), model.id.asc())
	else:
		stmt = stmt.order_by(sort_column.desc(), model.id.desc())

	stmt = stmt.offset(params.offset).limit(params.limit)
	result = await session.execute(stmt)
	return list(result.scalars().all()), total
