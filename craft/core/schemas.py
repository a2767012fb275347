# (c) Copyright Datacraft, 2026
"""Response envelope shared by every endpoint."""
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationMeta(BaseModel):
	page: int
	limit: int
	total: int
	total_pages: int
	has_next: bool
	has_prev: bool


class ApiResponse(BaseModel, Generic[T]):
	success: bool = True
	data: T | None = None
	pagination: PaginationMeta | None = None
	message: str | None = None


class BulkIds(BaseModel):
	ids: list[str] = Field(..., min_length=1)


class BulkUpdateResult(BaseModel):
	matched_count: int
	modified_count: int


class BulkDeleteResult(BaseModel):
	deleted_count: int
	requested_ids: list[str]
	deleted_ids: list[str]
	skipped_ids: list[str] = Field(default_factory=list)
