# (c) Copyright Datacraft, 2026
"""Declarative base and shared column mixins."""
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


class Base(DeclarativeBase):
	type_annotation_map = {
		dict: JSON,
		list: JSON,
	}


class TimestampColumns:
	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, index=True
	)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now
	)


class ScopedColumns:
	"""Workspace -> application -> environment placement of a record."""
	workspace_id: Mapped[str] = mapped_column(String(64), index=True)
	application_id: Mapped[str] = mapped_column(String(64), index=True)
	environment_id: Mapped[str] = mapped_column(String(64), index=True)


class MetadataColumns:
	"""Flattened ``metadata`` block shared by the managed entities."""
	created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
	last_modified_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
	tags: Mapped[list] = mapped_column(default=list)
	is_system: Mapped[bool] = mapped_column(default=False, index=True)
	is_custom: Mapped[bool] = mapped_column(default=True)
	version: Mapped[str] = mapped_column(String(32), default="1.0.0")

	META_INPUT_FIELDS = ("tags", "is_system", "is_custom", "version")

	def apply_meta(self, data: dict | None) -> dict:
		"""Copy client supplied metadata onto columns, return what changed."""
		changed = {}
		for key, value in (data or {}).items():
			if value is None or key not in self.META_INPUT_FIELDS:
				continue
			if getattr(self, key, None) != value:
				changed[key] = value
			setattr(self, key, list(value) if isinstance(value, list) else value)
		return changed

	def base_meta(self) -> dict:
		return {
			"created_by": self.created_by,
			"last_modified_by": self.last_modified_by,
			"tags": list(self.tags or []),
			"is_system": self.is_system,
			"is_custom": self.is_custom,
			"version": self.version,
		}
