# (c) Copyright Datacraft, 2026
"""Additional resource ORM model."""
from datetime import datetime

from sqlalchemy import DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from craft.core.db.base import Base, MetadataColumns, ScopedColumns, TimestampColumns


class AdditionalResource(Base, ScopedColumns, MetadataColumns, TimestampColumns):
	"""Condition, state, approval, status or ticket that policies can require."""
	__tablename__ = "additional_resources"

	id: Mapped[str] = mapped_column(String(128), primary_key=True)
	name: Mapped[str] = mapped_column(String(255), index=True)
	display_name: Mapped[str] = mapped_column(String(255))
	type: Mapped[str] = mapped_column(String(16), index=True)
	description: Mapped[str | None] = mapped_column(Text, nullable=True)
	attributes: Mapped[dict] = mapped_column(default=dict)
	evaluation_rules: Mapped[list] = mapped_column(default=list)
	dependencies: Mapped[dict | None] = mapped_column(nullable=True)
	config: Mapped[dict] = mapped_column(default=dict)
	owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
	category: Mapped[str | None] = mapped_column(String(128), nullable=True)
	priority: Mapped[str] = mapped_column(String(16), default="medium", index=True)
	is_template: Mapped[bool] = mapped_column(default=False)
	external_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
	active: Mapped[bool] = mapped_column(default=True, index=True)
	last_evaluated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
	evaluation_count: Mapped[int] = mapped_column(default=0)

	META_INPUT_FIELDS = MetadataColumns.META_INPUT_FIELDS + (
		"owner",
		"category",
		"priority",
		"is_template",
		"external_id",
	)

	__table_args__ = (
		UniqueConstraint("environment_id", "name", name="uq_additional_resources_environment_name"),
	)

	@property
	def meta(self) -> dict:
		return {
			**self.base_meta(),
			"owner": self.owner,
			"category": self.category,
			"priority": self.priority,
			"is_template": self.is_template,
			"external_id": self.external_id,
		}
