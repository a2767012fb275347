# (c) Copyright Datacraft, 2026
"""Attribute definition ORM model."""
from typing import Any

from sqlalchemy import JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from craft.core.db.base import Base, MetadataColumns, ScopedColumns, TimestampColumns


class Attribute(Base, ScopedColumns, MetadataColumns, TimestampColumns):
	"""Declared attribute: its data type, constraints and where it applies."""
	__tablename__ = "attributes"

	id: Mapped[str] = mapped_column(String(128), primary_key=True)
	name: Mapped[str] = mapped_column(String(100), index=True)
	display_name: Mapped[str] = mapped_column(String(100))
	description: Mapped[str | None] = mapped_column(Text, nullable=True)
	categories: Mapped[list] = mapped_column(default=list)
	data_type: Mapped[str] = mapped_column(String(16), index=True)
	is_required: Mapped[bool] = mapped_column(default=False)
	is_multi_value: Mapped[bool] = mapped_column(default=False)
	default_value: Mapped[Any] = mapped_column(JSON, nullable=True)
	scope: Mapped[str] = mapped_column(String(16), default="environment", index=True)
	inheritance_rules: Mapped[dict] = mapped_column(default=dict)
	constraints: Mapped[dict] = mapped_column(default=dict)
	validation: Mapped[dict] = mapped_column(default=dict)
	mapping: Mapped[dict] = mapped_column(default=dict)
	external_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
	active: Mapped[bool] = mapped_column(default=True, index=True)

	META_INPUT_FIELDS = MetadataColumns.META_INPUT_FIELDS + ("external_id",)

	__table_args__ = (
		UniqueConstraint("environment_id", "name", name="uq_attributes_environment_name"),
	)

	@property
	def meta(self) -> dict:
		return {**self.base_meta(), "external_id": self.external_id}
