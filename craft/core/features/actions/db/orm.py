# (c) Copyright Datacraft, 2026
"""Action ORM model."""
from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from craft.core.db.base import Base, MetadataColumns, ScopedColumns, TimestampColumns
from craft.core.utils import generate_id


def _action_id() -> str:
	return generate_id("action")


class Action(Base, ScopedColumns, MetadataColumns, TimestampColumns):
	"""Verb a subject performs on a resource, atomic or composite."""
	__tablename__ = "actions"

	id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_action_id)
	name: Mapped[str] = mapped_column(String(128), index=True)
	display_name: Mapped[str] = mapped_column(String(255))
	description: Mapped[str | None] = mapped_column(Text, nullable=True)
	category: Mapped[str] = mapped_column(String(16), index=True)
	type: Mapped[str] = mapped_column(String(16), default="atomic")
	http_method: Mapped[str | None] = mapped_column(String(8), nullable=True)
	endpoint: Mapped[str | None] = mapped_column(String(1024), nullable=True)
	resource_types: Mapped[list] = mapped_column(default=list)
	risk_level: Mapped[str] = mapped_column(String(16), default="low", index=True)
	parent_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
	composite_actions: Mapped[list] = mapped_column(default=list)
	owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
	active: Mapped[bool] = mapped_column(default=True, index=True)

	META_INPUT_FIELDS = MetadataColumns.META_INPUT_FIELDS + ("owner",)

	__table_args__ = (
		UniqueConstraint("name", name="uq_actions_name"),
	)

	@property
	def meta(self) -> dict:
		return {**self.base_meta(), "owner": self.owner}
