# (c) Copyright Datacraft, 2026
"""Subject ORM model."""
from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from craft.core.db.base import Base, MetadataColumns, ScopedColumns, TimestampColumns
from craft.core.utils import generate_id


def _subject_id() -> str:
	return generate_id("subject")


class Subject(Base, ScopedColumns, MetadataColumns, TimestampColumns):
	"""User, group, role, service or device that requests access."""
	__tablename__ = "subjects"

	id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_subject_id)
	name: Mapped[str] = mapped_column(String(255), index=True)
	display_name: Mapped[str] = mapped_column(String(255))
	email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
	type: Mapped[str] = mapped_column(String(32), default="user", index=True)
	role: Mapped[str | None] = mapped_column(String(128), nullable=True)
	department: Mapped[str | None] = mapped_column(String(128), nullable=True)
	description: Mapped[str | None] = mapped_column(Text, nullable=True)
	status: Mapped[str] = mapped_column(String(16), default="active")
	parent_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
	permissions: Mapped[list] = mapped_column(default=list)
	policies: Mapped[list] = mapped_column(default=list)
	owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
	external_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
	active: Mapped[bool] = mapped_column(default=True, index=True)

	META_INPUT_FIELDS = MetadataColumns.META_INPUT_FIELDS + ("owner", "external_id")

	__table_args__ = (
		Index("ix_subjects_environment_type", "environment_id", "type"),
	)

	@property
	def meta(self) -> dict:
		return {**self.base_meta(), "owner": self.owner, "external_id": self.external_id}
