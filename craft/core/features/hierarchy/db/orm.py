# (c) Copyright Datacraft, 2026
"""Workspace, application and environment ORM models."""
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from uuid_extensions import uuid7str

from craft.core.db.base import Base, TimestampColumns


class Workspace(Base, TimestampColumns):
	"""Top level tenancy container."""
	__tablename__ = "workspaces"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
	display_name: Mapped[str] = mapped_column(String(100))
	description: Mapped[str | None] = mapped_column(Text, nullable=True)
	status: Mapped[str] = mapped_column(String(16), default="active")
	owner_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
	settings: Mapped[dict] = mapped_column(default=dict)
	tags: Mapped[list] = mapped_column(default=list)
	created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
	last_modified_by: Mapped[str | None] = mapped_column(String(255), nullable=True)


class Application(Base, TimestampColumns):
	__tablename__ = "applications"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	workspace_id: Mapped[str] = mapped_column(
		ForeignKey("workspaces.id", ondelete="RESTRICT"), index=True
	)
	name: Mapped[str] = mapped_column(String(100))
	display_name: Mapped[str] = mapped_column(String(100))
	description: Mapped[str | None] = mapped_column(Text, nullable=True)
	type: Mapped[str] = mapped_column(String(32), default="web")
	status: Mapped[str] = mapped_column(String(16), default="active")
	owner_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
	created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
	last_modified_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

	__table_args__ = (
		UniqueConstraint("workspace_id", "name", name="uq_applications_workspace_name"),
	)


class Environment(Base, TimestampColumns):
	__tablename__ = "environments"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	workspace_id: Mapped[str] = mapped_column(String(36), index=True)
	application_id: Mapped[str] = mapped_column(
		ForeignKey("applications.id", ondelete="RESTRICT"), index=True
	)
	name: Mapped[str] = mapped_column(String(100))
	display_name: Mapped[str] = mapped_column(String(100))
	description: Mapped[str | None] = mapped_column(Text, nullable=True)
	type: Mapped[str] = mapped_column(String(32), default="development")
	status: Mapped[str] = mapped_column(String(16), default="active")
	is_default: Mapped[bool] = mapped_column(default=False)
	created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
	last_modified_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

	__table_args__ = (
		UniqueConstraint("application_id", "name", name="uq_environments_application_name"),
	)
