# (c) Copyright Datacraft, 2026
"""SQLAlchemy ORM model for the activity audit trail."""
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from uuid_extensions import uuid7str

from craft.core.db.base import Base, utc_now


class Activity(Base):
	"""Append-only audit record."""
	__tablename__ = "activities"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	type: Mapped[str] = mapped_column(String(64), index=True)
	category: Mapped[str] = mapped_column(String(64), index=True)
	action: Mapped[str] = mapped_column(String(255))
	description: Mapped[str] = mapped_column(Text, default="")
	severity: Mapped[str] = mapped_column(String(16), default="low", index=True)
	timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)

	actor_id: Mapped[str] = mapped_column(String(64))
	actor_name: Mapped[str] = mapped_column(String(255))
	actor_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
	actor_type: Mapped[str] = mapped_column(String(16), default="user")

	resource_type: Mapped[str] = mapped_column(String(64))
	resource_id: Mapped[str] = mapped_column(String(255))
	resource_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

	target: Mapped[dict | None] = mapped_column(nullable=True)

	workspace_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
	application_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
	environment_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

	meta: Mapped[dict] = mapped_column("metadata", default=dict)
	tags: Mapped[list] = mapped_column(default=list)

	__table_args__ = (
		Index("ix_activities_category_timestamp", "category", "timestamp"),
	)

	@property
	def actor(self) -> dict:
		return {
			"id": self.actor_id,
			"name": self.actor_name,
			"email": self.actor_email,
			"type": self.actor_type,
		}

	@property
	def resource(self) -> dict:
		return {
			"type": self.resource_type,
			"id": self.resource_id,
			"name": self.resource_name,
		}
