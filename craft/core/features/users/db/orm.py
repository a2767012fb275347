# (c) Copyright Datacraft, 2026
"""Users ORM models."""
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from uuid_extensions import uuid7str

from craft.core.db.base import Base, TimestampColumns


class User(Base, TimestampColumns):
	"""Console user. ``assigned_workspaces`` bounds what non super admins see."""
	__tablename__ = "users"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
	name: Mapped[str] = mapped_column(String(255))
	hashed_password: Mapped[str] = mapped_column(String(255))
	role: Mapped[str] = mapped_column(String(32), default="basic", index=True)
	active: Mapped[bool] = mapped_column(default=True)
	assigned_workspaces: Mapped[list] = mapped_column(default=list)
	department: Mapped[str | None] = mapped_column(String(255), nullable=True)
	last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

	@property
	def is_super_admin(self) -> bool:
		return self.role == "super_admin"

	@property
	def is_admin(self) -> bool:
		return self.role in ("admin", "super_admin")

	def __repr__(self):
		return f"User(id={self.id}, email={self.email}, role={self.role})"
