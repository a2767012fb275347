# (c) Copyright Datacraft, 2026
"""Resource ORM model."""
from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from craft.core.db.base import Base, MetadataColumns, ScopedColumns, TimestampColumns

DEFAULT_PERMISSIONS = {
	"read": True,
	"write": False,
	"delete": False,
	"execute": False,
	"admin": False,
}


def _default_permissions() -> dict:
	return dict(DEFAULT_PERMISSIONS)


class Resource(Base, ScopedColumns, MetadataColumns, TimestampColumns):
	"""Protected object, arranged in a tree through ``parent_id``."""
	__tablename__ = "resources"

	id: Mapped[str] = mapped_column(String(128), primary_key=True)
	name: Mapped[str] = mapped_column(String(255), index=True)
	display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
	type: Mapped[str] = mapped_column(String(32), index=True)
	uri: Mapped[str] = mapped_column(String(1024))
	description: Mapped[str | None] = mapped_column(Text, nullable=True)
	attributes: Mapped[dict] = mapped_column(default=dict)
	parent_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
	permissions: Mapped[dict] = mapped_column(default=_default_permissions)
	owner: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
	classification: Mapped[str] = mapped_column(String(32), default="internal", index=True)
	external_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
	size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
	mime_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
	active: Mapped[bool] = mapped_column(default=True, index=True)

	META_INPUT_FIELDS = MetadataColumns.META_INPUT_FIELDS + (
		"owner",
		"classification",
		"external_id",
		"size",
		"mime_type",
	)

	@property
	def meta(self) -> dict:
		return {
			**self.base_meta(),
			"owner": self.owner,
			"classification": self.classification,
			"external_id": self.external_id,
			"size": self.size,
			"mime_type": self.mime_type,
		}
