# (c) Copyright Datacraft, 2026
"""SQLAlchemy ORM models for policy system."""
from sqlalchemy import Column, Index, Integer, JSON, String, Text, UniqueConstraint

from craft.core.db.base import Base, MetadataColumns, ScopedColumns, TimestampColumns
from craft.core.utils import generate_id


def _policy_id() -> str:
	return generate_id("policy")


class PolicyModel(Base, ScopedColumns, MetadataColumns, TimestampColumns):
	"""Persisted policy definition."""
	__tablename__ = "policies"

	id = Column(String(128), primary_key=True, default=_policy_id)
	name = Column(String(255), nullable=False)
	description = Column(Text, default="")
	effect = Column(String(8), nullable=False)
	status = Column(String(16), nullable=False, default="Draft")
	priority = Column(Integer, nullable=False, default=1)
	rules = Column(JSON, default=list)
	subjects = Column(JSON, default=list)
	resources = Column(JSON, default=list)
	actions = Column(JSON, default=list)
	additional_resources = Column(JSON, default=list)
	conditions = Column(JSON, default=list)

	__table_args__ = (
		UniqueConstraint("environment_id", "name", name="uq_policies_environment_name"),
		Index("ix_policies_status_effect", "status", "effect"),
		Index("ix_policies_priority", "priority"),
	)

	@property
	def meta(self) -> dict:
		return self.base_meta()
