# (c) Copyright Datacraft, 2026
"""Pydantic schemas for policy API."""
from datetime import datetime
from typing import Any

from fastapi import Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .models import ConditionOperator, PolicyEffect, PolicyStatus


class RuleAttributeSchema(BaseModel):
	name: str = Field(..., min_length=1)
	operator: ConditionOperator = ConditionOperator.EQUALS
	value: Any = None


class RuleTargetSchema(BaseModel):
	type: str = ""
	attributes: list[RuleAttributeSchema] = Field(default_factory=list)


class RuleActionSchema(BaseModel):
	name: str = ""
	display_name: str | None = None


class PolicyConditionSchema(BaseModel):
	"""Schema for a policy condition."""
	field: str = Field(..., min_length=1)
	operator: ConditionOperator = ConditionOperator.EQUALS
	value: Any = None


class PolicyRuleSchema(BaseModel):
	"""Schema for a policy rule."""
	id: str = ""
	subject: RuleTargetSchema = Field(default_factory=RuleTargetSchema)
	action: RuleActionSchema = Field(default_factory=RuleActionSchema)
	object: RuleTargetSchema = Field(default_factory=RuleTargetSchema)
	conditions: list[PolicyConditionSchema] = Field(default_factory=list)


class AdditionalResourceRefSchema(BaseModel):
	id: str = Field(..., min_length=1)
	attributes: list[str] = Field(default_factory=list)


class PolicyMetadata(BaseModel):
	created_by: str | None = None
	last_modified_by: str | None = None
	tags: list[str] = Field(default_factory=list)
	version: str = "1.0.0"
	is_system: bool = False
	is_custom: bool = True


class PolicyMetadataInput(BaseModel):
	tags: list[str] | None = None
	version: str | None = None
	is_system: bool | None = None
	is_custom: bool | None = None


class PolicyBody(BaseModel):
	name: str = Field(..., min_length=1, max_length=255)
	description: str = Field("", max_length=1000)
	effect: PolicyEffect
	status: PolicyStatus = PolicyStatus.DRAFT
	priority: int = Field(default=1, ge=1)
	rules: list[PolicyRuleSchema] = Field(default_factory=list)
	subjects: list[str] = Field(default_factory=list)
	resources: list[str] = Field(default_factory=list)
	actions: list[str] = Field(default_factory=list)
	additional_resources: list[AdditionalResourceRefSchema] = Field(default_factory=list)
	conditions: list[PolicyConditionSchema] = Field(default_factory=list)
	metadata: PolicyMetadataInput = Field(default_factory=PolicyMetadataInput)


class PolicyCreate(PolicyBody):
	"""Schema for creating a policy."""
	id: str | None = Field(None, min_length=1, max_length=128)
	workspace_id: str
	application_id: str
	environment_id: str


class PolicyUpdate(BaseModel):
	"""Schema for updating a policy."""
	name: str | None = Field(None, min_length=1, max_length=255)
	description: str | None = Field(None, max_length=1000)
	effect: PolicyEffect | None = None
	status: PolicyStatus | None = None
	priority: int | None = Field(None, ge=1)
	rules: list[PolicyRuleSchema] | None = None
	subjects: list[str] | None = None
	resources: list[str] | None = None
	actions: list[str] | None = None
	additional_resources: list[AdditionalResourceRefSchema] | None = None
	conditions: list[PolicyConditionSchema] | None = None
	metadata: PolicyMetadataInput | None = None


class PolicyBulkUpdate(BaseModel):
	ids: list[str] = Field(..., min_length=1)
	updates: PolicyUpdate


class Policy(BaseModel):
	id: str
	workspace_id: str
	application_id: str
	environment_id: str
	name: str
	description: str = ""
	effect: PolicyEffect
	status: PolicyStatus
	priority: int
	rules: list[PolicyRuleSchema] = Field(default_factory=list)
	subjects: list[str] = Field(default_factory=list)
	resources: list[str] = Field(default_factory=list)
	actions: list[str] = Field(default_factory=list)
	additional_resources: list[AdditionalResourceRefSchema] = Field(default_factory=list)
	conditions: list[PolicyConditionSchema] = Field(default_factory=list)
	metadata: PolicyMetadata = Field(
		default_factory=PolicyMetadata,
		validation_alias=AliasChoices("meta", "metadata"),
	)
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class PolicyParams(BaseModel):
	"""Query parameters for policy listing."""
	effect: PolicyEffect | None = Query(None)
	status: PolicyStatus | None = Query(None)
	priority: int | None = Query(None, description="Minimum priority value")
	created_by: str | None = Query(None)
	tags: str | None = Query(None, description="Comma separated tags, any match")
	workspace_id: str | None = Query(None)
	application_id: str | None = Query(None)
	environment_id: str | None = Query(None)


class PriorityStats(BaseModel):
	min: int | None = None
	max: int | None = None
	avg: float | None = None


class PolicyStats(BaseModel):
	total: int
	active: int
	draft: int
	inactive: int
	allow: int
	deny: int
	priority: PriorityStats


class EvaluationTargetSchema(BaseModel):
	id: str | None = None
	type: str | None = None
	attributes: dict[str, Any] = Field(default_factory=dict)


class EvaluateRequest(BaseModel):
	"""Schema for a policy evaluation request."""
	policy_id: str | None = None
	subject: EvaluationTargetSchema
	resource: EvaluationTargetSchema
	action: str = Field(..., min_length=1)
	environment: dict[str, Any] = Field(default_factory=dict)
	additional_resources: dict[str, dict[str, Any]] = Field(default_factory=dict)
	workspace_id: str | None = None
	application_id: str | None = None
	environment_id: str | None = None


class EvaluateResponse(BaseModel):
	"""Schema for a policy evaluation response."""
	decision: PolicyEffect
	allowed: bool
	reason: str
	matched_policy_id: str | None = None
	matched_policy_name: str | None = None
	applicable_policies: list[str] = Field(default_factory=list)
	evaluated_policies: int = 0
	evaluation_time_ms: float = 0.0
	evaluated_at: datetime
