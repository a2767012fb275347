# (c) Copyright Datacraft, 2026
"""Additional resource API schemas."""
from datetime import datetime
from enum import Enum
from typing import Any

from fastapi import Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AdditionalResourceType(str, Enum):
	CONDITION = "condition"
	STATE = "state"
	APPROVAL = "approval"
	STATUS = "status"
	TICKET = "ticket"


class RuleOperator(str, Enum):
	EQUALS = "equals"
	NOT_EQUALS = "not_equals"
	IN = "in"
	NOT_IN = "not_in"
	CONTAINS = "contains"
	GREATER_THAN = "greater_than"
	LESS_THAN = "less_than"
	BETWEEN = "between"


class Priority(str, Enum):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"
	CRITICAL = "critical"


class DependencyOperator(str, Enum):
	AND = "AND"
	OR = "OR"


class AttributesOperation(str, Enum):
	MERGE = "merge"
	REPLACE = "replace"


class EvaluationRule(BaseModel):
	field: str = Field(..., min_length=1)
	operator: RuleOperator
	value: Any = None
	case_insensitive: bool = False


class Dependencies(BaseModel):
	depends_on: list[str] = Field(default_factory=list)
	operator: DependencyOperator = DependencyOperator.AND
	required: bool = True


class AdditionalResourceMetadata(BaseModel):
	owner: str | None = None
	created_by: str | None = None
	last_modified_by: str | None = None
	tags: list[str] = Field(default_factory=list)
	category: str | None = None
	priority: Priority = Priority.MEDIUM
	is_system: bool = False
	is_template: bool = False
	is_custom: bool = True
	version: str = "1.0.0"
	external_id: str | None = None


class AdditionalResourceMetadataInput(BaseModel):
	owner: str | None = None
	tags: list[str] | None = None
	category: str | None = None
	priority: Priority | None = None
	is_system: bool | None = None
	is_template: bool | None = None
	is_custom: bool | None = None
	version: str | None = None
	external_id: str | None = None


class AdditionalResource(BaseModel):
	id: str
	name: str
	display_name: str
	type: AdditionalResourceType
	description: str | None = None
	attributes: dict[str, Any] = Field(default_factory=dict)
	evaluation_rules: list[EvaluationRule] = Field(default_factory=list)
	dependencies: Dependencies | None = None
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: AdditionalResourceMetadata = Field(
		default_factory=AdditionalResourceMetadata,
		validation_alias=AliasChoices("meta", "metadata"),
	)
	config: dict[str, Any] = Field(default_factory=dict)
	active: bool = True
	last_evaluated_at: datetime | None = None
	evaluation_count: int = 0
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class AdditionalResourceCreate(BaseModel):
	name: str = Field(..., min_length=1, max_length=255)
	display_name: str = Field(..., min_length=1, max_length=255)
	type: AdditionalResourceType
	description: str | None = Field(None, max_length=1000)
	attributes: dict[str, Any] = Field(default_factory=dict)
	evaluation_rules: list[EvaluationRule] = Field(default_factory=list)
	dependencies: Dependencies | None = None
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: AdditionalResourceMetadataInput = Field(default_factory=AdditionalResourceMetadataInput)
	config: dict[str, Any] = Field(default_factory=dict)
	active: bool = True


class AdditionalResourceUpdate(BaseModel):
	display_name: str | None = Field(None, min_length=1, max_length=255)
	type: AdditionalResourceType | None = None
	description: str | None = Field(None, max_length=1000)
	attributes: dict[str, Any] | None = None
	evaluation_rules: list[EvaluationRule] | None = None
	dependencies: Dependencies | None = None
	metadata: AdditionalResourceMetadataInput | None = None
	config: dict[str, Any] | None = None
	active: bool | None = None


class AttributesUpdate(BaseModel):
	attributes: dict[str, Any]
	operation: AttributesOperation = AttributesOperation.MERGE


class EvaluateContext(BaseModel):
	context: dict[str, Any] = Field(default_factory=dict)


class EvaluationResult(BaseModel):
	id: str
	result: bool
	evaluated_at: datetime
	evaluation_count: int
	rule_results: list[dict[str, Any]] = Field(default_factory=list)


class AdditionalResourceParams(BaseModel):
	type: AdditionalResourceType | None = Query(None)
	active: bool | None = Query(None)
	priority: Priority | None = Query(None)
	category: str | None = Query(None)
	tags: str | None = Query(None, description="Comma separated tags, any match")
	workspace_id: str | None = Query(None)
	application_id: str | None = Query(None)
	environment_id: str | None = Query(None)


class TypedList(BaseModel):
	data: list[AdditionalResource]
	count: int


class AdditionalResourceStats(BaseModel):
	total: int
	active: int
	inactive: int
	by_type: dict[str, int]
	by_priority: dict[str, int]
