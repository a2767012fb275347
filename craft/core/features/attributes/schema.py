# (c) Copyright Datacraft, 2026
"""Attribute API schemas."""
from datetime import datetime
from enum import Enum
from typing import Any

from fastapi import Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class AttributeCategory(str, Enum):
	SUBJECT = "subject"
	RESOURCE = "resource"
	ADDITIONAL_RESOURCE = "additional_resource"


class AttributeDataType(str, Enum):
	STRING = "string"
	NUMBER = "number"
	BOOLEAN = "boolean"
	DATE = "date"
	ARRAY = "array"
	OBJECT = "object"


class AttributeScope(str, Enum):
	ENVIRONMENT = "environment"
	APPLICATION = "application"
	WORKSPACE = "workspace"


class ValueFormat(str, Enum):
	EMAIL = "email"
	URL = "url"
	PHONE = "phone"
	IPV4 = "ipv4"
	IPV6 = "ipv6"


class AttributeConstraints(BaseModel):
	min_length: int | None = Field(None, ge=0)
	max_length: int | None = Field(None, ge=0)
	min_value: float | None = None
	max_value: float | None = None
	pattern: str | None = None
	enum_values: list[Any] = Field(default_factory=list)
	format: ValueFormat | None = None

	@model_validator(mode="after")
	def _check_bounds(self):
		if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
			raise ValueError("Min length cannot be greater than max length")
		if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
			raise ValueError("Min value cannot be greater than max value")
		return self


class AttributeValidation(BaseModel):
	is_email: bool = False
	is_url: bool = False
	is_phone_number: bool = False
	custom_validator: str | None = None


class InheritanceRules(BaseModel):
	can_override: bool = True
	requires_approval: bool = False
	propagate_changes: bool = False


class AttributeMapping(BaseModel):
	source_field: str | None = None
	transform_function: str | None = None
	cache_time: int | None = Field(None, ge=0)


class AttributeMetadata(BaseModel):
	created_by: str | None = None
	last_modified_by: str | None = None
	tags: list[str] = Field(default_factory=list)
	is_system: bool = False
	is_custom: bool = True
	version: str = "1.0.0"
	external_id: str | None = None


class AttributeMetadataInput(BaseModel):
	tags: list[str] | None = None
	is_system: bool | None = None
	is_custom: bool | None = None
	version: str | None = None
	external_id: str | None = None


class PolicyRef(BaseModel):
	id: str
	name: str


class Attribute(BaseModel):
	id: str
	name: str
	display_name: str
	description: str | None = None
	categories: list[AttributeCategory]
	data_type: AttributeDataType
	is_required: bool = False
	is_multi_value: bool = False
	default_value: Any = None
	scope: AttributeScope = AttributeScope.ENVIRONMENT
	inheritance_rules: InheritanceRules = Field(default_factory=InheritanceRules)
	constraints: AttributeConstraints = Field(default_factory=AttributeConstraints)
	validation: AttributeValidation = Field(default_factory=AttributeValidation)
	mapping: AttributeMapping = Field(default_factory=AttributeMapping)
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: AttributeMetadata = Field(
		default_factory=AttributeMetadata,
		validation_alias=AliasChoices("meta", "metadata"),
	)
	active: bool = True
	policy_count: int = 0
	used_in_policies: list[PolicyRef] = Field(default_factory=list)
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class AttributeCreate(BaseModel):
	id: str | None = Field(None, min_length=1, max_length=100)
	name: str = Field(..., min_length=1, max_length=100)
	display_name: str = Field(..., min_length=1, max_length=100)
	description: str | None = Field(None, max_length=500)
	categories: list[AttributeCategory] = Field(..., min_length=1)
	data_type: AttributeDataType
	is_required: bool = False
	is_multi_value: bool = False
	default_value: Any = None
	scope: AttributeScope = AttributeScope.ENVIRONMENT
	inheritance_rules: InheritanceRules = Field(default_factory=InheritanceRules)
	constraints: AttributeConstraints = Field(default_factory=AttributeConstraints)
	validation: AttributeValidation = Field(default_factory=AttributeValidation)
	mapping: AttributeMapping = Field(default_factory=AttributeMapping)
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: AttributeMetadataInput = Field(default_factory=AttributeMetadataInput)
	active: bool = True


class AttributeUpdate(BaseModel):
	name: str | None = Field(None, min_length=1, max_length=100)
	display_name: str | None = Field(None, min_length=1, max_length=100)
	description: str | None = Field(None, max_length=500)
	categories: list[AttributeCategory] | None = Field(None, min_length=1)
	data_type: AttributeDataType | None = None
	is_required: bool | None = None
	is_multi_value: bool | None = None
	default_value: Any = None
	scope: AttributeScope | None = None
	inheritance_rules: InheritanceRules | None = None
	constraints: AttributeConstraints | None = None
	validation: AttributeValidation | None = None
	mapping: AttributeMapping | None = None
	metadata: AttributeMetadataInput | None = None
	active: bool | None = None


class AttributeBulkUpdate(BaseModel):
	ids: list[str] = Field(..., min_length=1)
	updates: AttributeUpdate


class ValueToValidate(BaseModel):
	value: Any = None


class ValueCheck(BaseModel):
	valid: bool
	errors: list[str] = Field(default_factory=list)
	normalized_value: Any = None


class AttributeParams(BaseModel):
	categories: str | None = Query(None, description="Comma separated categories, any match")
	data_type: AttributeDataType | None = Query(None)
	scope: AttributeScope | None = Query(None)
	is_required: bool | None = Query(None)
	active: bool | None = Query(None)
	is_system: bool | None = Query(None)
	is_custom: bool | None = Query(None)
	tags: str | None = Query(None, description="Comma separated tags, any match")
	workspace_id: str | None = Query(None)
	application_id: str | None = Query(None)
	environment_id: str | None = Query(None)


class CategoryCount(BaseModel):
	count: int
	required: int


class AttributeStats(BaseModel):
	total: int
	active: int
	required: int
	custom: int
	system: int
	by_category: dict[str, CategoryCount]
	by_data_type: dict[str, int]
