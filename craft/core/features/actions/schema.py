# (c) Copyright Datacraft, 2026
"""Action API schemas."""
from datetime import datetime
from enum import Enum

from fastapi import Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class ActionCategory(str, Enum):
	READ = "read"
	WRITE = "write"
	EXECUTE = "execute"
	DELETE = "delete"
	ADMIN = "admin"


class ActionType(str, Enum):
	ATOMIC = "atomic"
	COMPOSITE = "composite"


class HttpMethod(str, Enum):
	GET = "GET"
	POST = "POST"
	PUT = "PUT"
	DELETE = "DELETE"
	PATCH = "PATCH"


class RiskLevel(str, Enum):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"
	CRITICAL = "critical"


class ActionMetadata(BaseModel):
	owner: str | None = None
	created_by: str | None = None
	last_modified_by: str | None = None
	tags: list[str] = Field(default_factory=list)
	is_system: bool = False
	is_custom: bool = True
	version: str = "1.0.0"


class ActionMetadataInput(BaseModel):
	owner: str | None = None
	tags: list[str] | None = None
	is_system: bool | None = None
	is_custom: bool | None = None
	version: str | None = None


class Action(BaseModel):
	id: str
	name: str
	display_name: str
	description: str | None = None
	category: ActionCategory
	type: ActionType
	http_method: HttpMethod | None = None
	endpoint: str | None = None
	resource_types: list[str] = Field(default_factory=list)
	risk_level: RiskLevel
	parent_id: str | None = None
	children: list[str] = Field(default_factory=list)
	composite_actions: list[str] = Field(default_factory=list)
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: ActionMetadata = Field(
		default_factory=ActionMetadata,
		validation_alias=AliasChoices("meta", "metadata"),
	)
	active: bool = True
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class ActionCreate(BaseModel):
	id: str | None = Field(None, min_length=1, max_length=128)
	name: str = Field(..., min_length=1, max_length=128)
	display_name: str = Field(..., min_length=1, max_length=255)
	description: str | None = Field(None, max_length=1000)
	category: ActionCategory
	type: ActionType = ActionType.ATOMIC
	http_method: HttpMethod | None = None
	endpoint: str | None = Field(None, max_length=1024)
	resource_types: list[str] = Field(default_factory=list)
	risk_level: RiskLevel = RiskLevel.LOW
	parent_id: str | None = None
	composite_actions: list[str] = Field(default_factory=list)
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: ActionMetadataInput = Field(default_factory=ActionMetadataInput)
	active: bool = True

	@model_validator(mode="after")
	def _composite_needs_members(self):
		if self.type == ActionType.COMPOSITE and not self.composite_actions:
			raise ValueError("Composite actions must list at least one composite action")
		return self


class ActionUpdate(BaseModel):
	name: str | None = Field(None, min_length=1, max_length=128)
	display_name: str | None = Field(None, min_length=1, max_length=255)
	description: str | None = Field(None, max_length=1000)
	category: ActionCategory | None = None
	type: ActionType | None = None
	http_method: HttpMethod | None = None
	endpoint: str | None = Field(None, max_length=1024)
	resource_types: list[str] | None = None
	risk_level: RiskLevel | None = None
	parent_id: str | None = None
	composite_actions: list[str] | None = None
	metadata: ActionMetadataInput | None = None
	active: bool | None = None


class ActionBulkUpdate(BaseModel):
	ids: list[str] = Field(..., min_length=1)
	updates: ActionUpdate


class ActionParams(BaseModel):
	category: ActionCategory | None = Query(None)
	risk_level: RiskLevel | None = Query(None)
	type: ActionType | None = Query(None)
	active: bool | None = Query(None)
	http_method: HttpMethod | None = Query(None)
	tags: str | None = Query(None, description="Comma separated tags, any match")
	workspace_id: str | None = Query(None)
	application_id: str | None = Query(None)
	environment_id: str | None = Query(None)


class ActionStats(BaseModel):
	total: int
	active: int
	custom: int
	system: int
	by_category: dict[str, int]
	by_risk_level: dict[str, int]
