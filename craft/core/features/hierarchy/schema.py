# (c) Copyright Datacraft, 2026
"""Hierarchy API schemas."""
from datetime import datetime
from enum import Enum
from typing import Any

from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field

NAME_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class WorkspaceStatus(str, Enum):
	ACTIVE = "active"
	INACTIVE = "inactive"
	ARCHIVED = "archived"
	DRAFT = "draft"


class ApplicationType(str, Enum):
	WEB = "web"
	API = "api"
	MOBILE = "mobile"
	DESKTOP = "desktop"
	SERVICE = "service"
	MICROSERVICE = "microservice"


class EnvironmentType(str, Enum):
	DEVELOPMENT = "development"
	TESTING = "testing"
	STAGING = "staging"
	PRODUCTION = "production"
	CUSTOM = "custom"


class Workspace(BaseModel):
	id: str
	name: str
	display_name: str
	description: str | None = None
	status: WorkspaceStatus
	owner_id: str | None = None
	settings: dict[str, Any] = Field(default_factory=dict)
	tags: list[str] = Field(default_factory=list)
	created_by: str | None = None
	last_modified_by: str | None = None
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class WorkspaceCreate(BaseModel):
	name: str = Field(..., min_length=2, max_length=100, pattern=NAME_PATTERN)
	display_name: str = Field(..., min_length=2, max_length=100)
	description: str | None = Field(None, max_length=500)
	status: WorkspaceStatus = WorkspaceStatus.ACTIVE
	settings: dict[str, Any] = Field(default_factory=dict)
	tags: list[str] = Field(default_factory=list)


class WorkspaceUpdate(BaseModel):
	display_name: str | None = Field(None, min_length=2, max_length=100)
	description: str | None = Field(None, max_length=500)
	status: WorkspaceStatus | None = None
	settings: dict[str, Any] | None = None
	tags: list[str] | None = None


class WorkspaceStats(BaseModel):
	applications: int
	environments: int
	subjects: int
	resources: int
	actions: int
	policies: int
	additional_resources: int
	attributes: int


class WorkspaceParams(BaseModel):
	status: WorkspaceStatus | None = Query(None)


class Application(BaseModel):
	id: str
	workspace_id: str
	name: str
	display_name: str
	description: str | None = None
	type: ApplicationType
	status: WorkspaceStatus
	owner_id: str | None = None
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class ApplicationCreate(BaseModel):
	name: str = Field(..., min_length=2, max_length=100, pattern=NAME_PATTERN)
	display_name: str = Field(..., min_length=2, max_length=100)
	description: str | None = Field(None, max_length=500)
	type: ApplicationType = ApplicationType.WEB
	status: WorkspaceStatus = WorkspaceStatus.ACTIVE


class ApplicationUpdate(BaseModel):
	display_name: str | None = Field(None, min_length=2, max_length=100)
	description: str | None = Field(None, max_length=500)
	type: ApplicationType | None = None
	status: WorkspaceStatus | None = None


class Environment(BaseModel):
	id: str
	workspace_id: str
	application_id: str
	name: str
	display_name: str
	description: str | None = None
	type: EnvironmentType
	status: WorkspaceStatus
	is_default: bool = False
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class EnvironmentCreate(BaseModel):
	name: str = Field(..., min_length=2, max_length=100, pattern=NAME_PATTERN)
	display_name: str = Field(..., min_length=2, max_length=100)
	description: str | None = Field(None, max_length=500)
	type: EnvironmentType = EnvironmentType.DEVELOPMENT
	status: WorkspaceStatus = WorkspaceStatus.ACTIVE
	is_default: bool = False


class EnvironmentUpdate(BaseModel):
	display_name: str | None = Field(None, min_length=2, max_length=100)
	description: str | None = Field(None, max_length=500)
	type: EnvironmentType | None = None
	status: WorkspaceStatus | None = None
	is_default: bool | None = None
