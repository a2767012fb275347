# (c) Copyright Datacraft, 2026
"""Resource API schemas."""
from datetime import datetime
from enum import Enum
from typing import Any

from fastapi import Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ResourceType(str, Enum):
	FILE = "file"
	DOCUMENT = "document"
	API = "api"
	DATABASE = "database"
	SERVICE = "service"
	FOLDER = "folder"
	APPLICATION = "application"


class Classification(str, Enum):
	PUBLIC = "public"
	INTERNAL = "internal"
	CONFIDENTIAL = "confidential"
	RESTRICTED = "restricted"


class ResourcePermissions(BaseModel):
	read: bool = True
	write: bool = False
	delete: bool = False
	execute: bool = False
	admin: bool = False


class ResourceMetadata(BaseModel):
	owner: str | None = None
	created_by: str | None = None
	last_modified_by: str | None = None
	tags: list[str] = Field(default_factory=list)
	classification: Classification = Classification.INTERNAL
	external_id: str | None = None
	size: int | None = None
	mime_type: str | None = None
	is_system: bool = False
	is_custom: bool = True
	version: str = "1.0.0"


class ResourceMetadataInput(BaseModel):
	owner: str | None = None
	tags: list[str] | None = None
	classification: Classification | None = None
	external_id: str | None = None
	size: int | None = Field(None, ge=0)
	mime_type: str | None = None
	is_system: bool | None = None
	is_custom: bool | None = None
	version: str | None = None


class Resource(BaseModel):
	id: str
	name: str
	display_name: str | None = None
	type: ResourceType
	uri: str
	description: str | None = None
	attributes: dict[str, Any] = Field(default_factory=dict)
	parent_id: str | None = None
	children: list[str] = Field(default_factory=list)
	permissions: ResourcePermissions = Field(default_factory=ResourcePermissions)
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: ResourceMetadata = Field(
		default_factory=ResourceMetadata,
		validation_alias=AliasChoices("meta", "metadata"),
	)
	active: bool = True
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class ResourceCreate(BaseModel):
	id: str = Field(..., min_length=1, max_length=128)
	name: str = Field(..., min_length=1, max_length=255)
	display_name: str | None = Field(None, max_length=255)
	type: ResourceType
	uri: str = Field(..., min_length=1, max_length=1024)
	description: str | None = Field(None, max_length=1000)
	attributes: dict[str, Any] = Field(default_factory=dict)
	parent_id: str | None = None
	permissions: ResourcePermissions = Field(default_factory=ResourcePermissions)
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: ResourceMetadataInput = Field(default_factory=ResourceMetadataInput)
	active: bool = True


class ResourceUpdate(BaseModel):
	name: str | None = Field(None, min_length=1, max_length=255)
	display_name: str | None = Field(None, max_length=255)
	type: ResourceType | None = None
	uri: str | None = Field(None, min_length=1, max_length=1024)
	description: str | None = Field(None, max_length=1000)
	attributes: dict[str, Any] | None = None
	parent_id: str | None = None
	permissions: ResourcePermissions | None = None
	metadata: ResourceMetadataInput | None = None
	active: bool | None = None


class ResourceBulkUpdate(BaseModel):
	ids: list[str] = Field(..., min_length=1)
	updates: ResourceUpdate


class ResourceParams(BaseModel):
	type: ResourceType | None = Query(None)
	classification: Classification | None = Query(None)
	active: bool | None = Query(None)
	parent_id: str | None = Query(None)
	owner: str | None = Query(None)
	tags: str | None = Query(None, description="Comma separated tags, any match")
	workspace_id: str | None = Query(None)
	application_id: str | None = Query(None)
	environment_id: str | None = Query(None)


class ResourceStats(BaseModel):
	total: int
	active: int
	total_size: int
	by_type: dict[str, int]
	by_classification: dict[str, int]
