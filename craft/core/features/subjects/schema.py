# (c) Copyright Datacraft, 2026
"""Subject API schemas."""
from datetime import datetime
from enum import Enum

from fastapi import Query
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class SubjectType(str, Enum):
	USER = "user"
	GROUP = "group"
	ROLE = "role"
	SERVICE = "service"
	DEVICE = "device"


class SubjectStatus(str, Enum):
	ACTIVE = "active"
	INACTIVE = "inactive"


class SubjectMetadata(BaseModel):
	owner: str | None = None
	created_by: str | None = None
	last_modified_by: str | None = None
	tags: list[str] = Field(default_factory=list)
	is_system: bool = False
	is_custom: bool = True
	version: str = "1.0.0"
	external_id: str | None = None


class SubjectMetadataInput(BaseModel):
	owner: str | None = None
	tags: list[str] | None = None
	is_system: bool | None = None
	is_custom: bool | None = None
	version: str | None = None
	external_id: str | None = None


class Subject(BaseModel):
	id: str
	name: str
	display_name: str
	email: str | None = None
	type: SubjectType
	role: str | None = None
	department: str | None = None
	description: str | None = None
	status: SubjectStatus
	parent_id: str | None = None
	children: list[str] = Field(default_factory=list)
	permissions: list[str] = Field(default_factory=list)
	policies: list[str] = Field(default_factory=list)
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: SubjectMetadata = Field(
		default_factory=SubjectMetadata,
		validation_alias=AliasChoices("meta", "metadata"),
	)
	active: bool = True
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class SubjectCreate(BaseModel):
	id: str | None = Field(None, min_length=1, max_length=128)
	name: str | None = Field(None, min_length=1, max_length=255)
	display_name: str = Field(..., min_length=1, max_length=255)
	email: EmailStr | None = None
	type: SubjectType = SubjectType.USER
	role: str | None = None
	department: str | None = None
	description: str | None = Field(None, max_length=1000)
	status: SubjectStatus = SubjectStatus.ACTIVE
	parent_id: str | None = None
	permissions: list[str] = Field(default_factory=list)
	policies: list[str] = Field(default_factory=list)
	workspace_id: str
	application_id: str
	environment_id: str
	metadata: SubjectMetadataInput = Field(default_factory=SubjectMetadataInput)
	active: bool = True


class SubjectUpdate(BaseModel):
	name: str | None = Field(None, min_length=1, max_length=255)
	display_name: str | None = Field(None, min_length=1, max_length=255)
	email: EmailStr | None = None
	type: SubjectType | None = None
	role: str | None = None
	department: str | None = None
	description: str | None = Field(None, max_length=1000)
	status: SubjectStatus | None = None
	parent_id: str | None = None
	permissions: list[str] | None = None
	policies: list[str] | None = None
	metadata: SubjectMetadataInput | None = None
	active: bool | None = None


class SubjectBulkUpdate(BaseModel):
	ids: list[str] = Field(..., min_length=1)
	updates: SubjectUpdate


class SubjectParams(BaseModel):
	type: SubjectType | None = Query(None)
	status: SubjectStatus | None = Query(None)
	department: str | None = Query(None)
	role: str | None = Query(None)
	active: bool | None = Query(None)
	tags: str | None = Query(None, description="Comma separated tags, any match")
	workspace_id: str | None = Query(None)
	application_id: str | None = Query(None)
	environment_id: str | None = Query(None)


class SubjectStats(BaseModel):
	total: int
	active: int
	by_type: dict[str, int]
