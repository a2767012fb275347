# (c) Copyright Datacraft, 2026
"""Users API schemas."""
from datetime import datetime
from enum import Enum

from fastapi import Query
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRole(str, Enum):
	SUPER_ADMIN = "super_admin"
	ADMIN = "admin"
	BASIC = "basic"


class User(BaseModel):
	id: str
	email: str
	name: str
	role: UserRole
	active: bool = True
	assigned_workspaces: list[str] = Field(default_factory=list)
	department: str | None = None
	last_login: datetime | None = None
	created_at: datetime | None = None
	updated_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
	email: EmailStr
	name: str = Field(..., min_length=1, max_length=255)
	password: str = Field(..., min_length=8, max_length=128)
	role: UserRole = UserRole.BASIC
	active: bool = True
	assigned_workspaces: list[str] = Field(default_factory=list)
	department: str | None = None


class UserUpdate(BaseModel):
	name: str | None = Field(None, min_length=1, max_length=255)
	email: EmailStr | None = None
	active: bool | None = None
	department: str | None = None


class UserRoleUpdate(BaseModel):
	role: UserRole


class UserWorkspacesUpdate(BaseModel):
	workspace_ids: list[str]


class UserStats(BaseModel):
	total: int
	active: int
	by_role: dict[str, int]


class UserParams(BaseModel):
	"""Query parameters for user listing."""
	role: UserRole | None = Query(None)
	active: bool | None = Query(None)
	department: str | None = Query(None)
