# (c) Copyright Datacraft, 2026
"""Pydantic schemas for the activity API."""
from datetime import datetime
from typing import Any

from fastapi import Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .models import ActivityCategory, ActivityType, ActorType, ExportFormat, Severity


class ActivityActor(BaseModel):
	id: str
	name: str
	email: str | None = None
	type: ActorType = ActorType.USER


class ActivityResource(BaseModel):
	type: str
	id: str
	name: str | None = None


class ActivityMetadata(BaseModel):
	changes: dict[str, Any] | None = None
	ip_address: str | None = None
	user_agent: str | None = None
	session_id: str | None = None
	duration: float | None = None
	status: str | None = None
	error_message: str | None = None
	additional_data: dict[str, Any] | None = None


class Activity(BaseModel):
	id: str
	type: ActivityType
	category: ActivityCategory
	action: str
	resource: ActivityResource
	actor: ActivityActor
	target: dict[str, Any] | None = None
	description: str
	timestamp: datetime
	severity: Severity
	workspace_id: str | None = None
	application_id: str | None = None
	environment_id: str | None = None
	metadata: ActivityMetadata = Field(
		default_factory=ActivityMetadata,
		validation_alias=AliasChoices("meta", "metadata"),
	)
	tags: list[str] = Field(default_factory=list)

	model_config = ConfigDict(from_attributes=True)


class ActivityCreate(BaseModel):
	type: ActivityType
	category: ActivityCategory
	action: str = Field(..., min_length=1, max_length=255)
	resource: ActivityResource
	actor: ActivityActor | None = None
	target: dict[str, Any] | None = None
	description: str = Field(..., min_length=1)
	severity: Severity = Severity.LOW
	workspace_id: str | None = None
	application_id: str | None = None
	environment_id: str | None = None
	metadata: ActivityMetadata = Field(default_factory=ActivityMetadata)
	tags: list[str] | None = None


class ActivityFilters(BaseModel):
	"""Filters accepted both as query params and in export bodies."""
	category: list[ActivityCategory] | None = None
	severity: list[Severity] | None = None
	type: list[ActivityType] | None = None
	actor: str | None = None
	start_date: datetime | None = None
	end_date: datetime | None = None
	search: str | None = None
	workspace_id: str | None = None


class ActivityParams:
	"""Query parameters for activity listing.

	Category, severity and type repeat in the query string,
	``?severity=high&severity=critical``.
	"""

	def __init__(
		self,
		page: int = Query(1, ge=1),
		limit: int = Query(25, ge=1, le=100),
		category: list[ActivityCategory] | None = Query(None),
		severity: list[Severity] | None = Query(None),
		type: list[ActivityType] | None = Query(None),
		actor: str | None = Query(None),
		start_date: datetime | None = Query(None),
		end_date: datetime | None = Query(None),
		search: str | None = Query(None),
		workspace_id: str | None = Query(None),
	):
		self.page = page
		self.limit = limit
		self.filters = ActivityFilters(
			category=category,
			severity=severity,
			type=type,
			actor=actor,
			start_date=start_date,
			end_date=end_date,
			search=search,
			workspace_id=workspace_id,
		)

	def to_filters(self) -> ActivityFilters:
		return self.filters


class ActivityExportRequest(BaseModel):
	format: ExportFormat = ExportFormat.JSON
	filters: ActivityFilters = Field(default_factory=ActivityFilters)


class ActivityStats(BaseModel):
	total: int
	recent_count: int
	by_category: dict[str, int]
	by_severity: dict[str, int]
