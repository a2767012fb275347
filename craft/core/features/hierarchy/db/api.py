# (c) Copyright Datacraft, 2026
"""Workspace / application / environment database API."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.exceptions import NotFoundError, ValidationError
from craft.core.features.actions.db.orm import Action
from craft.core.features.additional_resources.db.orm import AdditionalResource
from craft.core.features.attributes.db.orm import Attribute
from craft.core.features.policies.db.orm import PolicyModel
from craft.core.features.resources.db.orm import Resource
from craft.core.features.subjects.db.orm import Subject
from craft.core.pagination import PaginationParams, paginate, scope_clause, search_clause

from .orm import Application, Environment, Workspace

SCOPED_MODELS = {
	"subjects": Subject,
	"resources": Resource,
	"actions": Action,
	"policies": PolicyModel,
	"additional_resources": AdditionalResource,
	"attributes": Attribute,
}


async def get_workspace(session: AsyncSession, workspace_id: str) -> Workspace | None:
	return await session.get(Workspace, workspace_id)


async def get_workspace_by_name(session: AsyncSession, name: str) -> Workspace | None:
	result = await session.execute(select(Workspace).where(Workspace.name == name))
	return result.scalar_one_or_none()


async def list_workspaces(
	session: AsyncSession,
	params: PaginationParams,
	workspace_ids: set[str] | None,
	status: str | None = None,
) -> tuple[list[Workspace], int]:
	stmt = select(Workspace)
	clause = scope_clause(Workspace.id, workspace_ids)
	if clause is not None:
		stmt = stmt.where(clause)
	if status:
		stmt = stmt.where(Workspace.status == status)
	clause = search_clause(params.search, [Workspace.name, Workspace.display_name, Workspace.description])
	if clause is not None:
		stmt = stmt.where(clause)
	return await paginate(session, stmt, Workspace, params)


async def get_application(
	session: AsyncSession,
	workspace_id: str,
	application_id: str,
) -> Application | None:
	app = await session.get(Application, application_id)
	if app is None or app.workspace_id != workspace_id:
		return None
	return app


async def get_application_by_name(
	session: AsyncSession,
	workspace_id: str,
	name: str,
) -> Application | None:
	stmt = select(Application).where(
		Application.workspace_id == workspace_id,
		Application.name == name,
	)
	return (await session.execute(stmt)).scalar_one_or_none()


async def list_applications(
	session: AsyncSession,
	workspace_id: str,
	params: PaginationParams,
) -> tuple[list[Application], int]:
	stmt = select(Application).where(Application.workspace_id == workspace_id)
	clause = search_clause(params.search, [Application.name, Application.display_name])
	if clause is not None:
		stmt = stmt.where(clause)
	return await paginate(session, stmt, Application, params)


async def get_environment(
	session: AsyncSession,
	application_id: str,
	environment_id: str,
) -> Environment | None:
	env = await session.get(Environment, environment_id)
	if env is None or env.application_id != application_id:
		return None
	return env


async def get_environment_by_name(
	session: AsyncSession,
	application_id: str,
	name: str,
) -> Environment | None:
	stmt = select(Environment).where(
		Environment.application_id == application_id,
		Environment.name == name,
	)
	return (await session.execute(stmt)).scalar_one_or_none()


async def list_environments(
	session: AsyncSession,
	application_id: str,
	params: PaginationParams,
) -> tuple[list[Environment], int]:
	stmt = select(Environment).where(Environment.application_id == application_id)
	clause = search_clause(params.search, [Environment.name, Environment.display_name])
	if clause is not None:
		stmt = stmt.where(clause)
	return await paginate(session, stmt, Environment, params)


async def clear_default_environment(
	session: AsyncSession,
	application_id: str,
	keep_id: str | None = None,
) -> None:
	"""Only one environment per application can be the default."""
	stmt = select(Environment).where(
		Environment.application_id == application_id,
		Environment.is_default.is_(True),
	)
	for env in (await session.execute(stmt)).scalars():
		if env.id != keep_id:
			env.is_default = False


async def validate_hierarchy(
	session: AsyncSession,
	workspace_id: str,
	application_id: str,
	environment_id: str,
) -> Environment:
	"""Check the workspace -> application -> environment chain exists."""
	if not workspace_id or not application_id or not environment_id:
		raise ValidationError("workspace_id, application_id and environment_id are required")

	if await get_workspace(session, workspace_id) is None:
		raise NotFoundError("Workspace")
	if await get_application(session, workspace_id, application_id) is None:
		raise NotFoundError("Application")
	env = await get_environment(session, application_id, environment_id)
	if env is None:
		raise NotFoundError("Environment")
	return env


async def count_children(session: AsyncSession, column, value: str) -> int:
	stmt = select(func.count()).where(column == value)
	return (await session.execute(stmt)).scalar_one()


async def count_scoped_entities(session: AsyncSession, column_name: str, value: str) -> dict[str, int]:
	"""Count workspace scoped entities where ``column_name == value``."""
	counts = {}
	for key, model in SCOPED_MODELS.items():
		column = getattr(model, column_name)
		counts[key] = await count_children(session, column, value)
	return counts


async def workspace_stats(session: AsyncSession, workspace_id: str) -> dict[str, int]:
	stats = await count_scoped_entities(session, "workspace_id", workspace_id)
	stats["applications"] = await count_children(session, Application.workspace_id, workspace_id)
	stats["environments"] = await count_children(session, Environment.workspace_id, workspace_id)
	return stats
