# (c) Copyright Datacraft, 2026
"""Shared fixtures: in-memory database, API client, users and a hierarchy."""
import os

os.environ.setdefault("CRAFT_ENVIRONMENT", "test")
os.environ.setdefault("CRAFT_DB_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CRAFT_JWT_SECRET", "test-secret")

import secrets

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from craft.app import app
from craft.core.db import models  # noqa: F401
from craft.core.db.base import Base
from craft.core.db.engine import get_db
from craft.core.features.auth.tokens import create_access_token
from craft.core.features.hierarchy.db.orm import Application, Environment, Workspace
from craft.core.features.users.db import api as users_api

PASSWORD = "correct-horse-42"


def auth_headers(user) -> dict[str, str]:
	token, _ = create_access_token(user.id, user.email, user.role, user.assigned_workspaces)
	return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def engine():
	engine = create_async_engine(
		"sqlite+aiosqlite://",
		poolclass=StaticPool,
		connect_args={"check_same_thread": False},
	)
	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)
	yield engine
	await engine.dispose()


@pytest.fixture
def session_factory(engine):
	return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
	async with session_factory() as session:
		yield session


@pytest.fixture
async def client(session_factory):
	async def override_get_db():
		async with session_factory() as session:
			yield session

	app.dependency_overrides[get_db] = override_get_db
	async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
		yield ac
	app.dependency_overrides.clear()


async def create_hierarchy(session, workspace_name: str) -> dict[str, str]:
	workspace = Workspace(name=workspace_name, display_name=workspace_name.title())
	session.add(workspace)
	await session.flush()
	application = Application(workspace_id=workspace.id, name="portal", display_name="Portal")
	session.add(application)
	await session.flush()
	environment = Environment(
		workspace_id=workspace.id,
		application_id=application.id,
		name="dev",
		display_name="Development",
	)
	session.add(environment)
	await session.commit()
	return {
		"workspace_id": workspace.id,
		"application_id": application.id,
		"environment_id": environment.id,
	}


@pytest.fixture
async def hierarchy(db_session):
	"""One workspace with one application and one environment."""
	return await create_hierarchy(db_session, "acme")


@pytest.fixture
async def other_hierarchy(db_session):
	"""A second workspace the ``admin`` fixture is not assigned to."""
	return await create_hierarchy(db_session, "globex")


@pytest.fixture
def make_user(db_session):
	async def _make(role: str = "basic", workspaces: list[str] | None = None, active: bool = True):
		user = await users_api.create_user(
			db_session,
			email=f"{role}-{secrets.token_hex(4)}@example.com",
			name=f"Test {role}",
			password=PASSWORD,
			role=role,
			active=active,
			assigned_workspaces=workspaces,
		)
		await db_session.commit()
		return user

	return _make


@pytest.fixture
async def super_admin(make_user):
	return await make_user("super_admin")


@pytest.fixture
async def admin(make_user, hierarchy):
	return await make_user("admin", [hierarchy["workspace_id"]])


@pytest.fixture
async def basic_user(make_user, hierarchy):
	return await make_user("basic", [hierarchy["workspace_id"]])


@pytest.fixture
def super_admin_headers(super_admin):
	return auth_headers(super_admin)


@pytest.fixture
def admin_headers(admin):
	return auth_headers(admin)


@pytest.fixture
def basic_headers(basic_user):
	return auth_headers(basic_user)
