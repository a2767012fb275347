# (c) Copyright Datacraft, 2026
"""Users database API."""
from datetime import datetime, timezone

from passlib.hash import pbkdf2_sha256
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.pagination import PaginationParams, paginate, search_clause

from .orm import User


async def get_user(session: AsyncSession, user_id: str) -> User | None:
	return await session.get(User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
	stmt = select(User).where(func.lower(User.email) == email.lower())
	result = await session.execute(stmt)
	return result.scalar_one_or_none()


async def list_users(
	session: AsyncSession,
	params: PaginationParams,
	role: str | None = None,
	active: bool | None = None,
	department: str | None = None,
) -> tuple[list[User], int]:
	stmt = select(User)
	if role:
		stmt = stmt.where(User.role == role)
	if active is not None:
		stmt = stmt.where(User.active == active)
	if department:
		stmt = stmt.where(User.department == department)
	clause = search_clause(params.search, [User.name, User.email, User.department])
	if clause is not None:
		stmt = stmt.where(clause)
	return await paginate(session, stmt, User, params)


async def create_user(
	session: AsyncSession,
	email: str,
	name: str,
	password: str,
	role: str = "basic",
	active: bool = True,
	assigned_workspaces: list[str] | None = None,
	department: str | None = None,
) -> User:
	user = User(
		email=email.lower(),
		name=name,
		hashed_password=pbkdf2_sha256.hash(password),
		role=role,
		active=active,
		assigned_workspaces=list(assigned_workspaces or []),
		department=department,
	)
	session.add(user)
	await session.flush()
	return user


def verify_password(user: User, password: str) -> bool:
	return pbkdf2_sha256.verify(password, user.hashed_password)


def set_password(user: User, password: str) -> None:
	user.hashed_password = pbkdf2_sha256.hash(password)


def touch_login(user: User) -> None:
	user.last_login = datetime.now(timezone.utc)


def assign_workspace(user: User, workspace_id: str) -> None:
	if workspace_id not in (user.assigned_workspaces or []):
		# JSON columns are not mutation tracked, assign a new list
		user.assigned_workspaces = [*(user.assigned_workspaces or []), workspace_id]


def unassign_workspace(user: User, workspace_id: str) -> None:
	user.assigned_workspaces = [
		w for w in (user.assigned_workspaces or []) if w != workspace_id
	]


async def user_stats(session: AsyncSession) -> dict:
	total = (await session.execute(select(func.count(User.id)))).scalar_one()
	active = (
		await session.execute(select(func.count(User.id)).where(User.active.is_(True)))
	).scalar_one()
	rows = await session.execute(select(User.role, func.count(User.id)).group_by(User.role))
	return {
		"total": total,
		"active": active,
		"by_role": {role: count for role, count in rows.all()},
	}
