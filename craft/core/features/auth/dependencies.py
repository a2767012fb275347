# (c) Copyright Datacraft, 2026
"""
Authentication and authorization dependencies.

``get_current_user`` resolves the bearer token to an active ``User``.
Role checks and workspace visibility build on top of it.
"""
import logging
from typing import Annotated, Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db.engine import get_db
from craft.core.exceptions import AuthenticationError, AuthorizationError
from craft.core.features.users.db import api as users_api
from craft.core.features.users.db.orm import User
from craft.core.features.users.schema import UserRole

from .tokens import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
	credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
	session: Annotated[AsyncSession, Depends(get_db)],
) -> User:
	if credentials is None or credentials.scheme.lower() != "bearer":
		raise AuthenticationError("Access token required")

	payload = decode_access_token(credentials.credentials)
	user = await users_api.get_user(session, payload.sub)
	if user is None:
		raise AuthenticationError("User not found")
	if not user.active:
		raise AuthenticationError("Account is inactive")
	return user


async def get_optional_user(
	credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
	session: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
	"""Like ``get_current_user`` but anonymous requests pass through."""
	if credentials is None:
		return None
	try:
		return await get_current_user(credentials, session)
	except AuthenticationError as e:
		logger.debug(f"Ignoring invalid optional credentials: {e.message}")
		return None


def require_roles(*roles: UserRole) -> Callable:
	allowed = {r.value for r in roles}

	async def _checker(user: Annotated[User, Depends(get_current_user)]) -> User:
		if user.role not in allowed:
			logger.warning(f"User {user.email} with role {user.role} denied, requires {sorted(allowed)}")
			raise AuthorizationError(
				"Insufficient permissions",
				details={"required_roles": sorted(allowed), "user_role": user.role},
			)
		return user

	return _checker


require_admin_or_super_admin = require_roles(UserRole.ADMIN, UserRole.SUPER_ADMIN)
require_super_admin = require_roles(UserRole.SUPER_ADMIN)

CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin_or_super_admin)]
SuperAdminUser = Annotated[User, Depends(require_super_admin)]


def visible_workspaces(user: User) -> set[str] | None:
	"""Workspace ids ``user`` may see; ``None`` means every workspace."""
	if user.is_super_admin:
		return None
	return set(user.assigned_workspaces or [])


def can_access_workspace(user: User, workspace_id: str | None) -> bool:
	scope = visible_workspaces(user)
	if scope is None:
		return True
	return workspace_id is not None and workspace_id in scope


def ensure_workspace_access(user: User, workspace_id: str | None) -> None:
	"""Writes into a workspace outside the caller's scope are forbidden."""
	if not can_access_workspace(user, workspace_id):
		raise AuthorizationError(
			"Access denied to this workspace",
			details={"workspace_id": workspace_id},
		)
