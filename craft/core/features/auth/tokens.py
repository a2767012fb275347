# (c) Copyright Datacraft, 2026
"""Signed JWT access tokens."""
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from craft.core.config import get_settings
from craft.core.exceptions import AuthenticationError


class TokenPayload(BaseModel):
	sub: str
	email: str
	role: str
	workspaces: list[str] = []
	exp: int
	iat: int


def create_access_token(
	user_id: str,
	email: str,
	role: str,
	workspaces: list[str] | None = None,
	expires_minutes: int | None = None,
) -> tuple[str, int]:
	"""Return an HS256 token and its lifetime in seconds."""
	settings = get_settings()
	lifetime = timedelta(minutes=expires_minutes or settings.jwt_expires_minutes)
	now = datetime.now(timezone.utc)
	payload = {
		"sub": user_id,
		"email": email,
		"role": role,
		"workspaces": list(workspaces or []),
		"iat": int(now.timestamp()),
		"exp": int((now + lifetime).timestamp()),
	}
	token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
	return token, int(lifetime.total_seconds())


def decode_access_token(token: str) -> TokenPayload:
	settings = get_settings()
	try:
		payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
	except jwt.ExpiredSignatureError:
		raise AuthenticationError("Token expired")
	except jwt.InvalidTokenError:
		raise AuthenticationError("Invalid token")
	return TokenPayload.model_validate(payload)
