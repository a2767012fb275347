# (c) Copyright Datacraft, 2026
"""Registration, login and account endpoints."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db.engine import get_session
from craft.core.exceptions import AuthenticationError, ConflictError, ValidationError
from craft.core.features.activities import (
	ActivityCategory,
	ActivityType,
	Severity,
	record_activity,
)
from craft.core.features.users.db import api as users_api
from craft.core.features.users.db.orm import User as UserModel
from craft.core.features.users.schema import User
from craft.core.middleware import RateLimiter
from craft.core.schemas import ApiResponse

from .dependencies import CurrentUser, get_optional_user
from .schema import (
	ChangePasswordRequest,
	LoginRequest,
	RegisterRequest,
	TokenResponse,
	TokenValidation,
)
from .tokens import create_access_token

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: UserModel) -> TokenResponse:
	token, expires_in = create_access_token(
		user.id, user.email, user.role, user.assigned_workspaces
	)
	return TokenResponse(token=token, expires_in=expires_in, user=User.model_validate(user))


def _record_auth(
	session: AsyncSession,
	user: UserModel | None,
	action: str,
	description: str,
	request: Request,
	severity: Severity = Severity.LOW,
) -> None:
	record_activity(
		session,
		user,
		type=ActivityType.AUTHENTICATION,
		category=ActivityCategory.SECURITY,
		action=action,
		resource_type="user",
		resource_id=user.id if user else "anonymous",
		resource_name=user.email if user else None,
		description=description,
		severity=severity,
		request=request,
	)


@router.post(
	"/register",
	response_model=ApiResponse[TokenResponse],
	status_code=status.HTTP_201_CREATED,
	dependencies=[Depends(RateLimiter("auth"))],
)
async def register(
	data: RegisterRequest,
	request: Request,
	session: Annotated[AsyncSession, Depends(get_session)],
):
	"""Create a ``basic`` user and return a token for it."""
	if await users_api.get_user_by_email(session, data.email):
		raise ConflictError("User with this email already exists")
	user = await users_api.create_user(session, email=data.email, name=data.name, password=data.password)
	users_api.touch_login(user)
	_record_auth(session, user, "registered", f"User {user.email} registered", request)
	await session.commit()
	logger.info(f"User registered: {user.email}")
	return ApiResponse(data=_token_response(user), message="User registered successfully")


@router.post(
	"/login",
	response_model=ApiResponse[TokenResponse],
	dependencies=[Depends(RateLimiter("auth"))],
)
async def login(
	data: LoginRequest,
	request: Request,
	session: Annotated[AsyncSession, Depends(get_session)],
):
	user = await users_api.get_user_by_email(session, data.email)
	if user is None or not users_api.verify_password(user, data.password):
		logger.warning(f"Failed login for {data.email}")
		raise AuthenticationError("Invalid email or password")
	if not user.active:
		raise AuthenticationError("Account is inactive")

	users_api.touch_login(user)
	_record_auth(session, user, "login", f"User {user.email} logged in", request)
	await session.commit()
	return ApiResponse(data=_token_response(user), message="Login successful")


@router.get("/profile", response_model=ApiResponse[User])
async def get_profile(user: CurrentUser):
	return ApiResponse(data=User.model_validate(user))


@router.post(
	"/change-password",
	response_model=ApiResponse[None],
	dependencies=[Depends(RateLimiter("strict"))],
)
async def change_password(
	data: ChangePasswordRequest,
	request: Request,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	if not users_api.verify_password(user, data.current_password):
		raise AuthenticationError("Current password is incorrect")
	if data.current_password == data.new_password:
		raise ValidationError("New password must differ from the current password")
	users_api.set_password(user, data.new_password)
	_record_auth(
		session, user, "password changed",
		f"User {user.email} changed password",
		request,
		severity=Severity.MEDIUM,
	)
	await session.commit()
	return ApiResponse(message="Password changed successfully")


@router.post("/validate-token", response_model=ApiResponse[TokenValidation])
async def validate_token(
	user: Annotated[UserModel | None, Depends(get_optional_user)],
):
	if user is None:
		return ApiResponse(data=TokenValidation(valid=False))
	return ApiResponse(data=TokenValidation(valid=True, user=User.model_validate(user)))
