# (c) Copyright Datacraft, 2026
"""
Application error hierarchy and the FastAPI handlers that render it.

Every error leaves the API in the same envelope::

	{"success": false, "error": "...", "code": "NOT_FOUND", "details": ...}
"""
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
	status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
	code: str = "INTERNAL_SERVER_ERROR"

	def __init__(self, message: str, details: Any = None):
		super().__init__(message)
		self.message = message
		self.details = details


class ValidationError(AppError):
	status_code = status.HTTP_400_BAD_REQUEST
	code = "VALIDATION_ERROR"


class BadRequestError(AppError):
	status_code = status.HTTP_400_BAD_REQUEST
	code = "BAD_REQUEST"


class AuthenticationError(AppError):
	status_code = status.HTTP_401_UNAUTHORIZED
	code = "AUTHENTICATION_ERROR"

	def __init__(self, message: str = "Authentication required", details: Any = None):
		super().__init__(message, details)


class AuthorizationError(AppError):
	status_code = status.HTTP_403_FORBIDDEN
	code = "AUTHORIZATION_ERROR"

	def __init__(self, message: str = "Insufficient permissions", details: Any = None):
		super().__init__(message, details)


class NotFoundError(AppError):
	status_code = status.HTTP_404_NOT_FOUND
	code = "NOT_FOUND"

	def __init__(self, resource: str = "Resource", details: Any = None):
		super().__init__(f"{resource} not found", details)


class ConflictError(AppError):
	status_code = status.HTTP_409_CONFLICT
	code = "CONFLICT"


class RateLimitError(AppError):
	status_code = status.HTTP_429_TOO_MANY_REQUESTS
	code = "RATE_LIMIT_EXCEEDED"

	def __init__(self, message: str = "Too many requests, please try again later", details: Any = None):
		super().__init__(message, details)


_STATUS_CODES = {
	400: "BAD_REQUEST",
	401: "AUTHENTICATION_ERROR",
	403: "AUTHORIZATION_ERROR",
	404: "NOT_FOUND",
	405: "BAD_REQUEST",
	409: "CONFLICT",
	429: "RATE_LIMIT_EXCEEDED",
}


def error_response(
	status_code: int,
	message: str,
	code: str,
	details: Any = None,
	headers: dict[str, str] | None = None,
) -> JSONResponse:
	content = {"success": False, "error": message, "code": code}
	if details is not None:
		content["details"] = jsonable_encoder(details)
	return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
	if exc.status_code >= 500:
		logger.error(f"{request.method} {request.url.path}: {exc.message}")
	else:
		logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
	headers = None
	if isinstance(exc, AuthenticationError):
		headers = {"WWW-Authenticate": "Bearer"}
	return error_response(exc.status_code, exc.message, exc.code, exc.details, headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
	errors = [
		{
			"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
			"message": err.get("msg"),
		}
		for err in exc.errors()
	]
	return error_response(
		status.HTTP_400_BAD_REQUEST,
		"Validation failed",
		ValidationError.code,
		errors,
	)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
	code = _STATUS_CODES.get(exc.status_code, "INTERNAL_SERVER_ERROR")
	return error_response(
		exc.status_code,
		str(exc.detail),
		code,
		headers=getattr(exc, "headers", None),
	)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
	logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
	return error_response(
		status.HTTP_409_CONFLICT,
		"Duplicate entry",
		ConflictError.code,
	)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
	logger.exception(f"Unhandled error on {request.method} {request.url.path}")
	return error_response(
		status.HTTP_500_INTERNAL_SERVER_ERROR,
		"Internal server error",
		"INTERNAL_SERVER_ERROR",
	)


def register_exception_handlers(app: FastAPI) -> None:
	app.add_exception_handler(AppError, app_error_handler)
	app.add_exception_handler(RequestValidationError, request_validation_handler)
	app.add_exception_handler(StarletteHTTPException, http_exception_handler)
	app.add_exception_handler(IntegrityError, integrity_error_handler)
	app.add_exception_handler(Exception, unhandled_error_handler)
