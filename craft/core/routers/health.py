# (c) Copyright Datacraft, 2026
"""Health and version endpoints."""
from fastapi import APIRouter
from pydantic import BaseModel

from craft.core.config import get_settings
from craft.core.schemas import ApiResponse
from craft.core.version import __version__

router = APIRouter(tags=["health"])


class Health(BaseModel):
	status: str
	version: str
	environment: str


class Version(BaseModel):
	version: str


@router.get("/health", response_model=ApiResponse[Health])
async def health():
	settings = get_settings()
	return ApiResponse(
		data=Health(status="ok", version=__version__, environment=settings.environment.value)
	)


@router.get("/version", response_model=ApiResponse[Version])
async def version():
	return ApiResponse(data=Version(version=__version__))
