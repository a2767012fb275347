# (c) Copyright Datacraft, 2026
"""Application settings configuration."""
from enum import Enum
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeEnvironment(str, Enum):
	DEVELOPMENT = "development"
	PRODUCTION = "production"
	TEST = "test"


class Settings(BaseSettings):
	db_url: str = "sqlite+aiosqlite:///./craft.db"
	db_echo: bool = False
	log_config: Path | None = None
	log_level: str = "INFO"
	api_prefix: str = "/api/v1"
	environment: RuntimeEnvironment = RuntimeEnvironment.DEVELOPMENT

	# CORS
	allowed_origins: list[str] = Field(
		default_factory=lambda: ["http://localhost:3000", "http://localhost:3001"]
	)

	# JWT
	jwt_secret: str = Field(default="change-me-in-production")
	jwt_algorithm: str = "HS256"
	jwt_expires_minutes: int = Field(gt=0, default=60 * 24 * 7)

	# Redis backed rate limiting
	redis_url: str | None = None
	rate_limit_enabled: bool = False
	rate_limit_window_seconds: int = Field(gt=0, default=15 * 60)
	rate_limit_max_requests: int = Field(gt=0, default=100)
	auth_rate_limit_window_seconds: int = Field(gt=0, default=15 * 60)
	auth_rate_limit_max_requests: int = Field(gt=0, default=5)
	strict_rate_limit_window_seconds: int = Field(gt=0, default=5 * 60)
	strict_rate_limit_max_requests: int = Field(gt=0, default=3)
	# Peers allowed to set X-Forwarded-For
	trusted_proxies: list[str] = Field(default_factory=list)

	# Listing
	default_page_size: int = Field(gt=0, default=10)
	max_page_size: int = Field(gt=0, default=100)
	activity_export_limit: int = Field(gt=0, default=10000)

	@computed_field
	@property
	def async_db_url(self) -> str:
		url = self.db_url
		if url.startswith("postgresql+psycopg://"):
			return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
		elif url.startswith("postgresql://"):
			return url.replace("postgresql://", "postgresql+asyncpg://", 1)
		elif url.startswith("sqlite:///"):
			return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
		return url

	@property
	def is_production(self) -> bool:
		return self.environment == RuntimeEnvironment.PRODUCTION

	model_config = SettingsConfigDict(
		env_prefix='craft_',
		env_file='.env',
		env_file_encoding='utf-8',
		extra='ignore',
	)


_settings: Settings | None = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		_settings = Settings()
	return _settings
