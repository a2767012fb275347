# (c) Copyright Datacraft, 2026
"""CRAFT ABAC administration API application."""
import logging
import os
from contextlib import asynccontextmanager
from logging.config import dictConfig
from pathlib import Path

import yaml
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from craft.core.config import get_settings
from craft.core.db.engine import create_tables, get_engine
from craft.core.exceptions import register_exception_handlers
from craft.core.middleware import (
	RateLimitMiddleware,
	RequestLogMiddleware,
	SecurityHeadersMiddleware,
)
from craft.core.router_loader import discover_routers
from craft.core.routers.health import router as health_router
from craft.core.version import __version__

logger = logging.getLogger(__name__)
config = get_settings()
prefix = config.api_prefix


def configure_logging() -> None:
	"""YAML dictConfig when a config file is given, basicConfig otherwise."""
	path = config.log_config or os.environ.get("CRAFT_LOGGING_CFG")
	logging_config_path = Path(path) if path else None

	if logging_config_path and logging_config_path.is_file():
		with open(logging_config_path, "r") as stream:
			dictConfig(yaml.safe_load(stream))
		return
	logging.basicConfig(
		level=config.log_level.upper(),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)


@asynccontextmanager
async def lifespan(app: FastAPI):
	logger.info(f"Starting CRAFT API {__version__} ({config.environment.value})")
	await create_tables()
	yield
	logger.info("Shutting down CRAFT API")
	await get_engine().dispose()


configure_logging()

app = FastAPI(
	title="CRAFT ABAC Administration API",
	version=__version__,
	lifespan=lifespan,
)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
	CORSMiddleware,
	allow_origins=config.allowed_origins,
	allow_credentials=True,
	allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
	allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
	expose_headers=["Content-Disposition", "Content-Type", "Content-Length"],
)

register_exception_handlers(app)

# Auto-discover and register all feature routers
routers = discover_routers(Path(__file__).parent / "core")
for router, feature_name in routers:
	app.include_router(router, prefix=prefix)

app.include_router(health_router)
app.include_router(health_router, prefix=prefix)
