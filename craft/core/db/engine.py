# (c) Copyright Datacraft, 2026
import logging

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from craft.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

engine_kwargs = {"echo": settings.db_echo}
if settings.async_db_url.startswith("postgresql"):
	engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(settings.async_db_url, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db():
	async with AsyncSessionLocal() as session:
		yield session


# Alias used by feature routers
get_session = get_db


def get_engine():
	return engine


async def create_tables():
	"""Create all tables known to the declarative base."""
	from craft.core.db.base import Base
	from craft.core.db import models  # noqa: F401

	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)
	logger.info("Database tables ensured")
