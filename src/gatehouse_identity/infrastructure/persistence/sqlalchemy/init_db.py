"""Engine construction and schema management for the shared auth metadata.

Every table (sessions plus one table per auth entity) is registered on
``AuthBase.metadata`` by importing the model packages below.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import gatehouse_auth.persistence.sqlalchemy.models  # noqa: F401
import gatehouse_identity.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from gatehouse_auth.persistence.sqlalchemy.base import AuthBase
from gatehouse_config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings | None = None) -> AsyncEngine:
    settings = settings or get_settings()
    return create_async_engine(settings.database_url, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def _engine_scope(engine: AsyncEngine | None) -> AsyncIterator[AsyncEngine]:
    # Engines created here are disposed here; caller engines are left alone
    if engine is not None:
        yield engine
        return
    owned = create_engine_from_settings()
    try:
        yield owned
    finally:
        await owned.dispose()


async def create_tables(engine: AsyncEngine | None = None) -> list[str]:
    """Create any missing tables and return the names of all known tables.

    Existing tables are never altered.
    """
    async with _engine_scope(engine) as bound, bound.begin() as conn:
        await conn.run_sync(AuthBase.metadata.create_all)

    names = sorted(AuthBase.metadata.tables)
    logger.info("Schema ensured for tables: %s", ", ".join(names))
    return names


async def drop_tables(engine: AsyncEngine | None = None) -> None:
    """Drop every auth table, deleting all identities and sessions."""
    async with _engine_scope(engine) as bound, bound.begin() as conn:
        await conn.run_sync(AuthBase.metadata.drop_all)
    logger.warning("Dropped all auth tables")
