"""Engine and session factory construction."""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from copy_worker.config import Settings

from .models import Base

logger = logging.getLogger(__name__)


def create_engine(settings: Settings, pooled: bool = True) -> AsyncEngine:
    """Create async engine from settings.

    Args:
        settings: Database settings.
        pooled: Use a connection pool (API process). Celery tasks pass False:
            each task run owns an event loop, and asyncpg connections cannot
            cross loops.
    """
    if not pooled:
        return create_async_engine(settings.database_url, echo=settings.db_echo, poolclass=NullPool)

    return create_async_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing tables (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database.tables_created")
