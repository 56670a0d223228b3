"""
Database configuration and session management.

The feed pipeline, the maintenance scheduler and the HTTP read path all borrow
connections from the same bounded pool:
- Small pool with limited overflow
- Short pool timeout to fail fast under load
- Connection recycling to prevent stale connections
"""
import asyncio
import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.exc import SQLAlchemyError

from lastheard.core.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def enable_case_sensitive_like(engine: AsyncEngine) -> None:
    """Make LIKE case-sensitive on SQLite connections, as it is on PostgreSQL."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_case_sensitive_like(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA case_sensitive_like = ON")
        cursor.close()


def get_async_database_url(url: str) -> str:
    """Convert sync database URL to async version."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


settings = get_settings()
async_url = get_async_database_url(settings.database_url)

# SQLite doesn't support pool_size/max_overflow, only use them for PostgreSQL
if async_url.startswith("sqlite"):
    engine = create_async_engine(
        async_url,
        echo=False,
    )
    enable_case_sensitive_like(engine)
else:
    # - pool_size=5 / max_overflow=5: at most 10 connections shared by feed, scheduler and API
    # - pool_timeout=10: fail fast if pool exhausted
    # - pool_recycle=300: recycle connections every 5 min
    # - connect_args timeout: 5s connection timeout
    engine = create_async_engine(
        async_url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=5,
        pool_timeout=10,
        connect_args={
            "timeout": 5,
            "command_timeout": 30,
        },
    )

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Close database connections."""
    await engine.dispose()


async def db_execute_safe(db: AsyncSession, query, default=None):
    """
    Execute a database query with graceful error handling.

    Returns the default value on timeout or database errors instead of
    raising, so read endpoints answer with empty results rather than a 5xx
    while the store is having trouble.
    """
    try:
        return await asyncio.wait_for(db.execute(query), timeout=10.0)
    except asyncio.TimeoutError:
        logger.error("Database query timed out")
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
    except Exception as e:
        # Driver level connection failures (refused, reset) are not wrapped by SQLAlchemy
        logger.error(f"Unexpected database error: {e}")
    try:
        await db.rollback()
    except Exception as e:
        logger.debug(f"Rollback after failed query also failed: {e}")
    return default
