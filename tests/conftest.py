"""
Shared pytest fixtures for the last-heard API tests.

Provides fixtures for database sessions, HTTP clients and sample call data.
"""
import json
import os
import time
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FEED_ENABLED", "false")
os.environ.setdefault("MAINTENANCE_ENABLED", "false")
os.environ.setdefault("SENTRY_DSN", "")

from lastheard.main import app
from lastheard.core.database import Base, enable_case_sensitive_like, get_db
from lastheard.models import CallRecord, Talkgroup


@pytest_asyncio.fixture
async def db_engine():
    """Create async test database engine."""
    database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

    # One shared connection so every session sees the same in-memory database
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=False, poolclass=StaticPool)
        enable_case_sensitive_like(engine)
    else:
        engine = create_async_engine(database_url, echo=False, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker:
    """Session factory bound to the test engine, as handed to background services."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session with proper cleanup."""
    async with session_factory() as session:
        for table in reversed(Base.metadata.sorted_tables):
            await session.execute(table.delete())
        await session.commit()

        yield session

        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with database override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def now() -> int:
    return int(time.time())


def make_call(
    source_call: str = "EA7KLK",
    destination_id: int = 214,
    destination_name: str = "Spain",
    start: int = None,
    duration: int = 10,
    source_id: int = 2147001,
    source_name: str = None,
) -> CallRecord:
    """Build a call record starting `start` (default: one minute ago)."""
    if start is None:
        start = int(time.time()) - 60
    return CallRecord(
        source_id=source_id,
        destination_id=destination_id,
        source_call=source_call,
        source_name=source_name,
        destination_call=None,
        destination_name=destination_name,
        start=start,
        stop=start + duration,
        talker_alias=None,
        duration=duration,
    )


@pytest.fixture
def call_factory():
    return make_call


@pytest.fixture
def session_stop_payload(now):
    """A Brandmeister Session-Stop payload for a 10 second group call."""
    return {
        "Event": "Session-Stop",
        "CallTypes": ["Group", "Voice", "Call"],
        "SourceID": 2147001,
        "SourceCall": " EA7KLK ",
        "SourceName": "Juan",
        "DestinationID": 214,
        "DestinationCall": "",
        "DestinationName": " Spain ",
        "TalkerAlias": "EA7KLK Juan",
        "Start": now - 20,
        "Stop": now - 10,
    }


@pytest.fixture
def envelope():
    """Wrap a payload the way the feed delivers it."""
    def wrap(payload) -> dict:
        return {"payload": json.dumps(payload)}
    return wrap


@pytest_asyncio.fixture
async def seeded_talkgroups(db_session: AsyncSession):
    """A small talkgroup directory covering several continents."""
    talkgroups = [
        Talkgroup(talkgroup_id=91, name="World-wide", country="Global",
                  continent="Global", full_country_name="Global"),
        Talkgroup(talkgroup_id=214, name="Spain", country="ES",
                  continent="Europe", full_country_name="Spain"),
        Talkgroup(talkgroup_id=2141, name="Andalucia", country="ES",
                  continent="Europe", full_country_name="Spain"),
        Talkgroup(talkgroup_id=262, name="Deutschland", country="DE",
                  continent="Europe", full_country_name="Germany"),
        Talkgroup(talkgroup_id=3100, name="USA Nationwide", country="US",
                  continent="North America", full_country_name="United States"),
    ]
    db_session.add_all(talkgroups)
    await db_session.commit()
    return talkgroups
