"""Integration tests for retention jobs and the talkgroup directory refresh"""
import json

import httpx
import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lastheard.core.config import Settings
from lastheard.models import (
    ApiKey, CallRecord, EmailChangeToken, PasswordResetToken, Talkgroup, User, UserSession
)
from lastheard.services.maintenance import MaintenanceScheduler
from lastheard.services.talkgroups import refresh_directory

PRIMARY_URL = "https://bm.test/v2/talkgroup"
FALLBACK_URL = "https://bm.test/v1.0/groups/"

PRIMARY_CSV = "id,name,country\n91,World-wide,\n214,Spain,ES\n262,Deutschland,\n3100,USA Nationwide,US\n"
FALLBACK_JSON = json.dumps({"91": "World-wide", "214": "Spain"})


@pytest.fixture
def directory_settings():
    return Settings(
        talkgroup_source_url=PRIMARY_URL,
        talkgroup_fallback_url=FALLBACK_URL,
        call_retention_days=7,
    )


def mock_client(routes: dict) -> httpx.AsyncClient:
    """Client answering each URL from routes; anything else is a 500."""
    def handler(request: httpx.Request) -> httpx.Response:
        body = routes.get(str(request.url))
        if body is None:
            return httpx.Response(500, text="upstream error")
        return httpx.Response(200, text=body)
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def load_talkgroups(db: AsyncSession) -> dict:
    db.expire_all()
    result = await db.execute(select(Talkgroup))
    return {tg.talkgroup_id: tg for tg in result.scalars().all()}


@pytest.mark.asyncio
class TestRunRetention:
    """Tests for the retention pass"""

    async def test_prunes_old_call_records(self, db_session, session_factory, call_factory, directory_settings, now):
        cutoff = now - 7 * 86400
        db_session.add_all([
            call_factory(source_call="OLD", start=cutoff - 3600),
            call_factory(source_call="EDGE", start=cutoff),
            call_factory(source_call="NEW", start=now - 60),
        ])
        await db_session.commit()

        scheduler = MaintenanceScheduler(session_factory, settings=directory_settings)
        results = await scheduler.run_retention(now=now)
        assert results["call_records"] == 1

        db_session.expire_all()
        remaining = await db_session.execute(select(CallRecord.source_call))
        assert {r[0] for r in remaining} == {"EDGE", "NEW"}

    async def test_expires_auth_artifacts(self, db_session, session_factory, directory_settings, now):
        user = User(callsign="EA7KLK", email="ea7klk@example.com", password_hash="x")
        db_session.add(user)
        await db_session.flush()
        db_session.add_all([
            UserSession(user_id=user.id, session_token="old", expires_at=now - 10),
            UserSession(user_id=user.id, session_token="live", expires_at=now + 3600),
            PasswordResetToken(user_id=user.id, token="reset-old", expires_at=now - 10),
            EmailChangeToken(user_id=user.id, new_email="new@example.com", token="email-old", expires_at=now - 10),
            EmailChangeToken(user_id=user.id, new_email="new@example.com", token="email-live", expires_at=now + 10),
            ApiKey(user_id=user.id, name="expired", api_key="k1", expires_at=now - 10),
            ApiKey(user_id=user.id, name="forever", api_key="k2", expires_at=None),
            ApiKey(user_id=user.id, name="current", api_key="k3", expires_at=now + 3600),
        ])
        await db_session.commit()

        scheduler = MaintenanceScheduler(session_factory, settings=directory_settings)
        results = await scheduler.run_retention(now=now)
        assert results == {"call_records": 0, "tokens": 2, "sessions": 1, "api_keys": 1}

        db_session.expire_all()
        sessions = await db_session.execute(select(UserSession.session_token))
        assert [r[0] for r in sessions] == ["live"]
        keys = await db_session.execute(select(ApiKey.name, ApiKey.is_active).order_by(ApiKey.name))
        assert [tuple(r) for r in keys] == [("current", True), ("expired", False), ("forever", True)]

        # Nothing left to do on a second pass
        again = await scheduler.run_retention(now=now)
        assert again == {"call_records": 0, "tokens": 0, "sessions": 0, "api_keys": 0}

    async def test_failed_job_does_not_stop_others(self, db_session, session_factory, directory_settings, now, monkeypatch):
        from lastheard.repositories import CallRecordRepository

        async def broken(self, cutoff):
            raise RuntimeError("disk full")

        monkeypatch.setattr(CallRecordRepository, "prune_older_than", broken)

        scheduler = MaintenanceScheduler(session_factory, settings=directory_settings)
        results = await scheduler.run_retention(now=now)
        assert results["call_records"] is None
        assert results["sessions"] == 0
        assert scheduler.get_stats()["last_retention"] == results

    async def test_directory_is_empty(self, db_session, session_factory, seeded_talkgroups, directory_settings):
        scheduler = MaintenanceScheduler(session_factory, settings=directory_settings)
        assert await scheduler.directory_is_empty() is False


@pytest.mark.asyncio
class TestRefreshDirectory:
    """Tests for downloading and applying the talkgroup directory"""

    async def test_primary_source_loaded(self, db_session, session_factory, directory_settings):
        async with mock_client({PRIMARY_URL: PRIMARY_CSV}) as client:
            result = await refresh_directory(session_factory, client=client, settings=directory_settings)

        assert result == {"success": True, "count": 4, "source": PRIMARY_URL}
        talkgroups = await load_talkgroups(db_session)
        assert set(talkgroups) == {91, 214, 262, 3100}
        assert talkgroups[91].continent == "Global"
        assert talkgroups[262].country == "DE"
        assert talkgroups[262].continent == "Europe"
        assert talkgroups[262].full_country_name == "Germany"
        assert talkgroups[3100].continent == "North America"

    async def test_refresh_is_idempotent(self, db_session, session_factory, directory_settings):
        routes = {PRIMARY_URL: PRIMARY_CSV}
        async with mock_client(routes) as client:
            await refresh_directory(session_factory, client=client, settings=directory_settings)

            await db_session.execute(update(Talkgroup).values(last_updated=1))
            await db_session.commit()

            routes[PRIMARY_URL] = PRIMARY_CSV.replace("Deutschland", "Germany Nationwide")
            result = await refresh_directory(session_factory, client=client, settings=directory_settings)

        assert result["success"] is True
        talkgroups = await load_talkgroups(db_session)
        assert len(talkgroups) == 4
        assert talkgroups[262].name == "Germany Nationwide"
        assert talkgroups[262].last_updated > 1
        # Unchanged rows are not rewritten
        assert talkgroups[214].last_updated == 1
        assert talkgroups[91].last_updated == 1

    async def test_fallback_used_when_primary_fails(self, db_session, session_factory, directory_settings):
        async with mock_client({FALLBACK_URL: FALLBACK_JSON}) as client:
            result = await refresh_directory(session_factory, client=client, settings=directory_settings)

        assert result == {"success": True, "count": 2, "source": FALLBACK_URL}
        assert set(await load_talkgroups(db_session)) == {91, 214}

    async def test_unparseable_primary_falls_back(self, db_session, session_factory, directory_settings):
        routes = {PRIMARY_URL: "<html>maintenance</html>", FALLBACK_URL: FALLBACK_JSON}
        async with mock_client(routes) as client:
            result = await refresh_directory(session_factory, client=client, settings=directory_settings)
        assert result["source"] == FALLBACK_URL

    async def test_failure_leaves_directory_untouched(
        self, db_session, session_factory, seeded_talkgroups, directory_settings
    ):
        async with mock_client({}) as client:
            result = await refresh_directory(session_factory, client=client, settings=directory_settings)

        assert result["success"] is False
        assert "error" in result
        talkgroups = await load_talkgroups(db_session)
        assert set(talkgroups) == {91, 214, 2141, 262, 3100}
        assert talkgroups[214].name == "Spain"
