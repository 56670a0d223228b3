"""
Typed data access for call records, the talkgroup directory and expiring
auth artifacts.

Writers commit their own unit of work. Read helpers used by the HTTP layer go
through db_execute_safe so a store hiccup yields empty results instead of an
error response.
"""
import logging
import time
from typing import Iterable, Optional

from sqlalchemy import delete, distinct, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lastheard.core.database import db_execute_safe
from lastheard.models import (
    ApiKey, CallRecord, EmailChangeToken, PasswordResetToken, Talkgroup, UserSession
)
from lastheard.services.aggregation import (
    ALL_CONTINENTS,
    GLOBAL_CONTINENT,
    QueryFilter,
    callsign_activity_statement,
    callsign_rows_to_dicts,
    talkgroup_activity_statement,
    talkgroup_rows_to_dicts,
)
from lastheard.services.normalizer import LOCAL_TALKGROUP_ID, NormalizedCall

logger = logging.getLogger(__name__)

RECENT_DEFAULT_LIMIT = 50
RECENT_MAX_LIMIT = 100
UPSERT_BATCH_SIZE = 500


def _now(now: Optional[int]) -> int:
    return int(time.time()) if now is None else now


def call_record_to_dict(record: CallRecord) -> dict:
    """Serialize a call record using the stored column names."""
    return {
        "id": record.id,
        "SourceID": record.source_id,
        "DestinationID": record.destination_id,
        "SourceCall": record.source_call,
        "SourceName": record.source_name,
        "DestinationCall": record.destination_call,
        "DestinationName": record.destination_name,
        "Start": record.start,
        "Stop": record.stop,
        "TalkerAlias": record.talker_alias,
        "duration": record.duration,
        "created_at": record.created_at,
    }


class CallRecordRepository:
    """Call record store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_call_record(self, call: NormalizedCall) -> Optional[int]:
        """Insert one call record. Returns the new id, or None if the write failed."""
        try:
            record = CallRecord(**call.as_row())
            self.db.add(record)
            await self.db.commit()
            return record.id
        except Exception as e:
            logger.error(f"Error storing call record for {call.source_call} -> TG {call.destination_id}: {e}")
            await self.db.rollback()
            return None

    async def prune_older_than(self, cutoff: int) -> int:
        """Delete call records that started before cutoff. A record starting exactly at cutoff is kept."""
        result = await self.db.execute(
            delete(CallRecord).where(CallRecord.start < cutoff)
        )
        await self.db.commit()
        return result.rowcount or 0

    async def group_by_talkgroup(self, query_filter: QueryFilter, now: Optional[int] = None) -> list[dict]:
        result = await db_execute_safe(self.db, talkgroup_activity_statement(query_filter, now))
        if result is None:
            return []
        return talkgroup_rows_to_dicts(result)

    async def group_by_callsign(self, query_filter: QueryFilter, now: Optional[int] = None) -> list[dict]:
        result = await db_execute_safe(self.db, callsign_activity_statement(query_filter, now))
        if result is None:
            return []
        return callsign_rows_to_dicts(result)

    async def recent_entries(
        self,
        callsign: Optional[str] = None,
        talkgroup: Optional[int] = None,
        limit: int = RECENT_DEFAULT_LIMIT,
    ) -> list[dict]:
        """Most recent call records, newest first."""
        limit = max(1, min(limit, RECENT_MAX_LIMIT))
        query = select(CallRecord).where(CallRecord.destination_id != LOCAL_TALKGROUP_ID)
        if callsign:
            query = query.where(CallRecord.source_call.like(f"%{callsign}%"))
        if talkgroup:
            query = query.where(CallRecord.destination_id == talkgroup)
        query = query.order_by(CallRecord.start.desc(), CallRecord.id.desc()).limit(limit)

        result = await db_execute_safe(self.db, query)
        if result is None:
            return []
        return [call_record_to_dict(r) for r in result.scalars().all()]

    async def statistics(self, now: Optional[int] = None) -> dict:
        """Totals over the whole store, excluding the local talkgroup."""
        since = _now(now) - 24 * 3600
        not_local = CallRecord.destination_id != LOCAL_TALKGROUP_ID
        queries = {
            "totalEntries": select(func.count()).select_from(CallRecord).where(not_local),
            "last24Hours": select(func.count()).select_from(CallRecord).where(
                not_local, CallRecord.start > since
            ),
            "uniqueCallsigns": select(func.count(distinct(CallRecord.source_call))).where(not_local),
            "uniqueTalkgroups": select(func.count(distinct(CallRecord.destination_id))).where(not_local),
        }

        stats = {}
        for key, query in queries.items():
            result = await db_execute_safe(self.db, query)
            stats[key] = (result.scalar() or 0) if result is not None else 0
        return stats


class TalkgroupRepository:
    """Talkgroup directory store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise NotImplementedError(f"Talkgroup upsert not supported on {dialect}")
        return insert

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Talkgroup))
        return result.scalar() or 0

    async def upsert_many(self, entries: Iterable[dict], now: Optional[int] = None) -> int:
        """
        Insert or update directory entries keyed by talkgroup id.

        Rows whose name, country and continent are unchanged are left alone, so
        re-applying the same document does not touch the table. Everything is
        committed together; on error nothing is written and the error is raised.
        """
        insert = self._insert()
        now = _now(now)
        # A talkgroup may only appear once per INSERT .. ON CONFLICT statement
        unique = {e["talkgroup_id"]: e for e in entries}
        rows = [
            {
                "talkgroup_id": e["talkgroup_id"],
                "name": e["name"],
                "country": e.get("country"),
                "continent": e.get("continent"),
                "full_country_name": e.get("full_country_name"),
                "last_updated": now,
            }
            for e in unique.values()
        ]

        try:
            for i in range(0, len(rows), UPSERT_BATCH_SIZE):
                stmt = insert(Talkgroup).values(rows[i:i + UPSERT_BATCH_SIZE])
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Talkgroup.talkgroup_id],
                    set_={
                        "name": stmt.excluded.name,
                        "country": stmt.excluded.country,
                        "continent": stmt.excluded.continent,
                        "full_country_name": stmt.excluded.full_country_name,
                        "last_updated": stmt.excluded.last_updated,
                    },
                    where=or_(
                        Talkgroup.name.is_distinct_from(stmt.excluded.name),
                        Talkgroup.country.is_distinct_from(stmt.excluded.country),
                        Talkgroup.continent.is_distinct_from(stmt.excluded.continent),
                        Talkgroup.full_country_name.is_distinct_from(stmt.excluded.full_country_name),
                    ),
                )
                await self.db.execute(stmt)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return len(rows)

    async def get(self, talkgroup_id: int) -> Optional[Talkgroup]:
        result = await db_execute_safe(
            self.db, select(Talkgroup).where(Talkgroup.talkgroup_id == talkgroup_id)
        )
        return result.scalar_one_or_none() if result is not None else None

    async def all(self) -> list[Talkgroup]:
        result = await db_execute_safe(self.db, select(Talkgroup).order_by(Talkgroup.talkgroup_id))
        return list(result.scalars().all()) if result is not None else []

    async def continents(self) -> list[str]:
        query = (
            select(distinct(Talkgroup.continent))
            .where(Talkgroup.continent.is_not(None))
            .order_by(Talkgroup.continent)
        )
        result = await db_execute_safe(self.db, query)
        return [row[0] for row in result] if result is not None else []

    async def countries(self, continent: Optional[str]) -> list[dict]:
        """Countries on a continent as select options. Empty for All/Global."""
        if not continent or continent in (ALL_CONTINENTS, GLOBAL_CONTINENT):
            return []
        query = (
            select(Talkgroup.country, Talkgroup.full_country_name)
            .where(Talkgroup.continent == continent, Talkgroup.country.is_not(None))
            .distinct()
            .order_by(Talkgroup.country)
        )
        result = await db_execute_safe(self.db, query)
        if result is None:
            return []
        return [
            {"label": row.full_country_name or row.country, "value": row.country}
            for row in result
        ]

    async def talkgroups(self, continent: Optional[str], country: Optional[str] = None) -> list[dict]:
        """Talkgroups on a continent, optionally within one country. Empty for All/Global."""
        if not continent or continent in (ALL_CONTINENTS, GLOBAL_CONTINENT):
            return []
        query = select(Talkgroup.talkgroup_id, Talkgroup.name).where(Talkgroup.continent == continent)
        if country:
            query = query.where(Talkgroup.country == country)
        query = query.order_by(Talkgroup.talkgroup_id)

        result = await db_execute_safe(self.db, query)
        if result is None:
            return []
        return [{"talkgroup_id": row.talkgroup_id, "name": row.name} for row in result]


class AuthArtifactRepository:
    """Expiring sessions, tokens and API keys."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def prune_expired_tokens(self, now: Optional[int] = None) -> int:
        """Delete password reset and e-mail change tokens past their expiry."""
        now = _now(now)
        removed = 0
        for model in (PasswordResetToken, EmailChangeToken):
            result = await self.db.execute(delete(model).where(model.expires_at < now))
            removed += result.rowcount or 0
        await self.db.commit()
        return removed

    async def prune_expired_sessions(self, now: Optional[int] = None) -> int:
        result = await self.db.execute(
            delete(UserSession).where(UserSession.expires_at < _now(now))
        )
        await self.db.commit()
        return result.rowcount or 0

    async def deactivate_expired_api_keys(self, now: Optional[int] = None) -> int:
        result = await self.db.execute(
            update(ApiKey)
            .where(
                ApiKey.is_active.is_(True),
                ApiKey.expires_at.is_not(None),
                ApiKey.expires_at < _now(now),
            )
            .values(is_active=False)
        )
        await self.db.commit()
        return result.rowcount or 0
