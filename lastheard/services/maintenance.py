"""
Retention and maintenance scheduler.

Two background loops:
- retention: prune old call records and expired auth artifacts at startup,
  then every maintenance_interval_hours
- directory: refresh the talkgroup directory at startup when it is empty,
  then every day at talkgroup_refresh_hour:talkgroup_refresh_minute local time

Each job is isolated; one failing never stops the others or the schedule.
"""
import asyncio
import logging
import time
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from lastheard.core.config import Settings, get_settings
from lastheard.core.metrics import MAINTENANCE_DURATION, MAINTENANCE_RUNS
from lastheard.repositories import (
    AuthArtifactRepository, CallRecordRepository, TalkgroupRepository
)
from lastheard.services.talkgroups import refresh_directory

logger = logging.getLogger(__name__)


def seconds_until(hour: int, minute: int = 0, now: Optional[datetime] = None) -> float:
    """Seconds from now until the next local hour:minute, tomorrow if already past."""
    now = now or datetime.now()
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class MaintenanceScheduler:
    """Runs retention and directory refresh jobs in the background."""

    def __init__(self, session_factory: async_sessionmaker, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._session_factory = session_factory
        self._running = False
        self._retention_task: Optional[asyncio.Task] = None
        self._directory_task: Optional[asyncio.Task] = None

        self.last_retention: Optional[dict] = None
        self.last_retention_at: Optional[int] = None
        self.last_refresh: Optional[dict] = None
        self.last_refresh_at: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        if self._running:
            return
        self._running = True
        self._retention_task = asyncio.create_task(self._retention_loop())
        self._directory_task = asyncio.create_task(self._directory_loop())
        logger.info(
            f"Maintenance scheduler started (retention {self.settings.call_retention_days}d, "
            f"directory refresh daily at {self.settings.talkgroup_refresh_hour:02d}:"
            f"{self.settings.talkgroup_refresh_minute:02d})"
        )

    async def stop(self):
        self._running = False
        for task in (self._retention_task, self._directory_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._retention_task = None
        self._directory_task = None
        logger.info("Maintenance scheduler stopped")

    async def _run_job(self, name: str, job) -> Optional[int]:
        """Run one job with its own session. Returns its count, or None if it failed."""
        started = time.monotonic()
        try:
            async with self._session_factory() as db:
                count = await job(db)
        except Exception as e:
            logger.error(f"Maintenance job {name} failed: {e}")
            MAINTENANCE_RUNS.labels(job=name, status="error").inc()
            return None
        finally:
            MAINTENANCE_DURATION.labels(job=name).observe(time.monotonic() - started)

        MAINTENANCE_RUNS.labels(job=name, status="success").inc()
        if count:
            logger.info(f"Maintenance job {name}: {count} rows affected")
        return count

    async def run_retention(self, now: Optional[int] = None) -> dict:
        """Run all retention jobs once. Values are affected row counts, None for a failed job."""
        now = int(time.time()) if now is None else now
        cutoff = now - self.settings.call_retention_days * 86400

        results = {
            "call_records": await self._run_job(
                "prune_call_records",
                lambda db: CallRecordRepository(db).prune_older_than(cutoff),
            ),
            "tokens": await self._run_job(
                "prune_expired_tokens",
                lambda db: AuthArtifactRepository(db).prune_expired_tokens(now),
            ),
            "sessions": await self._run_job(
                "prune_expired_sessions",
                lambda db: AuthArtifactRepository(db).prune_expired_sessions(now),
            ),
            "api_keys": await self._run_job(
                "deactivate_expired_api_keys",
                lambda db: AuthArtifactRepository(db).deactivate_expired_api_keys(now),
            ),
        }

        self.last_retention = results
        self.last_retention_at = now
        return results

    async def refresh_directory(self) -> dict:
        result = await refresh_directory(self._session_factory, settings=self.settings)
        status = "success" if result.get("success") else "error"
        MAINTENANCE_RUNS.labels(job="refresh_talkgroups", status=status).inc()
        self.last_refresh = result
        self.last_refresh_at = int(time.time())
        return result

    async def directory_is_empty(self) -> bool:
        try:
            async with self._session_factory() as db:
                return await TalkgroupRepository(db).count() == 0
        except Exception as e:
            logger.error(f"Could not count talkgroups: {e}")
            return False

    async def _retention_loop(self):
        interval = self.settings.maintenance_interval_hours * 3600
        while self._running:
            try:
                await self.run_retention()
            except Exception as e:
                logger.error(f"Retention run failed: {e}")
            await asyncio.sleep(interval)

    async def _directory_loop(self):
        if await self.directory_is_empty():
            logger.info("Talkgroup directory is empty, loading it now")
            await self.refresh_directory()

        while self._running:
            delay = seconds_until(
                self.settings.talkgroup_refresh_hour, self.settings.talkgroup_refresh_minute
            )
            logger.info(f"Next talkgroup directory refresh in {delay / 3600:.1f}h")
            await asyncio.sleep(delay)
            try:
                await self.refresh_directory()
            except Exception as e:
                logger.error(f"Talkgroup directory refresh failed: {e}")

    def get_stats(self) -> dict:
        return {
            "running": self._running,
            "last_retention": self.last_retention,
            "last_retention_at": self.last_retention_at,
            "last_refresh": self.last_refresh,
            "last_refresh_at": self.last_refresh_at,
        }
