"""
Brandmeister last-heard feed client.

Keeps one socket.io subscription to the Brandmeister last-heard endpoint and
runs every envelope through the normalizer. Accepted calls are written one at
a time with their own session. Delivery is best effort: a failed write is
logged and the call is dropped, with no retry and no buffering.
"""
import asyncio
import json
import logging
import time
from typing import Any, Optional

import socketio
from sqlalchemy.ext.asyncio import async_sessionmaker

from lastheard.core.config import Settings, get_settings
from lastheard.core.metrics import (
    CALL_RECORD_INSERT_ERRORS, CALL_RECORDS_INSERTED, FEED_CONNECTED, FEED_EVENTS,
    LAST_CALL_TIMESTAMP,
)
from lastheard.repositories import CallRecordRepository
from lastheard.services.normalizer import evaluate_event

logger = logging.getLogger(__name__)

INSERT_LOG_INTERVAL = 100


def extract_payload(data: Any) -> Optional[Any]:
    """Pull the payload out of a feed envelope. Returns None for a malformed envelope."""
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except ValueError:
            return None
    if not isinstance(data, dict):
        return None
    return data.get("payload")


class BrandmeisterFeed:
    """Owns the feed connection and the ingestion counters."""

    def __init__(self, session_factory: async_sessionmaker, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._session_factory = session_factory
        self._running = False
        self._task: Optional[asyncio.Task] = None

        self.connected = False
        self.received_count = 0
        self.inserted_count = 0
        self.last_insert_at: Optional[int] = None

        delay = self.settings.feed_reconnect_delay
        self.sio = socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=0,  # unlimited
            reconnection_delay=delay,
            reconnection_delay_max=delay,
            randomization_factor=0,
            logger=False,
            engineio_logger=False,
        )
        self.sio.on("connect", self._on_connect)
        self.sio.on("disconnect", self._on_disconnect)
        self.sio.on("connect_error", self._on_connect_error)
        self.sio.on(self.settings.feed_event_name, self.handle_envelope)

    async def start(self):
        """Start the feed connection in the background."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Brandmeister feed starting: {self.settings.feed_url}{self.settings.feed_socketio_path}")

    async def stop(self):
        """Disconnect and stop reconnecting."""
        self._running = False

        try:
            await self.sio.disconnect()
        except Exception as e:
            logger.warning(f"Error disconnecting from Brandmeister: {e}")

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self._set_connected(False)
        logger.info(f"Brandmeister feed stopped ({self.inserted_count} calls stored)")

    async def _run(self):
        """Connect, then wait on the connection. The client handles reconnects itself."""
        while self._running:
            try:
                await self.sio.connect(
                    self.settings.feed_url,
                    transports=["websocket"],
                    socketio_path=self.settings.feed_socketio_path,
                    wait_timeout=self.settings.feed_connect_timeout,
                    retry=True,
                )
                await self.sio.wait()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Brandmeister connection failed: {e}")

            if self._running:
                await asyncio.sleep(self.settings.feed_reconnect_delay)

    def _set_connected(self, connected: bool):
        self.connected = connected
        FEED_CONNECTED.set(1 if connected else 0)

    async def _on_connect(self):
        self._set_connected(True)
        logger.info("Connected to Brandmeister last-heard feed")

    async def _on_disconnect(self, *args):
        self._set_connected(False)
        logger.info("Disconnected from Brandmeister last-heard feed")

    async def _on_connect_error(self, data=None):
        self._set_connected(False)
        logger.warning(f"Brandmeister connection error: {data}")

    async def handle_envelope(self, data: Any) -> Optional[int]:
        """
        Process one feed envelope.

        Returns the stored call record id, or None when the event was filtered
        out or could not be written.
        """
        self.received_count += 1

        payload = extract_payload(data)
        call, rejection = evaluate_event(payload)
        if call is None:
            FEED_EVENTS.labels(outcome=rejection.value).inc()
            return None
        FEED_EVENTS.labels(outcome="accepted").inc()

        async with self._session_factory() as db:
            record_id = await CallRecordRepository(db).insert_call_record(call)

        if record_id is None:
            CALL_RECORD_INSERT_ERRORS.inc()
            return None

        self.inserted_count += 1
        self.last_insert_at = int(time.time())
        CALL_RECORDS_INSERTED.inc()
        LAST_CALL_TIMESTAMP.set(self.last_insert_at)
        if self.inserted_count % INSERT_LOG_INTERVAL == 0:
            logger.info(f"Stored {self.inserted_count} call records from Brandmeister")
        return record_id

    def get_stats(self) -> dict:
        return {
            "connected": self.connected,
            "received": self.received_count,
            "inserted": self.inserted_count,
            "last_insert_at": self.last_insert_at,
        }
