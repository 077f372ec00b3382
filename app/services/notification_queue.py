"""In-process work queue that runs locality dispatches off the request path."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

from app.errors import BackendReadError, IncidentNotFoundError
from app.services.notification_service import NotificationService


logger = logging.getLogger(__name__)


class NotificationEnqueuer(Protocol):
    def enqueue(self, incident_id: str) -> None: ...


class NotificationQueue:
    """
    Single-worker asyncio queue of incident ids awaiting dispatch.

    ``enqueue`` is safe to call from any thread once ``start`` has run. The
    worker builds a fresh dispatcher per job and runs it in a thread, so
    database and HTTP calls never block the event loop. Failures are logged
    and the worker moves on to the next id. ``stop`` drains the queue first.
    """

    def __init__(
        self,
        dispatcher_factory: Callable[[], NotificationService],
        drain_timeout: float = 10.0,
    ) -> None:
        self._dispatcher_factory = dispatcher_factory
        self._drain_timeout = drain_timeout
        self._queue: asyncio.Queue[str] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._worker: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(), name="notification-worker")
        logger.info("Notification worker started")

    async def stop(self) -> None:
        """
        Let the worker finish queued dispatches, then cancel it.

        Waits at most ``drain_timeout`` seconds. Ids still queued after that
        are dropped and counted in a warning.
        """
        if self._worker is None:
            return
        if self._queue is not None and self.running:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=self._drain_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Notification queue did not drain within %.1fs | queued=%d",
                    self._drain_timeout,
                    self._queue.qsize(),
                )
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        pending = self._queue.qsize() if self._queue else 0
        if pending:
            logger.warning("Notification worker stopped with %d queued incidents dropped", pending)
        self._worker = None
        self._loop = None
        logger.info("Notification worker stopped")

    def enqueue(self, incident_id: str) -> None:
        """Hand an incident id to the worker without waiting for the dispatch."""

        if self._loop is None or self._queue is None:
            raise RuntimeError("Notification queue is not running")
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        if current is self._loop:
            self._queue.put_nowait(incident_id)
        else:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, incident_id)
        logger.info("Queued locality notification | incident=%s", incident_id)

    async def join(self) -> None:
        """Wait until every queued dispatch has finished."""

        if self._queue is not None:
            await self._queue.join()

    async def _run(self) -> None:
        if self._queue is None:
            raise RuntimeError("Notification worker started without a queue")
        while True:
            incident_id = await self._queue.get()
            try:
                await self.process(incident_id)
            finally:
                self._queue.task_done()

    async def process(self, incident_id: str) -> None:
        try:
            dispatcher = self._dispatcher_factory()
            summary = await asyncio.to_thread(dispatcher.dispatch, incident_id)
        except IncidentNotFoundError:
            logger.warning("Skipping notification, incident not found or not approved | incident=%s", incident_id)
        except BackendReadError:
            logger.exception("Notification aborted, backend read failed | incident=%s", incident_id)
        except Exception:
            logger.exception("Notification dispatch failed | incident=%s", incident_id)
        else:
            logger.info(
                "Notification dispatch finished | incident=%s | successful=%d | failed=%d",
                incident_id,
                summary.successful,
                summary.failed,
            )
