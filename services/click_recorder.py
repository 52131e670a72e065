"""
Best-effort, non-blocking click event persistence.

The redirect path hands events to ``ClickRecorder.submit()``, which only
enqueues and never awaits storage. Worker tasks drain the bounded queue and
insert each event with a write timeout.

Delivery is at-most-once:
- a full queue drops the new event
- a failed or timed-out insert drops that event (no retry)
- events still queued when the shutdown timeout expires are dropped

Every drop is logged; none is ever surfaced to the redirect caller.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from repositories.click_repository import ClickRepository
from schemas.models.click import ClickDoc
from shared.logging import get_logger

log = get_logger(__name__)


class ClickRecorder:
    def __init__(
        self,
        repository: ClickRepository,
        *,
        max_queue_size: int = 1000,
        write_timeout: float = 2.0,
        workers: int = 1,
        shutdown_timeout: float = 5.0,
    ) -> None:
        self._repository = repository
        self._queue: asyncio.Queue[ClickDoc] = asyncio.Queue(maxsize=max_queue_size)
        self._write_timeout = write_timeout
        self._worker_count = max(1, workers)
        self._shutdown_timeout = shutdown_timeout
        self._tasks: list[asyncio.Task] = []
        self.recorded = 0
        self.dropped = 0

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._worker(), name=f"click-recorder-{i}")
            for i in range(self._worker_count)
        ]
        log.info("click_recorder_started", workers=self._worker_count)

    def submit(self, event: ClickDoc) -> bool:
        """Enqueue *event* without waiting. Returns False if it was dropped."""
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            log.warning(
                "click_event_dropped",
                reason="queue_full",
                link_id=str(event.meta.link_id),
            )
            return False
        return True

    async def _write(self, event: ClickDoc) -> None:
        try:
            await asyncio.wait_for(
                self._repository.insert(event), timeout=self._write_timeout
            )
            self.recorded += 1
        except asyncio.TimeoutError:
            self.dropped += 1
            log.warning(
                "click_event_write_failed",
                reason="timeout",
                link_id=str(event.meta.link_id),
                timeout_seconds=self._write_timeout,
            )
        except Exception as e:
            self.dropped += 1
            log.error(
                "click_event_write_failed",
                reason="storage_error",
                link_id=str(event.meta.link_id),
                error=str(e),
                error_type=type(e).__name__,
            )

    async def _worker(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._write(event)
            finally:
                self._queue.task_done()

    async def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued event has been written or dropped.

        Returns False if *timeout* expired first.
        """
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def stop(self) -> None:
        drained = await self.drain(timeout=self._shutdown_timeout)
        if not drained:
            self.dropped += self.pending
            log.warning("click_recorder_shutdown_dropped", pending=self.pending)
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        log.info(
            "click_recorder_stopped", recorded=self.recorded, dropped=self.dropped
        )
