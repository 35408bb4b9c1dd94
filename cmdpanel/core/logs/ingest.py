# cmdpanel/core/logs/ingest.py
"""Single-consumer queue between the push channel and the LogBuffer.

Push payloads arrive faster than anything else in the session and may be
malformed. offer() validates each payload and enqueues it; one consumer
task applies records to the buffer in receipt order. When the queue is
full the oldest queued record is dropped, matching the buffer's own
oldest-first eviction.
"""

import asyncio
import contextlib
import logging
from typing import Any

from pydantic import ValidationError

from cmdpanel.core.logs.buffer import LogBuffer
from cmdpanel.core.logs.models import LogRecord

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000


class LogIngestor:
    """Feeds validated push payloads into a LogBuffer."""

    def __init__(self, buffer: LogBuffer, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        self.buffer = buffer
        self._queue: asyncio.Queue[LogRecord] = asyncio.Queue(maxsize=maxsize)
        self._task: asyncio.Task | None = None
        self.dropped = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def offer(self, payload: Any) -> bool:
        """Accept one push payload.

        Args:
            payload: A LogRecord or a mapping with its fields.

        Returns:
            True if the payload was queued, False if it was malformed.
        """
        if isinstance(payload, LogRecord):
            record = payload
        else:
            try:
                record = LogRecord.model_validate(payload)
            except ValidationError:
                logger.debug("Dropping malformed log event: %r", payload)
                return False

        if self._queue.full():
            self._queue.get_nowait()
            self._queue.task_done()
            self.dropped += 1
        self._queue.put_nowait(record)
        return True

    async def _consume(self) -> None:
        while True:
            record = await self._queue.get()
            try:
                self.buffer.append(record)
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued record has been applied."""
        await self._queue.join()

    async def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._consume())
            logger.info("Log ingestor started")

    async def shutdown(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        self.buffer.notifier.cancel()
        logger.info("Log ingestor stopped (%d dropped)", self.dropped)
