# cmdpanel/interfaces/api/streaming.py
"""Server-sent log events for panel front ends.

LogFeed is the consumer of the LogBuffer's coalesced scroll notification:
each notification wakes every subscriber, which then sends the records
appended since it last looked.
"""

import asyncio
from collections.abc import AsyncIterator, Iterable

from cmdpanel.core.logs.buffer import LogBuffer
from cmdpanel.core.logs.models import LogRecord


def format_sse(records: Iterable[LogRecord]) -> str:
    """Encode records as server-sent events of type ``log``."""
    return "".join(f"event: log\ndata: {r.model_dump_json()}\n\n" for r in records)


class LogFeed:
    """Fans scroll notifications out to log stream subscribers."""

    def __init__(self) -> None:
        self._waiters: set[asyncio.Event] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._waiters)

    def notify(self) -> None:
        for waiter in self._waiters:
            waiter.set()

    async def subscribe(
        self, buffer: LogBuffer, backlog: int = 0
    ) -> AsyncIterator[str]:
        """Yield SSE chunks for records appended to the buffer.

        Args:
            buffer: Buffer to follow.
            backlog: Number of already buffered records to send first.

        Yields:
            SSE-encoded chunks, one per wake-up with new records.
        """
        waiter = asyncio.Event()
        self._waiters.add(waiter)
        seen = max(buffer.total - backlog, 0)
        try:
            while True:
                records = buffer.since(seen)
                seen = buffer.total
                if records:
                    yield format_sse(records)
                await waiter.wait()
                waiter.clear()
        finally:
            self._waiters.discard(waiter)
