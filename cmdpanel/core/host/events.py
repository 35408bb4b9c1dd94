# cmdpanel/core/host/events.py
"""Push-event channel from the host.

The host streams one JSON object per line for every log line it emits.
Each decoded payload is handed to a sink (normally LogIngestor.offer);
lines that are not JSON are dropped. The stream reconnects with
exponential backoff when the connection fails or the host closes it.
"""

import asyncio
import contextlib
import json
import logging
from collections.abc import Callable
from typing import Any

import httpx
import tenacity

logger = logging.getLogger(__name__)

STDOUT_EVENT_PATH = "/events/stdout_data"


class EventStreamClosed(Exception):
    """The host ended the event stream."""


class LogEventStream:
    """Reads the host's log event stream and forwards payloads to a sink."""

    def __init__(
        self,
        sink: Callable[[Any], Any],
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        path: str = STDOUT_EVENT_PATH,
    ) -> None:
        self._sink = sink
        self._path = path
        # Streams are long-lived; only the connect phase is bounded
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(None, connect=10.0),
            transport=transport,
        )
        self._task: asyncio.Task | None = None

    def dispatch(self, line: str) -> bool:
        """Decode one stream line and hand it to the sink.

        Args:
            line: Raw line from the stream.

        Returns:
            True if a payload was forwarded.
        """
        if not line.strip():
            return False
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Dropping non-JSON event line: %s", line[:80])
            return False
        self._sink(payload)
        return True

    async def read_once(self) -> int:
        """Consume the stream until the host closes it.

        Returns:
            Number of payloads forwarded.
        """
        forwarded = 0
        async with self._client.stream("GET", self._path) as response:
            response.raise_for_status()
            logger.info("Connected to host event stream")
            async for line in response.aiter_lines():
                if self.dispatch(line):
                    forwarded += 1
        return forwarded

    @tenacity.retry(
        wait=tenacity.wait_exponential(multiplier=1, min=1, max=30),
        retry=tenacity.retry_if_exception_type(
            (httpx.TransportError, httpx.HTTPStatusError, EventStreamClosed)
        ),
        before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
    )
    async def listen(self) -> None:
        """Read the stream forever, reconnecting on failure."""
        await self.read_once()
        raise EventStreamClosed("host closed the event stream")

    async def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.listen())
            logger.info("Event stream listener started")

    async def shutdown(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        await self._client.aclose()
        logger.info("Event stream listener stopped")
