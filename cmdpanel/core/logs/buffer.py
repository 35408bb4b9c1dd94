# cmdpanel/core/logs/buffer.py
"""Bounded, append-ordered buffer of host log records."""

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Iterator

from cmdpanel.core.logs.models import LogRecord

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 1000
DEFAULT_SCROLL_DELAY = 0.01


class ScrollNotifier:
    """Coalesces scroll-to-latest requests into one call per delay window.

    The first request arms a timer; requests arriving before it fires are
    absorbed by it.
    """

    def __init__(
        self,
        callback: Callable[[], None] | None = None,
        delay: float = DEFAULT_SCROLL_DELAY,
    ) -> None:
        self._callback = callback
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self.fired = 0

    def set_callback(self, callback: Callable[[], None] | None) -> None:
        self._callback = callback

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        if self._callback is None or self._handle is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop there is nothing to coalesce with
            self._fire()
            return
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.fired += 1
        if self._callback is not None:
            self._callback()


class LogBuffer:
    """Sliding window over the most recent host log records.

    Records are kept in arrival order. Once the limit is exceeded the
    oldest records are evicted first. Records with an empty message are
    rejected.

    Example:
        >>> buffer = LogBuffer(limit=2)
        >>> for i in range(3):
        ...     buffer.append(LogRecord(time_stamp="", level="INFO", target="bot", message=str(i)))
        >>> [r.message for r in buffer.records]
        ['1', '2']
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        notifier: ScrollNotifier | None = None,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be positive")
        self.limit = limit
        self.notifier = notifier or ScrollNotifier()
        self._records: deque[LogRecord] = deque(maxlen=limit)
        # Records ever accepted, including evicted ones
        self.total = 0

    def append(self, record: LogRecord) -> bool:
        """Append a record to the tail of the buffer.

        Args:
            record: Record to append.

        Returns:
            False if the record was rejected for having an empty message.
        """
        if not record.message:
            return False
        self._records.append(record)
        self.total += 1
        self.notifier.schedule()
        return True

    @property
    def records(self) -> tuple[LogRecord, ...]:
        """Read-only snapshot in append order."""
        return tuple(self._records)

    def tail(self, count: int) -> list[LogRecord]:
        if count <= 0:
            return []
        return list(self._records)[-count:]

    def since(self, seen: int) -> list[LogRecord]:
        """Records accepted after the first `seen` ones that are still retained.

        Args:
            seen: Value of `total` the caller last observed.

        Returns:
            The newer records in append order.
        """
        return self.tail(self.total - seen)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LogRecord]:
        return iter(tuple(self._records))
