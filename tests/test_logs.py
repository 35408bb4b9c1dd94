# tests/test_logs.py
"""Tests for the log buffer, scroll coalescing and the ingestion queue."""

import asyncio

import pytest

from cmdpanel.core.logs.buffer import LogBuffer, ScrollNotifier
from cmdpanel.core.logs.ingest import LogIngestor
from cmdpanel.core.logs.models import LogRecord


def record(message: str, level: str = "INFO") -> LogRecord:
    return LogRecord(
        time_stamp="2024-01-15 14:00:00", level=level, target="bot", message=message
    )


def payload(message: str) -> dict:
    return {
        "time_stamp": "2024-01-15 14:00:00",
        "level": "INFO",
        "target": "bot",
        "message": message,
    }


class TestLogBuffer:
    """Tests for LogBuffer."""

    def test_keeps_most_recent_thousand(self):
        """Test 1200 appends keep records 200..1199 in order."""
        buffer = LogBuffer()

        for i in range(1200):
            buffer.append(record(str(i)))

        assert len(buffer) == 1000
        assert buffer.records[0].message == "200"
        assert buffer.records[-1].message == "1199"
        assert buffer.total == 1200

    def test_rejects_empty_message(self):
        """Test records without a message are never stored."""
        buffer = LogBuffer()

        assert buffer.append(record("")) is False

        assert len(buffer) == 0
        assert buffer.total == 0

    def test_invalid_limit(self):
        """Test the limit must be positive."""
        with pytest.raises(ValueError):
            LogBuffer(limit=0)

    def test_tail(self):
        """Test tail() returns the newest records in append order."""
        buffer = LogBuffer(limit=5)
        for i in range(8):
            buffer.append(record(str(i)))

        assert [r.message for r in buffer.tail(2)] == ["6", "7"]
        assert [r.message for r in buffer.tail(50)] == ["3", "4", "5", "6", "7"]
        assert buffer.tail(0) == []

    def test_since(self):
        """Test since() returns only records appended after a given total."""
        buffer = LogBuffer(limit=3)
        buffer.append(record("a"))
        seen = buffer.total

        for message in ("b", "c", "d", "e"):
            buffer.append(record(message))

        # "b" was evicted before it could be read
        assert [r.message for r in buffer.since(seen)] == ["c", "d", "e"]
        assert buffer.since(buffer.total) == []

    def test_records_is_snapshot(self):
        """Test records is a read-only copy."""
        buffer = LogBuffer()
        buffer.append(record("a"))

        snapshot = buffer.records
        buffer.append(record("b"))

        assert len(snapshot) == 1
        assert [r.message for r in buffer] == ["a", "b"]


class TestScrollNotifier:
    """Tests for scroll-to-latest coalescing."""

    @pytest.mark.asyncio
    async def test_burst_coalesced(self):
        """Test a burst of appends triggers one scroll."""
        calls = []
        buffer = LogBuffer(notifier=ScrollNotifier(lambda: calls.append(1), delay=0.01))

        for i in range(50):
            buffer.append(record(str(i)))
        assert buffer.notifier.pending is True

        await asyncio.sleep(0.05)

        assert calls == [1]
        assert buffer.notifier.pending is False

    @pytest.mark.asyncio
    async def test_later_append_rearms(self):
        """Test an append after the timer fired schedules another scroll."""
        notifier = ScrollNotifier(lambda: None, delay=0.01)
        buffer = LogBuffer(notifier=notifier)

        buffer.append(record("a"))
        await asyncio.sleep(0.03)
        buffer.append(record("b"))
        await asyncio.sleep(0.03)

        assert notifier.fired == 2

    @pytest.mark.asyncio
    async def test_cancel(self):
        """Test a cancelled timer never fires."""
        notifier = ScrollNotifier(lambda: None, delay=0.01)
        notifier.schedule()

        notifier.cancel()
        await asyncio.sleep(0.03)

        assert notifier.fired == 0

    def test_no_callback_no_timer(self):
        """Test nothing is scheduled without a consumer."""
        notifier = ScrollNotifier()

        notifier.schedule()

        assert notifier.pending is False
        assert notifier.fired == 0

    def test_outside_event_loop_fires_immediately(self):
        """Test scheduling without a running loop calls back at once."""
        calls = []
        notifier = ScrollNotifier(lambda: calls.append(1))

        notifier.schedule()

        assert calls == [1]


class TestLogIngestor:
    """Tests for the single-consumer ingestion queue."""

    @pytest.mark.asyncio
    async def test_records_applied_in_order(self):
        """Test queued payloads reach the buffer in receipt order."""
        buffer = LogBuffer()
        ingestor = LogIngestor(buffer)
        await ingestor.start()

        for message in ("one", "two", "three"):
            assert ingestor.offer(payload(message)) is True
        await ingestor.join()

        assert [r.message for r in buffer] == ["one", "two", "three"]
        await ingestor.shutdown()

    @pytest.mark.asyncio
    async def test_malformed_payloads_dropped(self):
        """Test payloads missing fields are dropped without raising."""
        buffer = LogBuffer()
        ingestor = LogIngestor(buffer)
        await ingestor.start()

        assert ingestor.offer({"message": "no level"}) is False
        assert ingestor.offer("plain text") is False
        assert ingestor.offer(None) is False
        assert ingestor.offer(record("ok")) is True
        await ingestor.join()

        assert [r.message for r in buffer] == ["ok"]
        await ingestor.shutdown()

    @pytest.mark.asyncio
    async def test_extra_fields_ignored(self):
        """Test unknown payload fields do not reject the record."""
        ingestor = LogIngestor(LogBuffer())

        assert ingestor.offer({**payload("x"), "thread": "main"}) is True

    @pytest.mark.asyncio
    async def test_full_queue_drops_oldest(self):
        """Test overflow evicts the oldest queued record."""
        buffer = LogBuffer()
        ingestor = LogIngestor(buffer, maxsize=2)

        for message in ("1", "2", "3"):
            ingestor.offer(payload(message))
        assert ingestor.dropped == 1

        await ingestor.start()
        await ingestor.join()

        assert [r.message for r in buffer] == ["2", "3"]
        await ingestor.shutdown()

    @pytest.mark.asyncio
    async def test_start_and_shutdown(self):
        """Test the consumer task lifecycle."""
        notifier = ScrollNotifier(lambda: None, delay=10)
        ingestor = LogIngestor(LogBuffer(notifier=notifier))

        await ingestor.start()
        assert ingestor.running is True
        ingestor.offer(payload("x"))
        await ingestor.join()
        assert notifier.pending is True

        await ingestor.shutdown()

        assert ingestor.running is False
        assert notifier.pending is False
