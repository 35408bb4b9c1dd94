"""Host log ingestion into a bounded display buffer."""

from cmdpanel.core.logs.buffer import LogBuffer, ScrollNotifier
from cmdpanel.core.logs.ingest import LogIngestor
from cmdpanel.core.logs.models import LogRecord

__all__ = ["LogBuffer", "LogIngestor", "LogRecord", "ScrollNotifier"]
