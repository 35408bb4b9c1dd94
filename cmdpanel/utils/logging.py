# cmdpanel/utils/logging.py
"""JSON log lines tagged with the panel session.

Every line written while a PanelSession is active carries its session id,
so host round-trips of one panel can be followed in a shared log. Records
logged with ``extra={"host_call": ...}`` also carry the host call name.
"""

import json
import logging
from contextvars import ContextVar
from typing import Any

session_id_var: ContextVar[str] = ContextVar("session_id", default="")

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def set_session_id(session_id: str) -> None:
    """Tag log lines of the current context with a panel session id."""
    session_id_var.set(session_id)


def get_session_id() -> str:
    return session_id_var.get()


class StructuredFormatter(logging.Formatter):
    """Formats each record as one JSON object per line.

    Keys: timestamp, level, logger, message, plus session_id, host_call
    and exception when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        session_id = get_session_id()
        if session_id:
            entry["session_id"] = session_id

        host_call = getattr(record, "host_call", None)
        if host_call:
            entry["host_call"] = host_call

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False)


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Send root logging to stderr as JSON lines.

    Calling it again replaces the JSON handler instead of adding another.
    HTTP client request logs are raised to WARNING.

    Args:
        level: Root logging level.
    """
    for existing in list(logging.root.handlers):
        if isinstance(existing.formatter, StructuredFormatter):
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
