# cmdpanel/core/logs/models.py
"""Log record pushed by the host for every emitted line."""

from pydantic import BaseModel, ConfigDict


class LogRecord(BaseModel):
    """One host log line.

    Attributes:
        time_stamp: Timestamp formatted by the host.
        level: Log level name (INFO, WARN, ...).
        target: Module or source that emitted the line.
        message: Log text. Empty messages are never displayed.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    time_stamp: str
    level: str
    target: str
    message: str
