"""Utility functions for the control panel."""

from cmdpanel.utils.logging import (
    configure_structured_logging,
    get_session_id,
    set_session_id,
)
from cmdpanel.utils.observability import setup_logfire

__all__ = [
    "setup_logfire",
    "set_session_id",
    "get_session_id",
    "configure_structured_logging",
]
