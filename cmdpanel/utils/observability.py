"""Optional tracing of panel requests and host round-trips with Logfire."""

import logging
from typing import TYPE_CHECKING

from cmdpanel.config import settings

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

SERVICE_NAME = "cmdpanel"


def setup_logfire(app: "FastAPI | None" = None) -> bool:
    """Trace host calls (httpx) and, if given, the panel API with Logfire.

    Does nothing unless LOGFIRE_TOKEN is set. Must run before the host
    client is created for its requests to be traced.

    Args:
        app: Panel API application to instrument as well.

    Returns:
        True if Logfire was configured.
    """
    if not settings.logfire_token:
        return False

    try:
        import logfire

        logfire.configure(token=settings.logfire_token, service_name=SERVICE_NAME)
        logfire.instrument_httpx(capture_all=True)
        if app is not None:
            logfire.instrument_fastapi(app)
    except Exception as e:
        # Tracing is optional; the panel keeps running without it
        logger.warning("Logfire setup failed: %s", e)
        return False

    logger.info("Logfire tracing enabled")
    return True
