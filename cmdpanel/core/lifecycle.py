# cmdpanel/core/lifecycle.py
"""Ordered startup and shutdown of the panel's long-lived pieces.

The host client, the panel session (with its log ingestor) and the host
event stream each own a connection or a background task. They are brought
up in registration order and torn down in reverse, so the event stream
stops feeding the session before the session and the client go away.

Example:
    >>> from cmdpanel.core.lifecycle import get_lifecycle_manager
    >>>
    >>> lm = get_lifecycle_manager()
    >>> lm.register("host_client", host)
    >>> lm.register("session", session)
    >>> lm.register("event_stream", stream)
    >>> await lm.startup()
    >>> # ... panel serves requests ...
    >>> await lm.shutdown()
"""

import inspect
import logging
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class LifecycleComponent(Protocol):
    """Anything the panel must close on exit. start() is optional."""

    async def shutdown(self) -> None: ...


async def _invoke(component: Any, method: str) -> None:
    # start()/shutdown() may be plain or coroutine methods
    result = getattr(component, method)()
    if inspect.isawaitable(result):
        await result


class LifecycleManager:
    """Brings registered components up in order and down in reverse."""

    def __init__(self) -> None:
        self._registered: list[tuple[str, LifecycleComponent]] = []
        self._running: list[tuple[str, LifecycleComponent]] = []

    def register(self, name: str, component: LifecycleComponent) -> None:
        self._registered.append((name, component))
        logger.debug("Lifecycle component registered: %s", name)

    async def startup(self) -> None:
        """Start every registered component.

        If one fails to start, the components already running are shut
        down again and the error is re-raised.
        """
        if self._running:
            logger.debug("Panel components already running")
            return

        for name, component in self._registered:
            if hasattr(component, "start"):
                logger.info("Starting %s", name)
                try:
                    await _invoke(component, "start")
                except Exception:
                    logger.exception("Failed to start %s, rolling back", name)
                    await self.shutdown()
                    raise
            self._running.append((name, component))

        logger.info("Panel components running (%d)", len(self._running))

    async def shutdown(self) -> None:
        """Shut down running components, newest first.

        Errors are logged and do not keep the rest from shutting down.
        """
        while self._running:
            name, component = self._running.pop()
            logger.info("Stopping %s", name)
            try:
                await _invoke(component, "shutdown")
            except Exception as e:
                logger.error("Error shutting down %s: %s", name, e)

        logger.info("Panel components stopped")

    @property
    def is_started(self) -> bool:
        return bool(self._running)

    @property
    def component_count(self) -> int:
        return len(self._registered)


_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Return the process-wide lifecycle manager, creating it on first use."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


def reset_lifecycle_manager() -> None:
    """Drop the process-wide manager (tests)."""
    global _lifecycle_manager
    _lifecycle_manager = None
