# cmdpanel/core/process/controller.py
"""Start/stop state machine for the host's bot process.

State machine:
    STOPPED --toggle--> STARTING --(host ack)--> RUNNING
    RUNNING --toggle--> STOPPING --(host ack)--> STOPPED

While STARTING or STOPPING, toggle() is ignored. A failed or timed-out
start/stop is resolved by asking the host for its real state, falling back
to the pre-transition status, so the controller never stays in flight.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from cmdpanel.core.host.calls import with_timeout
from cmdpanel.core.host.errors import HostCallError, InvalidTransitionError
from cmdpanel.core.process.models import (
    BUTTON_LABELS,
    STATUS_LABELS,
    ProcessStatus,
    can_transition,
)

if TYPE_CHECKING:
    from cmdpanel.core.config.store import ConfigStore, ErrorHook
    from cmdpanel.core.host.protocol import HostProtocol

logger = logging.getLogger(__name__)

DEFAULT_TRANSITION_TIMEOUT = 30.0


class ProcessController:
    """Tracks and drives the lifecycle of the host's bot process."""

    def __init__(
        self,
        host: HostProtocol,
        store: ConfigStore,
        transition_timeout: float | None = DEFAULT_TRANSITION_TIMEOUT,
        on_error: ErrorHook | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            host: Host boundary.
            store: Configuration sent with every start request.
            transition_timeout: Seconds to wait for a start/stop reply,
                None to wait forever.
            on_error: Visibility hook for failed host calls.
        """
        self._host = host
        self._store = store
        self._transition_timeout = transition_timeout
        self._on_error = on_error
        self._status = ProcessStatus.STOPPED
        self._ready = False
        self._toggling = False

    @property
    def status(self) -> ProcessStatus:
        return self._status

    @property
    def ready(self) -> bool:
        """True once the initial status has been resolved from the host."""
        return self._ready

    @property
    def in_flight(self) -> bool:
        return self._toggling or self._status.in_flight

    @property
    def can_toggle(self) -> bool:
        return self._ready and not self.in_flight

    @property
    def button_label(self) -> str:
        return BUTTON_LABELS[self._status]

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self._status]

    def _set_status(self, target: ProcessStatus) -> None:
        if not can_transition(self._status, target):
            raise InvalidTransitionError(
                f"Cannot move from {self._status.value} to {target.value}"
            )
        if target is self._status:
            return
        logger.info("Process status: %s -> %s", self._status.value, target.value)
        self._status = target

    def _report(self, error: HostCallError) -> None:
        logger.error(
            "Process round-trip failed: %s", error, extra={"host_call": error.call}
        )
        if self._on_error is not None:
            self._on_error(error)

    async def _query(self) -> ProcessStatus:
        running = await self._host.is_running()
        return ProcessStatus.RUNNING if running else ProcessStatus.STOPPED

    async def refresh_status(self) -> ProcessStatus:
        """Ask the host whether the process is running.

        The answer replaces the local status unless a transition is in
        flight, in which case the transition keeps ownership of the status.

        Returns:
            The local status after the refresh.
        """
        try:
            actual = await self._query()
        except HostCallError as e:
            self._report(e)
            return self._status

        self._ready = True
        if self.in_flight:
            logger.debug("Status refresh during transition ignored: %s", actual.value)
            return self._status
        self._set_status(actual)
        return self._status

    async def toggle(self) -> bool:
        """Start the process if stopped, stop it if running.

        Returns:
            False if ignored because a transition was already in flight
            (or the host could not be queried), True otherwise.
        """
        if self.in_flight:
            logger.debug("Toggle ignored: transition in flight")
            return False

        # Taken before the first await so a second call is rejected
        self._toggling = True
        try:
            try:
                actual = await self._query()
            except HostCallError as e:
                self._report(e)
                return False

            self._ready = True
            self._set_status(actual)
            if actual is ProcessStatus.RUNNING:
                await self._transition(
                    ProcessStatus.STOPPING, ProcessStatus.STOPPED, "stop", self._host.stop
                )
            else:
                config = self._store.config.model_copy(deep=True)
                await self._transition(
                    ProcessStatus.STARTING,
                    ProcessStatus.RUNNING,
                    "start",
                    lambda: self._host.start(config),
                )
            return True
        finally:
            self._toggling = False

    async def _transition(
        self,
        pending: ProcessStatus,
        target: ProcessStatus,
        call: str,
        send: Callable[[], Awaitable[None]],
    ) -> None:
        previous = self._status
        self._set_status(pending)
        try:
            await with_timeout(call, send(), self._transition_timeout)
        except HostCallError as e:
            self._report(e)
            await self._recover(previous)
            return
        except Exception:
            logger.exception("Process %s failed unexpectedly", call)
            await self._recover(previous)
            raise
        self._set_status(target)

    async def _recover(self, previous: ProcessStatus) -> None:
        try:
            actual = await self._query()
        except HostCallError as e:
            self._report(e)
            logger.warning("Reverting process status to %s", previous.value)
            actual = previous
        except Exception:
            logger.exception("Status query failed, reverting to %s", previous.value)
            actual = previous
        self._set_status(actual)
