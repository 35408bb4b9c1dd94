# cmdpanel/core/host/calls.py
"""Retry and timeout helpers for host round-trips."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import tenacity

from cmdpanel.core.host.errors import ErrorKind, HostCallError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_PERSIST_ATTEMPTS = 3


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, HostCallError) and exc.transient


@tenacity.retry(
    stop=tenacity.stop_after_attempt(MAX_PERSIST_ATTEMPTS),
    wait=tenacity.wait_exponential(multiplier=0.2, min=0.2, max=2),
    retry=tenacity.retry_if_exception(_is_transient),
    before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def persist(call: Callable[..., Awaitable[T]], *args: Any) -> T:
    """Issue an idempotent write to the host, retrying transient failures.

    Retries up to 3 times with exponential backoff (0.2-2 seconds).
    Structural failures and the last transient failure are re-raised.

    Args:
        call: Bound host method (e.g. host.save_config).
        *args: Arguments for the call.

    Returns:
        Whatever the host call returns.
    """
    return await call(*args)


async def with_timeout(call: str, awaitable: Awaitable[T], timeout: float | None) -> T:
    """Await a host call, optionally bounded by a timeout.

    Args:
        call: Host call name used in the raised error.
        awaitable: The pending host call.
        timeout: Seconds to wait, or None to wait forever.

    Returns:
        Result of the awaitable.

    Raises:
        HostCallError: Transient error if the timeout expires.
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except (TimeoutError, asyncio.TimeoutError) as e:
        raise HostCallError(
            call, f"no reply within {timeout}s", ErrorKind.TRANSIENT
        ) from e
