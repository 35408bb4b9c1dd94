# cmdpanel/core/host/__init__.py
"""Host process boundary.

This module provides:
- HostProtocol: Request/response calls understood by the host
- HttpHostClient: JSON-over-HTTP implementation of HostProtocol
- LogEventStream: Push channel delivering host log lines
- HostCallError / ErrorKind: Failure taxonomy for host calls
- persist / with_timeout: Retry and timeout helpers
"""

from cmdpanel.core.host.calls import persist, with_timeout
from cmdpanel.core.host.client import HttpHostClient, create_host_client
from cmdpanel.core.host.errors import ErrorKind, HostCallError, InvalidTransitionError
from cmdpanel.core.host.events import LogEventStream
from cmdpanel.core.host.protocol import HostProtocol

__all__ = [
    "ErrorKind",
    "HostCallError",
    "HostProtocol",
    "HttpHostClient",
    "InvalidTransitionError",
    "LogEventStream",
    "create_host_client",
    "persist",
    "with_timeout",
]
