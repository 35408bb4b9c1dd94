# cmdpanel/core/host/errors.py
"""Error taxonomy for the host request/response boundary.

Every host call either returns its result or raises HostCallError. The
error carries a kind so callers can tell a failure worth retrying
(the same call may succeed if re-invoked) from a structural one (the
request itself cannot succeed, e.g. deleting an already-deleted script).
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failed host call."""

    TRANSIENT = "transient"
    STRUCTURAL = "structural"


class HostCallError(Exception):
    """A host round-trip failed.

    Attributes:
        call: Name of the host call (e.g. "save_config").
        message: Human readable failure description.
        kind: Whether re-invoking the same call may succeed.
        status_code: HTTP status of the response, if one was received.
    """

    def __init__(
        self,
        call: str,
        message: str,
        kind: ErrorKind = ErrorKind.TRANSIENT,
        status_code: int | None = None,
    ) -> None:
        super().__init__(f"{call} failed ({kind.value}): {message}")
        self.call = call
        self.message = message
        self.kind = kind
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    def to_dict(self) -> dict:
        """Convert to dictionary for display.

        Returns:
            Dictionary with call, message, kind and status_code.
        """
        return {
            "call": self.call,
            "message": self.message,
            "kind": self.kind.value,
            "status_code": self.status_code,
        }


class InvalidTransitionError(Exception):
    """A process status change not allowed by the transition table."""
