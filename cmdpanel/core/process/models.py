# cmdpanel/core/process/models.py
"""Process lifecycle states and the transitions allowed between them."""

from enum import Enum


class ProcessStatus(str, Enum):
    """Status of the host's bot process as seen by the panel.

    The host only reports RUNNING or STOPPED. STARTING and STOPPING are
    local, optimistic states held while a start/stop request is in flight.
    """

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"

    @property
    def in_flight(self) -> bool:
        return self in (ProcessStatus.STARTING, ProcessStatus.STOPPING)


# Settled states may be replaced by a host refresh; in-flight states resolve
# to either side so a failed request never leaves the status stuck.
TRANSITIONS: dict[ProcessStatus, frozenset[ProcessStatus]] = {
    ProcessStatus.STOPPED: frozenset(
        {ProcessStatus.STOPPED, ProcessStatus.RUNNING, ProcessStatus.STARTING}
    ),
    ProcessStatus.RUNNING: frozenset(
        {ProcessStatus.RUNNING, ProcessStatus.STOPPED, ProcessStatus.STOPPING}
    ),
    ProcessStatus.STARTING: frozenset({ProcessStatus.RUNNING, ProcessStatus.STOPPED}),
    ProcessStatus.STOPPING: frozenset({ProcessStatus.STOPPED, ProcessStatus.RUNNING}),
}

BUTTON_LABELS: dict[ProcessStatus, str] = {
    ProcessStatus.STOPPED: "Start",
    ProcessStatus.STARTING: "Starting",
    ProcessStatus.RUNNING: "Stop",
    ProcessStatus.STOPPING: "Stopping",
}

STATUS_LABELS: dict[ProcessStatus, str] = {
    ProcessStatus.STOPPED: "Stopped",
    ProcessStatus.STARTING: "Starting",
    ProcessStatus.RUNNING: "Running",
    ProcessStatus.STOPPING: "Stopping",
}


def can_transition(current: ProcessStatus, target: ProcessStatus) -> bool:
    return target in TRANSITIONS[current]
