"""Lifecycle tracking of the host's bot process."""

from cmdpanel.core.process.controller import ProcessController
from cmdpanel.core.process.models import TRANSITIONS, ProcessStatus, can_transition

__all__ = ["ProcessController", "ProcessStatus", "TRANSITIONS", "can_transition"]
