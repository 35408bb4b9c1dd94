"""User scripts run by the host on trigger events."""

from cmdpanel.core.scripts.models import DEFAULT_SCRIPT_NAME, Script
from cmdpanel.core.scripts.session import ScriptSession

__all__ = ["DEFAULT_SCRIPT_NAME", "Script", "ScriptSession"]
