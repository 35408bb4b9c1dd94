# cmdpanel/core/commands/__init__.py
"""Bot command catalog.

This module provides:
- CommandInfo: Command entry supplied by the host
- CommandView: Command with its derived enabled flag
- project_commands: Pure projection from catalog and disabled set
- CommandCatalog: Catalog holder that persists enablement changes
"""

from cmdpanel.core.commands.catalog import CommandCatalog
from cmdpanel.core.commands.models import CommandInfo, CommandView, project_commands

__all__ = [
    "CommandCatalog",
    "CommandInfo",
    "CommandView",
    "project_commands",
]
