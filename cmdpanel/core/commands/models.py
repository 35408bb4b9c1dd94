# cmdpanel/core/commands/models.py
"""Command catalog models.

The host supplies CommandInfo entries. Whether a command is enabled is
never stored on them: CommandView pairs an entry with a flag derived from
the configuration's disabled set by project_commands().
"""

from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class CommandInfo(BaseModel):
    """A bot command known to the host.

    Attributes:
        id: Stable identifier, joined with Configuration.disabled_commands.
        name: Display name.
        description: What the command does.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    description: str = ""


@dataclass(frozen=True)
class CommandView:
    """A command as presented to the user, with its derived enabled flag."""

    id: str
    name: str
    description: str
    enabled: bool

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "enabled": self.enabled,
        }


def project_commands(
    catalog: Iterable[CommandInfo], disabled: set[str]
) -> list[CommandView]:
    """Derive display views from the catalog and the disabled set.

    Args:
        catalog: Commands in host order.
        disabled: Identifiers currently disabled.

    Returns:
        One CommandView per catalog entry, in catalog order, with
        enabled == (id not in disabled).
    """
    return [
        CommandView(
            id=command.id,
            name=command.name,
            description=command.description,
            enabled=command.id not in disabled,
        )
        for command in catalog
    ]
