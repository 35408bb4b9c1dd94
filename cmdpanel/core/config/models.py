# cmdpanel/core/config/models.py
"""Bot configuration record shared between the panel and the host."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class GameParser(str, Enum):
    """Game log formats the host knows how to parse.

    Values are the wire names used by the host.
    """

    COUNTER_STRIKE_2 = "Counter Strike 2"
    COUNTER_STRIKE_SOURCE = "Counter Strike Source"
    MINECRAFT = "Minecraft"


class Configuration(BaseModel):
    """Configuration the host process runs with.

    Attributes:
        file_path: Game console log file the host tails.
        command_timeout: Per-command cooldown on the host, in seconds.
        owner: Player name allowed to run owner-only commands.
        parser: Game log format.
        openai_api_key: Key for AI-backed commands, may be empty.
        disabled_commands: Identifiers of commands the host must ignore.
        response_direction: Where the bot writes its replies.
    """

    model_config = ConfigDict(validate_assignment=True)

    file_path: str = ""
    command_timeout: int = Field(default=10, ge=0)
    owner: str = ""
    parser: GameParser = GameParser.COUNTER_STRIKE_2
    openai_api_key: str = ""
    disabled_commands: set[str] = Field(default_factory=set)
    response_direction: str = ""

    @field_validator("disabled_commands", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        # Older host configs omit or null the field
        return set() if value is None else value

    @field_serializer("disabled_commands")
    def _serialize_disabled(self, value: set[str]) -> list[str]:
        return sorted(value)
