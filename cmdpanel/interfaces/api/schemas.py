# cmdpanel/interfaces/api/schemas.py
"""Pydantic models for FastAPI request/response validation.

Defines request and response schemas for the panel API endpoints.
"""

from pydantic import BaseModel, Field

from cmdpanel.core.config.models import GameParser


class StatusResponse(BaseModel):
    """Response body for process status endpoints.

    Attributes:
        status: Process status (stopped, starting, running, stopping).
        label: Human readable status.
        button_label: Label for the start/stop control.
        ready: Whether the initial status has been resolved.
        can_toggle: Whether a toggle would be accepted now.
    """

    status: str = Field(..., description="Process status")
    label: str = Field(..., description="Human readable status")
    button_label: str = Field(..., description="Start/stop control label")
    ready: bool = Field(..., description="Initial status resolved from host")
    can_toggle: bool = Field(..., description="Toggle currently allowed")


class ToggleResponse(BaseModel):
    """Response body for POST /process/toggle."""

    accepted: bool = Field(..., description="False if ignored (in flight)")
    process: StatusResponse


class ConfigUpdate(BaseModel):
    """Request body for PUT /config. Only provided fields are changed.

    The disabled command set is edited through /commands instead.
    """

    file_path: str | None = None
    command_timeout: int | None = Field(None, ge=0)
    owner: str | None = None
    parser: GameParser | None = None
    openai_api_key: str | None = None
    response_direction: str | None = None


class CommandResponse(BaseModel):
    """A bot command with its enabled flag."""

    id: str = Field(..., description="Command identifier")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="What the command does")
    enabled: bool = Field(..., description="Derived from the disabled set")


class CommandToggle(BaseModel):
    """Request body for PUT /commands/{command_id}."""

    enabled: bool = Field(..., description="Desired state")


class CommandToggleResponse(BaseModel):
    """Response body for PUT /commands/{command_id}."""

    changed: bool = Field(..., description="Whether membership changed")
    command: CommandResponse


class ScriptResponse(BaseModel):
    """Script metadata (code is served with the active script)."""

    id: int | None = Field(None, description="Host-assigned identifier")
    name: str = Field(..., description="Display name")
    trigger: str = Field("", description="Trigger expression")
    enabled: bool = Field(True, description="Whether the host runs it")


class ActiveScriptResponse(BaseModel):
    """Response body for active script endpoints.

    Attributes:
        script: The active script, None if nothing is selected.
        buffer: Current edit buffer content.
        dirty: Whether the buffer has unsaved edits.
    """

    script: ScriptResponse | None = None
    buffer: str = ""
    dirty: bool = False


class BufferUpdate(BaseModel):
    """Request body for PUT /scripts/active/buffer."""

    code: str = Field(..., description="New buffer content")


class ScriptDetailsUpdate(BaseModel):
    """Request body for PATCH /scripts/active."""

    name: str | None = None
    trigger: str | None = None
    enabled: bool | None = None


class HostErrorResponse(BaseModel):
    """A failed host call reported by the session."""

    call: str
    message: str
    kind: str = Field(..., description="transient or structural")
    status_code: int | None = None
