# cmdpanel/core/scripts/models.py
"""Script data model."""

from pydantic import BaseModel

DEFAULT_SCRIPT_NAME = "New Script"


class Script(BaseModel):
    """A user-authored script the host runs when its trigger matches.

    Attributes:
        id: Identifier assigned by the host, None until created there.
        name: Display name.
        code: Script source. None until fetched from the host.
        trigger: Chat trigger expression that runs the script.
        enabled: Whether the host should run the script.
    """

    id: int | None = None
    name: str = DEFAULT_SCRIPT_NAME
    code: str | None = None
    trigger: str = ""
    enabled: bool = True
