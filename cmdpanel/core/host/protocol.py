# cmdpanel/core/host/protocol.py
"""Protocol for the host process request/response boundary.

Decouples the session components from the transport used to reach the
host. HttpHostClient is the production implementation; tests use an
in-memory fake.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cmdpanel.core.commands.models import CommandInfo
    from cmdpanel.core.config.models import Configuration
    from cmdpanel.core.scripts.models import Script


class HostProtocol(Protocol):
    """Asynchronous calls understood by the host process.

    Every method may raise HostCallError.
    """

    async def get_config(self) -> Configuration: ...

    async def save_config(self, config: Configuration) -> None: ...

    async def get_commands(self) -> list[CommandInfo]: ...

    async def update_disabled_commands(self, disabled: set[str]) -> None: ...

    async def is_running(self) -> bool: ...

    async def start(self, config: Configuration) -> None: ...

    async def stop(self) -> None: ...

    async def get_scripts(self) -> list[Script]: ...

    async def add_script(self, name: str) -> Script: ...

    async def update_script(self, script: Script) -> None: ...

    async def save_code(self, script_id: int, code: str) -> None: ...

    async def get_code(self, script_id: int) -> str: ...

    async def delete_script(self, script_id: int) -> None: ...
