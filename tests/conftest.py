# tests/conftest.py
"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- An in-memory host process that records every call
- Session components wired to that host
- Lifecycle singleton reset
"""

import asyncio
from collections.abc import Generator

import pytest

from cmdpanel.core.commands.models import CommandInfo
from cmdpanel.core.config.models import Configuration
from cmdpanel.core.config.store import ConfigStore
from cmdpanel.core.host.errors import ErrorKind, HostCallError
from cmdpanel.core.scripts.models import Script


class FakeHost:
    """In-memory host process.

    Every call is recorded in ``calls``. Outcomes can be scripted per call
    with fail() and a call can be held in flight with hold().
    """

    def __init__(self) -> None:
        self.config = Configuration(file_path="/games/console.log", owner="admin")
        self.commands = [
            CommandInfo(id="kill", name="Kill", description="Kill a player"),
            CommandInfo(id="heal", name="Heal", description="Heal a player"),
            CommandInfo(id="eval", name="Eval", description="Evaluate math"),
        ]
        self.disabled: set[str] = set()
        self.running = False
        self.started_with: Configuration | None = None
        self.scripts: dict[int, Script] = {}
        self.code: dict[int, str] = {}
        self.calls: list[tuple[str, tuple]] = []
        self._outcomes: dict[str, list[HostCallError | None]] = {}
        self._gates: dict[str, asyncio.Event] = {}
        self._next_id = 1

    # -- test controls -------------------------------------------------

    def fail(
        self,
        call: str,
        error: HostCallError | None = None,
        times: int = 1,
        after: int = 0,
    ) -> None:
        """Make the next `times` calls fail, after letting `after` succeed."""
        error = error or HostCallError(call, "boom", ErrorKind.STRUCTURAL)
        self._outcomes.setdefault(call, []).extend([None] * after + [error] * times)

    def hold(self, call: str) -> asyncio.Event:
        """Keep calls in flight until the returned event is set."""
        gate = asyncio.Event()
        self._gates[call] = gate
        return gate

    def count(self, call: str) -> int:
        return sum(1 for name, _ in self.calls if name == call)

    def seed_script(self, name: str, code: str = "", trigger: str = "") -> Script:
        script_id = self._next_id
        self._next_id += 1
        self.scripts[script_id] = Script(id=script_id, name=name, trigger=trigger)
        self.code[script_id] = code
        return self.scripts[script_id].model_copy()

    async def _enter(self, call: str, *args) -> None:
        self.calls.append((call, args))
        # Every round-trip yields to the loop like a real one
        await asyncio.sleep(0)
        gate = self._gates.get(call)
        if gate is not None:
            await gate.wait()
        outcomes = self._outcomes.get(call)
        if outcomes:
            error = outcomes.pop(0)
            if error is not None:
                raise error

    def _require(self, call: str, script_id: int | None) -> int:
        if script_id not in self.scripts:
            raise HostCallError(call, "no such script", ErrorKind.STRUCTURAL, 404)
        return script_id

    # -- HostProtocol ----------------------------------------------------

    async def get_config(self) -> Configuration:
        await self._enter("get_config")
        return self.config.model_copy(deep=True)

    async def save_config(self, config: Configuration) -> None:
        await self._enter("save_config", config.model_copy(deep=True))
        self.config = config.model_copy(deep=True)

    async def get_commands(self) -> list[CommandInfo]:
        await self._enter("get_commands")
        return list(self.commands)

    async def update_disabled_commands(self, disabled: set[str]) -> None:
        await self._enter("update_disabled_commands", set(disabled))
        self.disabled = set(disabled)

    async def is_running(self) -> bool:
        await self._enter("is_running")
        return self.running

    async def start(self, config: Configuration) -> None:
        await self._enter("start", config)
        self.running = True
        self.started_with = config

    async def stop(self) -> None:
        await self._enter("stop")
        self.running = False

    async def get_scripts(self) -> list[Script]:
        await self._enter("get_scripts")
        return [script.model_copy() for script in self.scripts.values()]

    async def add_script(self, name: str) -> Script:
        await self._enter("add_script", name)
        created = self.seed_script(name)
        created.code = ""
        return created

    async def update_script(self, script: Script) -> None:
        await self._enter("update_script", script.model_copy())
        script_id = self._require("update_script", script.id)
        self.scripts[script_id] = script.model_copy(update={"code": None})
        self.code[script_id] = script.code or ""

    async def save_code(self, script_id: int, code: str) -> None:
        await self._enter("save_code", script_id, code)
        self.code[self._require("save_code", script_id)] = code

    async def get_code(self, script_id: int) -> str:
        await self._enter("get_code", script_id)
        return self.code[self._require("get_code", script_id)]

    async def delete_script(self, script_id: int) -> None:
        await self._enter("delete_script", script_id)
        self._require("delete_script", script_id)
        del self.scripts[script_id]
        del self.code[script_id]


@pytest.fixture
def host() -> FakeHost:
    """Fresh in-memory host."""
    return FakeHost()


@pytest.fixture
def errors() -> list[HostCallError]:
    """Collects errors passed to component error hooks."""
    return []


@pytest.fixture
def store(host: FakeHost, errors: list[HostCallError]) -> ConfigStore:
    """ConfigStore bound to the fake host, reporting into `errors`."""
    return ConfigStore(host, on_error=errors.append)


@pytest.fixture
def reset_lifecycle_singleton() -> Generator[None, None, None]:
    """Reset the lifecycle manager singleton before and after test."""
    from cmdpanel.core.lifecycle import reset_lifecycle_manager

    reset_lifecycle_manager()
    yield
    reset_lifecycle_manager()
