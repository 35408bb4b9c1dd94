# cmdpanel/core/commands/catalog.py
"""Command catalog reconciled with the configuration's disabled set.

The catalog itself is immutable for the session. Enabled flags are
projected from it and ConfigStore.disabled_commands on every read, so the
flag shown for a command can never disagree with the disabled set.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from cmdpanel.core.commands.models import CommandInfo, CommandView, project_commands
from cmdpanel.core.host.calls import persist
from cmdpanel.core.host.errors import HostCallError

if TYPE_CHECKING:
    from cmdpanel.core.config.store import ConfigStore, ErrorHook
    from cmdpanel.core.host.protocol import HostProtocol

logger = logging.getLogger(__name__)


class CommandCatalog:
    """Known bot commands and their enabled/disabled status.

    Example:
        >>> catalog = CommandCatalog(host, config_store)
        >>> catalog.load([CommandInfo(id="kill"), CommandInfo(id="heal")], {"kill"})
        >>> [c.enabled for c in catalog.commands]
        [False, True]
        >>> await catalog.set_enabled("heal", False)
        True
    """

    def __init__(
        self,
        host: HostProtocol,
        store: ConfigStore,
        on_error: ErrorHook | None = None,
    ) -> None:
        self._host = host
        self._store = store
        self._on_error = on_error
        self._catalog: tuple[CommandInfo, ...] = ()
        self._write_lock = asyncio.Lock()

    @property
    def commands(self) -> list[CommandView]:
        """Catalog entries with their derived enabled flag, in host order."""
        return project_commands(self._catalog, self._store.disabled_commands)

    @property
    def catalog(self) -> tuple[CommandInfo, ...]:
        return self._catalog

    @property
    def known_ids(self) -> set[str]:
        return {command.id for command in self._catalog}

    def get(self, command_id: str) -> CommandView | None:
        for view in self.commands:
            if view.id == command_id:
                return view
        return None

    def load(self, catalog: Iterable[CommandInfo], disabled: Iterable[str]) -> None:
        """Install a catalog and disabled set.

        Disabled identifiers the catalog does not know are dropped so the
        disabled set stays a subset of the catalog.

        Args:
            catalog: Commands supplied by the host.
            disabled: Identifiers to treat as disabled.
        """
        self._catalog = tuple(catalog)
        known = self.known_ids
        disabled = set(disabled)
        unknown = disabled - known
        if unknown:
            logger.warning(
                "Ignoring unknown disabled commands: %s", ", ".join(sorted(unknown))
            )
        self._store.disabled_commands = disabled & known
        logger.info(
            "Command catalog loaded: %d commands, %d disabled",
            len(self._catalog),
            len(self._store.disabled_commands),
        )

    async def refresh(self) -> bool:
        """Fetch the catalog from the host and re-apply the disabled set.

        Returns:
            True on success, False if the host call failed.
        """
        try:
            catalog = await self._host.get_commands()
        except HostCallError as e:
            self._report(e)
            return False

        self.load(catalog, self._store.disabled_commands)
        return True

    async def set_enabled(self, command_id: str, enabled: bool) -> bool:
        """Enable or disable a command and persist the change.

        Enabling an enabled command or disabling a disabled one changes
        nothing and issues no host call.

        Args:
            command_id: Identifier of the command.
            enabled: Desired state.

        Returns:
            True if membership changed and both persistence calls succeeded.
        """
        if command_id not in self.known_ids:
            logger.warning("Ignoring unknown command: %s", command_id)
            return False

        disabled = self._store.disabled_commands
        if enabled == (command_id not in disabled):
            return False

        # Mutate before awaiting so concurrent callers see the new set
        if enabled:
            updated = disabled - {command_id}
        else:
            updated = disabled | {command_id}
        self._store.disabled_commands = updated
        logger.info(
            "Command %s %s", command_id, "enabled" if enabled else "disabled"
        )

        return await self._persist()

    async def _persist(self) -> bool:
        # One write at a time, each sending the set as it is when sent
        async with self._write_lock:
            ok = True
            try:
                await persist(
                    self._host.update_disabled_commands,
                    set(self._store.disabled_commands),
                )
            except HostCallError as e:
                self._report(e)
                ok = False

            # Independent of the call above; the full record is saved either way
            if not await self._store.save():
                ok = False
            return ok

    def _report(self, error: HostCallError) -> None:
        logger.error(
            "Command catalog round-trip failed: %s", error, extra={"host_call": error.call}
        )
        if self._on_error is not None:
            self._on_error(error)
