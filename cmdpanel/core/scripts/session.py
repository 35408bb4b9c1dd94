# cmdpanel/core/scripts/session.py
"""Script collection with one active selection and an edit buffer.

The session mirrors the host's script list, keeps at most one script
active and holds that script's code in an edit buffer. Buffer edits are
local until save_script(). Selecting another script overwrites the buffer
without asking; unsaved edits are discarded.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cmdpanel.core.host.calls import persist
from cmdpanel.core.host.errors import HostCallError
from cmdpanel.core.scripts.models import DEFAULT_SCRIPT_NAME, Script

if TYPE_CHECKING:
    from cmdpanel.core.config.store import ErrorHook
    from cmdpanel.core.host.protocol import HostProtocol

logger = logging.getLogger(__name__)


class ScriptSession:
    """CRUD over the host's scripts with an exclusive active script.

    Attributes:
        scripts: Script list as last fetched from the host, in host order.

    Example:
        >>> session = ScriptSession(host)
        >>> await session.load_scripts()  # selects the first script
        >>> session.edit_buffer("print('hi')")
        >>> session.dirty
        True
        >>> await session.save_script()
        True
    """

    def __init__(self, host: HostProtocol, on_error: ErrorHook | None = None) -> None:
        self._host = host
        self._on_error = on_error
        self.scripts: list[Script] = []
        self._active: Script | None = None
        self._buffer = ""
        self._saved_code = ""
        # Bumped on every selection; stale get_code replies compare against it
        self._selection = 0

    @property
    def active(self) -> Script | None:
        return self._active

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def dirty(self) -> bool:
        """True while the buffer differs from the last loaded or saved code."""
        return self._active is not None and self._buffer != self._saved_code

    def _report(self, error: HostCallError) -> None:
        logger.error(
            "Script round-trip failed: %s", error, extra={"host_call": error.call}
        )
        if self._on_error is not None:
            self._on_error(error)

    def _clear_selection(self) -> None:
        self._selection += 1
        self._active = None
        self._buffer = ""
        self._saved_code = ""

    def _find(self, script_id: int | None) -> Script | None:
        if script_id is None:
            return None
        for script in self.scripts:
            if script.id == script_id:
                return script
        return None

    async def load_scripts(self) -> bool:
        """Fetch the script list from the host.

        With no active script the first listed script is selected; an
        empty list clears the buffer. An active script still present on
        the host is rebound to the fresh record and keeps its unsaved buffer.

        Returns:
            True on success, False if the host call failed.
        """
        try:
            scripts = await self._host.get_scripts()
        except HostCallError as e:
            self._report(e)
            return False

        self.scripts = list(scripts)
        logger.info("Loaded %d scripts", len(self.scripts))

        if self._active is not None:
            fresh = self._find(self._active.id)
            if fresh is not None:
                if fresh.code is None:
                    fresh.code = self._saved_code
                self._active = fresh
                return True
            logger.info("Active script %s no longer exists", self._active.id)
            self._clear_selection()

        if self.scripts:
            return await self.select_script(self.scripts[0])

        self._buffer = ""
        return True

    async def select_script(self, script: Script) -> bool:
        """Make a script active and load its code into the buffer.

        Known code is adopted as is; otherwise it is fetched from the host.
        If another selection happens while the fetch is pending, the late
        reply is discarded.

        Args:
            script: Script to activate.

        Returns:
            True if the script is active with its code in the buffer.
        """
        self._selection += 1
        token = self._selection
        self._active = script

        if script.code is not None:
            self._set_buffer(script.code)
            return True

        if script.id is None:
            script.code = ""
            self._set_buffer("")
            return True

        try:
            code = await self._host.get_code(script.id)
        except HostCallError as e:
            self._report(e)
            if token == self._selection:
                self._clear_selection()
            return False

        if token != self._selection:
            logger.debug("Discarding code for superseded selection %s", script.id)
            return False

        script.code = code
        self._set_buffer(code)
        return True

    async def select_script_by_id(self, script_id: int) -> bool:
        """Select a script from the current list by its identifier.

        Returns:
            False if no listed script has that identifier.
        """
        script = self._find(script_id)
        if script is None:
            logger.warning("No script with id %s", script_id)
            return False
        return await self.select_script(script)

    def _set_buffer(self, code: str) -> None:
        self._buffer = code
        self._saved_code = code

    async def create_script(self) -> Script | None:
        """Create a script on the host, reload and select it.

        Returns:
            The created script, or None if the host call failed.
        """
        try:
            created = await self._host.add_script(DEFAULT_SCRIPT_NAME)
        except HostCallError as e:
            self._report(e)
            return None

        logger.info("Created script %s", created.id)
        await self.load_scripts()
        listed = self._find(created.id)
        await self.select_script(listed if listed is not None else created)
        return self._active

    async def delete_script(self) -> bool:
        """Delete the active script on the host and reload.

        Returns:
            True on success. False if no script is active or the call failed.
        """
        script = self._active
        if script is None or script.id is None:
            return False

        try:
            await self._host.delete_script(script.id)
        except HostCallError as e:
            self._report(e)
            if not e.transient:
                # e.g. already deleted elsewhere; resync with the host
                await self.load_scripts()
            return False

        logger.info("Deleted script %s", script.id)
        self._clear_selection()
        await self.load_scripts()
        return True

    def edit_buffer(self, content: str) -> bool:
        """Replace the buffer content of the active script (local only).

        Returns:
            False if no script is active.
        """
        if self._active is None:
            return False
        self._buffer = content
        return True

    def update_details(
        self,
        name: str | None = None,
        trigger: str | None = None,
        enabled: bool | None = None,
    ) -> bool:
        """Edit the active script's metadata (local until saved).

        Returns:
            False if no script is active.
        """
        if self._active is None:
            return False
        if name is not None:
            self._active.name = name
        if trigger is not None:
            self._active.trigger = trigger
        if enabled is not None:
            self._active.enabled = enabled
        return True

    async def save_script(self) -> bool:
        """Persist the active script and its buffer, then reload.

        The full record is written with update_script and the code again
        with save_code; the save counts only if both succeed.

        Returns:
            True if both writes succeeded.
        """
        script = self._active
        if script is None or script.id is None:
            return False

        code = self._buffer
        snapshot = script.model_copy(update={"code": code})

        try:
            await persist(self._host.update_script, snapshot)
            await persist(self._host.save_code, snapshot.id, code)
        except HostCallError as e:
            self._report(e)
            return False

        logger.info("Saved script %s", snapshot.id)
        script.code = code
        if self._active is script:
            self._saved_code = code
        await self.load_scripts()
        return True
