# cmdpanel/core/config/store.py
"""In-memory holder of the session's Configuration record.

The store keeps exactly one Configuration per session. Other components
read and write its fields directly; there is no field-level locking and
the last writer wins when the record is saved.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from cmdpanel.core.config.models import Configuration
from cmdpanel.core.host.calls import persist
from cmdpanel.core.host.errors import HostCallError

if TYPE_CHECKING:
    from cmdpanel.core.host.protocol import HostProtocol

logger = logging.getLogger(__name__)

ErrorHook = Callable[[HostCallError], None]


class ConfigStore:
    """Source of truth for the values sent on start and on save."""

    def __init__(self, host: HostProtocol, on_error: ErrorHook | None = None) -> None:
        self._host = host
        self._on_error = on_error
        self._config = Configuration()
        self._loaded = False

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def loaded(self) -> bool:
        """True once a configuration has been received from the host."""
        return self._loaded

    def _report(self, error: HostCallError) -> None:
        logger.error(
            "Config round-trip failed: %s", error, extra={"host_call": error.call}
        )
        if self._on_error is not None:
            self._on_error(error)

    async def load(self) -> bool:
        """Replace the record wholesale with the host's copy.

        Returns:
            True on success. On failure the current record is kept.
        """
        try:
            config = await self._host.get_config()
        except HostCallError as e:
            self._report(e)
            return False

        self._config = config
        self._loaded = True
        logger.info("Configuration loaded (parser=%s)", config.parser.value)
        return True

    async def save(self) -> bool:
        """Persist the current record wholesale to the host.

        Returns:
            True if the host acknowledged the save.
        """
        try:
            await persist(self._host.save_config, self._config)
        except HostCallError as e:
            self._report(e)
            return False

        logger.info("Configuration saved")
        return True

    def update(self, **fields: Any) -> Configuration:
        """Edit fields of the record in place (validated, not persisted).

        Args:
            **fields: Configuration field names and new values.

        Returns:
            The updated record.

        Raises:
            AttributeError: If a field name is unknown.
            pydantic.ValidationError: If a value is invalid.
        """
        for name, value in fields.items():
            if name not in Configuration.model_fields:
                raise AttributeError(f"Unknown configuration field: {name}")
            setattr(self._config, name, value)
        return self._config

    @property
    def disabled_commands(self) -> set[str]:
        return self._config.disabled_commands

    @disabled_commands.setter
    def disabled_commands(self, value: set[str]) -> None:
        self._config.disabled_commands = set(value)
