# cmdpanel/core/session.py
"""Panel session: the five state components wired to one host.

A session owns one Configuration (ConfigStore), the command catalog that
writes back into it, the process controller that sends it on start, the
script session, and the log buffer fed by the push channel. Host call
failures from every component are collected for display.
"""

import logging
import uuid
from collections import deque
from collections.abc import Callable
from typing import Any

from cmdpanel.config import Settings, settings
from cmdpanel.core.commands.catalog import CommandCatalog
from cmdpanel.core.config.store import ConfigStore
from cmdpanel.core.host.errors import HostCallError
from cmdpanel.core.host.protocol import HostProtocol
from cmdpanel.core.logs.buffer import LogBuffer, ScrollNotifier
from cmdpanel.core.logs.ingest import LogIngestor
from cmdpanel.core.process.controller import ProcessController
from cmdpanel.core.scripts.session import ScriptSession
from cmdpanel.utils.logging import set_session_id

logger = logging.getLogger(__name__)

RECENT_ERROR_LIMIT = 50


class PanelSession:
    """State of one control panel session against one host.

    Attributes:
        session_id: Correlation id attached to this session's log lines.
        config: ConfigStore holding the session's Configuration.
        commands: CommandCatalog reconciled with the disabled set.
        process: ProcessController for start/stop.
        scripts: ScriptSession for the user scripts.
        logs: LogBuffer with the most recent host log records.
        ingestor: LogIngestor feeding logs from the push channel.
        recent_errors: Last failed host calls, oldest first.
    """

    def __init__(
        self,
        host: HostProtocol,
        panel_settings: Settings | None = None,
        on_scroll: Callable[[], None] | None = None,
        session_id: str | None = None,
    ) -> None:
        cfg = panel_settings or settings
        self.host = host
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.recent_errors: deque[HostCallError] = deque(maxlen=RECENT_ERROR_LIMIT)

        self.config = ConfigStore(host, on_error=self._record_error)
        self.commands = CommandCatalog(host, self.config, on_error=self._record_error)
        self.process = ProcessController(
            host,
            self.config,
            transition_timeout=cfg.transition_timeout,
            on_error=self._record_error,
        )
        self.scripts = ScriptSession(host, on_error=self._record_error)
        self.logs = LogBuffer(
            limit=cfg.log_buffer_limit,
            notifier=ScrollNotifier(on_scroll, delay=cfg.scroll_delay),
        )
        self.ingestor = LogIngestor(self.logs, maxsize=cfg.log_queue_size)

    def _record_error(self, error: HostCallError) -> None:
        self.recent_errors.append(error)

    def on_log_event(self, payload: Any) -> bool:
        """Push-channel sink: queue one log payload for the buffer."""
        return self.ingestor.offer(payload)

    async def start(self) -> None:
        """Start ingestion and load the initial state from the host.

        Each load is independent; a failure in one leaves the others
        loaded and is reported through recent_errors.
        """
        set_session_id(self.session_id)
        await self.ingestor.start()
        await self.config.load()
        await self.commands.refresh()
        await self.process.refresh_status()
        await self.scripts.load_scripts()
        logger.info(
            "Session started: status=%s, %d commands, %d scripts",
            self.process.status.value,
            len(self.commands.commands),
            len(self.scripts.scripts),
        )

    async def shutdown(self) -> None:
        await self.ingestor.shutdown()
        logger.info("Session %s stopped", self.session_id)
