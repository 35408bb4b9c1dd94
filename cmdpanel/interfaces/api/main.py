# cmdpanel/interfaces/api/main.py
"""FastAPI application exposing the panel session.

Provides a REST API for a panel front end: process start/stop, bot
configuration, command enablement, script editing and the host log
buffer (snapshot and server-sent events).
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Load environment variables from .env file
load_dotenv()

from cmdpanel.config import settings  # noqa: E402
from cmdpanel.core.commands.models import CommandView  # noqa: E402
from cmdpanel.core.host.client import create_host_client  # noqa: E402
from cmdpanel.core.host.events import LogEventStream  # noqa: E402
from cmdpanel.core.lifecycle import get_lifecycle_manager  # noqa: E402
from cmdpanel.core.logs.models import LogRecord  # noqa: E402
from cmdpanel.core.process.controller import ProcessController  # noqa: E402
from cmdpanel.core.scripts.models import Script  # noqa: E402
from cmdpanel.core.scripts.session import ScriptSession  # noqa: E402
from cmdpanel.core.session import PanelSession  # noqa: E402
from cmdpanel.interfaces.api.schemas import (  # noqa: E402
    ActiveScriptResponse,
    BufferUpdate,
    CommandResponse,
    CommandToggle,
    CommandToggleResponse,
    ConfigUpdate,
    HostErrorResponse,
    ScriptDetailsUpdate,
    ScriptResponse,
    StatusResponse,
    ToggleResponse,
)
from cmdpanel.interfaces.api.security import (  # noqa: E402
    get_rate_limit_string,
    limiter,
    verify_api_key,
)
from cmdpanel.interfaces.api.streaming import LogFeed  # noqa: E402
from cmdpanel.utils.logging import configure_structured_logging  # noqa: E402
from cmdpanel.utils.observability import setup_logfire  # noqa: E402

logger = logging.getLogger(__name__)

ApiKey = Annotated[str, Depends(verify_api_key)]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    configure_structured_logging()
    setup_logfire(app)

    host = create_host_client()
    feed = LogFeed()
    session = PanelSession(host, on_scroll=feed.notify)
    stream = LogEventStream(session.on_log_event, settings.host_url)

    app.state.session = session
    app.state.feed = feed

    lifecycle = get_lifecycle_manager()
    lifecycle.register("host_client", host)
    lifecycle.register("session", session)
    lifecycle.register("event_stream", stream)
    await lifecycle.startup()
    logger.info("Panel connected to host at %s", settings.host_url)

    yield

    await lifecycle.shutdown()
    logger.info("Shutting down...")


app = FastAPI(
    title="Command Panel API",
    description="Control panel for the game-chat bot host process",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def get_session(request: Request) -> PanelSession:
    """Get the panel session created at startup."""
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Panel session not started")
    return session


Session = Annotated[PanelSession, Depends(get_session)]


def _host_failure(session: PanelSession) -> HTTPException:
    detail = "Host call failed"
    if session.recent_errors:
        detail = str(session.recent_errors[-1])
    return HTTPException(status_code=502, detail=detail)


def _status(process: ProcessController) -> StatusResponse:
    return StatusResponse(
        status=process.status.value,
        label=process.status_label,
        button_label=process.button_label,
        ready=process.ready,
        can_toggle=process.can_toggle,
    )


def _command(view: CommandView) -> CommandResponse:
    return CommandResponse(**view.to_dict())


def _script(script: Script) -> ScriptResponse:
    return ScriptResponse(
        id=script.id, name=script.name, trigger=script.trigger, enabled=script.enabled
    )


def _active(scripts: ScriptSession) -> ActiveScriptResponse:
    active = scripts.active
    return ActiveScriptResponse(
        script=_script(active) if active is not None else None,
        buffer=scripts.buffer,
        dirty=scripts.dirty,
    )


def _require_active(scripts: ScriptSession) -> None:
    if scripts.active is None:
        raise HTTPException(status_code=409, detail="No active script")


@app.get("/health")
@limiter.limit(get_rate_limit_string)
async def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint.

    Returns:
        Dictionary with health status, session availability and the
        number of open log streams.
    """
    session = getattr(request.app.state, "session", None)
    feed = getattr(request.app.state, "feed", None)
    return {
        "status": "healthy",
        "session_ready": session is not None and session.process.ready,
        "log_subscribers": feed.subscriber_count if feed is not None else 0,
    }


@app.get("/process", response_model=StatusResponse)
@limiter.limit(get_rate_limit_string)
async def get_process_status(
    request: Request, session: Session, _api_key: ApiKey
) -> StatusResponse:
    """Get the local process status without asking the host."""
    return _status(session.process)


@app.post("/process/refresh", response_model=StatusResponse)
@limiter.limit(get_rate_limit_string)
async def refresh_process_status(
    request: Request, session: Session, _api_key: ApiKey
) -> StatusResponse:
    """Ask the host whether the bot is running."""
    await session.process.refresh_status()
    return _status(session.process)


@app.post("/process/toggle", response_model=ToggleResponse)
@limiter.limit(get_rate_limit_string)
async def toggle_process(
    request: Request, session: Session, _api_key: ApiKey
) -> ToggleResponse:
    """Start the bot if stopped, stop it if running.

    Returns accepted=false if a start/stop is already in flight.
    """
    accepted = await session.process.toggle()
    return ToggleResponse(accepted=accepted, process=_status(session.process))


@app.get("/config")
@limiter.limit(get_rate_limit_string)
async def get_config(
    request: Request, session: Session, _api_key: ApiKey
) -> dict[str, Any]:
    """Get the session's bot configuration."""
    return session.config.config.model_dump(mode="json")


@app.put("/config")
@limiter.limit(get_rate_limit_string)
async def update_config(
    request: Request, update: ConfigUpdate, session: Session, _api_key: ApiKey
) -> dict[str, Any]:
    """Edit configuration fields and save the whole record to the host."""
    try:
        session.config.update(**update.model_dump(exclude_unset=True))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    if not await session.config.save():
        raise _host_failure(session)
    return session.config.config.model_dump(mode="json")


@app.post("/config/reload")
@limiter.limit(get_rate_limit_string)
async def reload_config(
    request: Request, session: Session, _api_key: ApiKey
) -> dict[str, Any]:
    """Replace the local configuration with the host's copy."""
    if not await session.config.load():
        raise _host_failure(session)
    session.commands.load(
        session.commands.catalog, session.config.disabled_commands
    )
    return session.config.config.model_dump(mode="json")


@app.get("/commands", response_model=list[CommandResponse])
@limiter.limit(get_rate_limit_string)
async def list_commands(
    request: Request, session: Session, _api_key: ApiKey
) -> list[CommandResponse]:
    """List bot commands with their enabled flags."""
    return [_command(view) for view in session.commands.commands]


@app.put("/commands/{command_id}", response_model=CommandToggleResponse)
@limiter.limit(get_rate_limit_string)
async def set_command_enabled(
    request: Request,
    command_id: str,
    toggle: CommandToggle,
    session: Session,
    _api_key: ApiKey,
) -> CommandToggleResponse:
    """Enable or disable a command; changes are saved to the host immediately."""
    before = session.commands.get(command_id)
    if before is None:
        raise HTTPException(status_code=404, detail=f"Command '{command_id}' not found")

    saved = await session.commands.set_enabled(command_id, toggle.enabled)
    changed = before.enabled != toggle.enabled
    if changed and not saved:
        raise _host_failure(session)

    return CommandToggleResponse(
        changed=changed, command=_command(session.commands.get(command_id))
    )


@app.get("/scripts", response_model=list[ScriptResponse])
@limiter.limit(get_rate_limit_string)
async def list_scripts(
    request: Request, session: Session, _api_key: ApiKey
) -> list[ScriptResponse]:
    """List scripts as last fetched from the host."""
    return [_script(script) for script in session.scripts.scripts]


@app.post("/scripts/reload", response_model=list[ScriptResponse])
@limiter.limit(get_rate_limit_string)
async def reload_scripts(
    request: Request, session: Session, _api_key: ApiKey
) -> list[ScriptResponse]:
    """Fetch the script list from the host again."""
    if not await session.scripts.load_scripts():
        raise _host_failure(session)
    return [_script(script) for script in session.scripts.scripts]


@app.post("/scripts", response_model=ActiveScriptResponse, status_code=201)
@limiter.limit(get_rate_limit_string)
async def create_script(
    request: Request, session: Session, _api_key: ApiKey
) -> ActiveScriptResponse:
    """Create a new script on the host and make it active."""
    if await session.scripts.create_script() is None:
        raise _host_failure(session)
    return _active(session.scripts)


@app.get("/scripts/active", response_model=ActiveScriptResponse)
@limiter.limit(get_rate_limit_string)
async def get_active_script(
    request: Request, session: Session, _api_key: ApiKey
) -> ActiveScriptResponse:
    """Get the active script and its edit buffer."""
    return _active(session.scripts)


@app.post("/scripts/{script_id}/select", response_model=ActiveScriptResponse)
@limiter.limit(get_rate_limit_string)
async def select_script(
    request: Request, script_id: int, session: Session, _api_key: ApiKey
) -> ActiveScriptResponse:
    """Make a script active, discarding unsaved buffer edits."""
    if not any(script.id == script_id for script in session.scripts.scripts):
        raise HTTPException(status_code=404, detail=f"Script {script_id} not found")
    if not await session.scripts.select_script_by_id(script_id):
        raise _host_failure(session)
    return _active(session.scripts)


@app.put("/scripts/active/buffer", response_model=ActiveScriptResponse)
@limiter.limit(get_rate_limit_string)
async def edit_active_buffer(
    request: Request, update: BufferUpdate, session: Session, _api_key: ApiKey
) -> ActiveScriptResponse:
    """Replace the edit buffer (not saved to the host)."""
    _require_active(session.scripts)
    session.scripts.edit_buffer(update.code)
    return _active(session.scripts)


@app.patch("/scripts/active", response_model=ActiveScriptResponse)
@limiter.limit(get_rate_limit_string)
async def edit_active_details(
    request: Request, update: ScriptDetailsUpdate, session: Session, _api_key: ApiKey
) -> ActiveScriptResponse:
    """Edit the active script's name, trigger or enabled flag (not saved)."""
    _require_active(session.scripts)
    session.scripts.update_details(**update.model_dump(exclude_unset=True))
    return _active(session.scripts)


@app.post("/scripts/active/save", response_model=ActiveScriptResponse)
@limiter.limit(get_rate_limit_string)
async def save_active_script(
    request: Request, session: Session, _api_key: ApiKey
) -> ActiveScriptResponse:
    """Save the active script and its buffer to the host."""
    _require_active(session.scripts)
    if not await session.scripts.save_script():
        raise _host_failure(session)
    return _active(session.scripts)


@app.delete("/scripts/active", response_model=ActiveScriptResponse)
@limiter.limit(get_rate_limit_string)
async def delete_active_script(
    request: Request, session: Session, _api_key: ApiKey
) -> ActiveScriptResponse:
    """Delete the active script on the host."""
    _require_active(session.scripts)
    if not await session.scripts.delete_script():
        raise _host_failure(session)
    return _active(session.scripts)


@app.get("/logs", response_model=list[LogRecord])
@limiter.limit(get_rate_limit_string)
async def get_logs(
    request: Request, session: Session, _api_key: ApiKey, limit: int = 200
) -> list[LogRecord]:
    """Get the most recent host log records in arrival order."""
    return session.logs.tail(limit)


@app.get("/logs/stream")
async def stream_logs(
    request: Request, session: Session, _api_key: ApiKey, backlog: int = 0
) -> StreamingResponse:
    """Follow the host log as server-sent events."""
    feed: LogFeed = request.app.state.feed
    return StreamingResponse(
        feed.subscribe(session.logs, backlog=backlog),
        media_type="text/event-stream",
    )


@app.get("/errors", response_model=list[HostErrorResponse])
@limiter.limit(get_rate_limit_string)
async def list_errors(
    request: Request, session: Session, _api_key: ApiKey
) -> list[HostErrorResponse]:
    """List recent failed host calls, oldest first."""
    return [HostErrorResponse(**error.to_dict()) for error in session.recent_errors]
