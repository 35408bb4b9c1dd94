# cmdpanel/core/host/client.py
"""HTTP implementation of the host request/response boundary.

Each host call is a POST to ``/invoke/{call}`` with a JSON object of named
arguments; the JSON response body is the call's result. Transport and HTTP
failures are converted to HostCallError with a transient/structural kind.
"""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from cmdpanel.config import settings
from cmdpanel.core.commands.models import CommandInfo
from cmdpanel.core.config.models import Configuration
from cmdpanel.core.host.errors import ErrorKind, HostCallError
from cmdpanel.core.scripts.models import Script

logger = logging.getLogger(__name__)

# Statuses worth retrying besides 5xx
RETRYABLE_STATUS = {408, 425, 429}

_commands_adapter = TypeAdapter(list[CommandInfo])
_scripts_adapter = TypeAdapter(list[Script])


def classify_status(status_code: int) -> ErrorKind:
    """Map an HTTP error status to an error kind.

    Args:
        status_code: HTTP status code of a failed response.

    Returns:
        TRANSIENT for 5xx and throttling/timeout statuses, STRUCTURAL otherwise.
    """
    if status_code >= 500 or status_code in RETRYABLE_STATUS:
        return ErrorKind.TRANSIENT
    return ErrorKind.STRUCTURAL


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return str(body)


class HttpHostClient:
    """Host client speaking JSON over HTTP.

    Attributes:
        base_url: Root URL of the host process.

    Example:
        >>> client = HttpHostClient("http://127.0.0.1:8765")
        >>> config = await client.get_config()
        >>> await client.start(config)
        >>> await client.aclose()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Root URL of the host process.
            timeout: Per-request timeout in seconds, None for no timeout.
            transport: Optional transport (used by tests).
        """
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def _invoke(self, call: str, **arguments: Any) -> Any:
        try:
            response = await self._client.post(f"/invoke/{call}", json=arguments)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise HostCallError(
                call,
                _error_detail(e.response),
                classify_status(status_code),
                status_code,
            ) from e
        except httpx.TransportError as e:
            raise HostCallError(
                call, str(e) or type(e).__name__, ErrorKind.TRANSIENT
            ) from e
        except httpx.HTTPError as e:
            # Decoding and redirect failures
            raise HostCallError(
                call, str(e) or type(e).__name__, ErrorKind.STRUCTURAL
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise HostCallError(
                call, "response is not JSON", ErrorKind.STRUCTURAL, response.status_code
            ) from e

    @staticmethod
    def _parse(call: str, validate: Any, data: Any) -> Any:
        try:
            return validate(data)
        except ValidationError as e:
            raise HostCallError(
                call, f"unexpected response shape: {e.error_count()} errors",
                ErrorKind.STRUCTURAL,
            ) from e

    async def get_config(self) -> Configuration:
        data = await self._invoke("get_config")
        return self._parse("get_config", Configuration.model_validate, data)

    async def save_config(self, config: Configuration) -> None:
        await self._invoke("save_config", config=config.model_dump(mode="json"))

    async def get_commands(self) -> list[CommandInfo]:
        data = await self._invoke("get_commands")
        return self._parse("get_commands", _commands_adapter.validate_python, data)

    async def update_disabled_commands(self, disabled: set[str]) -> None:
        await self._invoke("update_disabled_commands", disabledCommands=sorted(disabled))

    async def is_running(self) -> bool:
        data = await self._invoke("is_running")
        if not isinstance(data, bool):
            raise HostCallError(
                "is_running", f"expected a boolean, got {data!r}", ErrorKind.STRUCTURAL
            )
        return data

    async def start(self, config: Configuration) -> None:
        await self._invoke("start", config=config.model_dump(mode="json"))

    async def stop(self) -> None:
        await self._invoke("stop")

    async def get_scripts(self) -> list[Script]:
        data = await self._invoke("get_scripts")
        return self._parse("get_scripts", _scripts_adapter.validate_python, data)

    async def add_script(self, name: str) -> Script:
        data = await self._invoke("add_script", scriptName=name)
        return self._parse("add_script", Script.model_validate, data)

    async def update_script(self, script: Script) -> None:
        await self._invoke("update_script", script=script.model_dump(mode="json"))

    async def save_code(self, script_id: int, code: str) -> None:
        await self._invoke("save_code", scriptId=script_id, code=code)

    async def get_code(self, script_id: int) -> str:
        data = await self._invoke("get_code", scriptId=script_id)
        if data is None:
            return ""
        if not isinstance(data, str):
            raise HostCallError(
                "get_code", f"expected a string, got {type(data).__name__}",
                ErrorKind.STRUCTURAL,
            )
        return data

    async def delete_script(self, script_id: int) -> None:
        await self._invoke("delete_script", id=script_id)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def shutdown(self) -> None:
        """Close the underlying HTTP client (lifecycle hook)."""
        await self.aclose()
        logger.info("Host client closed")


def create_host_client() -> HttpHostClient:
    """Create a host client from the panel settings.

    Returns:
        HttpHostClient pointed at settings.host_url.
    """
    return HttpHostClient(settings.host_url, timeout=settings.host_request_timeout)
