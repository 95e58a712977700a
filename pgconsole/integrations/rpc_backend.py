"""HTTP backend calling SQL functions exposed through a PostgREST-style RPC API.

Config mirrors the ``backend`` section of the YAML settings:

    base_url: Root of the REST service (``https://<project>.example.co``)
    api_key: Sent both as ``apikey`` and as a bearer token when present
    execute_function: RPC function that runs one statement (``execute_sql``)
    list_tables_function: RPC function that lists tables (``get_table_info``)
    timeout: Request timeout in seconds

The execute function receives ``{"query_text": <statement>}`` and returns a JSON
document: an array of row objects, ``{"message": ...}`` for statements without
rows, or ``{"error": ...}`` when the database rejected the statement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from pgconsole.integrations.backend import BackendError, TableInfo

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RpcBackend:
    """`DatabaseBackend` implementation speaking JSON over HTTP."""

    base_url: str
    api_key: str = ""
    execute_function: str = "execute_sql"
    list_tables_function: str = "get_table_info"
    timeout: float = 30.0
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url is required for RpcBackend")
        self.base_url = self.base_url.rstrip("/")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self.transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def execute_statement(self, text: str) -> Any:
        return await self._call(self.execute_function, {"query_text": text})

    async def list_tables(self) -> list[TableInfo]:
        payload = await self._call(self.list_tables_function, {})
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise BackendError(
                f"Unexpected response from {self.list_tables_function}: expected a list"
            )
        try:
            return [TableInfo.from_payload(item) for item in payload if isinstance(item, dict)]
        except ValueError as exc:
            raise BackendError(f"Malformed row from {self.list_tables_function}: {exc}") from exc

    async def _call(self, function: str, body: dict[str, Any]) -> Any:
        path = f"/rest/v1/rpc/{function}"
        try:
            response = await self.client.post(path, json=body)
        except httpx.ConnectError as exc:
            raise BackendError(f"Failed to connect to {self.base_url}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise BackendError(f"Request timeout: {path}") from exc
        except httpx.HTTPError as exc:
            raise BackendError(f"RPC request failed: {exc}") from exc

        if response.status_code >= 400:
            message = _error_message(response)
            LOGGER.debug("RPC %s failed status=%s message=%s", function, response.status_code, message)
            raise BackendError(message)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(f"RPC {function} returned invalid JSON") from exc

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error", "details", "hint"):
            value = payload.get(key)
            if value:
                return str(value)
    text = response.text.strip()
    if text:
        return f"RPC error: {response.status_code} - {text[:200]}"
    return f"RPC error: {response.status_code}"
