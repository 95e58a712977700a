"""The database capability the console talks to.

Everything the console knows about the database passes through two calls:
`execute_statement`, which runs one SQL statement and returns whatever payload
the server produced, and `list_tables`, which reports the visible relations.
Transport problems surface as `BackendError`; application-level SQL errors come
back inside an otherwise successful payload (``{"error": "..."}``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol


class BackendError(RuntimeError):
    """Raised when the backend cannot be reached or rejects the request."""


@dataclass(frozen=True, slots=True)
class TableInfo:
    schema: str
    name: str
    type: str = "BASE TABLE"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TableInfo":
        schema = payload.get("table_schema", payload.get("schema"))
        name = payload.get("table_name", payload.get("name"))
        if not name:
            raise ValueError("Table payload is missing a table name")
        kind = payload.get("table_type", payload.get("type")) or "BASE TABLE"
        return cls(schema=str(schema or "public"), name=str(name), type=str(kind))

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}"


class DatabaseBackend(Protocol):
    """Abstracts the RPC endpoint that executes SQL on the server."""

    async def execute_statement(self, text: str) -> Any:  # pragma: no cover - interface
        """Execute one statement and return the raw result payload."""

    async def list_tables(self) -> list[TableInfo]:  # pragma: no cover - interface
        """Return the tables visible to the console."""
