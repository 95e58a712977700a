"""Lightweight, in-memory backend stub for offline sessions and tests.

This backend does not parse SQL or connect to a database. It returns canned
payloads keyed by the exact statement text and can be told to fail specific
statements, which is enough to exercise the console end to end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pgconsole.integrations.backend import BackendError, TableInfo


@dataclass(slots=True)
class InMemoryBackend:
    """Mapping-based backend that satisfies the `DatabaseBackend` protocol."""

    canned_results: dict[str, Any] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    tables: list[TableInfo] = field(default_factory=list)
    statements: list[str] = field(default_factory=list)
    list_tables_calls: int = 0

    async def execute_statement(self, text: str) -> Any:
        """Return the canned payload for *text*, or raise a scripted failure."""

        self.statements.append(text)
        if text in self.failures:
            raise BackendError(self.failures[text])
        payload = self.canned_results.get(text)
        if isinstance(payload, list):
            return [dict(row) if isinstance(row, dict) else row for row in payload]
        return payload

    async def list_tables(self) -> list[TableInfo]:
        self.list_tables_calls += 1
        return list(self.tables)

    def prime(self, statement: str, payload: Any) -> None:
        """Register a canned payload for a future `execute_statement` call."""

        self.canned_results[statement] = payload

    def fail(self, statement: str, message: str) -> None:
        """Make a future `execute_statement` call for *statement* raise."""

        self.failures[statement] = message
