"""Immutable records produced by the console: execution results and terminal lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pgconsole.core.logging_utils import utc_now

Row = dict[str, Any]


def _new_id() -> str:
    return uuid4().hex[:12]


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Outcome of running one statement.

    Exactly one of ``rows`` and ``error_message`` is set. Statements that change
    state without producing rows carry an empty ``rows`` list and keep the
    server's informational text in ``message``.
    """

    statement_text: str
    rows: tuple[Row, ...] | None = None
    error_message: str | None = None
    message: str | None = None
    execution_time_ms: int = 0
    submitted_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if (self.rows is None) == (self.error_message is None):
            raise ValueError("ExecutionResult needs exactly one of rows or error_message")

    @classmethod
    def success(cls, statement_text: str, rows: list[Row], *, message: str | None = None, **kwargs: Any) -> "ExecutionResult":
        return cls(
            statement_text=statement_text,
            rows=tuple(dict(row) for row in rows),
            message=message,
            **kwargs,
        )

    @classmethod
    def failure(cls, statement_text: str, error_message: str, **kwargs: Any) -> "ExecutionResult":
        return cls(statement_text=statement_text, error_message=error_message, **kwargs)

    @property
    def succeeded(self) -> bool:
        return self.error_message is None

    @property
    def row_list(self) -> list[Row]:
        return [dict(row) for row in self.rows or ()]

    @property
    def row_count(self) -> int:
        return len(self.rows or ())

    @property
    def columns(self) -> list[str]:
        if not self.rows:
            return []
        return list(self.rows[0].keys())

    def preview(self, limit: int = 100) -> str:
        """Return the statement text shortened for history listings."""

        if len(self.statement_text) <= limit:
            return self.statement_text
        return self.statement_text[:limit] + "..."


class LineKind(str, Enum):
    COMMAND = "command"
    OUTPUT = "output"
    ERROR = "error"
    TABLE = "table"


@dataclass(frozen=True, slots=True)
class TerminalLine:
    kind: LineKind
    content: str
    timestamp: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=_new_id)

    @classmethod
    def command(cls, content: str) -> "TerminalLine":
        return cls(LineKind.COMMAND, content)

    @classmethod
    def output(cls, content: str) -> "TerminalLine":
        return cls(LineKind.OUTPUT, content)

    @classmethod
    def error(cls, content: str) -> "TerminalLine":
        return cls(LineKind.ERROR, content)

    @classmethod
    def table(cls, content: str) -> "TerminalLine":
        return cls(LineKind.TABLE, content)
