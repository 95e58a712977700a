"""Sequential statement execution against the database backend.

Statements run strictly one after another: each backend call is awaited before
the next one is issued, because a later statement may read tables created or
altered by an earlier one. A failing statement is recorded and the batch moves
on; nothing short of an unexpected exception stops it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from pgconsole.console.results import ExecutionResult, Row
from pgconsole.core.observability import ExecutionObservationSink
from pgconsole.integrations.backend import BackendError, DatabaseBackend

LOGGER = logging.getLogger(__name__)

SCHEMA_CHANGE_KEYWORDS = ("create", "drop", "alter")
ANONYMOUS_COLUMN = "?column?"
UNKNOWN_ERROR = "Unknown error occurred"


def is_schema_changing(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in SCHEMA_CHANGE_KEYWORDS)


def _as_row(value: Any) -> Row:
    if isinstance(value, dict):
        return dict(value)
    return {ANONYMOUS_COLUMN: value}


def classify_payload(payload: Any) -> tuple[list[Row] | None, str | None, str | None]:
    """Map a raw backend payload to ``(rows, message, error)``."""

    if payload is None:
        return [], None, None
    if isinstance(payload, list):
        return [_as_row(item) for item in payload], None, None
    if isinstance(payload, dict):
        error = payload.get("error")
        if error:
            return None, None, str(error)
        if "message" in payload:
            return [], str(payload["message"]), None
        return [dict(payload)], None, None
    return [_as_row(payload)], None, None


@dataclass
class QueryExecutor:
    """Runs statements through a `DatabaseBackend`, one awaited call at a time."""

    backend: DatabaseBackend
    on_schema_change: Callable[[], None] | None = None
    observer: ExecutionObservationSink | None = None
    session_id: str = "console"
    clock: Callable[[], float] = time.perf_counter

    async def execute_one(self, statement: str) -> ExecutionResult:
        """Execute a single statement and signal schema changes if needed."""

        result = await self._run(statement)
        await self._notify_schema_change([statement])
        return result

    async def execute_batch(self, statements: Sequence[str]) -> list[ExecutionResult]:
        """Execute *statements* in order; one result per statement."""

        results: list[ExecutionResult] = []
        for statement in statements:
            results.append(await self._run(statement))

        failed = sum(1 for result in results if not result.succeeded)
        LOGGER.info("Batch finished statements=%s failed=%s", len(results), failed)
        await self._log_event(
            "batch_completed",
            {"statement_count": len(results), "failed_count": failed},
        )
        await self._notify_schema_change(statements)
        return results

    async def _run(self, statement: str) -> ExecutionResult:
        started = self.clock()
        try:
            payload = await self.backend.execute_statement(statement)
        except BackendError as exc:
            elapsed = self._elapsed_ms(started)
            message = str(exc) or UNKNOWN_ERROR
            LOGGER.warning("Statement failed in transport: %s", message)
            result = ExecutionResult.failure(statement, message, execution_time_ms=elapsed)
        else:
            elapsed = self._elapsed_ms(started)
            rows, message, error = classify_payload(payload)
            if error is not None:
                LOGGER.info("Statement rejected by database: %s", error)
                result = ExecutionResult.failure(statement, error, execution_time_ms=elapsed)
            else:
                result = ExecutionResult.success(
                    statement, rows or [], message=message, execution_time_ms=elapsed
                )

        LOGGER.debug(
            "Executed statement in %s ms rows=%s error=%s",
            result.execution_time_ms,
            result.row_count,
            result.error_message,
        )
        await self._log_event(
            "statement_executed",
            {
                "result_id": result.id,
                "statement": statement,
                "row_count": result.row_count,
                "message": result.message,
                "error": result.error_message,
                "execution_time_ms": result.execution_time_ms,
            },
        )
        return result

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int(round((self.clock() - started) * 1000)))

    async def _notify_schema_change(self, statements: Sequence[str]) -> None:
        if not any(is_schema_changing(statement) for statement in statements):
            return
        await self._log_event("schema_refresh_requested", {"statement_count": len(statements)})
        if self.on_schema_change is not None:
            self.on_schema_change()

    async def _log_event(self, event: str, payload: dict[str, Any]) -> None:
        if self.observer is not None:
            # Sinks do blocking file I/O.
            await asyncio.to_thread(self.observer.log_event, self.session_id, event, payload)
