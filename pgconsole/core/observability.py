"""JSONL-backed observability helpers for console executions."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from pgconsole.core.logging_utils import forget_log_path, resolve_log_path, utc_now_iso


class ExecutionObservationSink(Protocol):
    """Records lifecycle events emitted while statements execute."""

    def log_event(self, session_id: str, event: str, payload: dict[str, Any]) -> None:  # pragma: no cover - interface
        ...


def _write_jsonl(base_dir: Path, session_id: str, payload: dict[str, Any]) -> None:
    target = resolve_log_path(
        base_dir=base_dir,
        session_id=session_id,
        timestamp=payload.get("timestamp") if isinstance(payload, dict) else None,
    )
    with target.open("a", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, default=str)
        handle.write("\n")


def _build_event(event: str, payload: dict[str, Any]) -> dict[str, Any]:
    enriched = {key: value for key, value in payload.items() if value is not None}
    enriched.setdefault("event", event)
    enriched.setdefault("timestamp", utc_now_iso())
    return enriched


@dataclass(slots=True)
class JSONLExecutionLogger(ExecutionObservationSink):
    """Persists execution events under a dedicated logs directory."""

    base_dir: Path

    def log_event(self, session_id: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        _write_jsonl(self.base_dir, session_id, _build_event(event, payload))

    def close_session(self, session_id: str) -> None:
        forget_log_path(self.base_dir, session_id)


def describe_execution_event(event: str, payload: dict[str, Any]) -> str:
    """Return a one-line narration of an execution event for terminal output."""

    if event == "statement_executed":
        error = payload.get("error")
        elapsed = payload.get("execution_time_ms", 0)
        if error:
            return f"Statement failed after {elapsed} ms: {error}"
        return f"Statement returned {payload.get('row_count', 0)} row(s) in {elapsed} ms."
    if event == "batch_completed":
        count = payload.get("statement_count", 0)
        failed = payload.get("failed_count", 0)
        if failed:
            return f"Batch of {count} statement(s) finished with {failed} failure(s)."
        return f"Batch of {count} statement(s) finished."
    if event == "schema_refresh_requested":
        return "Schema-changing statement detected; refreshing table list."
    return f"Execution event: {event}"
