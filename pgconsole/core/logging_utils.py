"""Shared helpers for timestamped JSONL logging and export file naming."""

from __future__ import annotations

import re
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, Tuple


_FILENAME_CACHE: Dict[Tuple[str, str], Path] = {}


def make_timestamp_slug(raw: str | None = None) -> str:
    """Return a sortable timestamp slug (UTC) suitable for filenames."""

    candidate = (raw or "").strip()
    if candidate:
        sanitized = candidate[:-1] if candidate.endswith("Z") else candidate
        try:
            parsed = datetime.fromisoformat(sanitized)
        except ValueError:
            parsed = None
    else:
        parsed = None

    if parsed is None:
        parsed = datetime.now(UTC)

    return parsed.strftime("%Y%m%dT%H%M%S%f")[:-3]


def sanitize_session_id(session_id: str) -> str:
    """Sanitize *session_id* so it can be embedded in filenames."""

    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "-", session_id.strip())
    return cleaned or "session"


def resolve_log_path(base_dir: Path, session_id: str, timestamp: str | None = None) -> Path:
    """Return a cached, timestamp-prefixed path for the given session."""

    normalized_base = str(base_dir.expanduser().resolve())
    key = (normalized_base, session_id)
    if key in _FILENAME_CACHE:
        return _FILENAME_CACHE[key]

    slug = make_timestamp_slug(timestamp)
    safe_session = sanitize_session_id(session_id)
    filename = f"{slug}-{safe_session}.jsonl"
    target = Path(normalized_base) / filename
    target.parent.mkdir(parents=True, exist_ok=True)
    _FILENAME_CACHE[key] = target
    return target


def forget_log_path(base_dir: Path, session_id: str) -> None:
    """Drop the cached log path for *session_id*; the next event starts a new file."""

    normalized_base = str(base_dir.expanduser().resolve())
    _FILENAME_CACHE.pop((normalized_base, session_id), None)


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    """Return the current UTC time in ISO-8601 with millisecond precision."""

    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    """Milliseconds since the epoch, used to stamp download filenames."""

    return time.time_ns() // 1_000_000
