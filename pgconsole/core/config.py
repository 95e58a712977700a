"""Utilities for loading console settings from YAML configuration files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any
from pathlib import Path

import yaml

DEFAULT_WELCOME_MESSAGE = "PostgreSQL Terminal - Type SQL commands and press Enter"
DEFAULT_PROMPT = "postgres=# "


@dataclass(slots=True)
class BackendSettings:
    provider: str = "memory"
    url_env: str = "PGCONSOLE_RPC_URL"
    api_key_env: str = "PGCONSOLE_RPC_KEY"
    execute_function: str = "execute_sql"
    list_tables_function: str = "get_table_info"
    timeout_s: float = 30.0

    def resolve_url(self) -> str:
        value = os.getenv(self.url_env)
        if not value:
            raise OSError(f"Environment variable '{self.url_env}' is required for the RPC backend")
        return value.rstrip("/")

    def resolve_api_key(self) -> str:
        return os.getenv(self.api_key_env, "")


@dataclass(slots=True)
class ConsoleSettings:
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    prompt: str = DEFAULT_PROMPT
    suggestion_limit: int = 10


@dataclass(slots=True)
class PathsSettings:
    exports_dir: str | None = None
    execution_logs_dir: str | None = None


@dataclass(slots=True)
class Settings:
    backend: BackendSettings = field(default_factory=BackendSettings)
    console: ConsoleSettings = field(default_factory=ConsoleSettings)
    paths: PathsSettings | None = None


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_settings(path: str | Path) -> Settings:
    """Read configuration from *path* and return structured settings."""

    config_path = Path(path)
    raw = _load_yaml(config_path)

    backend_raw = raw.get("backend", {}) or {}
    provider = str(backend_raw.get("provider", "memory")).lower()
    if provider not in {"memory", "rpc"}:
        raise ValueError(f"Unsupported backend provider '{provider}'")
    backend = BackendSettings(
        provider=provider,
        url_env=str(backend_raw.get("url_env", "PGCONSOLE_RPC_URL")),
        api_key_env=str(backend_raw.get("api_key_env", "PGCONSOLE_RPC_KEY")),
        execute_function=str(backend_raw.get("execute_function", "execute_sql")),
        list_tables_function=str(backend_raw.get("list_tables_function", "get_table_info")),
        timeout_s=float(backend_raw.get("timeout_s", 30)),
    )

    console_raw = raw.get("console", {}) or {}
    console = ConsoleSettings(
        welcome_message=str(console_raw.get("welcome_message", DEFAULT_WELCOME_MESSAGE)),
        prompt=str(console_raw.get("prompt", DEFAULT_PROMPT)),
        suggestion_limit=int(console_raw.get("suggestion_limit", 10)),
    )
    if console.suggestion_limit < 1:
        raise ValueError("console.suggestion_limit must be at least 1")

    paths_raw: dict[str, Any] | None = raw.get("paths")
    paths = None
    if paths_raw:
        exports_dir = paths_raw.get("exports_dir")
        execution_logs_dir = paths_raw.get("execution_logs_dir")
        paths = PathsSettings(
            exports_dir=str(exports_dir) if exports_dir else None,
            execution_logs_dir=str(execution_logs_dir) if execution_logs_dir else None,
        )

    return Settings(backend=backend, console=console, paths=paths)
