"""Factory helpers for constructing console dependencies from settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pgconsole.console.executor import QueryExecutor
from pgconsole.console.meta_commands import MetaCommandInterpreter
from pgconsole.console.schema_cache import SchemaCache
from pgconsole.console.terminal import TerminalSession
from pgconsole.console.workspace import ConsoleWorkspace
from pgconsole.core.config import ConsoleSettings, Settings
from pgconsole.core.observability import ExecutionObservationSink, JSONLExecutionLogger
from pgconsole.integrations.backend import DatabaseBackend
from pgconsole.integrations.in_memory_backend import InMemoryBackend
from pgconsole.integrations.rpc_backend import RpcBackend


@dataclass(slots=True)
class ConsoleDependencies:
    """Collection of shared dependencies used by every console session."""

    backend: DatabaseBackend
    execution_logger: ExecutionObservationSink | None = None
    exports_dir: Path | None = None


@dataclass(slots=True)
class ConsoleSession:
    """The editor and terminal surfaces of one session, sharing one executor."""

    session_id: str
    executor: QueryExecutor
    schema: SchemaCache
    workspace: ConsoleWorkspace
    terminal: TerminalSession


def build_dependencies(settings: Settings) -> ConsoleDependencies:
    """Create dependency instances based on *settings*."""

    return ConsoleDependencies(
        backend=_build_backend(settings),
        execution_logger=JSONLExecutionLogger(base_dir=_resolve_execution_logs_dir(settings)),
        exports_dir=_resolve_exports_dir(settings),
    )


def build_console(
    dependencies: ConsoleDependencies,
    console_settings: ConsoleSettings | None = None,
    *,
    session_id: str = "console",
) -> ConsoleSession:
    """Wire a workspace and a terminal around one executor and schema cache."""

    console_settings = console_settings or ConsoleSettings()
    schema = SchemaCache(dependencies.backend)
    executor = QueryExecutor(
        backend=dependencies.backend,
        on_schema_change=schema.invalidate,
        observer=dependencies.execution_logger,
        session_id=session_id,
    )
    workspace = ConsoleWorkspace(
        executor=executor,
        schema=schema,
        suggestion_limit=console_settings.suggestion_limit,
    )
    terminal = TerminalSession(
        interpreter=MetaCommandInterpreter(executor=executor, schema=schema),
        welcome_message=console_settings.welcome_message,
        prompt=console_settings.prompt,
    )
    return ConsoleSession(
        session_id=session_id,
        executor=executor,
        schema=schema,
        workspace=workspace,
        terminal=terminal,
    )


def _build_backend(settings: Settings) -> DatabaseBackend:
    backend_settings = settings.backend
    if backend_settings.provider == "rpc":
        return RpcBackend(
            base_url=backend_settings.resolve_url(),
            api_key=backend_settings.resolve_api_key(),
            execute_function=backend_settings.execute_function,
            list_tables_function=backend_settings.list_tables_function,
            timeout=backend_settings.timeout_s,
        )
    return InMemoryBackend()


def _resolve_exports_dir(settings: Settings) -> Path:
    base = (
        settings.paths.exports_dir
        if settings.paths and settings.paths.exports_dir
        else "exports"
    )
    return Path(base).expanduser()


def _resolve_execution_logs_dir(settings: Settings) -> Path:
    base = (
        settings.paths.execution_logs_dir
        if settings.paths and settings.paths.execution_logs_dir
        else "logs/executions"
    )
    path = Path(base).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path
