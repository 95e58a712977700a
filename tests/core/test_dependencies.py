"""Tests for dependency construction."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from pgconsole.core.config import BackendSettings, ConsoleSettings, PathsSettings, Settings
from pgconsole.core.dependencies import ConsoleDependencies, build_console, build_dependencies
from pgconsole.core.observability import JSONLExecutionLogger
from pgconsole.integrations.backend import TableInfo
from pgconsole.integrations.in_memory_backend import InMemoryBackend
from pgconsole.integrations.rpc_backend import RpcBackend


@pytest.fixture()
def base_settings(tmp_path: Path) -> Settings:
    return Settings(
        paths=PathsSettings(
            exports_dir=str(tmp_path / "exports"),
            execution_logs_dir=str(tmp_path / "logs" / "executions"),
        ),
    )


def test_build_dependencies_defaults_to_in_memory(base_settings: Settings, tmp_path: Path) -> None:
    deps = build_dependencies(base_settings)

    assert isinstance(deps, ConsoleDependencies)
    assert isinstance(deps.backend, InMemoryBackend)
    assert isinstance(deps.execution_logger, JSONLExecutionLogger)
    assert (tmp_path / "logs" / "executions").is_dir()
    assert deps.exports_dir == tmp_path / "exports"


def test_build_dependencies_uses_rpc_backend(
    base_settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    base_settings.backend = BackendSettings(provider="rpc", execute_function="run_sql", timeout_s=7)
    monkeypatch.setenv("PGCONSOLE_RPC_URL", "https://db.example.test/")
    monkeypatch.setenv("PGCONSOLE_RPC_KEY", "anon")

    deps = build_dependencies(base_settings)

    assert isinstance(deps.backend, RpcBackend)
    assert deps.backend.base_url == "https://db.example.test"
    assert deps.backend.api_key == "anon"
    assert deps.backend.execute_function == "run_sql"
    assert deps.backend.timeout == 7


def test_rpc_backend_requires_url(base_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    base_settings.backend = BackendSettings(provider="rpc")
    monkeypatch.delenv("PGCONSOLE_RPC_URL", raising=False)

    with pytest.raises(OSError):
        build_dependencies(base_settings)


def test_build_console_shares_executor_and_schema() -> None:
    backend = InMemoryBackend()
    session = build_console(
        ConsoleDependencies(backend=backend),
        ConsoleSettings(prompt="db> ", suggestion_limit=3),
        session_id="abc",
    )

    assert session.session_id == "abc"
    assert session.executor.session_id == "abc"
    assert session.workspace.executor is session.executor
    assert session.terminal.interpreter.executor is session.executor
    assert session.workspace.schema is session.schema
    assert session.terminal.prompt == "db> "
    assert session.workspace.suggestion_limit == 3


def test_schema_change_from_either_surface_refreshes_tables() -> None:
    backend = InMemoryBackend()
    session = build_console(ConsoleDependencies(backend=backend))

    async def scenario() -> None:
        backend.tables.append(TableInfo(schema="public", name="t1"))
        await session.workspace.execute("CREATE TABLE t1 (id int)")
        await session.schema.settle()
        backend.tables.append(TableInfo(schema="public", name="t2"))
        await session.terminal.submit("CREATE TABLE t2 (id int)")
        await session.schema.settle()

    asyncio.run(scenario())

    assert session.schema.table_names() == ["t1", "t2"]
    assert backend.list_tables_calls == 2
