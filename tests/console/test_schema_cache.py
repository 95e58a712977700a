"""Tests for the cached table listing."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest

from pgconsole.console.executor import QueryExecutor
from pgconsole.console.schema_cache import SchemaCache
from pgconsole.integrations.backend import BackendError, TableInfo
from pgconsole.integrations.in_memory_backend import InMemoryBackend


@dataclass
class _FlakyCatalogBackend(InMemoryBackend):
    broken: bool = False

    async def list_tables(self) -> list[TableInfo]:
        if self.broken:
            raise BackendError("catalog unavailable")
        return await InMemoryBackend.list_tables(self)


def test_ensure_loaded_fetches_once() -> None:
    backend = InMemoryBackend(tables=[TableInfo(schema="public", name="users")])
    cache = SchemaCache(backend)

    async def scenario() -> None:
        await cache.ensure_loaded()
        await cache.ensure_loaded()

    asyncio.run(scenario())

    assert backend.list_tables_calls == 1
    assert cache.table_names() == ["users"]


def test_invalidate_outside_loop_marks_stale() -> None:
    backend = InMemoryBackend()
    cache = SchemaCache(backend)
    asyncio.run(cache.refresh())

    backend.tables.append(TableInfo(schema="public", name="orders"))
    cache.invalidate()

    assert cache.stale
    asyncio.run(cache.ensure_loaded())
    assert not cache.stale
    assert cache.table_names() == ["orders"]
    assert backend.list_tables_calls == 2


def test_schema_changing_batch_schedules_refresh() -> None:
    backend = InMemoryBackend()
    cache = SchemaCache(backend)
    executor = QueryExecutor(backend=backend, on_schema_change=cache.invalidate)

    async def scenario() -> None:
        backend.tables.append(TableInfo(schema="public", name="widgets"))
        await executor.execute_batch(["CREATE TABLE widgets (id int)"])
        await cache.settle()

    asyncio.run(scenario())

    assert backend.list_tables_calls == 1
    assert cache.table_names() == ["widgets"]


def test_refresh_keeps_previous_tables_on_failure() -> None:
    backend = _FlakyCatalogBackend(tables=[TableInfo(schema="public", name="users")])
    cache = SchemaCache(backend)
    asyncio.run(cache.refresh())

    backend.broken = True
    tables = asyncio.run(cache.refresh())

    assert [table.name for table in tables] == ["users"]


def test_fetch_propagates_failure() -> None:
    cache = SchemaCache(_FlakyCatalogBackend(broken=True))

    with pytest.raises(BackendError, match="catalog unavailable"):
        asyncio.run(cache.fetch())
