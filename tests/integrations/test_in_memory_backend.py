"""Unit tests for the in-memory backend stub."""

from __future__ import annotations

import asyncio

import pytest

from pgconsole.integrations.backend import BackendError, TableInfo
from pgconsole.integrations.in_memory_backend import InMemoryBackend


def test_execute_returns_canned_rows() -> None:
    backend = InMemoryBackend(
        canned_results={"SELECT * FROM accounts WHERE id = 1": [{"id": 1, "name": "Acme"}]}
    )

    rows = asyncio.run(backend.execute_statement("SELECT * FROM accounts WHERE id = 1"))

    assert rows == [{"id": 1, "name": "Acme"}]
    assert backend.statements == ["SELECT * FROM accounts WHERE id = 1"]


def test_unknown_statement_returns_none() -> None:
    backend = InMemoryBackend()

    assert asyncio.run(backend.execute_statement("SELECT * FROM leads")) is None


def test_returned_rows_are_copies() -> None:
    backend = InMemoryBackend()
    backend.prime("SELECT 1", [{"n": 1}])

    rows = asyncio.run(backend.execute_statement("SELECT 1"))
    rows[0]["n"] = 99

    assert backend.canned_results["SELECT 1"] == [{"n": 1}]


def test_fail_raises_backend_error() -> None:
    backend = InMemoryBackend()
    backend.fail("SELECT 1", "connection reset")

    with pytest.raises(BackendError, match="connection reset"):
        asyncio.run(backend.execute_statement("SELECT 1"))


def test_list_tables_counts_calls() -> None:
    backend = InMemoryBackend(tables=[TableInfo(schema="public", name="users")])

    tables = asyncio.run(backend.list_tables())

    assert tables == [TableInfo(schema="public", name="users", type="BASE TABLE")]
    assert backend.list_tables_calls == 1


def test_table_info_from_payload() -> None:
    info = TableInfo.from_payload(
        {"table_schema": "sales", "table_name": "orders", "table_type": "VIEW"}
    )

    assert info == TableInfo(schema="sales", name="orders", type="VIEW")
    assert info.qualified_name == "sales.orders"
    assert TableInfo.from_payload({"name": "users"}) == TableInfo(schema="public", name="users")
    with pytest.raises(ValueError):
        TableInfo.from_payload({"table_schema": "public"})
