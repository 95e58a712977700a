"""Cached table listing used for completion and the ``\\dt`` directive."""

from __future__ import annotations

import asyncio
import logging

from pgconsole.integrations.backend import BackendError, DatabaseBackend, TableInfo

LOGGER = logging.getLogger(__name__)


class SchemaCache:
    """Holds the last `list_tables` result and refreshes it on request.

    `invalidate` is the fire-and-forget hook handed to the executor: inside a
    running event loop it schedules a refresh task, otherwise it marks the cache
    stale so the next `ensure_loaded` reloads it.
    """

    def __init__(self, backend: DatabaseBackend) -> None:
        self._backend = backend
        self._tables: list[TableInfo] = []
        self._loaded = False
        self._stale = False
        self._refresh_task: asyncio.Task[list[TableInfo]] | None = None

    @property
    def tables(self) -> list[TableInfo]:
        return list(self._tables)

    @property
    def stale(self) -> bool:
        return self._stale

    def table_names(self) -> list[str]:
        return [table.name for table in self._tables]

    async def fetch(self) -> list[TableInfo]:
        """Reload the table list; backend failures propagate."""

        tables = await self._backend.list_tables()
        self._tables = list(tables)
        self._loaded = True
        self._stale = False
        LOGGER.debug("Schema cache refreshed with %s table(s)", len(self._tables))
        return self.tables

    async def refresh(self) -> list[TableInfo]:
        try:
            return await self.fetch()
        except BackendError as exc:
            LOGGER.warning("Could not load schema: %s", exc)
            return self.tables

    async def ensure_loaded(self) -> list[TableInfo]:
        await self.settle()
        if not self._loaded or self._stale:
            return await self.refresh()
        return self.tables

    def invalidate(self) -> None:
        self._stale = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = loop.create_task(self.refresh())

    async def settle(self) -> None:
        """Wait for a refresh scheduled by `invalidate`, if one is pending."""

        task = self._refresh_task
        if task is not None and not task.done():
            await task
