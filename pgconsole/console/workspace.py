"""Editor surface of the console: batch execution, result log and exports.

The workspace owns the SQL editor buffer and the list of execution results
shown in the results panel (most recent first). Submitting the editor splits
its text into statements and runs them as one batch through the shared
`QueryExecutor`; empty submissions produce a warning instead of a batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pgconsole.console.autocomplete import DEFAULT_LIMIT, Completion, apply_completion, suggest
from pgconsole.console.executor import QueryExecutor
from pgconsole.console.exports import ExportDocument, export_editor_sql, export_result_csv
from pgconsole.console.formatter import format_sql
from pgconsole.console.results import ExecutionResult
from pgconsole.console.schema_cache import SchemaCache
from pgconsole.console.splitter import split_statements
from pgconsole.console.terminal import ConsoleBusyError

LOGGER = logging.getLogger(__name__)

DEFAULT_EDITOR_TEXT = (
    "-- Welcome to PostgreSQL IDE\n-- Start typing your SQL queries here\n\nSELECT version();"
)
STATE_CHANGING_KEYWORDS = ("create", "insert", "update", "delete")


@dataclass(frozen=True, slots=True)
class ConsoleWarning:
    title: str
    description: str


EMPTY_QUERY_WARNING = ConsoleWarning("Empty Query", "Please enter a SQL query to execute.")


@dataclass(slots=True)
class BatchOutcome:
    results: list[ExecutionResult] = field(default_factory=list)
    warning: ConsoleWarning | None = None

    @property
    def has_errors(self) -> bool:
        return any(not result.succeeded for result in self.results)

    @property
    def summary(self) -> str | None:
        """Notification text for the batch, if it warrants one."""

        if self.warning is not None:
            return self.warning.description
        if self.has_errors:
            return "Some queries failed to execute. Check the results panel."
        text = " ".join(result.statement_text for result in self.results).lower()
        if any(keyword in text for keyword in STATE_CHANGING_KEYWORDS):
            return f"{len(self.results)} query(ies) executed successfully."
        return None


@dataclass
class ConsoleWorkspace:
    """Editor buffer, results log and schema-aware completion for one session."""

    executor: QueryExecutor
    schema: SchemaCache
    editor: str = DEFAULT_EDITOR_TEXT
    suggestion_limit: int = DEFAULT_LIMIT
    results: list[ExecutionResult] = field(default_factory=list)
    executing: bool = field(default=False, init=False)

    async def execute(self, text: str | None = None) -> BatchOutcome:
        """Run *text* (or the editor buffer) as one batch."""

        source = self.editor if text is None else text
        statements = split_statements(source)
        if not statements:
            LOGGER.info("Empty submission ignored")
            return BatchOutcome(warning=EMPTY_QUERY_WARNING)
        if self.executing:
            raise ConsoleBusyError("A batch is already executing in this workspace")

        self.executing = True
        try:
            results = await self.executor.execute_batch(statements)
        finally:
            self.executing = False

        self.results[:0] = results
        return BatchOutcome(results=results)

    def get_result(self, result_id: str) -> ExecutionResult | None:
        for result in self.results:
            if result.id == result_id:
                return result
        return None

    def clear_results(self) -> None:
        self.results.clear()

    def suggest(self, text: str, cursor: int) -> list[str]:
        return suggest(text, cursor, self.schema.table_names(), limit=self.suggestion_limit)

    def complete(self, text: str, cursor: int, candidate: str) -> Completion:
        return apply_completion(text, cursor, candidate)

    def format_editor(self) -> str:
        self.editor = format_sql(self.editor)
        return self.editor

    def export_result(self, result_id: str) -> ExportDocument:
        result = self.get_result(result_id)
        if result is None:
            raise KeyError(result_id)
        return export_result_csv(result)

    def export_editor(self) -> ExportDocument:
        return export_editor_sql(self.editor)
