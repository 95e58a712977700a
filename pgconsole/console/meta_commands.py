"""Interpretation of single terminal lines: directives and one-off SQL."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pgconsole.console.executor import QueryExecutor
from pgconsole.console.renderer import describe_row_count, render_fixed_width
from pgconsole.console.results import ExecutionResult, TerminalLine
from pgconsole.console.schema_cache import SchemaCache
from pgconsole.integrations.backend import BackendError

LOGGER = logging.getLogger(__name__)

HELP_TEXT = "\n".join(
    [
        "Available commands:",
        "  clear    - Clear the terminal",
        "  help     - Show this help message",
        "  \\l       - List databases",
        "  \\dt      - List tables",
        "  \\d table - Describe table",
        "  Any SQL command will be executed",
    ]
)

META_HINT = "Supported meta-commands: \\l, \\dt, \\d <table>"
DT_OWNER = "postgres"

LIST_DATABASES_SQL = (
    'SELECT datname AS "Name", pg_catalog.pg_get_userbyid(datdba) AS "Owner", '
    'pg_catalog.pg_encoding_to_char(encoding) AS "Encoding" '
    "FROM pg_catalog.pg_database WHERE datistemplate = false ORDER BY datname"
)


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _strip_identifier_quotes(part: str) -> str:
    if len(part) >= 2 and part.startswith('"') and part.endswith('"'):
        return part[1:-1]
    return part


def describe_table_sql(name: str) -> str:
    """Build the column-metadata query behind ``\\d <name>``."""

    parts = [_strip_identifier_quotes(part) for part in name.split(".", 1)]
    conditions = [f"table_name = {_sql_literal(parts[-1])}"]
    if len(parts) == 2:
        conditions.append(f"table_schema = {_sql_literal(parts[0])}")
    return (
        'SELECT column_name AS "Column", data_type AS "Type", '
        'is_nullable AS "Nullable", column_default AS "Default" '
        "FROM information_schema.columns "
        f"WHERE {' AND '.join(conditions)} "
        "ORDER BY ordinal_position"
    )


@dataclass(slots=True)
class InterpretOutcome:
    lines: list[TerminalLine] = field(default_factory=list)
    clear: bool = False


@dataclass
class MetaCommandInterpreter:
    """Resolves one terminal line into terminal output."""

    executor: QueryExecutor
    schema: SchemaCache

    async def interpret(self, line: str) -> InterpretOutcome:
        command = line.strip()
        lowered = command.lower()

        if lowered == "clear":
            return InterpretOutcome(clear=True)
        if lowered == "help":
            return InterpretOutcome([TerminalLine.output(HELP_TEXT)])
        if not command.startswith("\\"):
            return InterpretOutcome(await self._run_sql(command))

        name, *rest = command.split(maxsplit=1)
        name = name.lower()
        argument = rest[0].strip() if rest else ""
        if name == "\\l" and not argument:
            return InterpretOutcome(await self._list_databases())
        if name == "\\dt" and not argument:
            return InterpretOutcome(await self._list_tables())
        if name == "\\d":
            return InterpretOutcome(await self._describe_table(argument))

        LOGGER.debug("Unknown meta-command %s", command)
        return InterpretOutcome(
            [
                TerminalLine.error(f"Unknown meta-command: {command}"),
                TerminalLine.output(META_HINT),
            ]
        )

    async def _list_databases(self) -> list[TerminalLine]:
        result = await self.executor.execute_one(LIST_DATABASES_SQL)
        if not result.succeeded:
            return [TerminalLine.error(f"ERROR: {result.error_message}")]
        if not result.rows:
            return [TerminalLine.output(describe_row_count(0))]
        return [TerminalLine.table(_table_content(result))]

    async def _list_tables(self) -> list[TerminalLine]:
        try:
            tables = await self.schema.fetch()
        except BackendError as exc:
            return [TerminalLine.error(f"ERROR: {exc}")]
        if not tables:
            return [TerminalLine.output("Did not find any relations.")]
        rows = [
            {"Schema": table.schema, "Name": table.name, "Type": table.type, "Owner": DT_OWNER}
            for table in tables
        ]
        return [TerminalLine.table(f"{render_fixed_width(rows)}\n{describe_row_count(len(rows))}")]

    async def _describe_table(self, name: str) -> list[TerminalLine]:
        if not name:
            return [TerminalLine.error("Usage: \\d <table>")]
        result = await self.executor.execute_one(describe_table_sql(name))
        if not result.succeeded:
            return [TerminalLine.error(f"ERROR: {result.error_message}")]
        if not result.rows:
            return [TerminalLine.error(f'Did not find any relation named "{name}".')]
        return [TerminalLine.table(_table_content(result))]

    async def _run_sql(self, statement: str) -> list[TerminalLine]:
        result = await self.executor.execute_one(statement)
        if not result.succeeded:
            return [TerminalLine.error(f"ERROR: {result.error_message}")]
        if result.rows:
            return [TerminalLine.table(_table_content(result))]
        return [TerminalLine.output(result.message or describe_row_count(0))]


def _table_content(result: ExecutionResult) -> str:
    return f"{render_fixed_width(result.row_list)}\n{describe_row_count(result.row_count)}"
