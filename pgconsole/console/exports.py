"""Downloadable documents produced from results and the editor buffer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pgconsole.console.renderer import render_csv
from pgconsole.console.results import ExecutionResult
from pgconsole.core.logging_utils import epoch_millis


@dataclass(frozen=True, slots=True)
class ExportDocument:
    filename: str
    media_type: str
    content: str

    def write_to(self, directory: str | Path) -> Path:
        target_dir = Path(directory).expanduser()
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / self.filename
        counter = 1
        while target.exists():
            target = target_dir / f"{Path(self.filename).stem}-{counter}{Path(self.filename).suffix}"
            counter += 1
        target.write_text(self.content, encoding="utf-8")
        return target


def export_result_csv(result: ExecutionResult, *, stamp: int | None = None) -> ExportDocument:
    """Return the rows of *result* as a CSV document."""

    if not result.rows:
        raise ValueError("Result has no rows to export")
    stamp = epoch_millis() if stamp is None else stamp
    return ExportDocument(
        filename=f"query_result_{stamp}.csv",
        media_type="text/csv",
        content=render_csv(result.row_list),
    )


def export_editor_sql(buffer: str, *, stamp: int | None = None) -> ExportDocument:
    """Return the editor buffer verbatim as a ``.sql`` document."""

    stamp = epoch_millis() if stamp is None else stamp
    return ExportDocument(filename=f"query_{stamp}.sql", media_type="text/sql", content=buffer)
