"""Append-only command history with arrow-key style recall."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class InteractionHistory:
    """Submitted commands, oldest first, plus a recall cursor.

    ``None`` means no entry is selected; the cursor otherwise indexes
    ``entries``.
    """

    entries: list[str] = field(default_factory=list)
    cursor: int | None = None

    def __len__(self) -> int:
        return len(self.entries)

    def record(self, entry: str) -> None:
        self.entries.append(entry)
        self.cursor = None

    def recall_previous(self, current: int | None) -> tuple[str, int | None]:
        """Step toward the oldest entry, stopping at index 0."""

        if not self.entries:
            return "", None
        if current is None:
            index = len(self.entries) - 1
        else:
            index = max(0, min(current, len(self.entries)) - 1)
        return self.entries[index], index

    def recall_next(self, current: int | None) -> tuple[str, int | None]:
        """Step toward the newest entry; stepping past it clears the selection."""

        if current is None or not self.entries:
            return "", None
        index = current + 1
        if index >= len(self.entries):
            return "", None
        return self.entries[index], index

    def previous(self) -> str:
        entry, self.cursor = self.recall_previous(self.cursor)
        return entry

    def next(self) -> str:
        entry, self.cursor = self.recall_next(self.cursor)
        return entry

    def clear(self) -> None:
        self.entries.clear()
        self.cursor = None
