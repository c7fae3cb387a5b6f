"""Operational utilities for HabitQuest."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from .models import utcnow


class StructuredLogger:
    """Write JSON lines log entries for later inspection.

    Entries are kept in memory and, when ``path`` is set, appended to that
    file. Values that are not JSON types (enums, dates) are written as strings.
    """

    def __init__(self, *, path: Path | None = None) -> None:
        self.path = path
        self._entries: list[dict] = []

    def log(self, event_type: str, **fields: object) -> dict:
        entry = {"timestamp": utcnow().isoformat(), "event": event_type, **fields}
        self._entries.append(entry)
        if self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
        return entry

    def tail(self, limit: int = 50, *, child: Optional[str] = None) -> tuple[dict, ...]:
        entries = self._entries if child is None else [entry for entry in self._entries if entry.get("child") == child]
        return tuple(entries[-limit:])

    def events(self, event_type: str) -> tuple[dict, ...]:
        return tuple(entry for entry in self._entries if entry["event"] == event_type)


__all__ = ["StructuredLogger"]
