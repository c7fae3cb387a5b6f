"""Audit trail and single-step undo for household actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .models import utcnow


class Role(str, Enum):
    """Who is acting on the household data."""

    PARENT = "parent"
    CHILD = "child"
    SYSTEM = "system"


@dataclass(slots=True)
class AuditEvent:
    """One change made to the household, with the child it concerns if any."""

    actor: Role
    action: str
    target: str
    child_id: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)
    details: Dict[str, Any] = field(default_factory=dict)


class AuditLog:
    """Collect audit events for parent review."""

    def __init__(self) -> None:
        self._entries: list[AuditEvent] = []

    def record(
        self,
        actor: Role,
        action: str,
        target: str,
        *,
        child_id: Optional[str] = None,
        details: Optional[dict] = None,
        timestamp: Optional[datetime] = None,
    ) -> AuditEvent:
        event = AuditEvent(
            actor=Role(actor),
            action=action,
            target=target,
            child_id=child_id,
            timestamp=timestamp or utcnow(),
            details=dict(details or {}),
        )
        self._entries.append(event)
        return event

    def entries(
        self,
        *,
        action: str | None = None,
        child_id: str | None = None,
        actor: Role | None = None,
    ) -> tuple[AuditEvent, ...]:
        return tuple(
            entry
            for entry in self._entries
            if (action is None or entry.action == action)
            and (child_id is None or entry.child_id == child_id)
            and (actor is None or entry.actor is actor)
        )

    def latest(self) -> AuditEvent | None:
        return self._entries[-1] if self._entries else None


@dataclass(slots=True)
class _PendingUndo:
    label: str
    registered_at: datetime
    restore: Callable[[], None]


class UndoManager:
    """Keep the restore step of the latest ledger change for a limited window."""

    def __init__(self, *, window_seconds: int = 300) -> None:
        self._window = timedelta(seconds=window_seconds)
        self._pending: _PendingUndo | None = None

    @property
    def pending_label(self) -> Optional[str]:
        return self._pending.label if self._pending else None

    def register(self, restore: Callable[[], None], *, label: str, timestamp: Optional[datetime] = None) -> None:
        self._pending = _PendingUndo(label=label, registered_at=timestamp or utcnow(), restore=restore)

    def clear(self) -> None:
        self._pending = None

    def undo(self, *, at: Optional[datetime] = None) -> str:
        """Run the pending restore step and return its label."""

        if self._pending is None:
            raise LookupError("No undoable action is available.")
        if (at or utcnow()) - self._pending.registered_at > self._window:
            self._pending = None
            raise TimeoutError("Undo window has expired.")
        pending, self._pending = self._pending, None
        pending.restore()
        return pending.label


__all__ = ["AuditEvent", "AuditLog", "Role", "UndoManager"]
