"""Persistence for HabitQuest: SQLite storage via SQLModel and JSON backups."""
from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine

from .config import BACKUP_FILE_PREFIX, SQLITE_FILE_NAME, STATE_KEY
from .exceptions import ImportFormatError
from .models import utcnow
from .state import AppState


class StateRecord(SQLModel, table=True):
    k: str = Field(primary_key=True)
    v: str
    updated_at: datetime = Field(default_factory=utcnow)


def create_db_engine(url: Optional[str] = None) -> Engine:
    """Create the SQLite engine; ``sqlite://`` gives a private in-memory database."""

    url = url or f"sqlite:///{SQLITE_FILE_NAME}"
    if url == "sqlite://":
        return create_engine(url, echo=False, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, echo=False, connect_args={"check_same_thread": False})


class StateRepository:
    """Load and save the whole application state as a single JSON row."""

    def __init__(self, engine: Optional[Engine] = None, *, key: str = STATE_KEY) -> None:
        self.engine = engine or create_db_engine()
        self.key = key
        SQLModel.metadata.create_all(self.engine)

    def load(self) -> Optional[AppState]:
        with Session(self.engine) as session:
            record = session.get(StateRecord, self.key)
            if record is None:
                return None
            return AppState.from_dict(json.loads(record.v))

    def save(self, state: AppState) -> None:
        payload = json.dumps(state.to_dict(), ensure_ascii=False)
        with Session(self.engine) as session:
            record = session.get(StateRecord, self.key)
            if record is None:
                record = StateRecord(k=self.key, v=payload)
            else:
                record.v = payload
                record.updated_at = utcnow()
            session.add(record)
            session.commit()

    def clear(self) -> None:
        with Session(self.engine) as session:
            record = session.get(StateRecord, self.key)
            if record is not None:
                session.delete(record)
                session.commit()


def export_data(state: AppState, directory: Path, *, today: Optional[date] = None) -> Path:
    """Write a pretty-printed JSON backup and return its path."""

    stamp = (today or date.today()).isoformat()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{BACKUP_FILE_PREFIX}-{stamp}.json"
    path.write_text(json.dumps(state.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def import_data(path: Path) -> AppState:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ImportFormatError(f"Could not read backup file '{path}'.") from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ImportFormatError("Backup file is not valid JSON.") from exc
    if not isinstance(payload, dict):
        raise ImportFormatError("Backup file must contain a JSON object.")
    try:
        return AppState.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise ImportFormatError(f"Backup file has an invalid structure: {exc}") from exc


__all__ = [
    "StateRecord",
    "StateRepository",
    "create_db_engine",
    "export_data",
    "import_data",
]
