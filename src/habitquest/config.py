"""Configuration constants for HabitQuest, read from the environment."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

SQLITE_FILE_NAME = os.environ.get("HABITQUEST_SQLITE", "habitquest.db")
PIN_SALT = os.environ.get("HABITQUEST_PIN_SALT", "_fhm_salt")
RETENTION_DAYS = int(os.environ.get("HABITQUEST_RETENTION_DAYS", "14"))
UNDO_WINDOW_SECONDS = int(os.environ.get("HABITQUEST_UNDO_WINDOW_SECONDS", "300"))
PIN_MAX_ATTEMPTS = int(os.environ.get("HABITQUEST_PIN_MAX_ATTEMPTS", "5"))
PIN_LOCKOUT_MINUTES = int(os.environ.get("HABITQUEST_PIN_LOCKOUT_MINUTES", "15"))
STATE_KEY = "habitquest"
BACKUP_FILE_PREFIX = "habitquest-backup"

_log_path = os.environ.get("HABITQUEST_LOG_PATH")
LOG_PATH: Optional[Path] = Path(_log_path) if _log_path else None

__all__ = [
    "BACKUP_FILE_PREFIX",
    "LOG_PATH",
    "PIN_LOCKOUT_MINUTES",
    "PIN_MAX_ATTEMPTS",
    "PIN_SALT",
    "RETENTION_DAYS",
    "SQLITE_FILE_NAME",
    "STATE_KEY",
    "UNDO_WINDOW_SECONDS",
]
