"""Parent PIN hashing and brute-force protection."""

from __future__ import annotations

import hashlib
import hmac
from collections import deque
from datetime import datetime, timedelta
from typing import Deque, Optional

from .config import PIN_LOCKOUT_MINUTES, PIN_MAX_ATTEMPTS, PIN_SALT
from .models import utcnow


def hash_pin(pin: str, *, salt: str = PIN_SALT) -> str:
    """Return the hex SHA-256 digest of ``pin`` with the household salt appended."""

    return hashlib.sha256(f"{pin}{salt}".encode("utf-8")).hexdigest()


def verify_pin(pin: str, stored_hash: str, *, salt: str = PIN_SALT) -> bool:
    return hmac.compare_digest(hash_pin(pin, salt=salt), stored_hash)


class PinGuard:
    """Lock PIN checks after too many failures inside a sliding window."""

    def __init__(
        self,
        *,
        max_attempts: int = PIN_MAX_ATTEMPTS,
        lockout_minutes: int = PIN_LOCKOUT_MINUTES,
    ) -> None:
        self._max_attempts = max_attempts
        self._lockout_window = timedelta(minutes=lockout_minutes)
        self._failures: Deque[datetime] = deque()

    def record_attempt(self, *, success: bool, at: Optional[datetime] = None) -> bool:
        """Record an attempt and return whether further attempts are allowed."""

        now = at or utcnow()
        self._prune(now)
        if success:
            self._failures.clear()
            return True
        self._failures.append(now)
        return len(self._failures) < self._max_attempts

    def is_locked(self, *, at: Optional[datetime] = None) -> bool:
        self._prune(at or utcnow())
        return len(self._failures) >= self._max_attempts

    def _prune(self, now: datetime) -> None:
        while self._failures and now - self._failures[0] > self._lockout_window:
            self._failures.popleft()


__all__ = ["PinGuard", "hash_pin", "verify_pin"]
