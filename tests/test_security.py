from datetime import datetime, timedelta, timezone

from habitquest.security import PinGuard, hash_pin, verify_pin

START = datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)


def test_hash_is_salted_sha256_hex() -> None:
    digest = hash_pin("1234")

    assert len(digest) == 64
    assert digest == hash_pin("1234")
    assert digest != hash_pin("1234", salt="other")
    assert verify_pin("1234", digest)
    assert not verify_pin("4321", digest)


def test_guard_locks_after_repeated_failures() -> None:
    guard = PinGuard(max_attempts=3, lockout_minutes=15)

    assert guard.record_attempt(success=False, at=START)
    assert guard.record_attempt(success=False, at=START + timedelta(seconds=10))
    assert not guard.record_attempt(success=False, at=START + timedelta(seconds=20))

    assert guard.is_locked(at=START + timedelta(minutes=1))
    assert not guard.is_locked(at=START + timedelta(minutes=16))


def test_success_resets_failures() -> None:
    guard = PinGuard(max_attempts=2, lockout_minutes=15)

    guard.record_attempt(success=False, at=START)
    guard.record_attempt(success=True, at=START + timedelta(seconds=5))
    guard.record_attempt(success=False, at=START + timedelta(seconds=10))

    assert not guard.is_locked(at=START + timedelta(seconds=11))
