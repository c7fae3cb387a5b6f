"""Calendar helpers used by the day engine."""

from __future__ import annotations

from datetime import date, timedelta
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .models import Settings

DateLike = date | str


class Weekday(IntEnum):
    """Days of the week numbered the way stored schedules number them (Sunday first)."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        return cls((day.weekday() + 1) % 7)


def parse_date(value: DateLike) -> date:
    """Return ``value`` as a :class:`~datetime.date` (accepts ``YYYY-MM-DD``)."""

    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def format_date(value: DateLike) -> str:
    return parse_date(value).isoformat()


def get_today_str(today: date | None = None) -> str:
    """Return the current local date as ``YYYY-MM-DD``."""

    return (today or date.today()).isoformat()


def is_yesterday(earlier: DateLike, later: DateLike) -> bool:
    """True when ``later`` falls exactly one calendar day after ``earlier``."""

    return parse_date(later) - parse_date(earlier) == timedelta(days=1)


def is_offline_day(day: DateLike, settings: "Settings") -> bool:
    """Return whether ``day`` is an offline day.

    A per-date override wins over the weekly schedule; with neither the day is
    a regular screen day.
    """

    key = format_date(day)
    override = settings.offline_days_override.get(key)
    if override is not None:
        return bool(override)
    return Weekday.from_date(parse_date(day)) in settings.offline_days_schedule


__all__ = [
    "DateLike",
    "Weekday",
    "format_date",
    "get_today_str",
    "is_offline_day",
    "is_yesterday",
    "parse_date",
]
