"""Day statistics and compaction of ledgers past the retention window."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Mapping, Optional

from .dates import parse_date
from .models import CompactedDayLog, DayLog, DaySummary, QuestStatus, StoredDayLog

DEFAULT_RETENTION_DAYS = 14


def calculate_day_summary(log: DayLog) -> DaySummary:
    failed = [quest for quest in log.quests if quest.status is QuestStatus.FAILED]
    return DaySummary(
        completed_quests=sum(1 for quest in log.quests if quest.status is QuestStatus.DONE),
        failed_quests=len(failed),
        total_quests=len(log.quests),
        total_bonus_minutes=sum(bonus.reward_minutes for bonus in log.bonuses),
        total_penalty_minutes=sum(penalty.penalty_minutes for penalty in log.penalties),
        quest_penalty_minutes=sum(quest.penalty_minutes for quest in failed),
        next_day_carry_overs=tuple(penalty for penalty in log.penalties if penalty.carry_to_next_day),
        xp_earned=log.xp_earned,
        base_time=log.base_time,
        max_time=log.max_time,
        current_time=log.current_time,
    )


def compact_day_log(log: DayLog) -> CompactedDayLog:
    """Reduce ``log`` to its counts. Events and item lists are dropped for good."""

    summary = calculate_day_summary(log)
    return CompactedDayLog(
        date=log.date,
        child_id=log.child_id,
        base_time=log.base_time,
        max_time=log.max_time,
        current_time=log.current_time,
        xp_earned=log.xp_earned,
        xp_multiplier=log.xp_multiplier,
        is_offline_day=log.is_offline_day,
        completed_quests=summary.completed_quests,
        failed_quests=summary.failed_quests,
        total_quests=summary.total_quests,
        total_bonus_minutes=summary.total_bonus_minutes,
        total_penalty_minutes=summary.total_penalty_minutes,
        quest_penalty_minutes=summary.quest_penalty_minutes,
        bonus_count=len(log.bonuses),
        penalty_count=len(log.penalties),
    )


def compact_old_logs(
    logs: Mapping[str, StoredDayLog],
    retention_days: int = DEFAULT_RETENTION_DAYS,
    *,
    today: Optional[date] = None,
) -> Dict[str, StoredDayLog]:
    """Compact every ledger dated before ``today - retention_days``.

    Entries that are kept (already compacted, or still recent) are the same
    objects as in ``logs``, so ``result[key] is logs[key]`` tells the caller
    nothing happened to that date.
    """

    cutoff = (today or date.today()) - timedelta(days=retention_days)
    result: Dict[str, StoredDayLog] = {}
    for key, log in logs.items():
        if isinstance(log, DayLog) and parse_date(log.date) < cutoff:
            result[key] = compact_day_log(log)
        else:
            result[key] = log
    return result


def has_changes(before: Mapping[str, StoredDayLog], after: Mapping[str, StoredDayLog]) -> bool:
    return before.keys() != after.keys() or any(after[key] is not before[key] for key in after)


__all__ = [
    "DEFAULT_RETENTION_DAYS",
    "calculate_day_summary",
    "compact_day_log",
    "compact_old_logs",
    "has_changes",
]
