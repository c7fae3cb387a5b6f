"""Day engine: builds daily ledgers and applies quest, bonus and penalty events.

Every function here is pure. Mutators return a new :class:`DayLog` built with
:func:`dataclasses.replace`; when nothing changes (unknown id, quest not in a
state that allows the action) the very same ledger object is returned so
callers can detect a no-op with ``result is ledger``.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, TypeVar

from .dates import DateLike, format_date, is_offline_day, is_yesterday
from .defaults import generate_id
from .models import (
    ASSIGNED_TO_ALL,
    BonusEntry,
    BonusMissionTemplate,
    CarryOverEffect,
    CarryOverOrigin,
    ContractTask,
    DayContract,
    DayLog,
    EventType,
    LedgerEvent,
    PenaltyEntry,
    PenaltyTemplate,
    QuestCategory,
    QuestInstance,
    QuestStatus,
    Settings,
    StoredDayLog,
    TaskTemplates,
    utcnow,
)

T = TypeVar("T")

GATING_CATEGORIES = (QuestCategory.MORNING, QuestCategory.AFTERNOON)


def _clamp(value: int, upper: int) -> int:
    return max(0, min(upper, value))


def _event(text: str, event_type: EventType, at: Optional[datetime]) -> LedgerEvent:
    return LedgerEvent(id=generate_id(), text=text, type=event_type, timestamp=at or utcnow())


def is_assigned(assigned_to: Sequence[str], child_id: Optional[str]) -> bool:
    """Return whether a template with ``assigned_to`` is visible to ``child_id``."""

    if not assigned_to or ASSIGNED_TO_ALL in assigned_to:
        return True
    return child_id is not None and child_id in assigned_to


def filter_assigned(templates: Iterable[T], child_id: Optional[str]) -> tuple[T, ...]:
    """Keep the templates (of any kind) assigned to ``child_id``."""

    return tuple(item for item in templates if is_assigned(getattr(item, "assigned_to", ()), child_id))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------
def collect_carry_overs(previous: DayLog) -> List[CarryOverEffect]:
    """Gather the effects ``previous`` passes on to the following day."""

    effects: List[CarryOverEffect] = []
    for penalty in previous.penalties:
        if penalty.carry_to_next_day and penalty.next_day_penalty > 0:
            effects.append(CarryOverEffect(source_text=penalty.text, delta_minutes=penalty.next_day_penalty))
    for quest in previous.quests:
        if quest.status is QuestStatus.FAILED and quest.has_next_day_consequence and quest.next_day_penalty > 0:
            effects.append(CarryOverEffect(source_text=quest.text, delta_minutes=quest.next_day_penalty))
    for bonus in previous.bonuses:
        if bonus.has_next_day_consequence and bonus.next_day_bonus > 0:
            effects.append(CarryOverEffect(source_text=bonus.text, delta_minutes=-bonus.next_day_bonus))
    effects.extend(effect.relabelled(CarryOverOrigin.PREVIOUS_DAYS) for effect in previous.deferred_carry_overs)
    return effects


def create_day_log(
    day: DateLike,
    templates: TaskTemplates,
    settings: Settings,
    child_id: Optional[str] = None,
    previous: Optional[StoredDayLog] = None,
    *,
    at: Optional[datetime] = None,
) -> DayLog:
    """Build the ledger for ``day``.

    Effects from ``previous`` only apply when it is the ledger of the day
    before; longer gaps drop them. On an offline day the effects are shown but
    held back in ``deferred_carry_overs`` until the next screen day.
    """

    date_str = format_date(day)
    offline = is_offline_day(date_str, settings)
    multiplier = settings.xp_multiplier_offline if offline else 1

    effects: List[CarryOverEffect] = []
    if isinstance(previous, DayLog) and is_yesterday(previous.date, date_str):
        effects = collect_carry_overs(previous)

    if offline:
        base_time = _clamp(settings.base_time, settings.max_time)
        deferred = tuple(effects)
    else:
        total = sum(effect.delta_minutes for effect in effects)
        base_time = _clamp(settings.base_time - total, settings.max_time)
        deferred = ()

    quests = tuple(
        QuestInstance.from_template(template, instance_id=generate_id())
        for template in filter_assigned(templates.daily_quests, child_id)
    )
    suffix = " (postponed to the next day with screens)" if offline else ""
    events = tuple(_event(effect.text + suffix, EventType.INFO, at) for effect in effects)

    return DayLog(
        date=date_str,
        child_id=child_id,
        base_time=base_time,
        max_time=settings.max_time,
        current_time=base_time,
        is_offline_day=offline,
        xp_multiplier=multiplier,
        xp_earned=0,
        quests=quests,
        bonuses=(),
        penalties=(),
        events=events,
        carry_over_effects=tuple(effects),
        deferred_carry_overs=deferred,
    )


def sync_offline_status(log: DayLog, settings: Settings) -> DayLog:
    """Bring ``log`` in line with the offline schedule in ``settings``.

    A day that turns offline gets its carry-over effects added back to the
    base time and held in ``deferred_carry_overs``; a day that turns back into
    a screen day takes the deferred effects off again. ``current_time`` moves
    by the same amount as ``base_time``. No event is written. The ledger is
    returned unchanged when its offline status already matches.
    """

    offline = is_offline_day(log.date, settings)
    if offline == log.is_offline_day:
        return log
    if offline:
        restored = sum(effect.delta_minutes for effect in log.carry_over_effects)
        base_time = _clamp(log.base_time + restored, log.max_time)
        deferred = log.carry_over_effects
        multiplier = settings.xp_multiplier_offline
    else:
        pending = sum(effect.delta_minutes for effect in log.deferred_carry_overs)
        base_time = _clamp(log.base_time - pending, log.max_time)
        deferred = ()
        multiplier = 1
    return replace(
        log,
        is_offline_day=offline,
        xp_multiplier=multiplier,
        base_time=base_time,
        current_time=_clamp(log.current_time + (base_time - log.base_time), log.max_time),
        deferred_carry_overs=deferred,
    )


def is_time_unlocked(log: DayLog) -> bool:
    """Screen time opens once every morning and afternoon quest is done or failed."""

    return all(
        quest.status is not QuestStatus.PENDING for quest in log.quests if quest.category in GATING_CATEGORIES
    )


# ---------------------------------------------------------------------------
# Quests
# ---------------------------------------------------------------------------
def _replace_quest(log: DayLog, updated: QuestInstance) -> tuple[QuestInstance, ...]:
    return tuple(updated if quest.id == updated.id else quest for quest in log.quests)


def complete_quest(log: DayLog, quest_id: str, *, at: Optional[datetime] = None) -> DayLog:
    quest = log.find_quest(quest_id)
    if quest is None or quest.status is not QuestStatus.PENDING:
        return log
    gained = quest.xp_reward * log.xp_multiplier
    text = f"✅ Completed: {quest.text}"
    if gained:
        text += f" → +{gained} XP"
    return replace(
        log,
        quests=_replace_quest(log, replace(quest, status=QuestStatus.DONE, xp_awarded=gained)),
        xp_earned=log.xp_earned + gained,
        events=log.events + (_event(text, EventType.POSITIVE, at),),
    )


def fail_quest(log: DayLog, quest_id: str, *, at: Optional[datetime] = None) -> DayLog:
    quest = log.find_quest(quest_id)
    if quest is None or quest.status is not QuestStatus.PENDING:
        return log
    return replace(
        log,
        quests=_replace_quest(log, replace(quest, status=QuestStatus.FAILED)),
        current_time=_clamp(log.current_time - quest.penalty_minutes, log.max_time),
        events=log.events + (
            _event(f"❌ Not done: {quest.text} → -{quest.penalty_minutes} min", EventType.NEGATIVE, at),
        ),
    )


def revert_quest(log: DayLog, quest_id: str, *, at: Optional[datetime] = None) -> DayLog:
    """Put a done or failed quest back to pending, undoing exactly the time or XP it moved."""

    quest = log.find_quest(quest_id)
    if quest is None or quest.status is QuestStatus.PENDING:
        return log
    current_time = log.current_time
    xp_earned = log.xp_earned
    if quest.status is QuestStatus.FAILED:
        current_time = _clamp(current_time + quest.penalty_minutes, log.max_time)
    else:
        xp_earned -= quest.xp_awarded
    return replace(
        log,
        quests=_replace_quest(log, replace(quest, status=QuestStatus.PENDING, xp_awarded=0)),
        current_time=current_time,
        xp_earned=xp_earned,
        events=log.events + (_event(f"↩️ Reverted: {quest.text}", EventType.INFO, at),),
    )


# ---------------------------------------------------------------------------
# Bonus missions
# ---------------------------------------------------------------------------
def complete_bonus_mission(
    log: DayLog,
    template: BonusMissionTemplate,
    *,
    at: Optional[datetime] = None,
) -> DayLog:
    """Credit a bonus mission. Eligibility (single use, who may grant) is checked by the caller."""

    moment = at or utcnow()
    gained = template.xp_reward * log.xp_multiplier
    entry = BonusEntry(
        id=generate_id(),
        template_id=template.id,
        text=template.text,
        reward_minutes=template.reward_minutes,
        icon=template.icon,
        has_next_day_consequence=template.has_next_day_consequence,
        next_day_bonus=template.next_day_bonus,
        xp_reward=template.xp_reward,
        xp_awarded=gained,
        completed_at=moment,
    )
    text = f"⭐ Bonus: {template.text} → +{template.reward_minutes} min"
    if gained:
        text += f", +{gained} XP"
    return replace(
        log,
        current_time=_clamp(log.current_time + template.reward_minutes, log.max_time),
        xp_earned=log.xp_earned + gained,
        bonuses=log.bonuses + (entry,),
        events=log.events + (_event(text, EventType.POSITIVE, moment),),
    )


def withdraw_bonus(log: DayLog, bonus_id: str, *, at: Optional[datetime] = None) -> DayLog:
    bonus = log.find_bonus(bonus_id)
    if bonus is None:
        return log
    return replace(
        log,
        current_time=_clamp(log.current_time - bonus.reward_minutes, log.max_time),
        xp_earned=log.xp_earned - bonus.xp_awarded,
        bonuses=tuple(item for item in log.bonuses if item.id != bonus_id),
        events=log.events + (
            _event(f"↩️ Bonus withdrawn: {bonus.text} → -{bonus.reward_minutes} min", EventType.INFO, at),
        ),
    )


# ---------------------------------------------------------------------------
# Penalties
# ---------------------------------------------------------------------------
def apply_penalty(
    log: DayLog,
    template: PenaltyTemplate,
    carry_to_next_day: bool = False,
    *,
    at: Optional[datetime] = None,
) -> DayLog:
    """Deduct a penalty.

    ``carry_to_next_day`` only sticks when the template has a next-day
    consequence. The full XP penalty is taken even when it drives the day's
    ``xp_earned`` below zero, and it is stored on the entry so removing the
    penalty gives back exactly that.
    """

    moment = at or utcnow()
    carry = bool(carry_to_next_day and template.has_next_day_consequence)
    deducted = template.xp_penalty * log.xp_multiplier
    entry = PenaltyEntry(
        id=generate_id(),
        template_id=template.id,
        text=template.text,
        penalty_minutes=template.penalty_minutes,
        icon=template.icon,
        has_next_day_consequence=template.has_next_day_consequence,
        next_day_penalty=template.next_day_penalty,
        carry_to_next_day=carry,
        xp_penalty=template.xp_penalty,
        xp_deducted=deducted,
        applied_at=moment,
    )
    text = f"⚠️ Penalty: {template.text} → -{template.penalty_minutes} min"
    if carry:
        text += f" (+ consequence for tomorrow: -{template.next_day_penalty} min)"
    return replace(
        log,
        current_time=_clamp(log.current_time - template.penalty_minutes, log.max_time),
        xp_earned=log.xp_earned - deducted,
        penalties=log.penalties + (entry,),
        events=log.events + (_event(text, EventType.NEGATIVE, moment),),
    )


def remove_penalty(log: DayLog, penalty_id: str, *, at: Optional[datetime] = None) -> DayLog:
    """Lift a penalty and give back its minutes. Only parents may call this; the caller checks."""

    penalty = log.find_penalty(penalty_id)
    if penalty is None:
        return log
    return replace(
        log,
        current_time=_clamp(log.current_time + penalty.penalty_minutes, log.max_time),
        xp_earned=log.xp_earned + penalty.xp_deducted,
        penalties=tuple(item for item in log.penalties if item.id != penalty_id),
        events=log.events + (
            _event(f"↩️ Penalty removed: {penalty.text} → +{penalty.penalty_minutes} min", EventType.INFO, at),
        ),
    )


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------
def attach_contract(log: DayLog, task: ContractTask, *, at: Optional[datetime] = None) -> DayLog:
    """Pin an accepted contract task to the day. It carries no time or XP."""

    contract = DayContract(id=generate_id(), text=task.text, icon=task.icon)
    return replace(
        log,
        contract=contract,
        events=log.events + (_event(f"📜 Contract accepted: {task.text}", EventType.INFO, at),),
    )


def complete_contract_task(log: DayLog, *, at: Optional[datetime] = None) -> DayLog:
    if log.contract is None or log.contract.completed_at is not None:
        return log
    moment = at or utcnow()
    return replace(
        log,
        contract=replace(log.contract, completed_at=moment),
        events=log.events + (_event(f"📜 Contract fulfilled: {log.contract.text}", EventType.POSITIVE, moment),),
    )


__all__ = [
    "GATING_CATEGORIES",
    "apply_penalty",
    "attach_contract",
    "collect_carry_overs",
    "complete_bonus_mission",
    "complete_contract_task",
    "complete_quest",
    "create_day_log",
    "fail_quest",
    "filter_assigned",
    "is_assigned",
    "is_time_unlocked",
    "remove_penalty",
    "revert_quest",
    "sync_offline_status",
    "withdraw_bonus",
]
