"""Domain models used by the HabitQuest package."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .dates import Weekday

ASSIGNED_TO_ALL = "all"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_positive(value: int, name: str) -> int:
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero.")
    return value


def _require_non_negative(value: int, name: str) -> int:
    if value < 0:
        raise ValueError(f"{name} cannot be negative.")
    return value


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        # epoch milliseconds, as written by older exports
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return datetime.fromisoformat(value)


class QuestStatus(str, Enum):
    """Lifecycle of a quest instance within one day."""

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


class EventType(str, Enum):
    """Tone of a ledger event, used for colouring the day's history."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    INFO = "info"


class QuestCategory(str, Enum):
    """Fixed set of quest groups shown on the child's board."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    BOSS = "boss"


class CarryOverOrigin(str, Enum):
    """Where a carry-over effect came from."""

    YESTERDAY = "yesterday"
    PREVIOUS_DAYS = "previous_days"


class TemplateKind(str, Enum):
    """Names of the three template tables."""

    DAILY_QUESTS = "daily_quests"
    BONUS_MISSIONS = "bonus_missions"
    PENALTIES = "penalties"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LevelThreshold:
    """One rung of the level ladder."""

    level: int
    xp: int
    reward: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "xp": self.xp, "reward": self.reward}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LevelThreshold":
        return cls(level=int(payload["level"]), xp=int(payload["xp"]), reward=payload.get("reward", ""))


@dataclass(frozen=True, slots=True)
class Settings:
    """Household-wide configuration consumed by the day engine."""

    base_time: int = 60
    max_time: int = 90
    time_step: int = 10
    xp_multiplier_offline: int = 2
    level_thresholds: Tuple[LevelThreshold, ...] = ()
    offline_days_schedule: frozenset[Weekday] = field(default_factory=frozenset)
    offline_days_override: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _require_non_negative(self.base_time, "base_time")
        _require_positive(self.time_step, "time_step")
        if self.max_time < self.base_time:
            raise ValueError("max_time cannot be lower than base_time.")
        if self.xp_multiplier_offline < 1:
            raise ValueError("xp_multiplier_offline must be at least 1.")
        object.__setattr__(self, "level_thresholds", tuple(self.level_thresholds))
        object.__setattr__(
            self,
            "offline_days_schedule",
            frozenset(Weekday(day) for day in self.offline_days_schedule),
        )
        object.__setattr__(self, "offline_days_override", dict(self.offline_days_override))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_time": self.base_time,
            "max_time": self.max_time,
            "time_step": self.time_step,
            "xp_multiplier_offline": self.xp_multiplier_offline,
            "level_thresholds": [threshold.to_dict() for threshold in self.level_thresholds],
            "offline_days_schedule": sorted(int(day) for day in self.offline_days_schedule),
            "offline_days_override": dict(self.offline_days_override),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, defaults: Optional["Settings"] = None) -> "Settings":
        """Build settings from ``payload``, filling absent keys from ``defaults``."""

        base = defaults or cls()
        thresholds = payload.get("level_thresholds")
        return cls(
            base_time=int(payload.get("base_time", base.base_time)),
            max_time=int(payload.get("max_time", base.max_time)),
            time_step=int(payload.get("time_step", base.time_step)),
            xp_multiplier_offline=int(payload.get("xp_multiplier_offline", base.xp_multiplier_offline)),
            level_thresholds=(
                tuple(LevelThreshold.from_dict(item) for item in thresholds)
                if thresholds is not None
                else base.level_thresholds
            ),
            offline_days_schedule=payload.get("offline_days_schedule", base.offline_days_schedule),
            offline_days_override=payload.get("offline_days_override", base.offline_days_override),
        )


# ---------------------------------------------------------------------------
# Task templates
# ---------------------------------------------------------------------------
def _assignment(value: Iterable[str] | str | None) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True, slots=True)
class QuestTemplate:
    """A daily quest stamped onto every matching child's ledger."""

    id: str
    text: str
    category: QuestCategory
    penalty_minutes: int
    icon: str = ""
    has_next_day_consequence: bool = False
    next_day_penalty: int = 0
    xp_reward: int = 0
    assigned_to: Tuple[str, ...] = (ASSIGNED_TO_ALL,)

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", QuestCategory(self.category))
        object.__setattr__(self, "assigned_to", _assignment(self.assigned_to))
        _require_positive(self.penalty_minutes, "penalty_minutes")
        _require_non_negative(self.next_day_penalty, "next_day_penalty")
        _require_non_negative(self.xp_reward, "xp_reward")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category.value,
            "penalty_minutes": self.penalty_minutes,
            "icon": self.icon,
            "has_next_day_consequence": self.has_next_day_consequence,
            "next_day_penalty": self.next_day_penalty,
            "xp_reward": self.xp_reward,
            "assigned_to": list(self.assigned_to),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QuestTemplate":
        return cls(
            id=payload["id"],
            text=payload["text"],
            category=payload["category"],
            penalty_minutes=int(payload["penalty_minutes"]),
            icon=payload.get("icon", ""),
            has_next_day_consequence=bool(payload.get("has_next_day_consequence", False)),
            next_day_penalty=int(payload.get("next_day_penalty") or 0),
            xp_reward=int(payload.get("xp_reward") or 0),
            assigned_to=payload.get("assigned_to", (ASSIGNED_TO_ALL,)),
        )


@dataclass(frozen=True, slots=True)
class BonusMissionTemplate:
    """Extra task a parent can reward with screen minutes."""

    id: str
    text: str
    reward_minutes: int
    icon: str = ""
    multi_use: bool = False
    has_next_day_consequence: bool = False
    next_day_bonus: int = 0
    xp_reward: int = 0
    assigned_to: Tuple[str, ...] = (ASSIGNED_TO_ALL,)

    def __post_init__(self) -> None:
        object.__setattr__(self, "assigned_to", _assignment(self.assigned_to))
        _require_positive(self.reward_minutes, "reward_minutes")
        _require_non_negative(self.next_day_bonus, "next_day_bonus")
        _require_non_negative(self.xp_reward, "xp_reward")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "reward_minutes": self.reward_minutes,
            "icon": self.icon,
            "multi_use": self.multi_use,
            "has_next_day_consequence": self.has_next_day_consequence,
            "next_day_bonus": self.next_day_bonus,
            "xp_reward": self.xp_reward,
            "assigned_to": list(self.assigned_to),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BonusMissionTemplate":
        return cls(
            id=payload["id"],
            text=payload["text"],
            reward_minutes=int(payload["reward_minutes"]),
            icon=payload.get("icon", ""),
            multi_use=bool(payload.get("multi_use", False)),
            has_next_day_consequence=bool(payload.get("has_next_day_consequence", False)),
            next_day_bonus=int(payload.get("next_day_bonus") or 0),
            xp_reward=int(payload.get("xp_reward") or 0),
            assigned_to=payload.get("assigned_to", (ASSIGNED_TO_ALL,)),
        )


@dataclass(frozen=True, slots=True)
class PenaltyTemplate:
    """A misbehaviour that costs screen minutes and optionally XP."""

    id: str
    text: str
    penalty_minutes: int
    icon: str = ""
    multi_use: bool = False
    has_next_day_consequence: bool = False
    next_day_penalty: int = 0
    xp_penalty: int = 0
    assigned_to: Tuple[str, ...] = (ASSIGNED_TO_ALL,)

    def __post_init__(self) -> None:
        object.__setattr__(self, "assigned_to", _assignment(self.assigned_to))
        _require_positive(self.penalty_minutes, "penalty_minutes")
        _require_non_negative(self.next_day_penalty, "next_day_penalty")
        _require_non_negative(self.xp_penalty, "xp_penalty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "penalty_minutes": self.penalty_minutes,
            "icon": self.icon,
            "multi_use": self.multi_use,
            "has_next_day_consequence": self.has_next_day_consequence,
            "next_day_penalty": self.next_day_penalty,
            "xp_penalty": self.xp_penalty,
            "assigned_to": list(self.assigned_to),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PenaltyTemplate":
        return cls(
            id=payload["id"],
            text=payload["text"],
            penalty_minutes=int(payload["penalty_minutes"]),
            icon=payload.get("icon", ""),
            multi_use=bool(payload.get("multi_use", False)),
            has_next_day_consequence=bool(payload.get("has_next_day_consequence", False)),
            next_day_penalty=int(payload.get("next_day_penalty") or 0),
            xp_penalty=int(payload.get("xp_penalty") or 0),
            assigned_to=payload.get("assigned_to", (ASSIGNED_TO_ALL,)),
        )


TaskTemplate = QuestTemplate | BonusMissionTemplate | PenaltyTemplate

_TEMPLATE_TYPES = {
    TemplateKind.DAILY_QUESTS: QuestTemplate,
    TemplateKind.BONUS_MISSIONS: BonusMissionTemplate,
    TemplateKind.PENALTIES: PenaltyTemplate,
}


def template_type(kind: TemplateKind | str) -> type:
    return _TEMPLATE_TYPES[TemplateKind(kind)]


@dataclass(frozen=True, slots=True)
class TaskTemplates:
    """The three template tables the factory and the UI draw from."""

    daily_quests: Tuple[QuestTemplate, ...] = ()
    bonus_missions: Tuple[BonusMissionTemplate, ...] = ()
    penalties: Tuple[PenaltyTemplate, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "daily_quests", tuple(self.daily_quests))
        object.__setattr__(self, "bonus_missions", tuple(self.bonus_missions))
        object.__setattr__(self, "penalties", tuple(self.penalties))

    def of_kind(self, kind: TemplateKind | str) -> Tuple[TaskTemplate, ...]:
        return getattr(self, TemplateKind(kind).value)

    def to_dict(self) -> Dict[str, Any]:
        return {kind.value: [item.to_dict() for item in self.of_kind(kind)] for kind in TemplateKind}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TaskTemplates":
        return cls(
            **{
                kind.value: tuple(template_type(kind).from_dict(item) for item in payload.get(kind.value, ()))
                for kind in TemplateKind
            }
        )


# ---------------------------------------------------------------------------
# Ledger records
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class QuestInstance:
    """A quest stamped onto one day's ledger."""

    id: str
    template_id: str
    text: str
    category: QuestCategory
    penalty_minutes: int
    icon: str = ""
    has_next_day_consequence: bool = False
    next_day_penalty: int = 0
    xp_reward: int = 0
    status: QuestStatus = QuestStatus.PENDING
    xp_awarded: int = 0

    @classmethod
    def from_template(cls, template: QuestTemplate, *, instance_id: str) -> "QuestInstance":
        return cls(
            id=instance_id,
            template_id=template.id,
            text=template.text,
            category=template.category,
            penalty_minutes=template.penalty_minutes,
            icon=template.icon,
            has_next_day_consequence=template.has_next_day_consequence,
            next_day_penalty=template.next_day_penalty,
            xp_reward=template.xp_reward,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "template_id": self.template_id,
            "text": self.text,
            "category": self.category.value,
            "penalty_minutes": self.penalty_minutes,
            "icon": self.icon,
            "has_next_day_consequence": self.has_next_day_consequence,
            "next_day_penalty": self.next_day_penalty,
            "xp_reward": self.xp_reward,
            "status": self.status.value,
            "xp_awarded": self.xp_awarded,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, xp_multiplier: int = 1) -> "QuestInstance":
        """Load a quest; done quests saved before ``xp_awarded`` existed get it recomputed."""

        status = QuestStatus(payload.get("status", QuestStatus.PENDING.value))
        xp_reward = int(payload.get("xp_reward") or 0)
        awarded = payload.get("xp_awarded")
        if awarded is None:
            awarded = xp_reward * xp_multiplier if status is QuestStatus.DONE else 0
        return cls(
            id=payload["id"],
            template_id=payload.get("template_id", ""),
            text=payload["text"],
            category=QuestCategory(payload["category"]),
            penalty_minutes=int(payload["penalty_minutes"]),
            icon=payload.get("icon", ""),
            has_next_day_consequence=bool(payload.get("has_next_day_consequence", False)),
            next_day_penalty=int(payload.get("next_day_penalty") or 0),
            xp_reward=xp_reward,
            status=status,
            xp_awarded=int(awarded),
        )


@dataclass(frozen=True, slots=True)
class BonusEntry:
    """A bonus mission already credited to the day."""

    id: str
    template_id: str
    text: str
    reward_minutes: int
    icon: str = ""
    has_next_day_consequence: bool = False
    next_day_bonus: int = 0
    xp_reward: int = 0
    xp_awarded: int = 0
    completed_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "template_id": self.template_id,
            "text": self.text,
            "reward_minutes": self.reward_minutes,
            "icon": self.icon,
            "has_next_day_consequence": self.has_next_day_consequence,
            "next_day_bonus": self.next_day_bonus,
            "xp_reward": self.xp_reward,
            "xp_awarded": self.xp_awarded,
            "completed_at": self.completed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BonusEntry":
        return cls(
            id=payload["id"],
            template_id=payload.get("template_id", ""),
            text=payload["text"],
            reward_minutes=int(payload["reward_minutes"]),
            icon=payload.get("icon", ""),
            has_next_day_consequence=bool(payload.get("has_next_day_consequence", False)),
            next_day_bonus=int(payload.get("next_day_bonus") or 0),
            xp_reward=int(payload.get("xp_reward") or 0),
            xp_awarded=int(payload.get("xp_awarded") or 0),
            completed_at=_parse_timestamp(payload["completed_at"]) if payload.get("completed_at") else utcnow(),
        )


@dataclass(frozen=True, slots=True)
class PenaltyEntry:
    """A penalty already deducted from the day."""

    id: str
    template_id: str
    text: str
    penalty_minutes: int
    icon: str = ""
    has_next_day_consequence: bool = False
    next_day_penalty: int = 0
    carry_to_next_day: bool = False
    xp_penalty: int = 0
    xp_deducted: int = 0
    applied_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "template_id": self.template_id,
            "text": self.text,
            "penalty_minutes": self.penalty_minutes,
            "icon": self.icon,
            "has_next_day_consequence": self.has_next_day_consequence,
            "next_day_penalty": self.next_day_penalty,
            "carry_to_next_day": self.carry_to_next_day,
            "xp_penalty": self.xp_penalty,
            "xp_deducted": self.xp_deducted,
            "applied_at": self.applied_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PenaltyEntry":
        return cls(
            id=payload["id"],
            template_id=payload.get("template_id", ""),
            text=payload["text"],
            penalty_minutes=int(payload["penalty_minutes"]),
            icon=payload.get("icon", ""),
            has_next_day_consequence=bool(payload.get("has_next_day_consequence", False)),
            next_day_penalty=int(payload.get("next_day_penalty") or 0),
            carry_to_next_day=bool(payload.get("carry_to_next_day", False)),
            xp_penalty=int(payload.get("xp_penalty") or 0),
            xp_deducted=int(payload.get("xp_deducted") or 0),
            applied_at=_parse_timestamp(payload["applied_at"]) if payload.get("applied_at") else utcnow(),
        )


@dataclass(frozen=True, slots=True)
class LedgerEvent:
    """One line of the day's human readable history."""

    id: str
    text: str
    type: EventType
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "text": self.text,
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LedgerEvent":
        return cls(
            id=payload["id"],
            text=payload["text"],
            type=EventType(payload["type"]),
            timestamp=_parse_timestamp(payload["timestamp"]),
        )


@dataclass(frozen=True, slots=True)
class CarryOverEffect:
    """A signed base-time adjustment inherited from earlier days.

    ``delta_minutes`` is subtracted from the base time: positive values cost
    minutes, negative values grant them.
    """

    source_text: str
    delta_minutes: int
    origin: CarryOverOrigin = CarryOverOrigin.YESTERDAY

    @property
    def is_gain(self) -> bool:
        return self.delta_minutes < 0

    @property
    def text(self) -> str:
        when = "yesterday" if self.origin is CarryOverOrigin.YESTERDAY else "previous days"
        if self.is_gain:
            return f'Bonus from {when}: "{self.source_text}" → +{-self.delta_minutes} min to base time'
        return f'Consequence from {when}: "{self.source_text}" → -{self.delta_minutes} min from base time'

    def relabelled(self, origin: CarryOverOrigin) -> "CarryOverEffect":
        return CarryOverEffect(source_text=self.source_text, delta_minutes=self.delta_minutes, origin=origin)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_text": self.source_text,
            "delta_minutes": self.delta_minutes,
            "origin": self.origin.value,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CarryOverEffect":
        return cls(
            source_text=payload["source_text"],
            delta_minutes=int(payload["delta_minutes"]),
            origin=CarryOverOrigin(payload.get("origin", CarryOverOrigin.YESTERDAY.value)),
        )


@dataclass(frozen=True, slots=True)
class ContractTask:
    """A task a parent offers in exchange for lifting a curse."""

    text: str
    icon: str = "⚔️"

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "icon": self.icon}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ContractTask":
        return cls(text=payload["text"], icon=payload.get("icon") or "⚔️")


@dataclass(frozen=True, slots=True)
class DayContract:
    """An accepted contract task pinned to the day it was accepted on."""

    id: str
    text: str
    icon: str = "⚔️"
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "icon": self.icon,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DayContract":
        completed = payload.get("completed_at")
        return cls(
            id=payload["id"],
            text=payload["text"],
            icon=payload.get("icon") or "⚔️",
            completed_at=_parse_timestamp(completed) if completed else None,
        )


@dataclass(frozen=True, slots=True)
class DayLog:
    """A child's ledger for a single date. Replaced, never mutated.

    ``xp_earned`` is the net XP of the day and goes negative when penalties
    outweigh what was earned.
    """

    date: str
    base_time: int
    max_time: int
    current_time: int
    is_offline_day: bool = False
    xp_multiplier: int = 1
    xp_earned: int = 0
    quests: Tuple[QuestInstance, ...] = ()
    bonuses: Tuple[BonusEntry, ...] = ()
    penalties: Tuple[PenaltyEntry, ...] = ()
    events: Tuple[LedgerEvent, ...] = ()
    carry_over_effects: Tuple[CarryOverEffect, ...] = ()
    deferred_carry_overs: Tuple[CarryOverEffect, ...] = ()
    contract: Optional[DayContract] = None
    child_id: Optional[str] = None

    is_compacted = False

    def find_quest(self, quest_id: str) -> Optional[QuestInstance]:
        return next((quest for quest in self.quests if quest.id == quest_id), None)

    def find_bonus(self, bonus_id: str) -> Optional[BonusEntry]:
        return next((bonus for bonus in self.bonuses if bonus.id == bonus_id), None)

    def find_penalty(self, penalty_id: str) -> Optional[PenaltyEntry]:
        return next((penalty for penalty in self.penalties if penalty.id == penalty_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "child_id": self.child_id,
            "base_time": self.base_time,
            "max_time": self.max_time,
            "current_time": self.current_time,
            "is_offline_day": self.is_offline_day,
            "xp_multiplier": self.xp_multiplier,
            "xp_earned": self.xp_earned,
            "quests": [quest.to_dict() for quest in self.quests],
            "bonuses": [bonus.to_dict() for bonus in self.bonuses],
            "penalties": [penalty.to_dict() for penalty in self.penalties],
            "events": [event.to_dict() for event in self.events],
            "carry_over_effects": [effect.to_dict() for effect in self.carry_over_effects],
            "deferred_carry_overs": [effect.to_dict() for effect in self.deferred_carry_overs],
            "contract": self.contract.to_dict() if self.contract else None,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DayLog":
        multiplier = int(payload.get("xp_multiplier") or 1)
        contract = payload.get("contract")
        return cls(
            date=payload["date"],
            child_id=payload.get("child_id"),
            base_time=int(payload["base_time"]),
            max_time=int(payload["max_time"]),
            current_time=int(payload["current_time"]),
            is_offline_day=bool(payload.get("is_offline_day", False)),
            xp_multiplier=multiplier,
            xp_earned=int(payload.get("xp_earned") or 0),
            quests=tuple(QuestInstance.from_dict(item, xp_multiplier=multiplier) for item in payload.get("quests", ())),
            bonuses=tuple(BonusEntry.from_dict(item) for item in payload.get("bonuses", ())),
            penalties=tuple(PenaltyEntry.from_dict(item) for item in payload.get("penalties", ())),
            events=tuple(LedgerEvent.from_dict(item) for item in payload.get("events", ())),
            carry_over_effects=tuple(
                CarryOverEffect.from_dict(item) for item in payload.get("carry_over_effects", ())
            ),
            deferred_carry_overs=tuple(
                CarryOverEffect.from_dict(item) for item in payload.get("deferred_carry_overs", ())
            ),
            contract=DayContract.from_dict(contract) if contract else None,
        )


@dataclass(frozen=True, slots=True)
class DaySummary:
    """Aggregate statistics for one ledger."""

    completed_quests: int
    failed_quests: int
    total_quests: int
    total_bonus_minutes: int
    total_penalty_minutes: int
    quest_penalty_minutes: int
    next_day_carry_overs: Tuple[PenaltyEntry, ...]
    xp_earned: int
    base_time: int
    max_time: int
    current_time: int

    @property
    def completion_ratio(self) -> float:
        if not self.total_quests:
            return 0.0
        return self.completed_quests / self.total_quests


@dataclass(frozen=True, slots=True)
class CompactedDayLog:
    """Lossy, terminal projection of a :class:`DayLog` kept after the retention window."""

    date: str
    base_time: int
    max_time: int
    current_time: int
    xp_earned: int = 0
    xp_multiplier: int = 1
    is_offline_day: bool = False
    completed_quests: int = 0
    failed_quests: int = 0
    total_quests: int = 0
    total_bonus_minutes: int = 0
    total_penalty_minutes: int = 0
    quest_penalty_minutes: int = 0
    bonus_count: int = 0
    penalty_count: int = 0
    child_id: Optional[str] = None

    is_compacted = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "child_id": self.child_id,
            "is_compacted": True,
            "base_time": self.base_time,
            "max_time": self.max_time,
            "current_time": self.current_time,
            "xp_earned": self.xp_earned,
            "xp_multiplier": self.xp_multiplier,
            "is_offline_day": self.is_offline_day,
            "completed_quests": self.completed_quests,
            "failed_quests": self.failed_quests,
            "total_quests": self.total_quests,
            "total_bonus_minutes": self.total_bonus_minutes,
            "total_penalty_minutes": self.total_penalty_minutes,
            "quest_penalty_minutes": self.quest_penalty_minutes,
            "bonus_count": self.bonus_count,
            "penalty_count": self.penalty_count,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CompactedDayLog":
        counts = {
            name: int(payload.get(name) or 0)
            for name in (
                "xp_earned",
                "completed_quests",
                "failed_quests",
                "total_quests",
                "total_bonus_minutes",
                "total_penalty_minutes",
                "quest_penalty_minutes",
                "bonus_count",
                "penalty_count",
            )
        }
        return cls(
            date=payload["date"],
            child_id=payload.get("child_id"),
            base_time=int(payload["base_time"]),
            max_time=int(payload["max_time"]),
            current_time=int(payload["current_time"]),
            xp_multiplier=int(payload.get("xp_multiplier") or 1),
            is_offline_day=bool(payload.get("is_offline_day", False)),
            **counts,
        )


StoredDayLog = DayLog | CompactedDayLog


def day_log_from_dict(payload: Mapping[str, Any]) -> StoredDayLog:
    """Rebuild a stored ledger, full or compacted."""

    if payload.get("is_compacted"):
        return CompactedDayLog.from_dict(payload)
    return DayLog.from_dict(payload)


__all__ = [
    "ASSIGNED_TO_ALL",
    "BonusEntry",
    "BonusMissionTemplate",
    "CarryOverEffect",
    "CarryOverOrigin",
    "CompactedDayLog",
    "ContractTask",
    "DayContract",
    "DayLog",
    "DaySummary",
    "EventType",
    "LedgerEvent",
    "LevelThreshold",
    "PenaltyEntry",
    "PenaltyTemplate",
    "QuestCategory",
    "QuestInstance",
    "QuestStatus",
    "QuestTemplate",
    "Settings",
    "StoredDayLog",
    "TaskTemplate",
    "TaskTemplates",
    "TemplateKind",
    "day_log_from_dict",
    "template_type",
    "utcnow",
]
