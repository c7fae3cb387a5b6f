"""Application state held by the service layer and persisted as one JSON document."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .defaults import CURSE_DEFAULT_NEGOTIATION_THRESHOLD, DEFAULT_SETTINGS, DEFAULT_TEMPLATES, VOUCHER_TIME_BONUS
from .models import (
    ContractTask,
    Settings,
    StoredDayLog,
    TaskTemplates,
    _parse_timestamp,
    _require_non_negative,
    _require_positive,
    day_log_from_dict,
    utcnow,
)


@dataclass(frozen=True, slots=True)
class Voucher:
    """An item in a child's inventory, such as a screen-time bonus to redeem later."""

    id: str
    name: str
    value: int
    expires_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    type: str = VOUCHER_TIME_BONUS

    def __post_init__(self) -> None:
        name = self.name.strip()
        if not name:
            raise ValueError("Voucher name must not be empty.")
        object.__setattr__(self, "name", name)
        _require_positive(self.value, "value")

    def is_expired(self, at: Optional[datetime] = None) -> bool:
        return self.expires_at is not None and (at or utcnow()) >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "value": self.value,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Voucher":
        expires = payload.get("expires_at")
        created = payload.get("created_at")
        return cls(
            id=payload["id"],
            name=payload["name"],
            value=int(payload["value"]),
            expires_at=_parse_timestamp(expires) if expires is not None else None,
            created_at=_parse_timestamp(created) if created is not None else utcnow(),
            type=payload.get("type") or VOUCHER_TIME_BONUS,
        )


@dataclass(frozen=True, slots=True)
class CurseState:
    """A curse blocks a child until enough points are gathered.

    Once ``progress`` reaches ``negotiation_threshold`` the child may ask the
    parent for a contract task that lifts the curse early.
    """

    is_active: bool = False
    required_points: int = 0
    gathered_points: int = 0
    negotiation_threshold: float = CURSE_DEFAULT_NEGOTIATION_THRESHOLD

    def __post_init__(self) -> None:
        _require_non_negative(self.required_points, "required_points")
        _require_non_negative(self.gathered_points, "gathered_points")
        if not 0 <= self.negotiation_threshold <= 1:
            raise ValueError("negotiation_threshold must be between 0 and 1.")

    @property
    def progress(self) -> float:
        if self.required_points <= 0:
            return 1.0
        return min(1.0, self.gathered_points / self.required_points)

    @property
    def can_negotiate(self) -> bool:
        return self.is_active and self.progress >= self.negotiation_threshold

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_active": self.is_active,
            "required_points": self.required_points,
            "gathered_points": self.gathered_points,
            "negotiation_threshold": self.negotiation_threshold,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CurseState":
        threshold = payload.get("negotiation_threshold")
        return cls(
            is_active=bool(payload.get("is_active", False)),
            required_points=max(0, int(payload.get("required_points") or 0)),
            gathered_points=max(0, int(payload.get("gathered_points") or 0)),
            negotiation_threshold=(
                float(threshold) if threshold is not None else CURSE_DEFAULT_NEGOTIATION_THRESHOLD
            ),
        )


class NegotiationStatus(str, Enum):
    REQUESTED = "requested"
    OFFERED = "offered"
    ACCEPTED = "accepted"


@dataclass(frozen=True, slots=True)
class Negotiation:
    """Where a child's request to lift a curse stands."""

    status: NegotiationStatus
    timestamp: datetime = field(default_factory=utcnow)
    contract_task: Optional[ContractTask] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "contract_task": self.contract_task.to_dict() if self.contract_task else None,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Negotiation":
        task = payload.get("contract_task")
        timestamp = payload.get("timestamp")
        return cls(
            status=NegotiationStatus(payload["status"]),
            timestamp=_parse_timestamp(timestamp) if timestamp is not None else utcnow(),
            contract_task=ContractTask.from_dict(task) if task else None,
        )


@dataclass(frozen=True, slots=True)
class ChildProfile:
    """A child in the household with lifetime XP and optional personal time limits."""

    id: str
    name: str
    avatar: str = ""
    xp: int = 0
    base_time: Optional[int] = None
    max_time: Optional[int] = None
    inventory: Tuple[Voucher, ...] = ()
    active_curse: CurseState = CurseState()
    negotiation: Optional[Negotiation] = None

    def effective_settings(self, settings: Settings) -> Settings:
        """Return ``settings`` with this child's own time limits applied."""

        if self.base_time is None and self.max_time is None:
            return settings
        return replace(
            settings,
            base_time=self.base_time if self.base_time is not None else settings.base_time,
            max_time=self.max_time if self.max_time is not None else settings.max_time,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "avatar": self.avatar,
            "xp": self.xp,
            "base_time": self.base_time,
            "max_time": self.max_time,
            "inventory": [voucher.to_dict() for voucher in self.inventory],
            "active_curse": self.active_curse.to_dict(),
            "negotiation": self.negotiation.to_dict() if self.negotiation else None,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, settings: Settings = DEFAULT_SETTINGS) -> "ChildProfile":
        """Load a profile, backfilling time limits, inventory and curse missing from older exports."""

        base_time = payload.get("base_time")
        max_time = payload.get("max_time")
        curse = payload.get("active_curse")
        negotiation = payload.get("negotiation")
        return cls(
            id=payload["id"],
            name=payload["name"],
            avatar=payload.get("avatar", ""),
            xp=max(0, int(payload.get("xp") or 0)),
            base_time=int(base_time) if base_time is not None else settings.base_time,
            max_time=int(max_time) if max_time is not None else settings.max_time,
            inventory=tuple(Voucher.from_dict(item) for item in payload.get("inventory") or ()),
            active_curse=CurseState.from_dict(curse) if curse else CurseState(),
            negotiation=Negotiation.from_dict(negotiation) if negotiation else None,
        )


@dataclass(frozen=True, slots=True)
class AppState:
    """Everything the household stores. Replaced as a whole on every change."""

    parent_pin_hash: Optional[str] = None
    is_setup: bool = False
    children: Tuple[ChildProfile, ...] = ()
    templates: TaskTemplates = DEFAULT_TEMPLATES
    settings: Settings = DEFAULT_SETTINGS
    day_logs: Mapping[str, Mapping[str, StoredDayLog]] = field(default_factory=dict)

    def find_child(self, child_id: str) -> Optional[ChildProfile]:
        return next((child for child in self.children if child.id == child_id), None)

    def logs_for(self, child_id: str) -> Mapping[str, StoredDayLog]:
        return self.day_logs.get(child_id, {})

    def with_child(self, updated: ChildProfile) -> "AppState":
        children = tuple(updated if child.id == updated.id else child for child in self.children)
        return replace(self, children=children)

    def with_day_log(self, child_id: str, log: StoredDayLog) -> "AppState":
        child_logs = dict(self.logs_for(child_id))
        child_logs[log.date] = log
        day_logs = dict(self.day_logs)
        day_logs[child_id] = child_logs
        return replace(self, day_logs=day_logs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parent_pin_hash": self.parent_pin_hash,
            "is_setup": self.is_setup,
            "children": [child.to_dict() for child in self.children],
            "task_templates": self.templates.to_dict(),
            "settings": self.settings.to_dict(),
            "day_logs": {
                child_id: {key: log.to_dict() for key, log in logs.items()}
                for child_id, logs in self.day_logs.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AppState":
        """Rebuild state, merging settings keys added since the data was written."""

        settings = Settings.from_dict(payload.get("settings") or {}, defaults=DEFAULT_SETTINGS)
        templates_payload = payload.get("task_templates")
        return cls(
            parent_pin_hash=payload.get("parent_pin_hash"),
            is_setup=bool(payload.get("is_setup", False)),
            children=tuple(
                ChildProfile.from_dict(item, settings=settings) for item in payload.get("children", ())
            ),
            templates=TaskTemplates.from_dict(templates_payload) if templates_payload is not None else DEFAULT_TEMPLATES,
            settings=settings,
            day_logs={
                child_id: {key: day_log_from_dict(item) for key, item in logs.items()}
                for child_id, logs in (payload.get("day_logs") or {}).items()
            },
        )


def create_initial_state() -> AppState:
    return AppState()


__all__ = [
    "AppState",
    "ChildProfile",
    "CurseState",
    "Negotiation",
    "NegotiationStatus",
    "Voucher",
    "create_initial_state",
]
