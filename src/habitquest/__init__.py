"""HabitQuest package: a gamified daily chore ledger for children."""

from .admin import AuditLog, Role, UndoManager
from .dates import Weekday, get_today_str, is_offline_day, is_yesterday
from .defaults import DEFAULT_SETTINGS, DEFAULT_TEMPLATES
from .engine import (
    apply_penalty,
    attach_contract,
    complete_bonus_mission,
    complete_contract_task,
    complete_quest,
    create_day_log,
    fail_quest,
    filter_assigned,
    is_time_unlocked,
    remove_penalty,
    revert_quest,
    sync_offline_status,
    withdraw_bonus,
)
from .exceptions import (
    ChildNotFoundError,
    DayLogCompactedError,
    HabitQuestError,
    ImportFormatError,
    NegotiationError,
    PinLockedError,
    RoleNotPermittedError,
    TemplateNotFoundError,
    TemplateUnavailableError,
    VoucherNotFoundError,
)
from .leveling import LevelInfo, compute_level
from .models import (
    BonusEntry,
    BonusMissionTemplate,
    CarryOverEffect,
    CarryOverOrigin,
    CompactedDayLog,
    ContractTask,
    DayContract,
    DayLog,
    DaySummary,
    EventType,
    LedgerEvent,
    LevelThreshold,
    PenaltyEntry,
    PenaltyTemplate,
    QuestCategory,
    QuestInstance,
    QuestStatus,
    QuestTemplate,
    Settings,
    TaskTemplates,
    TemplateKind,
    day_log_from_dict,
)
from .ops import StructuredLogger
from .persistence import StateRepository, export_data, import_data
from .security import PinGuard, hash_pin, verify_pin
from .service import HabitQuest
from .state import AppState, ChildProfile, CurseState, Negotiation, NegotiationStatus, Voucher
from .summary import calculate_day_summary, compact_day_log, compact_old_logs

__all__ = [
    "AppState",
    "AuditLog",
    "BonusEntry",
    "BonusMissionTemplate",
    "CarryOverEffect",
    "CarryOverOrigin",
    "ChildNotFoundError",
    "ChildProfile",
    "CompactedDayLog",
    "ContractTask",
    "CurseState",
    "DEFAULT_SETTINGS",
    "DEFAULT_TEMPLATES",
    "DayContract",
    "DayLog",
    "DayLogCompactedError",
    "DaySummary",
    "EventType",
    "HabitQuest",
    "HabitQuestError",
    "ImportFormatError",
    "LedgerEvent",
    "LevelInfo",
    "LevelThreshold",
    "Negotiation",
    "NegotiationError",
    "NegotiationStatus",
    "PenaltyEntry",
    "PenaltyTemplate",
    "PinGuard",
    "PinLockedError",
    "QuestCategory",
    "QuestInstance",
    "QuestStatus",
    "QuestTemplate",
    "Role",
    "RoleNotPermittedError",
    "Settings",
    "StateRepository",
    "StructuredLogger",
    "TaskTemplates",
    "TemplateKind",
    "TemplateNotFoundError",
    "TemplateUnavailableError",
    "UndoManager",
    "Voucher",
    "VoucherNotFoundError",
    "Weekday",
    "apply_penalty",
    "attach_contract",
    "calculate_day_summary",
    "compact_day_log",
    "compact_old_logs",
    "complete_bonus_mission",
    "complete_contract_task",
    "complete_quest",
    "compute_level",
    "create_day_log",
    "day_log_from_dict",
    "export_data",
    "fail_quest",
    "filter_assigned",
    "get_today_str",
    "hash_pin",
    "import_data",
    "is_offline_day",
    "is_time_unlocked",
    "is_yesterday",
    "remove_penalty",
    "revert_quest",
    "sync_offline_status",
    "verify_pin",
    "withdraw_bonus",
]
