"""Default templates and settings for a fresh household."""

from __future__ import annotations

from typing import Dict, Tuple
from uuid import uuid4

from .models import (
    BonusMissionTemplate,
    LevelThreshold,
    PenaltyTemplate,
    QuestCategory,
    QuestTemplate,
    Settings,
    TaskTemplates,
)

DEFAULT_SETTINGS = Settings(
    base_time=60,
    max_time=90,
    time_step=10,
    xp_multiplier_offline=2,
    level_thresholds=(
        LevelThreshold(level=1, xp=500, reward="🍦 Ice cream"),
        LevelThreshold(level=2, xp=1500, reward="📖 A new book"),
        LevelThreshold(level=3, xp=3000, reward="🎮 An extra hour of gaming"),
        LevelThreshold(level=4, xp=5000, reward="🎬 Cinema with a parent"),
        LevelThreshold(level=5, xp=8000, reward="🎁 Surprise!"),
    ),
    offline_days_schedule=frozenset(),
    offline_days_override={},
)


def _quest(
    template_id: str,
    text: str,
    category: QuestCategory,
    icon: str,
    *,
    next_day_penalty: int = 0,
    xp_reward: int = 100,
) -> QuestTemplate:
    return QuestTemplate(
        id=template_id,
        text=text,
        category=category,
        penalty_minutes=10,
        icon=icon,
        has_next_day_consequence=next_day_penalty > 0,
        next_day_penalty=next_day_penalty,
        xp_reward=xp_reward,
    )


DEFAULT_DAILY_QUESTS: Tuple[QuestTemplate, ...] = (
    _quest("dq-1", "Get up with the alarm (no grumbling!)", QuestCategory.MORNING, "⏰"),
    _quest("dq-2", "Get dressed and wash up", QuestCategory.MORNING, "👕"),
    _quest("dq-3", "Backpack packed", QuestCategory.MORNING, "🎒"),
    _quest("dq-4", "Out of the house by 7:45", QuestCategory.MORNING, "🚪"),
    _quest("dq-5", "Backpack back in its place", QuestCategory.AFTERNOON, "🎒"),
    _quest("dq-6", "Lunchbox and bottle to the kitchen", QuestCategory.AFTERNOON, "🍱"),
    _quest("dq-7", "School and homework report", QuestCategory.AFTERNOON, "📋"),
    _quest("dq-8", "Clean floor in the bedroom", QuestCategory.EVENING, "🧹", next_day_penalty=10),
    _quest("dq-9", "Dirty clothes in the basket, clean ones in the wardrobe", QuestCategory.EVENING, "👔", next_day_penalty=10),
    _quest("dq-10", "Go to bed on schedule", QuestCategory.BOSS, "🌙", next_day_penalty=10, xp_reward=150),
)

DEFAULT_BONUS_MISSIONS: Tuple[BonusMissionTemplate, ...] = (
    BonusMissionTemplate(id="bm-1", text="Look after the gecko", reward_minutes=10, icon="🦎", xp_reward=150),
    BonusMissionTemplate(id="bm-2", text="Play with the cat", reward_minutes=10, icon="🐈", xp_reward=150),
    BonusMissionTemplate(id="bm-3", text="Fold the laundry", reward_minutes=10, icon="👕", xp_reward=150),
    BonusMissionTemplate(id="bm-4", text="Empty the dishwasher", reward_minutes=10, icon="🍽️", xp_reward=150),
    BonusMissionTemplate(id="bm-5", text="Vacuum the bedroom", reward_minutes=10, icon="🌪️", xp_reward=150),
    BonusMissionTemplate(id="bm-6", text="Mop the floor", reward_minutes=10, icon="💦", xp_reward=150),
    BonusMissionTemplate(id="bm-7", text="Take out the rubbish", reward_minutes=10, icon="🗑️", xp_reward=150),
    BonusMissionTemplate(
        id="bm-8", text="Read a book (20 min)", reward_minutes=10, icon="📖", multi_use=True, xp_reward=150
    ),
)

DEFAULT_PENALTIES: Tuple[PenaltyTemplate, ...] = (
    PenaltyTemplate(id="pn-1", text="Playing past the time limit", penalty_minutes=10, icon="⏰"),
    PenaltyTemplate(id="pn-2", text="Missing homework / unprepared (owned up)", penalty_minutes=20, icon="🎒"),
    PenaltyTemplate(
        id="pn-3",
        text="Note in the school diary",
        penalty_minutes=40,
        icon="📓",
        multi_use=True,
        has_next_day_consequence=True,
        next_day_penalty=10,
    ),
    PenaltyTemplate(
        id="pn-4",
        text="Messy room at night",
        penalty_minutes=10,
        icon="🌪️",
        has_next_day_consequence=True,
        next_day_penalty=10,
    ),
    PenaltyTemplate(id="pn-5", text="Arguing / bad behaviour", penalty_minutes=10, icon="🌩️", multi_use=True),
)

DEFAULT_TEMPLATES = TaskTemplates(
    daily_quests=DEFAULT_DAILY_QUESTS,
    bonus_missions=DEFAULT_BONUS_MISSIONS,
    penalties=DEFAULT_PENALTIES,
)

CATEGORY_LABELS: Dict[QuestCategory, Tuple[str, int]] = {
    QuestCategory.MORNING: ("☀️ Morning Express", 0),
    QuestCategory.AFTERNOON: ("🏫 Back to Base", 1),
    QuestCategory.EVENING: ("🧹 Clean Zone", 2),
    QuestCategory.BOSS: ("🏰 Day Finale", 3),
}

AVATAR_OPTIONS: Tuple[str, ...] = (
    "🦸", "🧙", "🦊", "🐲", "🦁", "🐯", "🦄", "🐼",
    "🦅", "⚡", "🌟", "🎮", "🏆", "🚀", "🎯", "🛡️",
)

CURSE_DEFAULT_NEGOTIATION_THRESHOLD = 0.7
VOUCHER_TIME_BONUS = "time_bonus"


def generate_id() -> str:
    return str(uuid4())


__all__ = [
    "AVATAR_OPTIONS",
    "CATEGORY_LABELS",
    "CURSE_DEFAULT_NEGOTIATION_THRESHOLD",
    "DEFAULT_BONUS_MISSIONS",
    "DEFAULT_DAILY_QUESTS",
    "DEFAULT_PENALTIES",
    "DEFAULT_SETTINGS",
    "DEFAULT_TEMPLATES",
    "VOUCHER_TIME_BONUS",
    "generate_id",
]
