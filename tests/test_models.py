import pytest

from habitquest.dates import Weekday
from habitquest.defaults import (
    CATEGORY_LABELS,
    DEFAULT_BONUS_MISSIONS,
    DEFAULT_DAILY_QUESTS,
    DEFAULT_PENALTIES,
    DEFAULT_SETTINGS,
    DEFAULT_TEMPLATES,
)
from habitquest.engine import apply_penalty, attach_contract, complete_quest, create_day_log
from habitquest.models import (
    BonusMissionTemplate,
    ContractTask,
    DayLog,
    PenaltyTemplate,
    QuestCategory,
    QuestTemplate,
    Settings,
    TaskTemplates,
    day_log_from_dict,
)


def test_default_settings_are_consistent() -> None:
    assert 0 < DEFAULT_SETTINGS.base_time < DEFAULT_SETTINGS.max_time
    assert DEFAULT_SETTINGS.xp_multiplier_offline >= 1
    xps = [threshold.xp for threshold in DEFAULT_SETTINGS.level_thresholds]
    assert xps == sorted(set(xps))
    assert [threshold.level for threshold in DEFAULT_SETTINGS.level_thresholds] == [1, 2, 3, 4, 5]


def test_default_templates_have_unique_ids_and_known_categories() -> None:
    ids = [item.id for item in DEFAULT_DAILY_QUESTS + DEFAULT_BONUS_MISSIONS + DEFAULT_PENALTIES]
    assert len(ids) == len(set(ids))
    assert {quest.category for quest in DEFAULT_DAILY_QUESTS} <= set(CATEGORY_LABELS)
    assert any(quest.category is QuestCategory.BOSS for quest in DEFAULT_DAILY_QUESTS)


def test_settings_validation() -> None:
    with pytest.raises(ValueError):
        Settings(base_time=100, max_time=90)
    with pytest.raises(ValueError):
        Settings(xp_multiplier_offline=0)
    with pytest.raises(ValueError):
        Settings(base_time=-1)
    with pytest.raises(ValueError):
        Settings(time_step=0)


def test_template_validation() -> None:
    with pytest.raises(ValueError):
        QuestTemplate(id="q", text="Zero", category=QuestCategory.MORNING, penalty_minutes=0)
    with pytest.raises(ValueError):
        QuestTemplate(id="q", text="Bad", category="lunch", penalty_minutes=5)
    with pytest.raises(ValueError):
        BonusMissionTemplate(id="b", text="Zero", reward_minutes=0)
    with pytest.raises(ValueError):
        PenaltyTemplate(id="p", text="Negative", penalty_minutes=5, xp_penalty=-1)


def test_settings_from_partial_payload_fills_defaults() -> None:
    settings = Settings.from_dict({"base_time": 45, "offline_days_schedule": [0, 6]}, defaults=DEFAULT_SETTINGS)

    assert settings.base_time == 45
    assert settings.max_time == DEFAULT_SETTINGS.max_time
    assert settings.level_thresholds == DEFAULT_SETTINGS.level_thresholds
    assert settings.offline_days_schedule == frozenset({Weekday.SUNDAY, Weekday.SATURDAY})
    assert Settings.from_dict(settings.to_dict()) == settings


def test_templates_survive_json_conversion() -> None:
    assert TaskTemplates.from_dict(DEFAULT_TEMPLATES.to_dict()) == DEFAULT_TEMPLATES


def test_day_log_survives_json_conversion() -> None:
    log = create_day_log("2025-01-15", DEFAULT_TEMPLATES, DEFAULT_SETTINGS, "ava")
    log = complete_quest(log, log.quests[0].id)
    log = apply_penalty(log, DEFAULT_PENALTIES[2], True)
    log = attach_contract(log, ContractTask(text="Tidy the garage", icon="🧰"))

    restored = day_log_from_dict(log.to_dict())

    assert isinstance(restored, DayLog)
    assert restored == log


def test_done_quests_from_older_data_get_their_awarded_xp_back() -> None:
    log = create_day_log("2025-01-15", DEFAULT_TEMPLATES, DEFAULT_SETTINGS)
    payload = log.to_dict()
    payload["xp_multiplier"] = 2
    payload["quests"][0]["status"] = "done"
    for quest in payload["quests"]:
        del quest["xp_awarded"]

    restored = DayLog.from_dict(payload)

    assert restored.quests[0].xp_awarded == 2 * restored.quests[0].xp_reward
    assert restored.quests[1].xp_awarded == 0
    assert restored.contract is None
