from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from habitquest.admin import Role
from habitquest.defaults import DEFAULT_SETTINGS, DEFAULT_TEMPLATES
from habitquest.engine import create_day_log
from habitquest.exceptions import (
    ChildNotFoundError,
    DayLogCompactedError,
    NegotiationError,
    PinLockedError,
    RoleNotPermittedError,
    TemplateNotFoundError,
    TemplateUnavailableError,
    VoucherNotFoundError,
)
from habitquest.models import BonusMissionTemplate, PenaltyTemplate, QuestCategory, QuestStatus, TemplateKind
from habitquest.ops import StructuredLogger
from habitquest.persistence import StateRepository, create_db_engine
from habitquest.security import PinGuard
from habitquest.service import HabitQuest
from habitquest.state import AppState, ChildProfile, CurseState, NegotiationStatus


class Clock:
    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture()
def repository() -> StateRepository:
    return StateRepository(create_db_engine("sqlite://"))


@pytest.fixture()
def clock() -> Clock:
    return Clock(date(2025, 1, 15))


@pytest.fixture()
def service(repository: StateRepository, clock: Clock) -> HabitQuest:
    app = HabitQuest(repository, logger=StructuredLogger(), clock=clock)
    app.load()
    return app


def test_fresh_household_starts_with_defaults(service: HabitQuest) -> None:
    assert service.children == ()
    assert service.state.templates == DEFAULT_TEMPLATES
    assert service.state.settings == DEFAULT_SETTINGS
    assert service.logger.events("state_loaded")[0]["fresh"] is True


def test_add_child_and_lookup(service: HabitQuest) -> None:
    ava = service.add_child("  Ava ", "🦊")

    assert ava.name == "Ava"
    assert ava.base_time == DEFAULT_SETTINGS.base_time
    assert service.get_child(ava.id) == ava
    with pytest.raises(ChildNotFoundError):
        service.get_child("nobody")
    with pytest.raises(ValueError):
        service.add_child("   ")


def test_day_log_is_created_once(service: HabitQuest) -> None:
    ava = service.add_child("Ava")

    first = service.get_or_create_day_log(ava.id)
    second = service.get_or_create_day_log(ava.id)

    assert first is second
    assert first.date == "2025-01-15"
    assert first.child_id == ava.id
    assert len(service.logger.events("day_log_created")) == 1


def test_unknown_child_cannot_get_a_day_log(service: HabitQuest) -> None:
    with pytest.raises(ChildNotFoundError):
        service.get_or_create_day_log("nobody")


def test_completed_quest_adds_lifetime_xp(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    quest = service.get_or_create_day_log(ava.id).quests[0]

    log = service.complete_quest(ava.id, quest.id)

    assert log.quests[0].status is QuestStatus.DONE
    assert service.get_child(ava.id).xp == quest.xp_reward
    assert service.get_day_log(ava.id) is log
    assert service.summary_for(ava.id).completed_quests == 1


def test_no_op_leaves_no_trace(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    quest_id = service.get_or_create_day_log(ava.id).quests[0].id
    done = service.complete_quest(ava.id, quest_id)

    again = service.complete_quest(ava.id, quest_id)

    assert again is done
    assert len(service.audit_log.entries(action="complete_quest")) == 1
    assert len(service.logger.events("ledger_updated")) == 1


def test_parent_only_actions(service: HabitQuest) -> None:
    ava = service.add_child("Ava")

    with pytest.raises(RoleNotPermittedError):
        service.complete_bonus_mission(ava.id, "bm-1", actor=Role.CHILD)

    log = service.apply_penalty(ava.id, "pn-1")
    with pytest.raises(RoleNotPermittedError):
        service.remove_penalty(ava.id, log.penalties[0].id, actor=Role.CHILD)

    restored = service.remove_penalty(ava.id, log.penalties[0].id)
    assert restored.penalties == ()


def test_single_use_templates_are_used_up_for_the_day(service: HabitQuest) -> None:
    ava = service.add_child("Ava")

    service.complete_bonus_mission(ava.id, "bm-1")
    with pytest.raises(TemplateUnavailableError):
        service.complete_bonus_mission(ava.id, "bm-1")
    assert "bm-1" not in {template.id for template in service.available_bonus_missions(ava.id)}

    service.complete_bonus_mission(ava.id, "bm-8")
    log = service.complete_bonus_mission(ava.id, "bm-8")
    assert [bonus.template_id for bonus in log.bonuses] == ["bm-1", "bm-8", "bm-8"]

    service.apply_penalty(ava.id, "pn-1")
    with pytest.raises(TemplateUnavailableError):
        service.apply_penalty(ava.id, "pn-1")


def test_withdrawn_bonus_frees_the_template(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    log = service.complete_bonus_mission(ava.id, "bm-1")

    service.withdraw_bonus(ava.id, log.bonuses[0].id)

    assert service.get_child(ava.id).xp == 0
    assert "bm-1" in {template.id for template in service.available_bonus_missions(ava.id)}


def test_assignment_limits_bonus_missions(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    ben = service.add_child("Ben")
    mission = service.add_template(
        TemplateKind.BONUS_MISSIONS,
        BonusMissionTemplate(id="", text="Feed the cat", reward_minutes=5, assigned_to=(ben.id,)),
    )

    assert mission.id
    assert mission in service.templates_for(ben.id).bonus_missions
    assert mission not in service.templates_for(ava.id).bonus_missions
    with pytest.raises(TemplateUnavailableError):
        service.complete_bonus_mission(ava.id, mission.id)
    assert service.complete_bonus_mission(ben.id, mission.id).bonuses[0].text == "Feed the cat"


def test_template_management(service: HabitQuest) -> None:
    updated = service.update_template(TemplateKind.PENALTIES, "pn-1", penalty_minutes=15)

    assert updated.penalty_minutes == 15
    assert service.get_template("penalties", "pn-1") == updated

    service.remove_template(TemplateKind.PENALTIES, "pn-1")
    with pytest.raises(TemplateNotFoundError):
        service.get_template(TemplateKind.PENALTIES, "pn-1")


def test_carry_over_reaches_the_next_day(service: HabitQuest, clock: Clock) -> None:
    ava = service.add_child("Ava")
    clock.today = date(2025, 1, 14)
    service.apply_penalty(ava.id, "pn-3", carry_to_next_day=True)

    clock.today = date(2025, 1, 15)
    log = service.get_or_create_day_log(ava.id)

    assert log.base_time == DEFAULT_SETTINGS.base_time - 10
    assert len(log.carry_over_effects) == 1
    assert [entry.date for entry in service.history(ava.id)] == ["2025-01-14", "2025-01-15"]


def test_child_time_limits_override_household_settings(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    service.update_child(ava.id, base_time=30, max_time=45)

    log = service.get_or_create_day_log(ava.id)

    assert log.base_time == 30
    assert log.max_time == 45
    with pytest.raises(ValueError):
        service.update_child(ava.id, base_time=60)


def test_level_follows_lifetime_xp(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    service.update_child(ava.id, xp=600)

    info = service.level_for(ava.id)

    assert info.level == 1
    assert info.next_level_xp == 1500


def test_undo_restores_ledger_and_xp(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    quest_id = service.get_or_create_day_log(ava.id).quests[0].id
    service.complete_quest(ava.id, quest_id)

    assert service.undo_last_action() == f"complete_quest {quest_id}"

    assert service.get_or_create_day_log(ava.id).quests[0].status is QuestStatus.PENDING
    assert service.get_child(ava.id).xp == 0
    with pytest.raises(LookupError):
        service.undo_last_action()


def test_undo_window_expires(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    service.apply_penalty(ava.id, "pn-1")

    with pytest.raises(TimeoutError):
        service.undo_last_action(at=datetime.now(timezone.utc) + timedelta(minutes=10))


def test_pin_setup_and_lockout(repository: StateRepository, clock: Clock) -> None:
    app = HabitQuest(repository, logger=StructuredLogger(), clock=clock, pin_guard=PinGuard(max_attempts=2))
    app.load()
    assert not app.check_pin("1234")

    app.setup_parent_pin("1234")

    assert app.state.is_setup
    assert app.check_pin("1234")
    assert not app.check_pin("0000")
    assert not app.check_pin("9999")
    with pytest.raises(PinLockedError):
        app.check_pin("1234")


def test_state_is_persisted_between_sessions(service: HabitQuest, repository: StateRepository, clock: Clock) -> None:
    ava = service.add_child("Ava")
    quest_id = service.get_or_create_day_log(ava.id).quests[0].id
    service.complete_quest(ava.id, quest_id)

    reopened = HabitQuest(repository, logger=StructuredLogger(), clock=clock)
    reopened.load()

    assert reopened.get_child(ava.id).xp == service.get_child(ava.id).xp
    assert reopened.get_day_log(ava.id) == service.get_day_log(ava.id)


def test_old_ledgers_are_compacted_on_load(repository: StateRepository, clock: Clock) -> None:
    child = ChildProfile(id="ava", name="Ava", base_time=60, max_time=90)
    old = create_day_log("2024-12-01", DEFAULT_TEMPLATES, DEFAULT_SETTINGS, "ava")
    recent = create_day_log("2025-01-14", DEFAULT_TEMPLATES, DEFAULT_SETTINGS, "ava")
    repository.save(AppState(children=(child,)).with_day_log("ava", old).with_day_log("ava", recent))

    app = HabitQuest(repository, logger=StructuredLogger(), clock=clock)
    app.load()

    assert app.get_day_log("ava", "2024-12-01").is_compacted
    assert app.get_day_log("ava", "2025-01-14") == recent
    assert repository.load().logs_for("ava")["2024-12-01"].is_compacted
    assert app.logger.events("logs_compacted")[0]["count"] == 1
    assert app.summary_for("ava", "2024-12-01") is None
    assert app.compact_logs() == 0
    with pytest.raises(DayLogCompactedError):
        app.get_or_create_day_log("ava", "2024-12-01")


def test_export_and_import_through_the_service(service: HabitQuest, clock: Clock, tmp_path) -> None:
    ava = service.add_child("Ava")
    service.complete_bonus_mission(ava.id, "bm-2")

    path = service.export_state(tmp_path)

    other = HabitQuest(logger=StructuredLogger(), clock=clock)
    other.import_state(path)
    assert path.name == "habitquest-backup-2025-01-15.json"
    assert other.children == service.children
    assert other.get_day_log(ava.id) == service.get_day_log(ava.id)
    assert other.audit_log.latest().action == "import_state"


def test_audit_and_log_entries_can_be_filtered_by_child(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    ben = service.add_child("Ben")
    service.apply_penalty(ava.id, "pn-1")
    service.complete_bonus_mission(ben.id, "bm-1")

    ava_actions = [entry.action for entry in service.audit_log.entries(child_id=ava.id)]
    assert ava_actions == ["add_child", "apply_penalty"]
    assert [entry.child_id for entry in service.audit_log.entries(actor=Role.PARENT, action="complete_bonus_mission")] == [ben.id]
    assert {entry["event"] for entry in service.logger.tail(child=ben.id)} == {"child_added", "day_log_created", "ledger_updated"}


def test_lifetime_xp_follows_interleaved_penalty_and_revert(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    service.update_child(ava.id, xp=500)
    rude = service.add_template(
        TemplateKind.PENALTIES, PenaltyTemplate(id="", text="Rude words", penalty_minutes=5, xp_penalty=50)
    )
    quest = service.get_or_create_day_log(ava.id).quests[0]

    service.complete_quest(ava.id, quest.id)
    log = service.apply_penalty(ava.id, rude.id)
    service.revert_quest(ava.id, quest.id)
    assert service.get_child(ava.id).xp == 450
    log = service.remove_penalty(ava.id, log.penalties[0].id)

    assert log.xp_earned == 0
    assert service.get_child(ava.id).xp == 500


def test_lifetime_xp_never_drops_below_zero(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    rude = service.add_template(
        TemplateKind.PENALTIES, PenaltyTemplate(id="", text="Rude words", penalty_minutes=5, xp_penalty=50)
    )

    log = service.apply_penalty(ava.id, rude.id)

    assert log.xp_earned == -50
    assert service.get_child(ava.id).xp == 0


def test_pending_undo_names_the_latest_action(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    assert service.pending_undo is None

    log = service.apply_penalty(ava.id, "pn-1")

    assert service.pending_undo == "apply_penalty pn-1"
    service.undo_last_action()
    assert service.pending_undo is None
    assert service.get_day_log(ava.id).penalties == ()
    assert log.penalties


def test_time_unlocks_after_school_quests(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    log = service.get_or_create_day_log(ava.id)
    assert not service.is_time_unlocked(ava.id)

    for quest in log.quests:
        if quest.category in (QuestCategory.MORNING, QuestCategory.AFTERNOON):
            service.complete_quest(ava.id, quest.id)

    assert service.is_time_unlocked(ava.id)


def test_base_time_moves_in_time_steps(service: HabitQuest) -> None:
    ava = service.add_child("Ava")

    assert service.step_base_time(ava.id, -2).base_time == DEFAULT_SETTINGS.base_time - 2 * DEFAULT_SETTINGS.time_step
    assert service.step_base_time(ava.id, 10).base_time == DEFAULT_SETTINGS.max_time
    assert service.step_base_time(ava.id, -20).base_time == 0


def test_switching_today_offline_in_settings_updates_the_ledger(service: HabitQuest, clock: Clock) -> None:
    ava = service.add_child("Ava")
    clock.today = date(2025, 1, 14)
    service.apply_penalty(ava.id, "pn-3", carry_to_next_day=True)
    clock.today = date(2025, 1, 15)
    online = service.get_or_create_day_log(ava.id)

    service.update_settings(offline_days_override={"2025-01-15": True})
    offline = service.get_day_log(ava.id)

    assert online.base_time == DEFAULT_SETTINGS.base_time - 10
    assert offline.is_offline_day
    assert offline.xp_multiplier == DEFAULT_SETTINGS.xp_multiplier_offline
    assert offline.base_time == DEFAULT_SETTINGS.base_time
    assert offline.deferred_carry_overs == online.carry_over_effects
    assert service.logger.events("offline_status_synced")[0]["offline"] is True

    service.update_settings(offline_days_override={})

    assert service.get_day_log(ava.id) == online


def test_stored_ledger_is_synced_when_accessed(repository: StateRepository, clock: Clock) -> None:
    child = ChildProfile(id="ava", name="Ava", base_time=60, max_time=90)
    online = create_day_log("2025-01-15", DEFAULT_TEMPLATES, DEFAULT_SETTINGS, "ava")
    offline_settings = replace(DEFAULT_SETTINGS, offline_days_override={"2025-01-15": True})
    repository.save(AppState(children=(child,), settings=offline_settings).with_day_log("ava", online))
    app = HabitQuest(repository, logger=StructuredLogger(), clock=clock)
    app.load()

    log = app.get_or_create_day_log("ava")

    assert log.is_offline_day
    assert log.xp_multiplier == offline_settings.xp_multiplier_offline
    assert repository.load().logs_for("ava")["2025-01-15"].is_offline_day
    assert app.get_or_create_day_log("ava") is log


def test_vouchers_in_the_inventory(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    now = datetime.now(timezone.utc)

    keep = service.give_voucher(ava.id, "Extra cartoon", 20)
    stale = service.give_voucher(ava.id, "Late night", 15, expires_at=now - timedelta(days=1))

    assert service.get_child(ava.id).inventory == (keep, stale)
    assert service.active_vouchers(ava.id) == (keep,)
    with pytest.raises(RoleNotPermittedError):
        service.give_voucher(ava.id, "Self-service", 60, actor=Role.CHILD)
    with pytest.raises(ValueError):
        service.give_voucher(ava.id, "Nothing", 0)

    assert service.remove_voucher(ava.id, keep.id) == keep
    assert service.get_child(ava.id).inventory == (stale,)
    with pytest.raises(VoucherNotFoundError):
        service.remove_voucher(ava.id, keep.id)
    assert [entry.action for entry in service.audit_log.entries(child_id=ava.id)][-1] == "remove_voucher"


def test_curse_points_and_lifting(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    assert service.update_curse_points(ava.id, 5) == CurseState()
    with pytest.raises(ValueError):
        service.apply_curse(ava.id, 0)
    with pytest.raises(ValueError):
        service.apply_curse(ava.id, 10, negotiation_threshold=1.5)
    with pytest.raises(RoleNotPermittedError):
        service.apply_curse(ava.id, 10, actor=Role.CHILD)

    curse = service.apply_curse(ava.id, 10)
    assert curse.negotiation_threshold == 0.7
    updated = service.update_curse_points(ava.id, -3, required_delta=2)

    assert updated.gathered_points == 0
    assert updated.required_points == 12
    service.lift_curse(ava.id)
    assert service.get_child(ava.id).active_curse == CurseState()
    assert service.get_child(ava.id).negotiation is None


def test_negotiation_ends_a_curse_through_a_contract(service: HabitQuest) -> None:
    ava = service.add_child("Ava")
    service.apply_curse(ava.id, 10)
    service.update_curse_points(ava.id, 6)
    with pytest.raises(NegotiationError):
        service.request_negotiation(ava.id)

    service.update_curse_points(ava.id, 1)
    assert service.request_negotiation(ava.id).status is NegotiationStatus.REQUESTED
    with pytest.raises(NegotiationError):
        service.request_negotiation(ava.id)
    with pytest.raises(RoleNotPermittedError):
        service.create_contract(ava.id, "Tidy the garage", actor=Role.CHILD)

    service.create_contract(ava.id, "Tidy the garage")
    assert service.respond_to_contract(ava.id, False) is None
    assert service.get_child(ava.id).negotiation is None
    assert service.get_child(ava.id).active_curse.is_active
    with pytest.raises(NegotiationError):
        service.respond_to_contract(ava.id, True)

    offer = service.create_contract(ava.id, "Tidy the garage", icon="🧰")
    log = service.respond_to_contract(ava.id, True)

    assert offer.contract_task.icon == "🧰"
    assert log.contract.text == "Tidy the garage"
    assert service.get_day_log(ava.id).contract == log.contract
    assert service.get_child(ava.id).negotiation.status is NegotiationStatus.ACCEPTED

    service.complete_contract(ava.id)

    assert service.get_child(ava.id).active_curse == CurseState()
    assert service.get_child(ava.id).negotiation is None
    assert service.get_day_log(ava.id).contract.completed_at is not None
    with pytest.raises(NegotiationError):
        service.complete_contract(ava.id)
