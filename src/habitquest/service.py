"""High level service that owns the household state and drives the day engine."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from . import engine
from .admin import AuditLog, Role, UndoManager
from .config import LOG_PATH, RETENTION_DAYS, UNDO_WINDOW_SECONDS
from .dates import DateLike, format_date, get_today_str
from .defaults import AVATAR_OPTIONS, CURSE_DEFAULT_NEGOTIATION_THRESHOLD, generate_id
from .exceptions import (
    ChildNotFoundError,
    DayLogCompactedError,
    NegotiationError,
    PinLockedError,
    RoleNotPermittedError,
    TemplateNotFoundError,
    TemplateUnavailableError,
    VoucherNotFoundError,
)
from .leveling import LevelInfo, compute_level
from .models import (
    BonusMissionTemplate,
    ContractTask,
    DayLog,
    DaySummary,
    PenaltyTemplate,
    StoredDayLog,
    TaskTemplate,
    TaskTemplates,
    TemplateKind,
)
from .ops import StructuredLogger
from .persistence import StateRepository, export_data, import_data
from .security import PinGuard, hash_pin, verify_pin
from .state import (
    AppState,
    ChildProfile,
    CurseState,
    Negotiation,
    NegotiationStatus,
    Voucher,
    create_initial_state,
)
from .summary import calculate_day_summary, compact_old_logs, has_changes


class HabitQuest:
    """Keep the latest :class:`AppState`, run engine operations on it and persist the result.

    Engine functions stay pure; this class is the only place where a new state
    replaces the old one, and every replacement is saved straight away.
    """

    __slots__ = (
        "_state",
        "_repository",
        "_logger",
        "_audit_log",
        "_undo",
        "_pin_guard",
        "_clock",
        "_retention_days",
    )

    def __init__(
        self,
        repository: Optional[StateRepository] = None,
        *,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], date]] = None,
        retention_days: int = RETENTION_DAYS,
        undo_window_seconds: int = UNDO_WINDOW_SECONDS,
        pin_guard: Optional[PinGuard] = None,
    ) -> None:
        self._state = create_initial_state()
        self._repository = repository
        self._logger = logger or StructuredLogger(path=LOG_PATH)
        self._audit_log = AuditLog()
        self._undo = UndoManager(window_seconds=undo_window_seconds)
        self._pin_guard = pin_guard or PinGuard()
        self._clock = clock or date.today
        self._retention_days = retention_days

    # ------------------------------------------------------------------
    # State handling
    # ------------------------------------------------------------------
    @property
    def state(self) -> AppState:
        return self._state

    @property
    def logger(self) -> StructuredLogger:
        return self._logger

    @property
    def audit_log(self) -> AuditLog:
        return self._audit_log

    def today(self) -> str:
        return get_today_str(self._clock())

    def load(self) -> AppState:
        """Load stored state (or start fresh) and compact ledgers past the retention window."""

        stored = self._repository.load() if self._repository else None
        self._state = stored or create_initial_state()
        compacted = self._compact(self._retention_days)
        if compacted and self._repository:
            self._repository.save(self._state)
        self._logger.log(
            "state_loaded",
            fresh=stored is None,
            children=len(self._state.children),
            compacted=compacted,
        )
        return self._state

    def _commit(self, state: AppState) -> AppState:
        self._state = state
        if self._repository:
            self._repository.save(state)
        return state

    # ------------------------------------------------------------------
    # Parent PIN
    # ------------------------------------------------------------------
    def setup_parent_pin(self, pin: str) -> None:
        if not pin:
            raise ValueError("PIN cannot be empty.")
        self._commit(replace(self._state, parent_pin_hash=hash_pin(pin), is_setup=True))
        self._audit_log.record(Role.PARENT, "setup_pin", "household")

    def check_pin(self, pin: str, *, at: Optional[datetime] = None) -> bool:
        if self._pin_guard.is_locked(at=at):
            raise PinLockedError("Too many wrong PIN attempts. Try again later.")
        stored = self._state.parent_pin_hash
        if not stored:
            return False
        valid = verify_pin(pin, stored)
        self._pin_guard.record_attempt(success=valid, at=at)
        if not valid:
            self._logger.log("pin_failed")
        return valid

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------
    @property
    def children(self) -> Tuple[ChildProfile, ...]:
        return self._state.children

    def get_child(self, child_id: str) -> ChildProfile:
        child = self._state.find_child(child_id)
        if child is None:
            raise ChildNotFoundError(f"Child '{child_id}' does not exist.")
        return child

    def add_child(self, name: str, avatar: str = AVATAR_OPTIONS[0]) -> ChildProfile:
        if not name.strip():
            raise ValueError("Child name cannot be empty.")
        settings = self._state.settings
        child = ChildProfile(
            id=generate_id(),
            name=name.strip(),
            avatar=avatar,
            base_time=settings.base_time,
            max_time=settings.max_time,
        )
        self._commit(replace(self._state, children=self._state.children + (child,)))
        self._audit_log.record(Role.PARENT, "add_child", child.id, child_id=child.id, details={"name": child.name})
        self._logger.log("child_added", child=child.id, name=child.name)
        return child

    def update_child(self, child_id: str, **changes: Any) -> ChildProfile:
        updated = replace(self.get_child(child_id), **changes)
        if updated.base_time is not None and updated.max_time is not None and updated.base_time > updated.max_time:
            raise ValueError("base_time cannot exceed max_time.")
        self._commit(self._state.with_child(updated))
        self._audit_log.record(Role.PARENT, "update_child", child_id, child_id=child_id, details=dict(changes))
        return updated

    def step_base_time(self, child_id: str, steps: int) -> ChildProfile:
        """Move the child's base time by ``steps`` times the household ``time_step``, within 0..max_time."""

        child = self.get_child(child_id)
        settings = child.effective_settings(self._state.settings)
        base_time = max(0, min(settings.max_time, settings.base_time + steps * settings.time_step))
        return self.update_child(child_id, base_time=base_time, max_time=settings.max_time)

    def remove_child(self, child_id: str) -> None:
        self.get_child(child_id)
        day_logs = {key: logs for key, logs in self._state.day_logs.items() if key != child_id}
        children = tuple(child for child in self._state.children if child.id != child_id)
        self._commit(replace(self._state, children=children, day_logs=day_logs))
        self._undo.clear()
        self._audit_log.record(Role.PARENT, "remove_child", child_id, child_id=child_id)

    # ------------------------------------------------------------------
    # Templates and settings
    # ------------------------------------------------------------------
    def get_template(self, kind: TemplateKind | str, template_id: str) -> TaskTemplate:
        for template in self._state.templates.of_kind(kind):
            if template.id == template_id:
                return template
        raise TemplateNotFoundError(f"No {TemplateKind(kind).value} template '{template_id}'.")

    def _set_templates(self, kind: TemplateKind | str, items: Tuple[TaskTemplate, ...]) -> None:
        templates = replace(self._state.templates, **{TemplateKind(kind).value: items})
        self._commit(replace(self._state, templates=templates))

    def add_template(self, kind: TemplateKind | str, template: TaskTemplate) -> TaskTemplate:
        created = replace(template, id=generate_id())
        self._set_templates(kind, self._state.templates.of_kind(kind) + (created,))
        self._audit_log.record(Role.PARENT, "add_template", created.id, details={"kind": TemplateKind(kind).value})
        return created

    def update_template(self, kind: TemplateKind | str, template_id: str, **changes: Any) -> TaskTemplate:
        updated = replace(self.get_template(kind, template_id), **changes)
        items = tuple(updated if item.id == template_id else item for item in self._state.templates.of_kind(kind))
        self._set_templates(kind, items)
        self._audit_log.record(Role.PARENT, "update_template", template_id, details=dict(changes))
        return updated

    def remove_template(self, kind: TemplateKind | str, template_id: str) -> None:
        self.get_template(kind, template_id)
        items = tuple(item for item in self._state.templates.of_kind(kind) if item.id != template_id)
        self._set_templates(kind, items)
        self._audit_log.record(Role.PARENT, "remove_template", template_id)

    def templates_for(self, child_id: str) -> TaskTemplates:
        """Return only the templates assigned to ``child_id``."""

        templates = self._state.templates
        return TaskTemplates(
            daily_quests=engine.filter_assigned(templates.daily_quests, child_id),
            bonus_missions=engine.filter_assigned(templates.bonus_missions, child_id),
            penalties=engine.filter_assigned(templates.penalties, child_id),
        )

    def update_settings(self, **changes: Any) -> None:
        """Change household settings and re-check today's ledgers against the offline schedule."""

        settings = replace(self._state.settings, **changes)
        self._commit(replace(self._state, settings=settings))
        self._audit_log.record(Role.PARENT, "update_settings", "household", details={k: str(v) for k, v in changes.items()})
        today = self.today()
        for child in self._state.children:
            log = self._state.logs_for(child.id).get(today)
            if isinstance(log, DayLog):
                self._sync_offline(child.id, log)

    # ------------------------------------------------------------------
    # Day logs
    # ------------------------------------------------------------------
    def get_day_log(self, child_id: str, day: Optional[DateLike] = None) -> Optional[StoredDayLog]:
        key = format_date(day) if day is not None else self.today()
        return self._state.logs_for(child_id).get(key)

    def get_or_create_day_log(self, child_id: str, day: Optional[DateLike] = None) -> DayLog:
        """Return the child's ledger for ``day``, creating it once if missing."""

        key = format_date(day) if day is not None else self.today()
        logs = self._state.logs_for(child_id)
        existing = logs.get(key)
        if isinstance(existing, DayLog):
            return self._sync_offline(child_id, existing)
        if existing is not None:
            raise DayLogCompactedError(f"The ledger for {key} has been compacted and can no longer change.")
        child = self.get_child(child_id)
        earlier = sorted(date_key for date_key in logs if date_key < key)
        previous = logs[earlier[-1]] if earlier else None
        log = engine.create_day_log(
            key,
            self._state.templates,
            child.effective_settings(self._state.settings),
            child_id,
            previous,
        )
        self._commit(self._state.with_day_log(child_id, log))
        self._logger.log(
            "day_log_created",
            child=child_id,
            date=key,
            base_time=log.base_time,
            offline=log.is_offline_day,
            carry_overs=len(log.carry_over_effects),
            deferred=len(log.deferred_carry_overs),
        )
        return log

    def _sync_offline(self, child_id: str, log: DayLog) -> DayLog:
        child = self.get_child(child_id)
        synced = engine.sync_offline_status(log, child.effective_settings(self._state.settings))
        if synced is log:
            return log
        self._commit(self._state.with_day_log(child_id, synced))
        self._logger.log(
            "offline_status_synced",
            child=child_id,
            date=log.date,
            offline=synced.is_offline_day,
            base_time=synced.base_time,
            current_time=synced.current_time,
        )
        return synced

    def is_time_unlocked(self, child_id: str) -> bool:
        return engine.is_time_unlocked(self.get_or_create_day_log(child_id))

    def history(self, child_id: str) -> Tuple[StoredDayLog, ...]:
        logs = self._state.logs_for(child_id)
        return tuple(logs[key] for key in sorted(logs))

    def summary_for(self, child_id: str, day: Optional[DateLike] = None) -> Optional[DaySummary]:
        log = self.get_day_log(child_id, day)
        if not isinstance(log, DayLog):
            return None
        return calculate_day_summary(log)

    def level_for(self, child_id: str) -> LevelInfo:
        return compute_level(self.get_child(child_id).xp, self._state.settings.level_thresholds)

    def compact_logs(self, retention_days: Optional[int] = None) -> int:
        compacted = self._compact(self._retention_days if retention_days is None else retention_days)
        if compacted:
            self._commit(self._state)
        return compacted

    def _compact(self, retention_days: int) -> int:
        today = self._clock()
        day_logs: Dict[str, Dict[str, StoredDayLog]] = {}
        compacted = 0
        for child_id, logs in self._state.day_logs.items():
            result = compact_old_logs(logs, retention_days, today=today)
            if has_changes(logs, result):
                compacted += sum(1 for key in result if result[key] is not logs[key])
            day_logs[child_id] = result
        if compacted:
            self._state = replace(self._state, day_logs=day_logs)
            self._logger.log("logs_compacted", count=compacted, retention_days=retention_days)
        return compacted

    # ------------------------------------------------------------------
    # Ledger events
    # ------------------------------------------------------------------
    def complete_quest(self, child_id: str, quest_id: str, *, actor: Role = Role.CHILD) -> DayLog:
        return self._apply(child_id, actor, "complete_quest", quest_id, lambda log: engine.complete_quest(log, quest_id))

    def fail_quest(self, child_id: str, quest_id: str, *, actor: Role = Role.PARENT) -> DayLog:
        return self._apply(child_id, actor, "fail_quest", quest_id, lambda log: engine.fail_quest(log, quest_id))

    def revert_quest(self, child_id: str, quest_id: str, *, actor: Role = Role.PARENT) -> DayLog:
        return self._apply(child_id, actor, "revert_quest", quest_id, lambda log: engine.revert_quest(log, quest_id))

    def available_bonus_missions(self, child_id: str) -> Tuple[BonusMissionTemplate, ...]:
        """Bonus missions still open today: assigned to the child and not a used-up single-use one."""

        log = self.get_or_create_day_log(child_id)
        used = {bonus.template_id for bonus in log.bonuses}
        return tuple(
            template
            for template in engine.filter_assigned(self._state.templates.bonus_missions, child_id)
            if template.multi_use or template.id not in used
        )

    def available_penalties(self, child_id: str) -> Tuple[PenaltyTemplate, ...]:
        log = self.get_or_create_day_log(child_id)
        used = {penalty.template_id for penalty in log.penalties}
        return tuple(
            template
            for template in engine.filter_assigned(self._state.templates.penalties, child_id)
            if template.multi_use or template.id not in used
        )

    def complete_bonus_mission(self, child_id: str, template_id: str, *, actor: Role = Role.PARENT) -> DayLog:
        self._require_role(actor, "complete_bonus_mission", Role.PARENT)
        template = self.get_template(TemplateKind.BONUS_MISSIONS, template_id)
        if template not in self.available_bonus_missions(child_id):
            raise TemplateUnavailableError(f"Bonus mission '{template.text}' is not available today.")
        return self._apply(
            child_id, actor, "complete_bonus_mission", template_id, lambda log: engine.complete_bonus_mission(log, template)
        )

    def withdraw_bonus(self, child_id: str, bonus_id: str, *, actor: Role = Role.CHILD) -> DayLog:
        return self._apply(child_id, actor, "withdraw_bonus", bonus_id, lambda log: engine.withdraw_bonus(log, bonus_id))

    def apply_penalty(
        self,
        child_id: str,
        template_id: str,
        *,
        carry_to_next_day: bool = False,
        actor: Role = Role.PARENT,
    ) -> DayLog:
        template = self.get_template(TemplateKind.PENALTIES, template_id)
        if template not in self.available_penalties(child_id):
            raise TemplateUnavailableError(f"Penalty '{template.text}' is not available today.")
        return self._apply(
            child_id,
            actor,
            "apply_penalty",
            template_id,
            lambda log: engine.apply_penalty(log, template, carry_to_next_day),
        )

    def remove_penalty(self, child_id: str, penalty_id: str, *, actor: Role = Role.PARENT) -> DayLog:
        self._require_role(actor, "remove_penalty", Role.PARENT)
        return self._apply(child_id, actor, "remove_penalty", penalty_id, lambda log: engine.remove_penalty(log, penalty_id))

    def undo_last_action(self, *, at: Optional[datetime] = None) -> str:
        """Restore the ledger and XP from before the latest ledger change and return its label."""

        return self._undo.undo(at=at)

    @property
    def pending_undo(self) -> Optional[str]:
        """Label of the action :meth:`undo_last_action` would revert, if any."""

        return self._undo.pending_label

    def _require_role(self, actor: Role, action: str, *allowed: Role) -> None:
        if actor not in allowed:
            raise RoleNotPermittedError(f"{actor.value} may not {action.replace('_', ' ')}.")

    def _apply(
        self,
        child_id: str,
        actor: Role,
        action: str,
        target: str,
        mutate: Callable[[DayLog], DayLog],
    ) -> DayLog:
        current = self.get_or_create_day_log(child_id)
        updated = mutate(current)
        if updated is current:
            return current
        child = self.get_child(child_id)
        xp_delta = updated.xp_earned - current.xp_earned
        state = self._state.with_day_log(child_id, updated)
        if xp_delta:
            state = state.with_child(replace(child, xp=max(0, child.xp + xp_delta)))
        self._commit(state)
        self._undo.register(lambda: self._restore(child_id, current, child.xp), label=f"{action} {target}")
        self._audit_log.record(actor, action, target, child_id=child_id, details={"date": current.date})
        self._logger.log(
            "ledger_updated",
            child=child_id,
            date=current.date,
            action=action,
            actor=actor.value,
            xp_delta=xp_delta,
            current_time=updated.current_time,
        )
        return updated

    def _restore(self, child_id: str, log: DayLog, xp: int) -> None:
        child = self.get_child(child_id)
        self._commit(self._state.with_day_log(child_id, log).with_child(replace(child, xp=xp)))
        self._audit_log.record(Role.PARENT, "undo", log.date, child_id=child_id)

    # ------------------------------------------------------------------
    # Vouchers
    # ------------------------------------------------------------------
    def _save_child(self, updated: ChildProfile, actor: Role, action: str, target: str, **details: Any) -> ChildProfile:
        self._commit(self._state.with_child(updated))
        self._audit_log.record(actor, action, target, child_id=updated.id, details=details)
        self._logger.log(action, child=updated.id, **details)
        return updated

    def give_voucher(
        self,
        child_id: str,
        name: str,
        value: int,
        *,
        expires_at: Optional[datetime] = None,
        actor: Role = Role.PARENT,
    ) -> Voucher:
        self._require_role(actor, "give_voucher", Role.PARENT)
        child = self.get_child(child_id)
        voucher = Voucher(id=generate_id(), name=name, value=value, expires_at=expires_at)
        self._save_child(
            replace(child, inventory=child.inventory + (voucher,)),
            actor,
            "give_voucher",
            voucher.id,
            name=voucher.name,
            value=voucher.value,
        )
        return voucher

    def remove_voucher(self, child_id: str, voucher_id: str, *, actor: Role = Role.CHILD) -> Voucher:
        """Take a voucher out of the inventory, whether redeemed by the child or revoked by a parent."""

        child = self.get_child(child_id)
        voucher = next((item for item in child.inventory if item.id == voucher_id), None)
        if voucher is None:
            raise VoucherNotFoundError(f"Voucher '{voucher_id}' is not in {child.name}'s inventory.")
        inventory = tuple(item for item in child.inventory if item.id != voucher_id)
        self._save_child(replace(child, inventory=inventory), actor, "remove_voucher", voucher_id, name=voucher.name)
        return voucher

    def active_vouchers(self, child_id: str, *, at: Optional[datetime] = None) -> Tuple[Voucher, ...]:
        return tuple(voucher for voucher in self.get_child(child_id).inventory if not voucher.is_expired(at))

    # ------------------------------------------------------------------
    # Curses and negotiation
    # ------------------------------------------------------------------
    def apply_curse(
        self,
        child_id: str,
        required_points: int,
        negotiation_threshold: float = CURSE_DEFAULT_NEGOTIATION_THRESHOLD,
        *,
        actor: Role = Role.PARENT,
    ) -> CurseState:
        """Start a curse; any running negotiation is dropped."""

        self._require_role(actor, "apply_curse", Role.PARENT)
        if required_points <= 0:
            raise ValueError("required_points must be greater than zero.")
        child = self.get_child(child_id)
        curse = CurseState(
            is_active=True,
            required_points=required_points,
            negotiation_threshold=negotiation_threshold,
        )
        self._save_child(
            replace(child, active_curse=curse, negotiation=None),
            actor,
            "apply_curse",
            child_id,
            required_points=required_points,
            negotiation_threshold=negotiation_threshold,
        )
        return curse

    def lift_curse(self, child_id: str, *, actor: Role = Role.PARENT) -> None:
        self._require_role(actor, "lift_curse", Role.PARENT)
        child = self.get_child(child_id)
        self._save_child(replace(child, active_curse=CurseState(), negotiation=None), actor, "lift_curse", child_id)

    def update_curse_points(
        self,
        child_id: str,
        gathered_delta: int,
        required_delta: int = 0,
        *,
        actor: Role = Role.PARENT,
    ) -> CurseState:
        """Adjust the curse counters, never below zero. Without an active curse nothing changes."""

        self._require_role(actor, "update_curse_points", Role.PARENT)
        child = self.get_child(child_id)
        curse = child.active_curse
        if not curse.is_active:
            return curse
        updated = replace(
            curse,
            gathered_points=max(0, curse.gathered_points + gathered_delta),
            required_points=max(0, curse.required_points + required_delta),
        )
        self._save_child(
            replace(child, active_curse=updated),
            actor,
            "update_curse_points",
            child_id,
            gathered_points=updated.gathered_points,
            required_points=updated.required_points,
        )
        return updated

    def request_negotiation(self, child_id: str, *, actor: Role = Role.CHILD) -> Negotiation:
        child = self.get_child(child_id)
        if not child.active_curse.can_negotiate:
            raise NegotiationError("Not enough curse points gathered to ask for a contract.")
        if child.negotiation is not None:
            raise NegotiationError(f"A negotiation is already {child.negotiation.status.value}.")
        negotiation = Negotiation(status=NegotiationStatus.REQUESTED)
        self._save_child(replace(child, negotiation=negotiation), actor, "request_negotiation", child_id)
        return negotiation

    def create_contract(
        self,
        child_id: str,
        text: str,
        icon: str = "⚔️",
        *,
        actor: Role = Role.PARENT,
    ) -> Negotiation:
        """Offer a contract task that ends the curse once the child carries it out."""

        self._require_role(actor, "create_contract", Role.PARENT)
        if not text.strip():
            raise ValueError("Contract task cannot be empty.")
        child = self.get_child(child_id)
        if not child.active_curse.is_active:
            raise NegotiationError(f"{child.name} has no active curse.")
        if child.negotiation is not None and child.negotiation.status is NegotiationStatus.ACCEPTED:
            raise NegotiationError("The current contract has already been accepted.")
        negotiation = Negotiation(
            status=NegotiationStatus.OFFERED,
            contract_task=ContractTask(text=text.strip(), icon=icon or "⚔️"),
        )
        self._save_child(replace(child, negotiation=negotiation), actor, "create_contract", child_id, text=text.strip())
        return negotiation

    def respond_to_contract(self, child_id: str, accept: bool, *, actor: Role = Role.CHILD) -> Optional[DayLog]:
        """Accept or reject an offered contract.

        Rejecting clears the negotiation and keeps the curse. Accepting pins the
        task to today's ledger and returns that ledger.
        """

        child = self.get_child(child_id)
        negotiation = child.negotiation
        if negotiation is None or negotiation.status is not NegotiationStatus.OFFERED or negotiation.contract_task is None:
            raise NegotiationError("There is no contract offer to respond to.")
        if not accept:
            self._save_child(replace(child, negotiation=None), actor, "reject_contract", child_id)
            return None
        log = engine.attach_contract(self.get_or_create_day_log(child_id), negotiation.contract_task)
        self._state = self._state.with_day_log(child_id, log)
        self._save_child(
            replace(child, negotiation=replace(negotiation, status=NegotiationStatus.ACCEPTED)),
            actor,
            "accept_contract",
            child_id,
            date=log.date,
            text=negotiation.contract_task.text,
        )
        return log

    def complete_contract(self, child_id: str, *, actor: Role = Role.PARENT) -> None:
        """Confirm the contract task is done: the curse ends and the ledger entry is stamped."""

        self._require_role(actor, "complete_contract", Role.PARENT)
        child = self.get_child(child_id)
        if child.negotiation is None or child.negotiation.status is not NegotiationStatus.ACCEPTED:
            raise NegotiationError("There is no accepted contract to complete.")
        logs = self._state.logs_for(child_id)
        for key in sorted(logs, reverse=True):
            log = logs[key]
            if isinstance(log, DayLog) and log.contract is not None and log.contract.completed_at is None:
                self._state = self._state.with_day_log(child_id, engine.complete_contract_task(log))
                break
        self._save_child(
            replace(child, active_curse=CurseState(), negotiation=None), actor, "complete_contract", child_id
        )

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------
    def export_state(self, directory: Path) -> Path:
        path = export_data(self._state, directory, today=self._clock())
        self._logger.log("state_exported", path=str(path))
        return path

    def import_state(self, path: Path) -> AppState:
        """Replace the whole household state with a backup file."""

        self._state = import_data(path)
        self._undo.clear()
        self._compact(self._retention_days)
        self._commit(self._state)
        self._audit_log.record(Role.PARENT, "import_state", str(path))
        self._logger.log("state_imported", path=str(path), children=len(self._state.children))
        return self._state


__all__ = ["HabitQuest"]
