"""Custom exception hierarchy for the HabitQuest application shell.

The day engine itself never raises for unknown ids or invalid transitions;
these errors belong to the service layer around it.
"""

from __future__ import annotations


class HabitQuestError(Exception):
    """Base class for all HabitQuest specific errors."""


class ChildNotFoundError(HabitQuestError):
    """Raised when a child profile lookup fails."""


class TemplateNotFoundError(HabitQuestError):
    """Raised when a quest, bonus or penalty template cannot be found."""


class TemplateUnavailableError(HabitQuestError):
    """Raised when a template is not assigned to the child or already used up today."""


class RoleNotPermittedError(HabitQuestError):
    """Raised when the acting role may not perform an action."""


class PinLockedError(HabitQuestError):
    """Raised when PIN checks are locked after repeated failures."""


class ImportFormatError(HabitQuestError):
    """Raised when an imported backup file cannot be parsed."""


class DayLogCompactedError(HabitQuestError):
    """Raised when a change targets a day whose ledger has already been compacted."""


class VoucherNotFoundError(HabitQuestError):
    """Raised when a voucher is not in the child's inventory."""


class NegotiationError(HabitQuestError):
    """Raised when a curse negotiation step is taken out of order."""
