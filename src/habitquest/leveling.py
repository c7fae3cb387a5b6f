"""Level progression derived from lifetime XP."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .models import LevelThreshold


@dataclass(frozen=True, slots=True)
class LevelInfo:
    """Snapshot of a child's position on the level ladder."""

    level: int
    progress: float
    current_reward: Optional[str] = None
    next_level_xp: Optional[int] = None
    next_reward: Optional[str] = None
    current_level_xp: int = 0

    @property
    def is_max_level(self) -> bool:
        return self.level > 0 and self.next_reward is None and self.progress >= 1


def compute_level(total_xp: int, thresholds: Sequence[LevelThreshold]) -> LevelInfo:
    """Map ``total_xp`` onto the ascending ``thresholds`` table.

    ``progress`` interpolates linearly between the last threshold reached (or
    zero) and the next one. Once every threshold is met progress is ``1`` and
    ``next_level_xp`` repeats the final threshold.
    """

    if not thresholds:
        return LevelInfo(level=0, progress=0.0)

    level = 0
    current_reward: Optional[str] = None
    previous_xp = 0
    next_threshold: Optional[LevelThreshold] = None
    for index, threshold in enumerate(thresholds, start=1):
        if threshold.xp <= total_xp:
            level = index
            current_reward = threshold.reward
            previous_xp = threshold.xp
        else:
            next_threshold = threshold
            break

    if next_threshold is None:
        return LevelInfo(
            level=level,
            progress=1.0,
            current_reward=current_reward,
            next_level_xp=previous_xp,
            current_level_xp=previous_xp,
        )

    span = next_threshold.xp - previous_xp
    progress = (total_xp - previous_xp) / span if span > 0 else 1.0
    return LevelInfo(
        level=level,
        progress=min(1.0, max(0.0, progress)),
        current_reward=current_reward,
        next_level_xp=next_threshold.xp,
        next_reward=next_threshold.reward,
        current_level_xp=previous_xp,
    )


__all__ = ["LevelInfo", "compute_level"]
