"""
Type definitions for the judging scheduler.

This module contains result types shared by the resolver, populate and the
command line surface.
"""

from dataclasses import dataclass
from enum import Enum

from .models import Judge, SessionUnit
from .pods import Pod
from .rotation import PanelSchedule


class PriorityTier(Enum):
    """Search pass that produced a group placement, best first"""

    FIRST_CHOICE = 1
    SECOND_CHOICE = 2
    THIRD_CHOICE = 3
    CONFLICT_FREE = 4
    FALLBACK = 5


@dataclass(frozen=True)
class JudgePopularity:
    """How often a judge is named at each preference rank."""

    first: int = 0
    second: int = 0
    third: int = 0


@dataclass(frozen=True)
class GroupPlacement:
    """Record of which group an entrant was placed on and why."""

    entrant_id: str
    group_number: int
    tier: PriorityTier
    preferred_judge_id: str | None = None
    conflicts_ignored: bool = False
    triads_swapped: bool = False


@dataclass(frozen=True)
class PopulateResult:
    """Complete populate result: placed units plus diagnostics."""

    units: tuple[SessionUnit, ...]
    judge_order: tuple[Judge, ...]
    placements: tuple[GroupPlacement, ...]
    pods: tuple[Pod, ...]
    panel_schedule: PanelSchedule
    unplaced_entrant_ids: tuple[str, ...] = ()

    @property
    def scheduled_count(self) -> int:
        return sum(1 for unit in self.units if unit.scheduled)

    def tier_counts(self) -> dict[PriorityTier, int]:
        counts = {tier: 0 for tier in PriorityTier}
        for placement in self.placements:
            counts[placement.tier] += 1
        return counts
