"""
Preference check: how well a schedule honours what each entrant asked for.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from .models import Entrant, Judge, SessionUnit, Settings
from .time_grid import ranges_overlap, unit_slot_range


@dataclass(frozen=True)
class EntrantPreferenceStatus:
    entrant_id: str
    entrant_name: str
    format_honored: bool | None  # None when no format was requested
    judges_met: tuple[str, ...]
    judges_missed: tuple[str, ...]
    avoid_clean: tuple[str, ...]
    avoid_violated: tuple[str, ...]

    @property
    def satisfied(self) -> int:
        return len(self.judges_met) + len(self.avoid_clean) + (1 if self.format_honored else 0)

    @property
    def violated(self) -> int:
        return len(self.avoid_violated) + (1 if self.format_honored is False else 0)

    @property
    def unmet(self) -> int:
        return len(self.judges_missed)


@dataclass(frozen=True)
class PreferenceCheck:
    statuses: tuple[EntrantPreferenceStatus, ...]

    @property
    def satisfied(self) -> int:
        return sum(status.satisfied for status in self.statuses)

    @property
    def violated(self) -> int:
        return sum(status.violated for status in self.statuses)

    @property
    def unmet(self) -> int:
        return sum(status.unmet for status in self.statuses)


def _overlaps_any(
    units: list[SessionUnit], others: list[SessionUnit], settings: Settings
) -> bool:
    return any(
        ranges_overlap(unit_slot_range(unit, settings), unit_slot_range(other, settings))
        for unit in units
        for other in others
    )


def preference_check(
    entrants: Iterable[Entrant],
    judges: Iterable[Judge],
    units: Iterable[SessionUnit],
    settings: Settings,
) -> PreferenceCheck:
    """
    Summarise format, judge and avoid preferences for every included entrant.

    Judge preferences naming unknown judges are not counted. An avoided
    entrant counts as violated when any of their scheduled units overlaps one
    of this entrant's in time.
    """
    judge_ids = {judge.id for judge in judges}
    units = list(units)
    units_by_entrant: dict[str, list[SessionUnit]] = defaultdict(list)
    placed_by_entrant: dict[str, list[SessionUnit]] = defaultdict(list)
    for unit in units:
        units_by_entrant[unit.entrant_id].append(unit)
        if unit.scheduled:
            placed_by_entrant[unit.entrant_id].append(unit)

    statuses = []
    for entrant in entrants:
        if not entrant.included:
            continue

        format_honored = None
        if entrant.session_format is not None:
            format_honored = any(
                unit.session_format is entrant.session_format for unit in units_by_entrant[entrant.id]
            )

        assigned_judges = {unit.judge_id for unit in placed_by_entrant[entrant.id]}
        wanted = [judge_id for judge_id in entrant.judge_preferences if judge_id in judge_ids]
        met = tuple(judge_id for judge_id in wanted if judge_id in assigned_judges)
        missed = tuple(judge_id for judge_id in wanted if judge_id not in assigned_judges)

        clean, violated = [], []
        for avoided_id in sorted(entrant.avoid_ids):
            if _overlaps_any(placed_by_entrant[entrant.id], placed_by_entrant[avoided_id], settings):
                violated.append(avoided_id)
            else:
                clean.append(avoided_id)

        statuses.append(
            EntrantPreferenceStatus(
                entrant_id=entrant.id,
                entrant_name=entrant.name,
                format_honored=format_honored,
                judges_met=met,
                judges_missed=missed,
                avoid_clean=tuple(clean),
                avoid_violated=tuple(violated),
            )
        )
    return PreferenceCheck(statuses=tuple(statuses))
