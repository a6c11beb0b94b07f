"""
Conflict detection for committed or hand-edited schedules.

This module checks a set of placed session units against the hard and soft
scheduling rules without changing anything. It is re-run after every edit,
so identical input must always give an identical, ordered list.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .config import DetectorThresholds
from .models import Category, Entrant, Judge, MovingMode, SessionFormat, SessionUnit, Settings, Severity
from .time_grid import duration_minutes, format_clock, ranges_overlap, unit_end_minutes, unit_slot_range

logger = logging.getLogger(__name__)


class ConflictKind(Enum):
    ENTRANT_DOUBLE_BOOKING = "entrant"
    CATEGORY_REPETITION = "category"
    ROOM_OVERLAP = "room"
    UNPADDED_ROOM_TURNOVER = "room_turnover"
    AVOIDANCE_VIOLATION = "avoid"
    JUDGE_OVERTIME = "judge_overtime"
    LATE_FINISH = "late"


@dataclass(frozen=True)
class ConflictDetail:
    """Base for every conflict variant."""

    kind: ClassVar[ConflictKind]
    severity: Severity

    @property
    def is_hard(self) -> bool:
        return self.severity is Severity.HARD

    def describe(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class EntrantDoubleBooking(ConflictDetail):
    kind: ClassVar[ConflictKind] = ConflictKind.ENTRANT_DOUBLE_BOOKING
    entrant_name: str

    def describe(self) -> str:
        return f"{self.entrant_name} is booked in two sessions at the same time"


@dataclass(frozen=True)
class CategoryRepetition(ConflictDetail):
    kind: ClassVar[ConflictKind] = ConflictKind.CATEGORY_REPETITION
    entrant_name: str
    category: Category

    def describe(self) -> str:
        return f"{self.entrant_name} sees more than one {self.category.value} judge"


@dataclass(frozen=True)
class RoomOverlap(ConflictDetail):
    kind: ClassVar[ConflictKind] = ConflictKind.ROOM_OVERLAP
    room: str

    def describe(self) -> str:
        return f"Room {self.room} hosts overlapping sessions"


@dataclass(frozen=True)
class UnpaddedRoomTurnover(ConflictDetail):
    kind: ClassVar[ConflictKind] = ConflictKind.UNPADDED_ROOM_TURNOVER
    room: str
    entrant_name: str

    def describe(self) -> str:
        return f"Room {self.room} has no turnover gap around {self.entrant_name}"


@dataclass(frozen=True)
class AvoidanceViolation(ConflictDetail):
    kind: ClassVar[ConflictKind] = ConflictKind.AVOIDANCE_VIOLATION
    entrant_name: str
    avoided_entrant_name: str

    def describe(self) -> str:
        return f"{self.entrant_name} overlaps {self.avoided_entrant_name}, whom they avoid"


@dataclass(frozen=True)
class JudgeOvertime(ConflictDetail):
    kind: ClassVar[ConflictKind] = ConflictKind.JUDGE_OVERTIME
    judge_name: str
    total_minutes: int

    def describe(self) -> str:
        return f"{self.judge_name} judges {self.total_minutes} minutes"


@dataclass(frozen=True)
class LateFinish(ConflictDetail):
    kind: ClassVar[ConflictKind] = ConflictKind.LATE_FINISH
    entrant_names: tuple[str, ...]

    def describe(self) -> str:
        return f"Sessions run late for: {', '.join(self.entrant_names)}"


ConflictKey = tuple[str, ...]


def _room_of(entrant: Entrant | None) -> str | None:
    if entrant is None or not entrant.room:
        return None
    return entrant.room.strip() or None


def _check_late_finish(
    units: list[SessionUnit], settings: Settings, thresholds: DetectorThresholds
) -> LateFinish | None:
    names: list[str] = []
    for unit in units:
        if unit_end_minutes(unit, settings) > thresholds.late_finish_minutes and unit.entrant_name not in names:
            names.append(unit.entrant_name)
    if not names:
        return None
    logger.debug(f"{len(names)} entrant(s) finish after {format_clock(thresholds.late_finish_minutes)}")
    return LateFinish(severity=Severity.SOFT, entrant_names=tuple(names))


def _check_category_repetition(
    unit: SessionUnit, units: list[SessionUnit], judge_map: dict[str, Judge]
) -> list[tuple[ConflictKey, ConflictDetail]]:
    category = judge_map[unit.judge_id].category
    if category is None:
        return []
    for other in units:
        if other.id == unit.id or other.entrant_id != unit.entrant_id:
            continue
        if judge_map[other.judge_id].category is category:
            key = ("category", unit.entrant_id, category.value)
            return [(key, CategoryRepetition(severity=Severity.SOFT, entrant_name=unit.entrant_name, category=category))]
    return []


def _check_entrant_double_booking(
    unit: SessionUnit, units: list[SessionUnit], settings: Settings
) -> list[tuple[ConflictKey, ConflictDetail]]:
    own_range = unit_slot_range(unit, settings)
    for other in units:
        if other.id == unit.id or other.entrant_id != unit.entrant_id:
            continue
        if ranges_overlap(own_range, unit_slot_range(other, settings)):
            key = ("entrant", unit.entrant_id)
            return [(key, EntrantDoubleBooking(severity=Severity.HARD, entrant_name=unit.entrant_name))]
    return []


def _check_room(
    unit: SessionUnit,
    units: list[SessionUnit],
    entrant_map: dict[str, Entrant],
    settings: Settings,
    thresholds: DetectorThresholds,
) -> list[tuple[ConflictKey, ConflictDetail]]:
    """Room overlap, or failing that a missing turnover gap, for judges-move events."""
    if settings.moving is not MovingMode.JUDGES:
        return []
    room = _room_of(entrant_map[unit.entrant_id])
    if room is None:
        return []

    own_range = unit_slot_range(unit, settings)
    neighbours = [
        other
        for other in units
        if other.entrant_id != unit.entrant_id and _room_of(entrant_map[other.entrant_id]) == room
    ]

    overlapping = [other for other in neighbours if ranges_overlap(own_range, unit_slot_range(other, settings))]
    if overlapping:
        short_only = unit.session_format is SessionFormat.THREE_BY_TEN and all(
            other.session_format is SessionFormat.THREE_BY_TEN for other in overlapping
        )
        severity = Severity.SOFT if short_only else Severity.HARD
        return [(("room", room), RoomOverlap(severity=severity, room=room))]

    for other in neighbours:
        if ranges_overlap(own_range, unit_slot_range(other, settings), padding=thresholds.room_buffer_slots):
            conflict = UnpaddedRoomTurnover(severity=Severity.SOFT, room=room, entrant_name=unit.entrant_name)
            return [(("turnover", room), conflict)]
    return []


def _check_avoidance(
    unit: SessionUnit, units: list[SessionUnit], entrant_map: dict[str, Entrant], settings: Settings
) -> list[tuple[ConflictKey, ConflictDetail]]:
    avoid_ids = entrant_map[unit.entrant_id].avoid_ids
    if not avoid_ids:
        return []
    own_range = unit_slot_range(unit, settings)
    found = []
    for other in units:
        if other.entrant_id not in avoid_ids:
            continue
        if ranges_overlap(own_range, unit_slot_range(other, settings)):
            conflict = AvoidanceViolation(
                severity=Severity.HARD,
                entrant_name=unit.entrant_name,
                avoided_entrant_name=other.entrant_name,
            )
            found.append((("avoid", unit.entrant_id, other.entrant_id), conflict))
    return found


def _check_judge_overtime(
    judges: list[Judge], units: list[SessionUnit], settings: Settings, thresholds: DetectorThresholds
) -> list[tuple[ConflictKey, ConflictDetail]]:
    found = []
    for judge in judges:
        total = sum(duration_minutes(unit.session_format, settings) for unit in units if unit.judge_id == judge.id)
        if total > thresholds.overtime_threshold_minutes:
            conflict = JudgeOvertime(severity=Severity.SOFT, judge_name=judge.name, total_minutes=total)
            found.append((("overtime", judge.id), conflict))
    return found


def _record(found: dict[ConflictKey, ConflictDetail], key: ConflictKey, conflict: ConflictDetail) -> None:
    """Keep the first conflict per key, upgrading soft to hard in place."""
    existing = found.get(key)
    if existing is None or (not existing.is_hard and conflict.is_hard):
        found[key] = conflict


def detect_conflicts(
    units: Iterable[SessionUnit],
    judges: Iterable[Judge],
    entrants: Iterable[Entrant],
    settings: Settings,
    thresholds: DetectorThresholds | None = None,
) -> list[ConflictDetail]:
    """
    Check a schedule against every conflict rule.

    Args:
        units: Session units; unscheduled ones are ignored
        judges: All judges, in display order
        entrants: All entrants
        settings: Event settings
        thresholds: Detector limits, defaults when omitted

    Returns:
        Conflicts in a stable order, at most one per conflict key
    """
    thresholds = thresholds or DetectorThresholds()
    judges = list(judges)
    judge_map = {judge.id: judge for judge in judges}
    entrant_map = {entrant.id: entrant for entrant in entrants}

    scheduled: list[SessionUnit] = []
    for unit in units:
        if not unit.scheduled:
            continue
        if unit.entrant_id not in entrant_map:
            logger.warning(f"Skipping session unit {unit.id}: unknown entrant {unit.entrant_id}")
            continue
        if unit.judge_id not in judge_map:
            logger.warning(f"Skipping session unit {unit.id}: unknown judge {unit.judge_id}")
            continue
        scheduled.append(unit)

    found: dict[ConflictKey, ConflictDetail] = {}

    late = _check_late_finish(scheduled, settings, thresholds)
    if late is not None:
        found[("late",)] = late

    for unit in scheduled:
        checks = (
            _check_category_repetition(unit, scheduled, judge_map)
            + _check_entrant_double_booking(unit, scheduled, settings)
            + _check_room(unit, scheduled, entrant_map, settings, thresholds)
            + _check_avoidance(unit, scheduled, entrant_map, settings)
        )
        for key, conflict in checks:
            _record(found, key, conflict)

    for key, conflict in _check_judge_overtime(judges, scheduled, settings, thresholds):
        _record(found, key, conflict)

    return list(found.values())


def has_hard_conflicts(conflicts: Iterable[ConflictDetail]) -> bool:
    return any(conflict.is_hard for conflict in conflicts)
