"""
Manual edits to a committed schedule.

Each edit returns a new tuple of units. Edits never leave a unit half placed;
callers re-run the conflict detector afterwards.
"""

import logging
from collections.abc import Iterable

from .models import SessionFormat, SessionUnit, Settings
from .time_grid import ranges_overlap, slot_range, unit_slot_range

logger = logging.getLogger(__name__)


class PlacementError(Exception):
    """Raised when a manual placement cannot be applied."""

    pass


def _index_of(units: list[SessionUnit], unit_id: str) -> int:
    for index, unit in enumerate(units):
        if unit.id == unit_id:
            return index
    raise PlacementError(f"Unknown session unit: {unit_id}")


def _with_placement(unit: SessionUnit, source: SessionUnit) -> SessionUnit:
    """Give ``unit`` the judge and start of ``source``, or take it off the grid."""
    if source.scheduled:
        return unit.schedule(source.judge_id, source.start_slot)
    return unit.unschedule()


def has_judge_time_conflict(
    units: Iterable[SessionUnit],
    judge_id: str,
    start_slot: int,
    session_format: SessionFormat,
    settings: Settings,
    exclude_unit_id: str | None = None,
) -> bool:
    """Check whether a session would collide with another on the judge's column."""
    candidate = slot_range(start_slot, session_format, settings)
    for unit in units:
        if not unit.scheduled or unit.judge_id != judge_id or unit.id == exclude_unit_id:
            continue
        if ranges_overlap(candidate, unit_slot_range(unit, settings)):
            return True
    return False


def place_unit(
    units: Iterable[SessionUnit], unit_id: str, judge_id: str, start_slot: int, settings: Settings
) -> tuple[SessionUnit, ...]:
    """
    Move a unit to a judge and start slot.

    Raises:
        PlacementError: If the unit is unknown, the slot is negative or the
            judge is already busy at that time
    """
    result = list(units)
    index = _index_of(result, unit_id)
    unit = result[index]

    if start_slot < 0:
        raise PlacementError(f"Start slot must be non-negative, got {start_slot}")
    if has_judge_time_conflict(result, judge_id, start_slot, unit.session_format, settings, exclude_unit_id=unit_id):
        raise PlacementError(f"Judge {judge_id} is already busy at slot {start_slot}")

    result[index] = unit.schedule(judge_id, start_slot)
    logger.debug(f"Placed {unit_id} on {judge_id} at slot {start_slot}")
    return tuple(result)


def unschedule_unit(units: Iterable[SessionUnit], unit_id: str) -> tuple[SessionUnit, ...]:
    result = list(units)
    index = _index_of(result, unit_id)
    result[index] = result[index].unschedule()
    return tuple(result)


def swap_units(units: Iterable[SessionUnit], first_id: str, second_id: str) -> tuple[SessionUnit, ...]:
    """Exchange judge and start slot between two units."""
    result = list(units)
    first = _index_of(result, first_id)
    second = _index_of(result, second_id)
    result[first], result[second] = (
        _with_placement(result[first], result[second]),
        _with_placement(result[second], result[first]),
    )
    return tuple(result)


def swap_entrants(
    units: Iterable[SessionUnit], first_entrant_id: str, second_entrant_id: str
) -> tuple[SessionUnit, ...]:
    """Exchange scheduling state between two entrants, matching units by sequence index.

    Units with no counterpart on the other entrant keep their placement.
    """
    result = list(units)
    first_by_index: dict[int, int] = {}
    second_by_index: dict[int, int] = {}
    for position, unit in enumerate(result):
        if unit.entrant_id == first_entrant_id:
            first_by_index.setdefault(unit.sequence_index or 0, position)
        elif unit.entrant_id == second_entrant_id:
            second_by_index.setdefault(unit.sequence_index or 0, position)

    for sequence_index, first in first_by_index.items():
        second = second_by_index.get(sequence_index)
        if second is None:
            continue
        result[first], result[second] = (
            _with_placement(result[first], result[second]),
            _with_placement(result[second], result[first]),
        )
    return tuple(result)
