"""
Full grid population.

Runs the builders end to end: pods, rotation, long sessions, identity
resolution, then realizes the abstract schedule onto concrete session units.
Populate always starts from an empty grid.
"""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping

from .config import DetectorThresholds
from .models import (
    Entrant,
    Judge,
    MovingMode,
    SessionFormat,
    SessionUnit,
    Settings,
    get_category_display_order,
)
from .pods import partition_pods
from .resolver import judge_popularity, resolve_groups, resolve_judges
from .rotation import PanelSchedule, build_panel_schedule, first_occurrences, pack_long_sessions
from .session_units import clear_schedule
from .time_grid import slots_by_format, unit_slot_range
from .types import PopulateResult

logger = logging.getLogger(__name__)


def realize_units(
    units: tuple[SessionUnit, ...],
    schedule: PanelSchedule,
    seats: tuple[Judge, ...],
    entrant_by_group: Mapping[int, Entrant],
) -> tuple[SessionUnit, ...]:
    """Give each entrant's units a judge and start slot from the abstract grid.

    Judges are visited in index order and groups in the order they first
    appear on each judge; every visit consumes the entrant's next unplaced
    unit.
    """
    pending: dict[str, list[int]] = defaultdict(list)
    for index, unit in enumerate(units):
        if not unit.scheduled:
            pending[unit.entrant_id].append(index)

    result = list(units)
    for judge_index, sequence in enumerate(schedule.judge_sequences):
        judge = seats[judge_index]
        for group, start_slot in first_occurrences(sequence).items():
            entrant = entrant_by_group.get(group)
            if entrant is None or not pending[entrant.id]:
                continue
            index = pending[entrant.id].pop(0)
            result[index] = result[index].schedule(judge.id, start_slot)
    return tuple(result)


def apply_room_turnover(
    units: tuple[SessionUnit, ...],
    entrants: Iterable[Entrant],
    settings: Settings,
    buffer_slots: int,
) -> tuple[SessionUnit, ...]:
    """Push sessions back until different entrants sharing a room get a buffer.

    When a later session starts too soon after an earlier one in the same
    room, every unit starting at or after it moves back by the shortfall.
    Sessions starting on the same slot are left for the detector to report.
    """
    rooms = {entrant.id: entrant.room.strip() for entrant in entrants if entrant.room and entrant.room.strip()}
    current = list(units)

    while True:
        by_room: dict[str, list[int]] = defaultdict(list)
        for index, unit in enumerate(current):
            if unit.scheduled and unit.entrant_id in rooms:
                by_room[rooms[unit.entrant_id]].append(index)

        shift = None
        for room, indices in by_room.items():
            ordered = sorted(indices, key=lambda index: current[index].start_slot)
            for earlier_index, later_index in zip(ordered, ordered[1:]):
                earlier, later = current[earlier_index], current[later_index]
                if earlier.entrant_id == later.entrant_id or earlier.start_slot == later.start_slot:
                    continue
                needed = unit_slot_range(earlier, settings)[1] + 1 + buffer_slots
                if later.start_slot < needed:
                    shift = (later.start_slot, needed - later.start_slot)
                    logger.debug(f"Room {room}: moving sessions from slot {later.start_slot} back {shift[1]} slot(s)")
                    break
            if shift is not None:
                break

        if shift is None:
            return tuple(current)

        threshold, delta = shift
        current = [
            unit.schedule(unit.judge_id, unit.start_slot + delta)
            if unit.scheduled and unit.start_slot >= threshold
            else unit
            for unit in current
        ]


def judge_display_order(seats: tuple[Judge, ...], triad_count: int) -> tuple[Judge, ...]:
    """Order judges triad by triad, each triad sorted SNG, MUS, PER."""
    ordered: list[Judge] = []
    for triad in range(triad_count):
        members = seats[triad * 3:triad * 3 + 3]
        ordered.extend(sorted(members, key=lambda judge: get_category_display_order(judge.category)))
    ordered.extend(seats[triad_count * 3:])
    return tuple(ordered)


def populate_schedule(
    units: Iterable[SessionUnit],
    entrants: Iterable[Entrant],
    judges: Iterable[Judge],
    settings: Settings,
    thresholds: DetectorThresholds | None = None,
) -> PopulateResult:
    """
    Build a complete schedule from scratch.

    Args:
        units: Current session units; existing placements are discarded
        entrants: All entrants, in placement priority order
        judges: All judges; inactive judges are not used
        settings: Event settings
        thresholds: Supplies the room turnover buffer, defaults when omitted

    Returns:
        PopulateResult with every unit either fully placed or untouched
    """
    thresholds = thresholds or DetectorThresholds()
    entrants = list(entrants)
    units = clear_schedule(units)
    known_ids = {entrant.id for entrant in entrants}
    orphaned = sum(1 for unit in units if unit.entrant_id not in known_ids)
    if orphaned:
        logger.warning(f"Skipping {orphaned} session unit(s) for unknown entrants")

    entrant_formats: dict[str, SessionFormat] = {}
    for unit in units:
        if unit.entrant_id not in known_ids:
            continue
        entrant_formats.setdefault(unit.entrant_id, unit.session_format)
    scheduling = [entrant for entrant in entrants if entrant.id in entrant_formats]
    active_judges = [judge for judge in judges if judge.active]

    counts = Counter(entrant_formats.values())
    pods = partition_pods(counts[SessionFormat.THREE_BY_TEN], counts[SessionFormat.THREE_BY_TWENTY])
    logger.info(
        f"Scheduling {len(scheduling)} entrant(s) on {len(active_judges)} judge(s): "
        f"{len(pods)} pod(s), {counts[SessionFormat.LONG_SINGLE]} long session(s)"
    )

    slots = slots_by_format(settings)
    schedule = build_panel_schedule(pods, len(active_judges), slots)
    schedule = pack_long_sessions(schedule, counts[SessionFormat.LONG_SINGLE], slots[SessionFormat.LONG_SINGLE])

    seats = resolve_judges(active_judges, scheduling, schedule.triad_count)
    if logger.isEnabledFor(logging.DEBUG):
        for judge_id, popularity in judge_popularity(active_judges, scheduling).items():
            logger.debug(f"Judge {judge_id}: {popularity.first}/{popularity.second}/{popularity.third} choices")

    resolution = resolve_groups(schedule, seats, scheduling, entrant_formats)
    placed = realize_units(units, schedule, resolution.seats, resolution.entrant_by_group)

    if settings.moving is MovingMode.JUDGES:
        placed = apply_room_turnover(placed, scheduling, settings, thresholds.room_buffer_slots)

    result = PopulateResult(
        units=placed,
        judge_order=judge_display_order(resolution.seats, schedule.triad_count),
        placements=resolution.placements,
        pods=pods,
        panel_schedule=schedule,
        unplaced_entrant_ids=resolution.unplaced_entrant_ids,
    )
    logger.info(f"Assigned {result.scheduled_count} of {len(placed)} session unit(s) to the grid")
    return result
