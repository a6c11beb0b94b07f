"""
Session unit registry.

Derives the atomic judge-visit units from each entrant's chosen format and
keeps them in step with the entrant list. Every operation returns a new tuple;
placements are only ever carried over, never invented.
"""

import logging
from collections.abc import Iterable

from .models import Entrant, SessionFormat, SessionUnit

logger = logging.getLogger(__name__)


def unit_id(entrant_id: str, session_format: SessionFormat, sequence_index: int | None = None) -> str:
    if session_format is SessionFormat.LONG_SINGLE:
        return f"{entrant_id}-1xlong"
    return f"{entrant_id}-{session_format.value}-{sequence_index}"


def units_for_entrant(entrant: Entrant) -> tuple[SessionUnit, ...]:
    """Create the unscheduled units for one entrant's format."""
    session_format = entrant.effective_format
    if session_format.repetitions == 1:
        return (
            SessionUnit(
                id=unit_id(entrant.id, session_format),
                entrant_id=entrant.id,
                entrant_name=entrant.name,
                session_format=session_format,
            ),
        )
    return tuple(
        SessionUnit(
            id=unit_id(entrant.id, session_format, index),
            entrant_id=entrant.id,
            entrant_name=entrant.name,
            session_format=session_format,
            sequence_index=index,
        )
        for index in range(session_format.repetitions)
    )


def generate_units(entrants: Iterable[Entrant]) -> tuple[SessionUnit, ...]:
    """Create units for every included entrant, in entrant order."""
    units: list[SessionUnit] = []
    for entrant in entrants:
        if entrant.included:
            units.extend(units_for_entrant(entrant))
    return tuple(units)


def regenerate_units(
    entrants: Iterable[Entrant], existing: Iterable[SessionUnit]
) -> tuple[SessionUnit, ...]:
    """Rebuild units from the entrant list, keeping placements that still apply.

    A placement is copied onto the new unit that shares its
    (entrant, format, index) key. Units of a format the entrant no longer uses
    are dropped along with their placement.
    """
    placed = {unit.key: unit for unit in existing if unit.scheduled}

    regenerated: list[SessionUnit] = []
    for unit in generate_units(entrants):
        previous = placed.get(unit.key)
        if previous is not None:
            unit = unit.schedule(previous.judge_id, previous.start_slot)
        regenerated.append(unit)
    return tuple(regenerated)


def remove_entrant_units(units: Iterable[SessionUnit], entrant_id: str) -> tuple[SessionUnit, ...]:
    return tuple(unit for unit in units if unit.entrant_id != entrant_id)


def clean_units(units: Iterable[SessionUnit], entrants: Iterable[Entrant]) -> tuple[SessionUnit, ...]:
    """Drop units that reference entrants which no longer exist."""
    known_ids = {entrant.id for entrant in entrants}
    units = tuple(units)
    kept = tuple(unit for unit in units if unit.entrant_id in known_ids)
    if len(kept) != len(units):
        logger.warning(f"Dropped {len(units) - len(kept)} session unit(s) for unknown entrants")
    return kept


def scheduled_units(units: Iterable[SessionUnit]) -> tuple[SessionUnit, ...]:
    return tuple(unit for unit in units if unit.scheduled)


def replace_unit(units: Iterable[SessionUnit], updated: SessionUnit) -> tuple[SessionUnit, ...]:
    """Replace the unit sharing ``updated``'s key, or append it if there is none."""
    result = list(units)
    for index, unit in enumerate(result):
        if unit.key == updated.key:
            result[index] = updated
            return tuple(result)
    result.append(updated)
    return tuple(result)


def clear_schedule(units: Iterable[SessionUnit]) -> tuple[SessionUnit, ...]:
    """Take every unit off the grid."""
    return tuple(unit.unschedule() if unit.scheduled else unit for unit in units)
