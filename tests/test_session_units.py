from __future__ import annotations

import logging

import pytest

from judgegrid.models import SessionFormat, SessionUnit
from judgegrid.session_units import (
    clean_units,
    clear_schedule,
    generate_units,
    regenerate_units,
    remove_entrant_units,
    replace_unit,
    scheduled_units,
)
from tests.utils import make_entrant, placed_unit


def test_default_format_gives_three_units() -> None:
    units = generate_units([make_entrant("E1", session_format=None)])

    assert [unit.id for unit in units] == ["E1-3x20-0", "E1-3x20-1", "E1-3x20-2"]
    assert all(unit.session_format is SessionFormat.THREE_BY_TWENTY for unit in units)
    assert not any(unit.scheduled for unit in units)


def test_long_format_gives_one_unit_without_index() -> None:
    (unit,) = generate_units([make_entrant("E1", session_format=SessionFormat.LONG_SINGLE)])

    assert unit.id == "E1-1xlong"
    assert unit.sequence_index is None


def test_excluded_entrants_get_no_units() -> None:
    units = generate_units([make_entrant("E1"), make_entrant("E2", included=False)])

    assert {unit.entrant_id for unit in units} == {"E1"}


def test_regenerate_keeps_matching_placements() -> None:
    entrant = make_entrant("E1")
    existing = (placed_unit("E1", "J1", 4, sequence_index=1),)

    units = regenerate_units([entrant], existing)

    assert len(units) == 3
    assert units[1].judge_id == "J1" and units[1].start_slot == 4
    assert not units[0].scheduled and not units[2].scheduled


def test_regenerate_drops_placements_of_old_format() -> None:
    entrant = make_entrant("E1", session_format=SessionFormat.THREE_BY_TEN)
    existing = (placed_unit("E1", "J1", 4, sequence_index=1),)

    units = regenerate_units([entrant], existing)

    assert not any(unit.scheduled for unit in units)


def test_clean_units_drops_unknown_entrants(caplog) -> None:
    units = (placed_unit("E1", "J1", 0), placed_unit("E2", "J1", 4))

    with caplog.at_level(logging.WARNING):
        kept = clean_units(units, [make_entrant("E1")])

    assert [unit.entrant_id for unit in kept] == ["E1"]
    assert "Dropped 1 session unit" in caplog.text


def test_remove_and_replace() -> None:
    units = generate_units([make_entrant("E1"), make_entrant("E2")])

    assert {unit.entrant_id for unit in remove_entrant_units(units, "E1")} == {"E2"}

    updated = units[0].schedule("J1", 0)
    replaced = replace_unit(units, updated)
    assert replaced[0] == updated
    assert len(replaced) == len(units)


def test_clear_schedule_unschedules_everything() -> None:
    units = (placed_unit("E1", "J1", 0), placed_unit("E2", "J2", 4))

    assert not any(unit.scheduled for unit in clear_schedule(units))


def test_partial_scheduling_state_is_rejected() -> None:
    with pytest.raises(ValueError):
        SessionUnit(
            id="E1-3x20-0",
            entrant_id="E1",
            entrant_name="Entrant E1",
            session_format=SessionFormat.THREE_BY_TWENTY,
            sequence_index=0,
            start_slot=3,
        )
    with pytest.raises(ValueError):
        SessionUnit(
            id="E1-3x20-3",
            entrant_id="E1",
            entrant_name="Entrant E1",
            session_format=SessionFormat.THREE_BY_TWENTY,
            sequence_index=3,
        )


def test_scheduled_units_filters_placed() -> None:
    units = (placed_unit("E1", "J1", 0), placed_unit("E2", "J2", 4).unschedule())

    assert [unit.entrant_id for unit in scheduled_units(units)] == ["E1"]
