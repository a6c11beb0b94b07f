from __future__ import annotations

from judgegrid.models import SessionFormat, Settings
from judgegrid.time_grid import format_clock, ranges_overlap, slot_range, slot_start_minutes, unit_end_minutes
from tests.utils import placed_unit


def test_slot_ranges_are_inclusive() -> None:
    settings = Settings()

    assert slot_range(0, SessionFormat.THREE_BY_TWENTY, settings) == (0, 3)
    assert slot_range(2, SessionFormat.LONG_SINGLE, settings) == (2, 9)
    assert slot_range(5, SessionFormat.THREE_BY_TEN, settings) == (5, 6)


def test_overlap_with_padding() -> None:
    assert ranges_overlap((0, 3), (3, 6))
    assert not ranges_overlap((0, 3), (4, 7))
    assert ranges_overlap((0, 3), (5, 8), padding=2)
    assert not ranges_overlap((0, 3), (6, 9), padding=2)


def test_clock_conversion() -> None:
    settings = Settings(start_time="23:30")

    assert slot_start_minutes(6, settings) == 24 * 60
    assert format_clock(slot_start_minutes(6, settings)) == "00:00"
    assert unit_end_minutes(placed_unit("E1", "J1", 0), settings) == 23 * 60 + 50
