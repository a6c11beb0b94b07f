"""
Discrete time grid shared by the builders and the conflict detector.

Slot 0 starts at the configured event start time and every slot lasts one
quantum. Slot ranges are inclusive on both ends, as they are on the grid.
"""

from .models import SessionFormat, SessionUnit, Settings


def duration_minutes(session_format: SessionFormat, settings: Settings) -> int:
    return settings.durations[session_format]


def duration_slots(session_format: SessionFormat, settings: Settings) -> int:
    """Number of grid slots a session of this format occupies."""
    return settings.durations[session_format] // settings.slot_minutes


def slots_by_format(settings: Settings) -> dict[SessionFormat, int]:
    return {session_format: duration_slots(session_format, settings) for session_format in SessionFormat}


def slot_range(start_slot: int, session_format: SessionFormat, settings: Settings) -> tuple[int, int]:
    return (start_slot, start_slot + duration_slots(session_format, settings) - 1)


def unit_slot_range(unit: SessionUnit, settings: Settings) -> tuple[int, int]:
    """Inclusive (first, last) slot of a scheduled unit."""
    if unit.start_slot is None:
        raise ValueError(f"Session unit {unit.id} is not scheduled")
    return slot_range(unit.start_slot, unit.session_format, settings)


def ranges_overlap(first: tuple[int, int], second: tuple[int, int], padding: int = 0) -> bool:
    """Check whether two inclusive slot ranges overlap.

    With ``padding`` the ranges also count as overlapping when fewer than
    ``padding`` free slots separate them.
    """
    start1, end1 = first
    start2, end2 = second
    return not (start1 > end2 + padding or end1 + padding < start2)


def slot_start_minutes(slot: int, settings: Settings) -> int:
    """Minutes after midnight at which a slot starts. May exceed 24 hours."""
    return settings.start_minutes + slot * settings.slot_minutes


def unit_end_minutes(unit: SessionUnit, settings: Settings) -> int:
    """Minutes after midnight at which a scheduled unit ends."""
    if unit.start_slot is None:
        raise ValueError(f"Session unit {unit.id} is not scheduled")
    return slot_start_minutes(unit.start_slot, settings) + duration_minutes(unit.session_format, settings)


def format_clock(minutes: int) -> str:
    """Format minutes after midnight as ``HH:MM``, wrapping past midnight."""
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
