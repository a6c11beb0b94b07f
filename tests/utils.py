"""Builders shared by the scheduler tests."""
from __future__ import annotations

from judgegrid.models import Category, Entrant, Judge, MovingMode, SessionFormat, SessionUnit, Settings
from judgegrid.session_units import unit_id

CATEGORY_CYCLE = (Category.MUSIC, Category.SINGING, Category.PERFORMANCE)


def make_entrant(
    entrant_id: str,
    session_format: SessionFormat | None = SessionFormat.THREE_BY_TWENTY,
    preferences: tuple[str, ...] = (),
    avoid: tuple[str, ...] = (),
    room: str | None = None,
    included: bool = True,
) -> Entrant:
    return Entrant(
        id=entrant_id,
        name=f"Entrant {entrant_id}",
        session_format=session_format,
        judge_preferences=preferences,
        avoid_ids=frozenset(avoid),
        room=room,
        included=included,
    )


def make_judge(judge_id: str, category: Category | None = None, active: bool = True) -> Judge:
    return Judge(id=judge_id, name=f"Judge {judge_id}", category=category, active=active)


def balanced_judges(count: int) -> list[Judge]:
    """Judges J1..Jn cycling through MUS, SNG, PER."""
    return [make_judge(f"J{index + 1}", CATEGORY_CYCLE[index % 3]) for index in range(count)]


def placed_unit(
    entrant_id: str,
    judge_id: str,
    start_slot: int,
    session_format: SessionFormat = SessionFormat.THREE_BY_TWENTY,
    sequence_index: int | None = 0,
) -> SessionUnit:
    if session_format is SessionFormat.LONG_SINGLE:
        sequence_index = None
    return SessionUnit(
        id=unit_id(entrant_id, session_format, sequence_index),
        entrant_id=entrant_id,
        entrant_name=f"Entrant {entrant_id}",
        session_format=session_format,
        sequence_index=sequence_index,
        start_slot=start_slot,
        judge_id=judge_id,
    )


def judges_moving() -> Settings:
    return Settings(moving=MovingMode.JUDGES)
