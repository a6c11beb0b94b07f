from __future__ import annotations

import logging

from judgegrid.config import DetectorThresholds
from judgegrid.conflicts import (
    AvoidanceViolation,
    ConflictKind,
    JudgeOvertime,
    LateFinish,
    RoomOverlap,
    UnpaddedRoomTurnover,
    detect_conflicts,
    has_hard_conflicts,
)
from judgegrid.models import Category, MovingMode, SessionFormat, Settings, Severity
from tests.utils import judges_moving, make_entrant, make_judge, placed_unit

S = SessionFormat.THREE_BY_TEN
M = SessionFormat.THREE_BY_TWENTY
L = SessionFormat.LONG_SINGLE


def _plain_judges(*ids: str):
    return [make_judge(judge_id) for judge_id in ids]


def test_empty_schedule_has_no_conflicts() -> None:
    assert detect_conflicts([], [], [], Settings()) == []


def test_unscheduled_units_are_ignored() -> None:
    unit = placed_unit("E1", "J1", 0).unschedule()
    assert detect_conflicts([unit], _plain_judges("J1"), [make_entrant("E1")], Settings()) == []


def test_overlapping_units_of_one_entrant_give_one_double_booking() -> None:
    judges = [make_judge("J1", Category.MUSIC), make_judge("J2", Category.SINGING)]
    units = [
        placed_unit("E1", "J1", 0, sequence_index=0),
        placed_unit("E1", "J2", 2, sequence_index=1),
    ]

    conflicts = detect_conflicts(units, judges, [make_entrant("E1")], Settings())

    assert [conflict.kind for conflict in conflicts] == [ConflictKind.ENTRANT_DOUBLE_BOOKING]
    assert conflicts[0].severity is Severity.HARD
    assert conflicts[0].entrant_name == "Entrant E1"


def test_same_category_twice_is_soft() -> None:
    judges = [make_judge("J1", Category.MUSIC), make_judge("J2", Category.MUSIC)]
    units = [
        placed_unit("E1", "J1", 0, sequence_index=0),
        placed_unit("E1", "J2", 4, sequence_index=1),
    ]

    conflicts = detect_conflicts(units, judges, [make_entrant("E1")], Settings())

    assert len(conflicts) == 1
    assert conflicts[0].kind is ConflictKind.CATEGORY_REPETITION
    assert conflicts[0].category is Category.MUSIC
    assert not has_hard_conflicts(conflicts)


def test_judge_overtime_reports_total_minutes() -> None:
    settings = Settings(long_minutes=70)
    units = [
        placed_unit("E1", "J1", 0, sequence_index=0),
        placed_unit("E1", "J2", 0, sequence_index=1).unschedule(),
        placed_unit("E2", "J1", 4, sequence_index=0),
        placed_unit("E3", "J1", 8, sequence_index=0),
        placed_unit("E4", "J1", 12, session_format=L),
    ]
    entrants = [make_entrant(entrant_id) for entrant_id in ("E1", "E2", "E3")]
    entrants.append(make_entrant("E4", session_format=L))

    conflicts = detect_conflicts(units, _plain_judges("J1"), entrants, settings)

    assert conflicts == [JudgeOvertime(severity=Severity.SOFT, judge_name="Judge J1", total_minutes=130)]


def test_overtime_threshold_from_thresholds() -> None:
    units = [placed_unit("E1", "J1", 0)]
    thresholds = DetectorThresholds(overtime_threshold_minutes=15)

    conflicts = detect_conflicts(units, _plain_judges("J1"), [make_entrant("E1")], Settings(), thresholds)

    assert [conflict.kind for conflict in conflicts] == [ConflictKind.JUDGE_OVERTIME]


def test_detection_is_idempotent() -> None:
    judges = [make_judge("J1", Category.MUSIC), make_judge("J2", Category.MUSIC)]
    entrants = [make_entrant("E1", avoid=("E2",)), make_entrant("E2")]
    units = [
        placed_unit("E1", "J1", 0, sequence_index=0),
        placed_unit("E1", "J2", 2, sequence_index=1),
        placed_unit("E2", "J2", 0),
    ]

    first = detect_conflicts(units, judges, entrants, Settings())
    second = detect_conflicts(units, judges, entrants, Settings())

    assert first == second
    assert len(first) >= 3


def test_room_overlap_only_when_judges_move() -> None:
    entrants = [make_entrant("E1", room="A"), make_entrant("E2", room="A ")]
    units = [placed_unit("E1", "J1", 0), placed_unit("E2", "J2", 0)]
    judges = _plain_judges("J1", "J2")

    moving = detect_conflicts(units, judges, entrants, judges_moving())
    staying = detect_conflicts(units, judges, entrants, Settings(moving=MovingMode.GROUPS))

    assert moving == [RoomOverlap(severity=Severity.HARD, room="A")]
    assert staying == []


def test_short_sessions_sharing_a_room_are_soft() -> None:
    entrants = [make_entrant("E1", S, room="A"), make_entrant("E2", S, room="A")]
    units = [
        placed_unit("E1", "J1", 0, session_format=S),
        placed_unit("E2", "J2", 1, session_format=S),
    ]

    conflicts = detect_conflicts(units, _plain_judges("J1", "J2"), entrants, judges_moving())

    assert conflicts == [RoomOverlap(severity=Severity.SOFT, room="A")]


def test_room_overlap_upgrades_to_hard_in_place() -> None:
    entrants = [
        make_entrant("E1", S, room="A"),
        make_entrant("E2", S, room="A"),
        make_entrant("E3", M, room="A"),
    ]
    units = [
        placed_unit("E1", "J1", 0, session_format=S),
        placed_unit("E2", "J2", 1, session_format=S),
        placed_unit("E3", "J3", 2, session_format=M),
    ]

    conflicts = detect_conflicts(units, _plain_judges("J1", "J2", "J3"), entrants, judges_moving())

    assert conflicts == [RoomOverlap(severity=Severity.HARD, room="A")]


def test_unpadded_turnover_between_different_entrants() -> None:
    entrants = [make_entrant("E1", room="A"), make_entrant("E2", room="A")]
    judges = _plain_judges("J1", "J2")
    tight = [placed_unit("E1", "J1", 0), placed_unit("E2", "J2", 5)]
    padded = [placed_unit("E1", "J1", 0), placed_unit("E2", "J2", 6)]

    conflicts = detect_conflicts(tight, judges, entrants, judges_moving())

    assert conflicts == [UnpaddedRoomTurnover(severity=Severity.SOFT, room="A", entrant_name="Entrant E1")]
    assert detect_conflicts(padded, judges, entrants, judges_moving()) == []


def test_avoidance_violation_uses_time_overlap() -> None:
    entrants = [make_entrant("E1", avoid=("E2",)), make_entrant("E2")]
    judges = _plain_judges("J1", "J2")
    overlapping = [placed_unit("E1", "J1", 0), placed_unit("E2", "J2", 3)]
    apart = [placed_unit("E1", "J1", 0), placed_unit("E2", "J2", 4)]

    conflicts = detect_conflicts(overlapping, judges, entrants, Settings())

    assert conflicts == [
        AvoidanceViolation(severity=Severity.HARD, entrant_name="Entrant E1", avoided_entrant_name="Entrant E2")
    ]
    assert detect_conflicts(apart, judges, entrants, Settings()) == []


def test_late_finish_lists_entrants_once() -> None:
    settings = Settings(start_time="23:00")
    entrants = [make_entrant("E1"), make_entrant("E2")]
    units = [
        placed_unit("E1", "J1", 0, sequence_index=0),
        placed_unit("E2", "J1", 24, sequence_index=0),
        placed_unit("E2", "J2", 28, sequence_index=1),
    ]

    conflicts = detect_conflicts(units, _plain_judges("J1", "J2"), entrants, settings)

    assert conflicts[0] == LateFinish(severity=Severity.SOFT, entrant_names=("Entrant E2",))


def test_unknown_references_are_skipped(caplog) -> None:
    units = [placed_unit("E1", "ghost", 0), placed_unit("nobody", "J1", 0)]

    with caplog.at_level(logging.WARNING):
        conflicts = detect_conflicts(units, _plain_judges("J1"), [make_entrant("E1")], Settings())

    assert conflicts == []
    assert "unknown judge ghost" in caplog.text
    assert "unknown entrant nobody" in caplog.text
