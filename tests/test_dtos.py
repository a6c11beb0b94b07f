from __future__ import annotations

from datetime import time

import pytest
from pydantic import ValidationError

from judgegrid.dtos import EntrantRow, ScheduleSnapshot, SessionUnitRow, SettingsRow
from judgegrid.models import Category, MovingMode, SessionFormat
from tests.utils import balanced_judges, make_entrant, placed_unit


def _snapshot_dict() -> dict:
    return {
        "settings": {"start_time": "08:30", "moving": "judges"},
        "judges": [{"id": "J1", "name": "Ann", "category": "SNG"}],
        "entrants": [
            {
                "id": "E1",
                "name": "Four Winds",
                "session_format": "3x10",
                "judge_preferences": ["J1", "", None],
                "avoid_ids": ["E2"],
                "group_kind": "quartet",
            },
            {"id": "E2", "name": "Harbour Chorus", "group_kind": "chorus"},
        ],
        "units": [
            {
                "id": "E1-3x10-0",
                "entrant_id": "E1",
                "entrant_name": "Four Winds",
                "session_format": "3x10",
                "sequence_index": 0,
                "start_slot": 2,
                "judge_id": "J1",
            }
        ],
    }


def test_snapshot_converts_to_domain() -> None:
    snapshot = ScheduleSnapshot.model_validate(_snapshot_dict())

    settings = snapshot.to_settings()
    assert settings.start_time == time(8, 30)
    assert settings.moving is MovingMode.JUDGES

    (judge,) = snapshot.to_judges()
    assert judge.category is Category.SINGING

    first, second = snapshot.to_entrants()
    assert first.session_format is SessionFormat.THREE_BY_TEN
    assert first.judge_preferences == ("J1",)
    assert first.avoid_ids == frozenset({"E2"})
    assert second.effective_format is SessionFormat.THREE_BY_TWENTY

    (unit,) = snapshot.to_units()
    assert unit.scheduled and unit.start_slot == 2


def test_partial_unit_is_rejected() -> None:
    with pytest.raises(ValidationError):
        SessionUnitRow(
            id="E1-3x20-0",
            entrant_id="E1",
            entrant_name="E1",
            session_format="3x20",
            sequence_index=0,
            judge_id="J1",
        )


@pytest.mark.parametrize(
    "session_format, sequence_index",
    [("3x20", None), ("3x10", 3), ("1xLong", 0)],
)
def test_sequence_index_must_match_format(session_format, sequence_index) -> None:
    with pytest.raises(ValidationError, match="sequence_index"):
        SessionUnitRow(
            id="u",
            entrant_id="E1",
            entrant_name="E1",
            session_format=session_format,
            sequence_index=sequence_index,
        )


def test_settings_lengths_must_be_ordered() -> None:
    with pytest.raises(ValidationError):
        SettingsRow(three_by_ten_minutes=20, three_by_twenty_minutes=20)
    with pytest.raises(ValidationError):
        SettingsRow(long_minutes=42)


def test_too_many_preferences() -> None:
    with pytest.raises(ValidationError):
        EntrantRow(id="E1", name="E1", judge_preferences=["A", "B", "C", "D"])


def test_entrant_cannot_avoid_itself() -> None:
    with pytest.raises(ValidationError):
        EntrantRow(id="E1", name="E1", avoid_ids=["E1"])


def test_duplicate_ids_are_rejected() -> None:
    data = _snapshot_dict()
    data["entrants"].append({"id": "E1", "name": "Copy"})

    with pytest.raises(ValidationError, match="Duplicate entrant ids"):
        ScheduleSnapshot.model_validate(data)


def test_snapshot_from_domain_survives_json() -> None:
    snapshot = ScheduleSnapshot.from_domain(
        SettingsRow().to_settings(),
        balanced_judges(3),
        [make_entrant("E1", avoid=("E2",)), make_entrant("E2")],
        (placed_unit("E1", "J1", 0),),
    )

    reloaded = ScheduleSnapshot.model_validate_json(snapshot.model_dump_json())

    assert reloaded == snapshot
    assert reloaded.to_units()[0].judge_id == "J1"


def test_with_units_replaces_units_only() -> None:
    snapshot = ScheduleSnapshot.model_validate(_snapshot_dict())

    updated = snapshot.with_units(())

    assert updated.units == []
    assert updated.entrants == snapshot.entrants
