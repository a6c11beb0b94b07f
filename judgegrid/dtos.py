"""
Pydantic DTOs for schedule snapshot import/export.

All snapshot I/O goes through these validated DTOs so that the scheduler
only ever sees well-formed domain objects.
"""

from datetime import datetime, time
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Self

from .models import (
    Category,
    Entrant,
    GroupKind,
    Judge,
    MovingMode,
    SessionFormat,
    SessionUnit,
    Settings,
)


class SettingsRow(BaseModel):
    """Event-wide session lengths, start time and moving mode."""

    long_minutes: int = Field(default=40, description="Length of a 1xLong session in minutes", gt=0)
    three_by_twenty_minutes: int = Field(default=20, description="Length of one 3x20 visit in minutes", gt=0)
    three_by_ten_minutes: int = Field(default=10, description="Length of one 3x10 visit in minutes", gt=0)
    start_time: time = Field(default=time(9, 0), description="Event start time (HH:MM format)")
    moving: MovingMode = Field(default=MovingMode.GROUPS, description="Who changes rooms: judges or groups")

    @field_validator('start_time', mode='before')
    @classmethod
    def parse_time(cls, v: str | time) -> time:
        """Parse time from string if needed."""
        if isinstance(v, time):
            return v
        if isinstance(v, str):
            # Handle HH:MM format
            try:
                return datetime.strptime(v.strip(), '%H:%M').time()
            except ValueError:
                # Try ISO format
                return time.fromisoformat(v.strip())
        raise ValueError(f"Invalid time format: {v}")

    @model_validator(mode='after')
    def validate_lengths(self) -> Self:
        """Reject lengths the grid cannot represent."""
        self.to_settings()
        return self

    def to_settings(self) -> Settings:
        return Settings(
            long_minutes=self.long_minutes,
            three_by_twenty_minutes=self.three_by_twenty_minutes,
            three_by_ten_minutes=self.three_by_ten_minutes,
            start_time=self.start_time,
            moving=self.moving,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> 'SettingsRow':
        return cls(
            long_minutes=settings.long_minutes,
            three_by_twenty_minutes=settings.three_by_twenty_minutes,
            three_by_ten_minutes=settings.three_by_ten_minutes,
            start_time=settings.start_time,
            moving=settings.moving,
        )


class JudgeRow(BaseModel):
    id: str = Field(description="Unique judge identifier", min_length=1)
    name: str = Field(description="Display name")
    category: Category | None = Field(default=None, description="Judging category (SNG, MUS or PER)")
    room: str | None = Field(default=None, description="Room the judge sits in")
    active: bool = Field(default=True, description="Whether the judge takes part in the grid")

    def to_judge(self) -> Judge:
        return Judge(id=self.id, name=self.name, category=self.category, room=self.room, active=self.active)

    @classmethod
    def from_judge(cls, judge: Judge) -> 'JudgeRow':
        return cls(id=judge.id, name=judge.name, category=judge.category, room=judge.room, active=judge.active)


class EntrantRow(BaseModel):
    """
    Represents one entrant (a quartet or chorus) in the snapshot.

    Judge preferences are ranked best first. Avoid ids name other entrants
    this one should not share judges or time with.
    """

    id: str = Field(description="Unique entrant identifier", min_length=1)
    name: str = Field(description="Display name")
    session_format: SessionFormat | None = Field(default=None, description="Requested format, 3x20 when empty")
    judge_preferences: list[str] = Field(default_factory=list, description="Preferred judge ids", max_length=3)
    avoid_ids: list[str] = Field(default_factory=list, description="Entrant ids to avoid")
    room: str | None = Field(default=None, description="Room the entrant warms up or performs in")
    included: bool = Field(default=True, description="Whether the entrant is scheduled")
    group_kind: GroupKind | None = Field(default=None, description="quartet or chorus")
    overall_sf: float | None = Field(default=None, description="Semi-final ranking score")
    overall_f: float | None = Field(default=None, description="Final ranking score")

    @field_validator('judge_preferences', mode='before')
    @classmethod
    def drop_blank_preferences(cls, v: list[str | None] | None) -> list[str]:
        """Empty preference cells mean no preference."""
        if v is None:
            return []
        return [judge_id.strip() for judge_id in v if judge_id and judge_id.strip()]

    @model_validator(mode='after')
    def validate_avoid_list(self) -> Self:
        if self.id in self.avoid_ids:
            raise ValueError(f"Entrant {self.id} cannot avoid itself")
        return self

    def to_entrant(self) -> Entrant:
        return Entrant(
            id=self.id,
            name=self.name,
            session_format=self.session_format,
            judge_preferences=tuple(self.judge_preferences),
            avoid_ids=frozenset(self.avoid_ids),
            room=self.room,
            included=self.included,
            group_kind=self.group_kind,
            overall_sf=self.overall_sf,
            overall_f=self.overall_f,
        )

    @classmethod
    def from_entrant(cls, entrant: Entrant) -> 'EntrantRow':
        return cls(
            id=entrant.id,
            name=entrant.name,
            session_format=entrant.session_format,
            judge_preferences=list(entrant.judge_preferences),
            avoid_ids=sorted(entrant.avoid_ids),
            room=entrant.room,
            included=entrant.included,
            group_kind=entrant.group_kind,
            overall_sf=entrant.overall_sf,
            overall_f=entrant.overall_f,
        )


class SessionUnitRow(BaseModel):
    id: str = Field(description="Unique session unit identifier")
    entrant_id: str = Field(description="Owning entrant id")
    entrant_name: str = Field(description="Owning entrant name at creation time")
    session_format: SessionFormat = Field(description="Format this unit belongs to")
    sequence_index: int | None = Field(default=None, description="Visit number 0-2 for 3x formats", ge=0, le=2)
    start_slot: int | None = Field(default=None, description="Grid slot the unit starts on", ge=0)
    judge_id: str | None = Field(default=None, description="Judge evaluating the unit")

    @model_validator(mode='after')
    def validate_scheduling_state(self) -> Self:
        """A unit is either fully placed or not placed at all."""
        if (self.start_slot is None) != (self.judge_id is None):
            raise ValueError(
                f"Session unit {self.id} must have both start_slot and judge_id or neither"
            )
        repetitions = self.session_format.repetitions
        if repetitions == 1 and self.sequence_index is not None:
            raise ValueError(f"Session unit {self.id} is single-format and cannot have a sequence_index")
        if repetitions > 1 and (self.sequence_index is None or self.sequence_index >= repetitions):
            raise ValueError(
                f"Session unit {self.id} needs a sequence_index in 0..{repetitions - 1} for {self.session_format.value}"
            )
        return self

    def to_unit(self) -> SessionUnit:
        return SessionUnit(
            id=self.id,
            entrant_id=self.entrant_id,
            entrant_name=self.entrant_name,
            session_format=self.session_format,
            sequence_index=self.sequence_index,
            start_slot=self.start_slot,
            judge_id=self.judge_id,
        )

    @classmethod
    def from_unit(cls, unit: SessionUnit) -> 'SessionUnitRow':
        return cls(
            id=unit.id,
            entrant_id=unit.entrant_id,
            entrant_name=unit.entrant_name,
            session_format=unit.session_format,
            sequence_index=unit.sequence_index,
            start_slot=unit.start_slot,
            judge_id=unit.judge_id,
        )


class ScheduleSnapshot(BaseModel):
    """Everything needed to populate, check or print one event's grid."""

    settings: SettingsRow = Field(default_factory=SettingsRow)
    judges: list[JudgeRow] = Field(default_factory=list)
    entrants: list[EntrantRow] = Field(default_factory=list)
    units: list[SessionUnitRow] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_unique_ids(self) -> Self:
        for label, ids in (
            ("judge", [judge.id for judge in self.judges]),
            ("entrant", [entrant.id for entrant in self.entrants]),
            ("session unit", [unit.id for unit in self.units]),
        ):
            duplicates = sorted({item for item in ids if ids.count(item) > 1})
            if duplicates:
                raise ValueError(f"Duplicate {label} ids: {', '.join(duplicates)}")
        return self

    def to_settings(self) -> Settings:
        return self.settings.to_settings()

    def to_judges(self) -> list[Judge]:
        return [row.to_judge() for row in self.judges]

    def to_entrants(self) -> list[Entrant]:
        return [row.to_entrant() for row in self.entrants]

    def to_units(self) -> tuple[SessionUnit, ...]:
        return tuple(row.to_unit() for row in self.units)

    def with_units(self, units: tuple[SessionUnit, ...]) -> 'ScheduleSnapshot':
        return self.model_copy(update={"units": [SessionUnitRow.from_unit(unit) for unit in units]})

    @classmethod
    def from_domain(
        cls,
        settings: Settings,
        judges: list[Judge],
        entrants: list[Entrant],
        units: tuple[SessionUnit, ...],
    ) -> 'ScheduleSnapshot':
        return cls(
            settings=SettingsRow.from_settings(settings),
            judges=[JudgeRow.from_judge(judge) for judge in judges],
            entrants=[EntrantRow.from_entrant(entrant) for entrant in entrants],
            units=[SessionUnitRow.from_unit(unit) for unit in units],
        )
