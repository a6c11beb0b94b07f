from dataclasses import dataclass, replace
from datetime import time
from enum import Enum

from .config import DEFAULT_DURATIONS, MINUTES_PER_SLOT


class SessionFormat(Enum):
    """Session formats an entrant can choose"""

    LONG_SINGLE = "1xLong"
    THREE_BY_TWENTY = "3x20"
    THREE_BY_TEN = "3x10"

    @property
    def repetitions(self) -> int:
        return 1 if self is SessionFormat.LONG_SINGLE else 3


# Format used when an entrant has not picked one
DEFAULT_SESSION_FORMAT = SessionFormat.THREE_BY_TWENTY

# Pod-based formats, shorter first
POD_FORMATS: tuple[SessionFormat, ...] = (
    SessionFormat.THREE_BY_TEN,
    SessionFormat.THREE_BY_TWENTY,
)


class Category(Enum):
    """Judge specialty categories"""

    SINGING = "SNG"
    MUSIC = "MUS"
    PERFORMANCE = "PER"


# Lane order used when seating a category-balanced triad
TRIAD_CATEGORY_ORDER: tuple[Category, ...] = (
    Category.MUSIC,
    Category.SINGING,
    Category.PERFORMANCE,
)

# Order in which judges of a triad are displayed
CATEGORY_DISPLAY_ORDER: dict[Category, int] = {
    Category.SINGING: 0,
    Category.MUSIC: 1,
    Category.PERFORMANCE: 2,
}


def get_category_display_order(category: Category | None) -> int:
    """Get the display ordering value for a category (uncategorized last)."""
    if category is None:
        return 99
    return CATEGORY_DISPLAY_ORDER.get(category, 99)


class GroupKind(Enum):
    SMALL_ENSEMBLE = "quartet"
    LARGE_ENSEMBLE = "chorus"


class MovingMode(Enum):
    """Who walks between rooms during the event"""

    JUDGES = "judges"  # judges visit entrant rooms
    GROUPS = "groups"  # entrants visit judge rooms


class Severity(Enum):
    HARD = "hard"
    SOFT = "soft"


@dataclass
class Entrant:
    id: str
    name: str
    session_format: SessionFormat | None = None
    judge_preferences: tuple[str, ...] = ()  # best to worst, at most 3
    avoid_ids: frozenset[str] = frozenset()
    room: str | None = None
    included: bool = True
    group_kind: GroupKind | None = None
    overall_sf: float | None = None  # display only
    overall_f: float | None = None  # display only

    @property
    def effective_format(self) -> SessionFormat:
        return self.session_format or DEFAULT_SESSION_FORMAT

    def preference(self, rank: int) -> str | None:
        """Get the judge id ranked at ``rank`` (1-based), if any."""
        if 1 <= rank <= len(self.judge_preferences):
            return self.judge_preferences[rank - 1] or None
        return None


@dataclass
class Judge:
    id: str
    name: str
    category: Category | None = None
    room: str | None = None
    active: bool = True


@dataclass(frozen=True)
class SessionUnit:
    """One judge visit belonging to an entrant's chosen format.

    A unit is scheduled exactly when both ``start_slot`` and ``judge_id`` are
    set. Anything in between is rejected at construction time.
    """

    id: str
    entrant_id: str
    entrant_name: str
    session_format: SessionFormat
    sequence_index: int | None = None
    start_slot: int | None = None
    judge_id: str | None = None

    def __post_init__(self) -> None:
        if (self.start_slot is None) != (self.judge_id is None):
            raise ValueError(
                f"Session unit {self.id} is partially scheduled: "
                f"start_slot={self.start_slot}, judge_id={self.judge_id}"
            )
        if self.start_slot is not None and self.start_slot < 0:
            raise ValueError(f"Session unit {self.id} has negative start slot {self.start_slot}")
        if self.session_format.repetitions == 1:
            if self.sequence_index is not None:
                raise ValueError(f"Session unit {self.id} is single-format but has an index")
        elif self.sequence_index not in range(self.session_format.repetitions):
            raise ValueError(
                f"Session unit {self.id} needs a sequence index in 0..{self.session_format.repetitions - 1}"
            )

    @property
    def scheduled(self) -> bool:
        return self.start_slot is not None and self.judge_id is not None

    @property
    def key(self) -> tuple[str, SessionFormat, int]:
        """Identity that survives regeneration: (entrant, format, index)."""
        return (self.entrant_id, self.session_format, self.sequence_index or 0)

    def schedule(self, judge_id: str, start_slot: int) -> "SessionUnit":
        return replace(self, judge_id=judge_id, start_slot=start_slot)

    def unschedule(self) -> "SessionUnit":
        return replace(self, judge_id=None, start_slot=None)


def _parse_clock(value: str) -> time:
    hours, minutes = value.strip().split(":")
    return time(int(hours), int(minutes))


@dataclass(frozen=True)
class Settings:
    long_minutes: int = DEFAULT_DURATIONS[SessionFormat.LONG_SINGLE.value]
    three_by_twenty_minutes: int = DEFAULT_DURATIONS[SessionFormat.THREE_BY_TWENTY.value]
    three_by_ten_minutes: int = DEFAULT_DURATIONS[SessionFormat.THREE_BY_TEN.value]
    start_time: time = time(9, 0)
    moving: MovingMode = MovingMode.GROUPS
    slot_minutes: int = MINUTES_PER_SLOT

    def __post_init__(self) -> None:
        if isinstance(self.start_time, str):
            object.__setattr__(self, "start_time", _parse_clock(self.start_time))
        if self.slot_minutes <= 0:
            raise ValueError(f"slot_minutes must be positive, got {self.slot_minutes}")

        for session_format, minutes in self.durations.items():
            if minutes <= 0 or minutes % self.slot_minutes != 0:
                raise ValueError(
                    f"{session_format.value} length must be a positive multiple of "
                    f"{self.slot_minutes} minutes, got {minutes}"
                )
        if not self.three_by_ten_minutes < self.three_by_twenty_minutes < self.long_minutes:
            raise ValueError(
                "Session lengths must satisfy 3x10 < 3x20 < 1xLong, got "
                f"{self.three_by_ten_minutes}/{self.three_by_twenty_minutes}/{self.long_minutes}"
            )

    @property
    def durations(self) -> dict[SessionFormat, int]:
        """Configured length in minutes for each session format."""
        return {
            SessionFormat.LONG_SINGLE: self.long_minutes,
            SessionFormat.THREE_BY_TWENTY: self.three_by_twenty_minutes,
            SessionFormat.THREE_BY_TEN: self.three_by_ten_minutes,
        }

    @property
    def start_minutes(self) -> int:
        """Event start as minutes after midnight."""
        return self.start_time.hour * 60 + self.start_time.minute
