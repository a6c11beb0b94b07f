"""Configuration for the judging scheduler."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

# Grid quantum: every session length must be a multiple of this
MINUTES_PER_SLOT = 5

# Fallback session lengths in minutes, keyed by format value
DEFAULT_DURATIONS: dict[str, int] = {
    "1xLong": 40,
    "3x20": 20,
    "3x10": 10,
}


def parse_clock_minutes(value: str) -> int:
    """Parse ``HH:MM`` into minutes after midnight. Hours past 23 are allowed."""
    hours, minutes = value.strip().split(":")
    return int(hours) * 60 + int(minutes)


@dataclass(frozen=True)
class DetectorThresholds:
    """Limits used by the conflict detector."""

    overtime_threshold_minutes: int = 120
    late_finish_minutes: int = 25 * 60  # 01:00 on the day after the event starts
    room_buffer_slots: int = 2  # 10 minutes of turnover at 5 minutes per slot

    @classmethod
    def from_env(cls) -> "DetectorThresholds":
        """Load thresholds from environment variables."""
        return cls(
            overtime_threshold_minutes=int(os.getenv("JUDGEGRID_OVERTIME_MINUTES", "120")),
            late_finish_minutes=parse_clock_minutes(os.getenv("JUDGEGRID_LATE_FINISH", "25:00")),
            room_buffer_slots=int(os.getenv("JUDGEGRID_ROOM_BUFFER_SLOTS", "2")),
        )
