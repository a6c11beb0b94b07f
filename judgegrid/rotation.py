"""
Rotation matrix construction.

Turns pods into per-judge slot sequences. Each judge index owns a tuple of
slot values: a positive value is a global group number occupying that slot,
0 is a bye. Judges are taken three at a time as triads; pods rotate through
a triad so every member sees each of its three judges once.

Every step takes a PanelSchedule and returns a new one.
"""

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping

from .models import SessionFormat
from .pods import Pod

logger = logging.getLogger(__name__)

BYE = 0

# Round-robin patterns by pod size. Each round lists the pod-local group seen
# by lane 0, 1 and 2. Sizes 1-3 meet every lane once; in size 4 every group
# meets every lane once and sits out exactly one round.
ROTATION_PATTERNS: dict[int, tuple[tuple[int, int, int], ...]] = {
    1: ((1, 0, 0), (0, 1, 0), (0, 0, 1)),
    2: ((1, 2, 0), (0, 1, 2), (2, 0, 1)),
    3: ((1, 2, 3), (2, 3, 1), (3, 1, 2)),
    4: ((1, 2, 3), (4, 1, 2), (3, 4, 1), (2, 3, 4)),
}

Lanes = tuple[tuple[int, ...], tuple[int, ...], tuple[int, ...]]


@dataclass(frozen=True)
class PanelSchedule:
    """Abstract grid: slot sequences per judge index plus group formats."""

    judge_sequences: tuple[tuple[int, ...], ...]
    group_formats: Mapping[int, SessionFormat]
    triad_count: int
    next_group: int = 1  # next unused global group number

    @property
    def judge_count(self) -> int:
        return len(self.judge_sequences)

    def load(self, judge_index: int) -> int:
        """Slots assigned to a judge, byes included."""
        return len(self.judge_sequences[judge_index])

    def triad_load(self, triad: int) -> int:
        return sum(self.load(judge_index) for judge_index in triad_members(triad))

    def groups_for_judge(self, judge_index: int) -> frozenset[int]:
        return frozenset(value for value in self.judge_sequences[judge_index] if value != BYE)

    def panel(self, group: int) -> tuple[int, ...]:
        """Judge indices that evaluate a group, in index order."""
        return tuple(
            judge_index
            for judge_index, sequence in enumerate(self.judge_sequences)
            if group in sequence
        )

    def bye_count(self, judge_index: int) -> int:
        return sum(1 for value in self.judge_sequences[judge_index] if value == BYE)


def empty_schedule(judge_count: int) -> PanelSchedule:
    return PanelSchedule(
        judge_sequences=((),) * judge_count,
        group_formats=MappingProxyType({}),
        triad_count=judge_count // 3,
    )


def triad_members(triad: int) -> range:
    return range(triad * 3, triad * 3 + 3)


def pod_lanes(pod: Pod, slots_by_format: Mapping[SessionFormat, int]) -> Lanes:
    """Build the three lane sequences for one pod, using pod-local numbers.

    Mixed pods run every round at the longer format's length; a lane seeing a
    shorter-format group spends the rest of that round on a bye.
    """
    pattern = ROTATION_PATTERNS.get(len(pod))
    if pattern is None:
        raise ValueError(f"Pods must have 1-4 members, got {len(pod)}")

    round_length = max(slots_by_format[session_format] for session_format in pod)
    lanes: list[list[int]] = [[], [], []]
    for round_groups in pattern:
        for lane, group in zip(lanes, round_groups):
            if group == BYE:
                lane.extend([BYE] * round_length)
                continue
            own_length = slots_by_format[pod[group - 1]]
            lane.extend([group] * own_length)
            lane.extend([BYE] * (round_length - own_length))
    return (tuple(lanes[0]), tuple(lanes[1]), tuple(lanes[2]))


def renumber_lanes(lanes: Lanes, offset: int) -> Lanes:
    """Shift pod-local group numbers into the global numbering."""
    return tuple(
        tuple(value + offset if value != BYE else BYE for value in lane)
        for lane in lanes
    )  # type: ignore[return-value]


def lightest_triad(schedule: PanelSchedule) -> int:
    """Triad with the fewest assigned slots; ties go to the earlier triad."""
    return min(range(schedule.triad_count), key=lambda triad: (schedule.triad_load(triad), triad))


def place_pod(
    schedule: PanelSchedule, pod: Pod, slots_by_format: Mapping[SessionFormat, int]
) -> PanelSchedule:
    """Append one pod's rotation to the least loaded triad."""
    if schedule.triad_count == 0:
        raise ValueError("Cannot place a pod without a complete judge triad")

    lanes = renumber_lanes(pod_lanes(pod, slots_by_format), schedule.next_group - 1)
    triad = lightest_triad(schedule)

    sequences = list(schedule.judge_sequences)
    for lane, judge_index in zip(lanes, triad_members(triad)):
        sequences[judge_index] = sequences[judge_index] + lane

    group_formats = dict(schedule.group_formats)
    for offset, session_format in enumerate(pod):
        group_formats[schedule.next_group + offset] = session_format

    return replace(
        schedule,
        judge_sequences=tuple(sequences),
        group_formats=MappingProxyType(group_formats),
        next_group=schedule.next_group + len(pod),
    )


def trim_trailing_byes(schedule: PanelSchedule) -> PanelSchedule:
    """Drop byes at the tail of every judge's sequence."""
    trimmed = []
    for sequence in schedule.judge_sequences:
        end = len(sequence)
        while end > 0 and sequence[end - 1] == BYE:
            end -= 1
        trimmed.append(sequence[:end])
    return replace(schedule, judge_sequences=tuple(trimmed))


def build_panel_schedule(
    pods: tuple[Pod, ...],
    judge_count: int,
    slots_by_format: Mapping[SessionFormat, int],
) -> PanelSchedule:
    """Place every pod on a judge triad, balancing triad load.

    Args:
        pods: Pods in placement order
        judge_count: Number of judges available for the grid
        slots_by_format: Slot length of each session format

    Returns:
        PanelSchedule with trailing byes removed. Without a complete triad no
        pod can be placed and the schedule is returned empty.
    """
    schedule = empty_schedule(judge_count)
    if pods and schedule.triad_count == 0:
        logger.warning(
            f"Need at least 3 judges to rotate pods, have {judge_count}; "
            f"{sum(len(pod) for pod in pods)} entrant(s) left unscheduled"
        )
        return schedule

    for pod in pods:
        schedule = place_pod(schedule, pod, slots_by_format)
    return trim_trailing_byes(schedule)


def pack_long_sessions(schedule: PanelSchedule, count: int, long_slots: int) -> PanelSchedule:
    """Append single long sessions one at a time to the least loaded judge."""
    if count == 0:
        return schedule
    if schedule.judge_count == 0:
        logger.warning(f"No judges available for {count} long session(s)")
        return schedule

    sequences = list(schedule.judge_sequences)
    group_formats = dict(schedule.group_formats)
    group = schedule.next_group
    for _ in range(count):
        judge_index = min(range(len(sequences)), key=lambda index: (len(sequences[index]), index))
        sequences[judge_index] = sequences[judge_index] + (group,) * long_slots
        group_formats[group] = SessionFormat.LONG_SINGLE
        group += 1

    return replace(
        schedule,
        judge_sequences=tuple(sequences),
        group_formats=MappingProxyType(group_formats),
        next_group=group,
    )


def first_occurrences(sequence: tuple[int, ...]) -> dict[int, int]:
    """Map each group on a judge to the slot where it first appears."""
    starts: dict[int, int] = {}
    for slot, value in enumerate(sequence):
        if value != BYE and value not in starts:
            starts[value] = slot
    return starts
