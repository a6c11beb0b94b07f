"""
Identity resolution: bind real judges to panel indices and real entrants to
group numbers.

Judges are seated so every triad holds one judge per category where possible,
with first-choice popularity spread evenly across triads. Entrants are then
placed on groups by a sequence of named search passes, each of which either
returns a placement or defers to the next.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from itertools import product
from types import MappingProxyType

from .models import TRIAD_CATEGORY_ORDER, Entrant, Judge, SessionFormat
from .rotation import PanelSchedule, triad_members
from .types import GroupPlacement, JudgePopularity, PriorityTier

logger = logging.getLogger(__name__)


def judge_popularity(
    judges: Iterable[Judge], entrants: Iterable[Entrant]
) -> dict[str, JudgePopularity]:
    """Count how often each judge is named 1st, 2nd and 3rd."""
    counts = {judge.id: [0, 0, 0] for judge in judges}
    for entrant in entrants:
        for rank in (1, 2, 3):
            judge_id = entrant.preference(rank)
            if judge_id in counts:
                counts[judge_id][rank - 1] += 1
    return {
        judge_id: JudgePopularity(first=first, second=second, third=third)
        for judge_id, (first, second, third) in counts.items()
    }


def _best_triad(
    pools: list[list[Judge]], target: float, first_counts: Mapping[str, int]
) -> list[Judge | None]:
    """Pick one judge per category whose first-choice total is nearest ``target``."""
    best: tuple[Judge, ...] | None = None
    best_diff = float("inf")
    for combo in product(*pools):
        diff = abs(sum(first_counts[judge.id] for judge in combo) - target)
        if diff < best_diff:
            best, best_diff = combo, diff
    if best is not None:
        return list(best)
    # Some category is exhausted: seat whatever each category still has
    return [pool[0] if pool else None for pool in pools]


def resolve_judges(
    judges: list[Judge], entrants: list[Entrant], triad_count: int
) -> tuple[Judge, ...]:
    """Seat judges on panel indices.

    Args:
        judges: Judges available for the grid, in input order
        entrants: Entrants being scheduled, used for popularity counts
        triad_count: Number of complete triads in the panel schedule

    Returns:
        One judge per panel index. Indices 3t..3t+2 hold triad t in lane
        order (MUS, SNG, PER); judges left over follow in input order.
    """
    popularity = judge_popularity(judges, entrants)
    first_counts = {judge_id: counts.first for judge_id, counts in popularity.items()}

    seats: list[Judge | None] = [None] * len(judges)
    seated: set[str] = set()

    for triad in range(triad_count):
        unseated = [judge for judge in judges if judge.id not in seated]
        target = sum(first_counts[judge.id] for judge in unseated) / (triad_count - triad)
        pools = [
            [judge for judge in unseated if judge.category is category]
            for category in TRIAD_CATEGORY_ORDER
        ]

        chosen = _best_triad(pools, target, first_counts)
        for lane, judge in zip(triad_members(triad), chosen):
            if judge is not None:
                seats[lane] = judge
                seated.add(judge.id)

        for lane in triad_members(triad):
            if seats[lane] is None:
                filler = next((judge for judge in judges if judge.id not in seated), None)
                if filler is not None:
                    seats[lane] = filler
                    seated.add(filler.id)
                    logger.debug(f"Filled triad {triad + 1} lane {lane % 3} with {filler.name}")

    leftovers = iter(judge for judge in judges if judge.id not in seated)
    for index in range(triad_count * 3, len(seats)):
        seats[index] = next(leftovers)

    return tuple(judge for judge in seats if judge is not None)


@dataclass(frozen=True)
class SearchState:
    """Seating and group assignments built up while placing entrants."""

    schedule: PanelSchedule
    seats: tuple[Judge, ...]
    entrant_by_group: Mapping[int, Entrant] = field(default_factory=lambda: MappingProxyType({}))

    def seat_of(self, judge_id: str) -> int | None:
        for index, judge in enumerate(self.seats):
            if judge.id == judge_id:
                return index
        return None

    def panel(self, group: int) -> tuple[int, ...]:
        return self.schedule.panel(group)

    def has_avoidance_conflict(self, entrant: Entrant, group: int) -> bool:
        """Check whether anyone sharing a judge with ``group`` is avoided by ``entrant``."""
        if not entrant.avoid_ids:
            return False
        for judge_index in self.panel(group):
            for other_group in self.schedule.groups_for_judge(judge_index):
                if other_group == group:
                    continue
                other = self.entrant_by_group.get(other_group)
                if other is not None and other.id in entrant.avoid_ids:
                    return True
        return False

    def triad_is_empty(self, triad: int) -> bool:
        """True when no entrant is placed on any group the triad evaluates."""
        for judge_index in triad_members(triad):
            for group in self.schedule.groups_for_judge(judge_index):
                if group in self.entrant_by_group:
                    return False
        return True

    def swap_triads(self, first: int, second: int) -> "SearchState":
        seats = list(self.seats)
        for a, b in zip(triad_members(first), triad_members(second)):
            seats[a], seats[b] = seats[b], seats[a]
        return replace(self, seats=tuple(seats))

    def assign(self, group: int, entrant: Entrant) -> "SearchState":
        entrant_by_group = dict(self.entrant_by_group)
        entrant_by_group[group] = entrant
        return replace(self, entrant_by_group=MappingProxyType(entrant_by_group))


PassResult = tuple[GroupPlacement, SearchState] | None
SearchPass = Callable[[SearchState, Entrant, tuple[int, ...]], PassResult]


def first_choice_pass(state: SearchState, entrant: Entrant, candidates: tuple[int, ...]) -> PassResult:
    """Put the entrant in front of their 1st choice, ignoring avoidance.

    When the 1st choice sits in a different triad from a candidate group and
    neither triad has entrants yet, the two triads trade judges so the
    preference can be met.
    """
    judge_id = entrant.preference(1)
    if judge_id is None or state.seat_of(judge_id) is None:
        return None

    swapped = False
    for group in candidates:
        seat = state.seat_of(judge_id)
        panel = state.panel(group)
        if seat in panel:
            placement = GroupPlacement(
                entrant_id=entrant.id,
                group_number=group,
                tier=PriorityTier.FIRST_CHOICE,
                preferred_judge_id=judge_id,
                conflicts_ignored=state.has_avoidance_conflict(entrant, group),
                triads_swapped=swapped,
            )
            return placement, state
        if not panel:
            continue

        preferred_triad = seat // 3
        group_triad = panel[0] // 3
        if (
            preferred_triad != group_triad
            and preferred_triad < state.schedule.triad_count
            and group_triad < state.schedule.triad_count
            and state.triad_is_empty(preferred_triad)
            and state.triad_is_empty(group_triad)
        ):
            logger.debug(
                f"Swapping triads {preferred_triad + 1} and {group_triad + 1} "
                f"for {entrant.name}'s 1st choice"
            )
            state = state.swap_triads(preferred_triad, group_triad)
            swapped = True
            if state.seat_of(judge_id) in panel:
                placement = GroupPlacement(
                    entrant_id=entrant.id,
                    group_number=group,
                    tier=PriorityTier.FIRST_CHOICE,
                    preferred_judge_id=judge_id,
                    conflicts_ignored=state.has_avoidance_conflict(entrant, group),
                    triads_swapped=True,
                )
                return placement, state
    return None


def _ranked_choice_pass(
    rank: int, tier: PriorityTier, state: SearchState, entrant: Entrant, candidates: tuple[int, ...]
) -> PassResult:
    judge_id = entrant.preference(rank)
    seat = state.seat_of(judge_id) if judge_id else None
    if seat is None:
        return None
    for group in candidates:
        if seat in state.panel(group) and not state.has_avoidance_conflict(entrant, group):
            return GroupPlacement(entrant.id, group, tier, preferred_judge_id=judge_id), state
    return None


def second_choice_pass(state: SearchState, entrant: Entrant, candidates: tuple[int, ...]) -> PassResult:
    return _ranked_choice_pass(2, PriorityTier.SECOND_CHOICE, state, entrant, candidates)


def third_choice_pass(state: SearchState, entrant: Entrant, candidates: tuple[int, ...]) -> PassResult:
    return _ranked_choice_pass(3, PriorityTier.THIRD_CHOICE, state, entrant, candidates)


def conflict_free_pass(state: SearchState, entrant: Entrant, candidates: tuple[int, ...]) -> PassResult:
    """Take any evaluated group that keeps the entrant clear of avoided entrants."""
    for group in candidates:
        if state.panel(group) and not state.has_avoidance_conflict(entrant, group):
            return GroupPlacement(entrant.id, group, PriorityTier.CONFLICT_FREE), state
    return None


def fallback_pass(state: SearchState, entrant: Entrant, candidates: tuple[int, ...]) -> PassResult:
    if not candidates:
        return None
    group = candidates[0]
    placement = GroupPlacement(
        entrant.id,
        group,
        PriorityTier.FALLBACK,
        conflicts_ignored=state.has_avoidance_conflict(entrant, group),
    )
    return placement, state


SEARCH_PASSES: tuple[SearchPass, ...] = (
    first_choice_pass,
    second_choice_pass,
    third_choice_pass,
    conflict_free_pass,
    fallback_pass,
)


@dataclass(frozen=True)
class GroupResolution:
    seats: tuple[Judge, ...]
    entrant_by_group: Mapping[int, Entrant]
    placements: tuple[GroupPlacement, ...]
    unplaced_entrant_ids: tuple[str, ...] = ()


def resolve_groups(
    schedule: PanelSchedule,
    seats: tuple[Judge, ...],
    entrants: list[Entrant],
    entrant_formats: Mapping[str, SessionFormat],
) -> GroupResolution:
    """Place each entrant on one group of their format.

    Entrants are handled in input order. Seats may change when a 1st-choice
    placement trades two untouched triads, so the returned seating replaces
    the one passed in.
    """
    state = SearchState(schedule=schedule, seats=seats)
    placements: list[GroupPlacement] = []
    unplaced: list[str] = []
    placed_ids: set[str] = set()

    for entrant in entrants:
        session_format = entrant_formats.get(entrant.id)
        if session_format is None or entrant.id in placed_ids:
            continue

        candidates = tuple(
            group
            for group in sorted(schedule.group_formats)
            if schedule.group_formats[group] is session_format and group not in state.entrant_by_group
        )
        if not candidates:
            logger.warning(f"No {session_format.value} group left for {entrant.name}")
            unplaced.append(entrant.id)
            continue

        for search in SEARCH_PASSES:
            found = search(state, entrant, candidates)
            if found is not None:
                placement, state = found
                break
        else:  # pragma: no cover - fallback_pass always answers for non-empty candidates
            unplaced.append(entrant.id)
            continue

        if placement.conflicts_ignored:
            logger.info(f"{entrant.name} placed at {placement.tier.name} despite an avoid conflict")
        state = state.assign(placement.group_number, entrant)
        placements.append(placement)
        placed_ids.add(entrant.id)

    tiers = {tier: 0 for tier in PriorityTier}
    for placement in placements:
        tiers[placement.tier] += 1
    logger.info(
        "Group placement tiers: "
        + ", ".join(f"{tier.name.lower()}={count}" for tier, count in tiers.items())
    )

    return GroupResolution(
        seats=state.seats,
        entrant_by_group=state.entrant_by_group,
        placements=tuple(placements),
        unplaced_entrant_ids=tuple(unplaced),
    )
