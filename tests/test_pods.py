from __future__ import annotations

import pytest

from judgegrid.models import SessionFormat
from judgegrid.pods import partition_pods

S = SessionFormat.THREE_BY_TEN
M = SessionFormat.THREE_BY_TWENTY


def _members(pods, session_format) -> int:
    return sum(pod.count(session_format) for pod in pods)


def test_triads_when_total_divides_by_three() -> None:
    assert partition_pods(6, 0) == ((S, S, S), (S, S, S))
    assert partition_pods(3, 3) == ((S, S, S), (M, M, M))


def test_mixed_triad_absorbs_remainders() -> None:
    assert partition_pods(1, 2) == ((S, M, M),)
    assert partition_pods(2, 1) == ((S, S, M),)
    assert partition_pods(4, 5) == ((S, S, S), (M, M, M), (S, M, M))


def test_quad_used_when_nothing_strands() -> None:
    assert partition_pods(0, 4) == ((M, M, M, M),)
    assert partition_pods(7, 0) == ((S, S, S, S), (S, S, S))


def test_quad_skipped_when_it_would_strand_an_entrant() -> None:
    # 5 % 4 == 1: a quad would leave one 3x10 entrant alone
    assert partition_pods(5, 0) == ((S, S, S), (S, S))


def test_pairs_and_mixed_pair() -> None:
    assert partition_pods(2, 2) == ((S, S), (M, M))
    assert partition_pods(1, 1) == ((S, M),)
    assert partition_pods(4, 1) == ((S, S, S), (S, M))


def test_singleton_only_as_last_resort() -> None:
    assert partition_pods(1, 0) == ((S,),)
    assert partition_pods(3, 1) == ((S, S, S), (M,))


def test_empty_and_negative_counts() -> None:
    assert partition_pods(0, 0) == ()
    with pytest.raises(ValueError):
        partition_pods(-1, 2)


@pytest.mark.parametrize("short_count", range(0, 16))
@pytest.mark.parametrize("medium_count", range(0, 16))
def test_every_entrant_lands_in_exactly_one_pod(short_count: int, medium_count: int) -> None:
    pods = partition_pods(short_count, medium_count)

    assert _members(pods, S) == short_count
    assert _members(pods, M) == medium_count
    assert all(1 <= len(pod) <= 4 for pod in pods)


@pytest.mark.parametrize("short_count", range(0, 16))
@pytest.mark.parametrize("medium_count", range(0, 16))
def test_singleton_implies_triad_remainder_of_one(short_count: int, medium_count: int) -> None:
    counts = {S: short_count, M: medium_count}
    for pod in partition_pods(short_count, medium_count):
        if len(pod) == 1:
            assert counts[pod[0]] % 3 == 1
