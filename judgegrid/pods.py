"""
Pod partitioning for three-repetition entrants.

A pod is a group of 1-4 entrants that rotate through the same 3-judge panel.
Pods of 3 fill a panel rotation with no idle slots, so they are preferred;
quads are used only when they avoid stranding a single entrant, and the
remainder becomes pairs or, if unavoidable, a singleton.
"""

import logging

from .models import SessionFormat

logger = logging.getLogger(__name__)

Pod = tuple[SessionFormat, ...]

SHORT = SessionFormat.THREE_BY_TEN
MEDIUM = SessionFormat.THREE_BY_TWENTY


def _take_homogeneous(
    remaining: dict[SessionFormat, int], size: int
) -> list[Pod]:
    """Cut as many same-format pods of ``size`` as possible, short format first."""
    pods: list[Pod] = []
    for session_format in (SHORT, MEDIUM):
        while remaining[session_format] >= size:
            pods.append((session_format,) * size)
            remaining[session_format] -= size
    return pods


def _take_mixed_triad(remaining: dict[SessionFormat, int]) -> list[Pod]:
    if (remaining[SHORT], remaining[MEDIUM]) == (1, 2):
        pod: Pod = (SHORT, MEDIUM, MEDIUM)
    elif (remaining[SHORT], remaining[MEDIUM]) == (2, 1):
        pod = (SHORT, SHORT, MEDIUM)
    else:
        return []
    remaining[SHORT] = remaining[MEDIUM] = 0
    return [pod]


def _take_pairs(remaining: dict[SessionFormat, int]) -> list[Pod]:
    pods: list[Pod] = []
    for session_format in (SHORT, MEDIUM):
        if remaining[session_format] >= 2:
            pods.append((session_format, session_format))
            remaining[session_format] -= 2
    if remaining[SHORT] == 1 and remaining[MEDIUM] == 1:
        pods.append((SHORT, MEDIUM))
        remaining[SHORT] = remaining[MEDIUM] = 0
    return pods


def partition_pods(short_count: int, medium_count: int) -> tuple[Pod, ...]:
    """Split 3x10 and 3x20 entrants into rotation pods.

    Args:
        short_count: Number of entrants using the 3x10 format
        medium_count: Number of entrants using the 3x20 format

    Returns:
        Pods in placement order. Each pod lists the format of each member.
    """
    if short_count < 0 or medium_count < 0:
        raise ValueError(f"Entrant counts must be non-negative, got {short_count}/{medium_count}")

    remaining = {SHORT: short_count, MEDIUM: medium_count}
    pods: list[Pod] = []

    if (short_count + medium_count) % 3 == 0:
        pods += _take_homogeneous(remaining, 3)
        pods += _take_mixed_triad(remaining)
    else:
        # Quads only when neither format is left with a lone entrant
        would_strand = short_count % 4 == 1 or medium_count % 4 == 1
        if not would_strand:
            pods += _take_homogeneous(remaining, 4)
        pods += _take_homogeneous(remaining, 3)
        pods += _take_mixed_triad(remaining)
        pods += _take_pairs(remaining)

    for session_format in (SHORT, MEDIUM):
        if remaining[session_format] == 1:
            pods.append((session_format,))
            remaining[session_format] = 0

    if remaining[SHORT] or remaining[MEDIUM]:
        logger.warning(
            f"Unassigned entrants after pod partitioning: "
            f"{remaining[SHORT]} {SHORT.value}, {remaining[MEDIUM]} {MEDIUM.value}"
        )
    return tuple(pods)
