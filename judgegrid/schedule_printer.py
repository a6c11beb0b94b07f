"""
Schedule printing and formatting utilities.

This module contains functions for formatting judging grids, conflicts and
preference checks as plain text with emojis and clock times.
"""

from collections.abc import Iterable

from .conflicts import ConflictDetail
from .models import Judge, SessionUnit, Settings
from .preferences import PreferenceCheck
from .session_units import scheduled_units
from .time_grid import format_clock, slot_start_minutes, unit_slot_range

CELL_WIDTH = 18


def _cell(text: str) -> str:
    if len(text) > CELL_WIDTH:
        text = text[:CELL_WIDTH - 1] + "…"
    return text.ljust(CELL_WIDTH)


def format_grid(units: Iterable[SessionUnit], judges: list[Judge], settings: Settings) -> str:
    """Format the grid with one column per judge and one row per slot."""
    units = list(units)
    placed = scheduled_units(units)
    if not placed or not judges:
        return "No sessions scheduled"

    cells: dict[tuple[str, int], str] = {}
    last_slot = 0
    for unit in placed:
        first, last = unit_slot_range(unit, settings)
        last_slot = max(last_slot, last)
        label = unit.entrant_name
        if unit.sequence_index is not None:
            label = f"{label} ({unit.sequence_index + 1})"
        cells[(unit.judge_id, first)] = label
        for slot in range(first + 1, last + 1):
            cells.setdefault((unit.judge_id, slot), "  ┆")

    header = "Time  | " + " | ".join(
        _cell(f"{judge.name} ({judge.category.value})" if judge.category else judge.name) for judge in judges
    )
    lines = [header, "-" * len(header)]
    for slot in range(last_slot + 1):
        clock = format_clock(slot_start_minutes(slot, settings))
        row = " | ".join(_cell(cells.get((judge.id, slot), "")) for judge in judges)
        lines.append(f"{clock} | {row}")

    unplaced = len(units) - len(placed)
    if unplaced:
        lines.append(f"\n{unplaced} session unit(s) not on the grid")
    return "\n".join(lines)


def format_conflicts(conflicts: list[ConflictDetail]) -> str:
    if not conflicts:
        return "✅ No conflicts"
    lines = []
    for conflict in conflicts:
        emoji = "🔴" if conflict.is_hard else "🟡"
        lines.append(f"{emoji} [{conflict.severity.value}] {conflict.describe()}")
    return "\n".join(lines)


def format_preference_check(check: PreferenceCheck, judges: list[Judge]) -> str:
    """Format per-entrant preference results plus the overall tally."""
    judge_names = {judge.id: judge.name for judge in judges}
    lines = [
        f"🟢 {check.satisfied} satisfied  🔴 {check.violated} violated  ⚪ {check.unmet} unmet",
        "-" * 80,
    ]
    for status in check.statuses:
        parts = []
        if status.format_honored is not None:
            parts.append("format ok" if status.format_honored else "format changed")
        if status.judges_met:
            parts.append("met " + ", ".join(judge_names.get(j, j) for j in status.judges_met))
        if status.judges_missed:
            parts.append("missed " + ", ".join(judge_names.get(j, j) for j in status.judges_missed))
        if status.avoid_violated:
            parts.append(f"{len(status.avoid_violated)} avoid conflict(s)")
        lines.append(f"{status.entrant_name}: {'; '.join(parts) if parts else 'no preferences'}")
    return "\n".join(lines)
