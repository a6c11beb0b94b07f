"""Command-line interface for judging grid scheduling."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from .config import DetectorThresholds
from .conflicts import detect_conflicts, has_hard_conflicts
from .dtos import ScheduleSnapshot
from .populate import populate_schedule
from .preferences import preference_check
from .schedule_printer import format_conflicts, format_grid, format_preference_check
from .session_units import regenerate_units

app = typer.Typer(
    name="judgegrid",
    help="Judge panel scheduling for quartet and chorus evaluation sessions",
    no_args_is_help=True,
)

SnapshotArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to the JSON schedule snapshot",
        exists=True,
        readable=True,
    ),
]


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    setup_logging(verbose)


def load_snapshot(path: Path) -> ScheduleSnapshot:
    """Read and validate a snapshot, exiting with a message on bad input."""
    try:
        return ScheduleSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        typer.echo(f"❌ Invalid snapshot {path}:\n{e}", err=True)
        raise typer.Exit(1)


@app.command("populate")
def populate(
    snapshot_file: SnapshotArgument,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Where to write the populated snapshot (default: overwrite input)"),
    ] = None,
) -> None:
    """Fill the grid from scratch and write the placed units back."""
    snapshot = load_snapshot(snapshot_file)
    settings = snapshot.to_settings()
    judges = snapshot.to_judges()
    entrants = snapshot.to_entrants()
    thresholds = DetectorThresholds.from_env()

    units = regenerate_units(entrants, snapshot.to_units())
    result = populate_schedule(units, entrants, judges, settings, thresholds)

    target = output or snapshot_file
    populated = snapshot.with_units(result.units)
    target.write_text(populated.model_dump_json(indent=2), encoding="utf-8")

    typer.echo(f"✅ Placed {result.scheduled_count} of {len(result.units)} session units")
    tiers = result.tier_counts()
    typer.echo("   " + ", ".join(f"{tier.name.lower()}: {count}" for tier, count in tiers.items() if count))
    if result.unplaced_entrant_ids:
        typer.echo(f"⚠️  Unplaced entrants: {', '.join(result.unplaced_entrant_ids)}", err=True)

    conflicts = detect_conflicts(result.units, judges, entrants, settings, thresholds)
    typer.echo(format_conflicts(conflicts))
    typer.echo(f"Saved to {target}")


@app.command("check")
def check(snapshot_file: SnapshotArgument) -> None:
    """Report conflicts in a snapshot; exits with 1 if any are hard."""
    snapshot = load_snapshot(snapshot_file)
    conflicts = detect_conflicts(
        snapshot.to_units(),
        snapshot.to_judges(),
        snapshot.to_entrants(),
        snapshot.to_settings(),
        DetectorThresholds.from_env(),
    )
    typer.echo(format_conflicts(conflicts))
    if has_hard_conflicts(conflicts):
        raise typer.Exit(1)


@app.command("show")
def show(snapshot_file: SnapshotArgument) -> None:
    """Print the grid as a text table."""
    snapshot = load_snapshot(snapshot_file)
    judges = [judge for judge in snapshot.to_judges() if judge.active]
    typer.echo(format_grid(snapshot.to_units(), judges, snapshot.to_settings()))


@app.command("preferences")
def preferences(snapshot_file: SnapshotArgument) -> None:
    """Summarise how well the grid honours entrant preferences."""
    snapshot = load_snapshot(snapshot_file)
    judges = snapshot.to_judges()
    result = preference_check(snapshot.to_entrants(), judges, snapshot.to_units(), snapshot.to_settings())
    typer.echo(format_preference_check(result, judges))
