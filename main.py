"""Consolidated CLI for judging grid tools."""

import typer

from judgegrid.cli import app as grid_app

# Create main application
app = typer.Typer(
    name="judgegrid",
    help="Judge panel scheduling tools",
    no_args_is_help=True,
)

# Register subcommands
app.add_typer(grid_app, name="grid", help="Populate, check and print judging grids")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
