"""
planmerge CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console
from rich.table import Table

from planmerge import __version__
from planmerge.cli import inspect_cmd, merge, workspace
from planmerge.core.config.env import load_layered_env
from planmerge.core.formats import list_formats

# Help panel names for command grouping
PANEL_MERGE = "Merge Schedules"
PANEL_WORKSPACE = "Work Step by Step"
PANEL_INFO = "About planmerge"

app = typer.Typer(
    name="planmerge",
    help="Merge project schedules (XLSX, MS Project XML) by WBS code",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool) -> None:
    """Route library log records to stderr; DEBUG with --debug, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    planmerge - merge project schedules by WBS code.

    One-shot:
        planmerge merge base.xlsx update.xml -o merged.xml

    Step by step:
        planmerge workspace add base.xlsx update.xml
        planmerge workspace merge
        planmerge workspace list
        planmerge workspace export merged.xml
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)

    ctx.obj = {"debug": debug}


# =============================================================================
# Merge Schedules
# =============================================================================

app.command(name="merge", rich_help_panel=PANEL_MERGE)(merge.merge)
app.command(name="inspect", rich_help_panel=PANEL_MERGE)(inspect_cmd.inspect)


# =============================================================================
# Work Step by Step
# =============================================================================

app.add_typer(workspace.app, name="workspace", rich_help_panel=PANEL_WORKSPACE)


# =============================================================================
# About planmerge
# =============================================================================


@app.command(rich_help_panel=PANEL_INFO)
def formats() -> None:
    """List the file types planmerge can read and write."""
    supported = list_formats()
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Suffix")
    table.add_column("Read", justify="center")
    table.add_column("Write", justify="center")
    for suffix in sorted(set(supported["read"]) | set(supported["write"])):
        table.add_row(
            suffix,
            "yes" if suffix in supported["read"] else "-",
            "yes" if suffix in supported["write"] else "-",
        )
    console.print(table)


@app.command(rich_help_panel=PANEL_INFO)
def version() -> None:
    """Show planmerge version and exit."""
    console.print(f"planmerge version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
