"""
planmerge CLI - one-shot merge command.

Reads a base schedule and any number of overlay schedules, folds the
overlays into the base by WBS code and writes the result.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from planmerge.cli.errors import ExitCode, print_error, print_format_error
from planmerge.core.config import load_config
from planmerge.core.formats import ScheduleFormatError, read_schedule, write_schedule
from planmerge.core.merge import fold_sources
from planmerge.core.tasks.models import Task

logger = logging.getLogger(__name__)

console = Console()


def merge(
    files: Annotated[
        list[Path],
        typer.Argument(help="Base schedule followed by one or more overlay schedules"),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="File to write (.xlsx or .xml; no suffix means the configured default)",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what the merge would do without writing anything",
        ),
    ] = False,
) -> None:
    """
    Merge schedules by WBS code.

    The first file is the base. Each overlay is applied in order: tasks
    whose WBS matches a base task update its progress, dates, duration,
    assignee and notes; all other tasks are appended.

    Examples:

        planmerge merge plan.xlsx update.xml -o merged.xml

        planmerge merge plan.xml week1.xlsx week2.xlsx --dry-run
    """
    if len(files) < 2:
        print_error(
            "Need a base file and at least one overlay",
            solution="planmerge merge base.xlsx overlay.xml -o merged.xml",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    if output is None and not dry_run:
        print_error(
            "No output file given",
            solution="Add --output merged.xml (or --dry-run to preview)",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    config = load_config()

    sources: list[list[Task]] = []
    for path in files:
        try:
            tasks = read_schedule(path, hours_per_day=config.reader.hours_per_day)
        except ScheduleFormatError as e:
            print_format_error(e)
            raise typer.Exit(ExitCode.USER_ERROR)
        logger.debug("Read %d tasks from %s", len(tasks), path)
        sources.append(tasks)

    merged, stats = fold_sources(sources)

    console.print(
        f"Merged [bold]{len(files)}[/bold] files into [bold]{len(merged)}[/bold] tasks"
    )
    console.print(f"  Updated:  {stats.updated}")
    console.print(f"  Appended: {stats.appended}")
    if stats.appended_without_wbs:
        console.print(f"  Appended without WBS: {stats.appended_without_wbs}")

    # output is only None on a dry run
    if dry_run or output is None:
        console.print("[dim]Dry run: nothing written[/dim]")
        return

    try:
        written = write_schedule(
            merged, output, config.write_options(), default_suffix=config.export.default_suffix
        )
    except ScheduleFormatError as e:
        print_format_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)

    console.print(f"[green]Wrote[/green] {written}", highlight=False)
