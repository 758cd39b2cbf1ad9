"""
planmerge CLI - inspect command.

Shows how a schedule file is read: the detected spreadsheet columns and
the resulting task list.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from planmerge.cli.errors import ExitCode, print_format_error
from planmerge.cli.tables import task_table
from planmerge.core.config import load_config
from planmerge.core.formats import ScheduleFormatError, get_reader
from planmerge.core.formats.xlsx import XlsxReader

console = Console()


def _column_table(columns: dict[str, int]) -> Table:
    table = Table(title="Detected columns", show_header=True, header_style="bold cyan")
    table.add_column("Field")
    table.add_column("Column", justify="right")
    for field_name, index in sorted(columns.items(), key=lambda item: item[1]):
        table.add_row(field_name, str(index))
    return table


def inspect(
    file: Annotated[Path, typer.Argument(help="Schedule file to read (.xlsx, .xml or .mpp)")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print tasks as JSON"),
    ] = False,
) -> None:
    """
    Read one schedule file and show its tasks.

    For spreadsheets the detected header-to-column mapping is shown too,
    which helps when a column is not being picked up.
    """
    config = load_config()

    try:
        reader = get_reader(file, hours_per_day=config.reader.hours_per_day)
        columns = reader.read_header(file) if isinstance(reader, XlsxReader) else None
        tasks = reader.read(file)
    except ScheduleFormatError as e:
        print_format_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)

    if json_output:
        data: dict[str, object] = {
            "file": str(file),
            "tasks": [task.model_dump(mode="json") for task in tasks],
        }
        if columns is not None:
            data["columns"] = columns
        typer.echo(json.dumps(data, indent=2))
        return

    if columns is not None:
        if columns:
            console.print(_column_table(columns))
        else:
            console.print("[yellow]No recognizable header row[/yellow]")

    if not tasks:
        console.print(f"No tasks found in {file.name}")
        return

    console.print(task_table(tasks, title=f"{file.name} ({len(tasks)} tasks)"))
