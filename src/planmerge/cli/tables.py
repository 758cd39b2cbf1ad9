"""Rich table renderers shared by the CLI commands."""

from collections.abc import Sequence

from rich.table import Table

from planmerge.core.tasks.models import Task, TaskStatus
from planmerge.core.workspace import SourceFile

STATUS_COLORS = {
    TaskStatus.NOT_STARTED: "white",
    TaskStatus.IN_PROGRESS: "yellow",
    TaskStatus.ON_HOLD: "magenta",
    TaskStatus.COMPLETED: "green",
    TaskStatus.CANCELLED: "dim",
}


def task_table(tasks: Sequence[Task], title: str | None = None, show_source: bool = False) -> Table:
    """Build a table of tasks, numbered by list position."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", justify="right")
    table.add_column("WBS")
    table.add_column("Name", overflow="fold")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Status")
    table.add_column("%", justify="right")
    table.add_column("Assignee", overflow="fold")
    if show_source:
        table.add_column("Src", justify="right", style="dim")

    for position, task in enumerate(tasks):
        color = STATUS_COLORS.get(task.status, "white")
        row = [
            str(position),
            task.wbs,
            task.name,
            task.start_date.isoformat(),
            task.end_date.isoformat(),
            f"[{color}]{task.status.label}[/{color}]",
            str(task.percent_complete),
            task.assignee,
        ]
        if show_source:
            row.append(str(task.source_index))
        table.add_row(*row)

    return table


def file_table(files: Sequence[SourceFile]) -> Table:
    """Build a table of imported source files, numbered by source index."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Index", justify="right")
    table.add_column("File", overflow="fold")
    table.add_column("Format")
    table.add_column("Tasks", justify="right")
    table.add_column("Role", style="dim")

    for index, source in enumerate(files):
        table.add_row(
            str(index),
            source.name,
            source.format,
            str(source.task_count),
            "base" if index == 0 else "overlay",
        )

    return table
