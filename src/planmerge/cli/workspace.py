"""
planmerge CLI - workspace commands.

The workspace keeps imported schedule files and the combined task list
between invocations, so files can be added, reviewed, merged, tidied
and exported step by step.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from rich.console import Console

from planmerge.cli.errors import (
    ExitCode,
    print_empty_workspace_error,
    print_error,
    print_format_error,
    print_workspace_error,
)
from planmerge.cli.tables import file_table, task_table
from planmerge.core.config import load_config
from planmerge.core.formats import ScheduleFormatError
from planmerge.core.workspace import WorkspaceError, WorkspaceService

T = TypeVar("T")

app = typer.Typer(
    name="workspace",
    help="Import, review, merge and export schedules step by step",
    no_args_is_help=True,
)

console = Console()


def _service() -> WorkspaceService:
    return WorkspaceService.for_project(Path.cwd(), load_config())


def _run(operation: Callable[[], T]) -> T:
    """Run a workspace operation, turning domain errors into CLI exits."""
    try:
        return operation()
    except WorkspaceError as e:
        print_workspace_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)
    except ScheduleFormatError as e:
        print_format_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)
    except OSError as e:
        print_error("Cannot save workspace", reason=str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)


@app.command()
def add(
    files: Annotated[list[Path], typer.Argument(help="Schedule files to import")],
) -> None:
    """
    Import schedule files.

    The first file ever imported is the merge base; each later file is
    an overlay applied in import order. Files already imported are skipped.
    """
    service = _service()
    result = _run(lambda: service.add_files(files))

    for source in result.added:
        console.print(
            f"[green]Imported[/green] {source.name}: {source.task_count} tasks", highlight=False
        )
    for path in result.skipped:
        console.print(f"[dim]Skipped {Path(path).name}: already imported[/dim]", highlight=False)
    for path, message in result.failed:
        print_error(f"Cannot import {Path(path).name}", reason=message)

    if result.failed and not result.added:
        raise typer.Exit(ExitCode.USER_ERROR)


@app.command(name="files")
def list_files() -> None:
    """List imported files with their source index."""
    files = _run(lambda: _service().list_files())
    if not files:
        console.print("No files imported")
        return
    console.print(file_table(files))


@app.command()
def remove(
    index: Annotated[int, typer.Argument(help="Source index shown by 'workspace files'")],
) -> None:
    """
    Remove an imported file and its tasks.

    Later files move down one index.
    """
    service = _service()
    removed = _run(lambda: service.remove_file(index))
    console.print(f"[green]Removed[/green] {removed.name}", highlight=False)


@app.command(name="merge")
def merge_workspace() -> None:
    """
    Merge every imported file into the base.

    File 0 is the base; the others are applied in index order. Merged
    tasks all belong to the base afterwards, so files added later can be
    merged in with another run.
    """
    service = _service()
    files = _run(service.list_files)
    if not files:
        print_empty_workspace_error()
        raise typer.Exit(ExitCode.USER_ERROR)

    stats = _run(service.merge)
    tasks = _run(service.list_tasks)
    console.print(f"Merged [bold]{len(files)}[/bold] files into [bold]{len(tasks)}[/bold] tasks")
    console.print(f"  Updated:  {stats.updated}")
    console.print(f"  Appended: {stats.appended}")
    if stats.appended_without_wbs:
        console.print(f"  Appended without WBS: {stats.appended_without_wbs}")


@app.command(name="list")
def list_tasks(
    json_output: Annotated[bool, typer.Option("--json", help="Print tasks as JSON")] = False,
) -> None:
    """Show the working task list."""
    state = _run(lambda: _service().load())

    if json_output:
        typer.echo(json.dumps([t.model_dump(mode="json") for t in state.tasks], indent=2))
        return

    if not state.tasks:
        console.print("No tasks in workspace")
        return

    title = "Merged tasks" if state.merged else "Imported tasks"
    console.print(task_table(state.tasks, title=title, show_source=not state.merged))


@app.command()
def delete(
    positions: Annotated[list[int], typer.Argument(help="Task positions shown by 'workspace list'")],
) -> None:
    """Delete tasks by position."""
    service = _service()
    count = _run(lambda: service.delete_tasks(positions))
    console.print(f"[green]Deleted[/green] {count} task(s)")


@app.command()
def move(
    positions: Annotated[list[int], typer.Argument(help="Task positions to move")],
    up: Annotated[
        bool,
        typer.Option("--up/--down", help="Direction to move the selected tasks"),
    ] = True,
) -> None:
    """
    Move tasks one slot up or down.

    Tasks at the list edge, or next to another selected task, stay put.
    """
    service = _service()
    selection = _run(lambda: service.move_tasks(positions, up=up))
    console.print(f"Selection now at: {', '.join(map(str, selection))}")


@app.command()
def export(
    path: Annotated[Path, typer.Argument(help="Output file (.xlsx or .xml)")],
) -> None:
    """Write the working task list to a file."""
    service = _service()
    tasks = _run(service.list_tasks)
    if not tasks:
        print_empty_workspace_error()
        raise typer.Exit(ExitCode.USER_ERROR)

    written = _run(lambda: service.export(path))
    console.print(f"[green]Exported[/green] {len(tasks)} tasks to {written}", highlight=False)


@app.command()
def clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Discard the workspace: imported files and tasks."""
    if not yes and not typer.confirm("Discard all imported files and tasks?"):
        raise typer.Exit(ExitCode.SUCCESS)

    if _service().clear():
        console.print("[green]Workspace cleared[/green]")
    else:
        console.print("Workspace already empty")
