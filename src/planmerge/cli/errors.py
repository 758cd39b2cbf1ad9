"""
Standardized error handling and exit codes for the planmerge CLI.

Provides consistent error messages with actionable guidance and
standardized exit codes across all commands.
"""

from enum import IntEnum

from rich.console import Console

from planmerge.core.formats import (
    BinaryProjectFileError,
    ScheduleFormatError,
    UnsupportedFormatError,
    list_formats,
)
from planmerge.core.workspace import WorkspaceError

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for planmerge CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Generic error."""

    USER_ERROR = 2
    """Bad input: unreadable file, unsupported format, invalid index."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Cannot read plan.mpp",
        ...     reason="Binary MPP files are not directly supported",
        ...     solution="Save the project as XML from MS Project",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}", highlight=False)

    if reason:
        console.print(f"[dim]{reason}[/dim]", highlight=False)

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}", highlight=False)


def print_format_error(error: ScheduleFormatError) -> None:
    """Print an error raised while reading or writing a schedule file."""
    target = error.path.name if error.path else "file"

    if isinstance(error, BinaryProjectFileError):
        print_error(
            f"Cannot read {target}",
            reason=error.message,
            solution="In MS Project use File > Save As > XML, then import the .xml file",
        )
    elif isinstance(error, UnsupportedFormatError):
        formats = list_formats()
        print_error(
            f"Unsupported file type: {target}",
            reason=error.message,
            solution=f"Use one of: {', '.join(formats['read'])}",
        )
    else:
        print_error(f"Cannot process {target}", reason=error.message)


def print_workspace_error(error: WorkspaceError) -> None:
    """Print a working-set error."""
    if error.path is not None:
        solution = "planmerge workspace clear  # discard the corrupted workspace"
    else:
        solution = "planmerge workspace files  # or: planmerge workspace list"
    print_error(error.message, solution=solution)


def print_empty_workspace_error() -> None:
    """Print error when a command needs imported files but there are none."""
    print_error(
        "Workspace is empty",
        reason="No schedule files have been imported yet",
        solution="planmerge workspace add base.xlsx update.xml",
    )


__all__ = [
    "ExitCode",
    "console",
    "print_empty_workspace_error",
    "print_error",
    "print_format_error",
    "print_workspace_error",
]
