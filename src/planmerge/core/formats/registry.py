"""
Schedule reader/writer protocols and registry.

Readers and writers register themselves for one or more file suffixes,
so the workspace and CLI can pick an implementation from a path alone.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from planmerge.core.tasks.models import Task

from .exceptions import UnsupportedFormatError
from .parsing import HOURS_PER_DAY


@dataclass
class WriteOptions:
    """Settings passed to every writer. Writers ignore what they do not use."""

    project_title: str = "Merged Project"
    start_time: str = "08:00:00"
    finish_time: str = "17:00:00"
    hours_per_day: int = HOURS_PER_DAY


@runtime_checkable
class ScheduleReader(Protocol):
    """
    Protocol for schedule readers.

    A reader turns one file into Task records. Readers leave
    ``source_index`` at 0; the caller applies the per-file index.
    """

    def read(self, path: Path) -> list[Task]:
        """
        Read all tasks from a file.

        Args:
            path: File to read

        Returns:
            Tasks in file order

        Raises:
            ScheduleFormatError: If the file cannot be read
        """
        ...


@runtime_checkable
class ScheduleWriter(Protocol):
    """Protocol for schedule writers."""

    def write(self, tasks: Sequence[Task], path: Path) -> None:
        """
        Write tasks to a file, replacing it if it exists.

        Args:
            tasks: Tasks in output order
            path: Destination file
        """
        ...


# Registries: suffix (lower-case, with dot) -> class
_readers: dict[str, type] = {}
_writers: dict[str, type] = {}


def _normalize_suffix(suffix: str) -> str:
    suffix = suffix.lower()
    return suffix if suffix.startswith(".") else f".{suffix}"


def register_reader(*suffixes: str) -> Callable[[type], type]:
    """
    Decorator to register a reader class for file suffixes.

    Usage:
        @register_reader(".xlsx")
        class XlsxReader:
            def read(self, path): ...
    """

    def decorator(reader_class: type) -> type:
        for suffix in suffixes:
            _readers[_normalize_suffix(suffix)] = reader_class
        return reader_class

    return decorator


def register_writer(*suffixes: str) -> Callable[[type], type]:
    """Decorator to register a writer class for file suffixes."""

    def decorator(writer_class: type) -> type:
        for suffix in suffixes:
            _writers[_normalize_suffix(suffix)] = writer_class
        return writer_class

    return decorator


def get_reader(path: Path | str, hours_per_day: int = HOURS_PER_DAY) -> ScheduleReader:
    """
    Get a reader instance for a file path.

    Args:
        path: File whose suffix selects the reader
        hours_per_day: Working hours per day used for duration conversion

    Returns:
        Reader instance

    Raises:
        UnsupportedFormatError: If no reader handles the suffix
    """
    suffix = Path(path).suffix.lower()
    reader_class = _readers.get(suffix)
    if reader_class is None:
        raise UnsupportedFormatError(
            f"Cannot read '{suffix or path}' files. "
            f"Supported: {', '.join(sorted(_readers))}",
            path,
        )
    reader: ScheduleReader = reader_class(hours_per_day=hours_per_day)
    return reader


def get_writer(path: Path | str, options: WriteOptions | None = None) -> ScheduleWriter:
    """
    Get a writer instance for a file path.

    Args:
        path: File whose suffix selects the writer
        options: Writer settings (defaults when omitted)

    Returns:
        Writer instance

    Raises:
        UnsupportedFormatError: If no writer handles the suffix
    """
    suffix = Path(path).suffix.lower()
    writer_class = _writers.get(suffix)
    if writer_class is None:
        raise UnsupportedFormatError(
            f"Cannot write '{suffix or path}' files. "
            f"Supported: {', '.join(sorted(_writers))}",
            path,
        )
    writer: ScheduleWriter = writer_class(options or WriteOptions())
    return writer


def list_formats() -> dict[str, list[str]]:
    """
    List registered suffixes.

    Returns:
        {"read": [...], "write": [...]} with sorted suffixes
    """
    return {"read": sorted(_readers), "write": sorted(_writers)}


def read_schedule(path: Path | str, hours_per_day: int = HOURS_PER_DAY) -> list[Task]:
    """Read a schedule file with the reader registered for its suffix."""
    return get_reader(path, hours_per_day=hours_per_day).read(Path(path))


def write_schedule(
    tasks: Sequence[Task],
    path: Path | str,
    options: WriteOptions | None = None,
    default_suffix: str = ".xml",
) -> Path:
    """
    Write tasks with the writer registered for the path's suffix.

    A path without a suffix gets default_suffix.

    Returns:
        The path actually written
    """
    target = Path(path)
    if not target.suffix:
        target = target.with_suffix(_normalize_suffix(default_suffix))
    get_writer(target, options).write(tasks, target)
    return target
