"""
Exceptions raised by schedule readers and writers.

Exception Hierarchy:
    ScheduleFormatError (base)
    ├── UnsupportedFormatError (no reader/writer for the file suffix)
    ├── BinaryProjectFileError (native binary .mpp content)
    └── ScheduleParseError (unreadable or malformed file)
"""

from pathlib import Path


class ScheduleFormatError(Exception):
    """
    Base exception for file-format errors.

    Attributes:
        message: Human-readable error message
        path: File the error relates to, if known
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        return self.message


class UnsupportedFormatError(ScheduleFormatError):
    """Raised when no reader or writer is registered for a file suffix."""


class BinaryProjectFileError(ScheduleFormatError):
    """Raised when a .mpp file holds native binary data rather than XML."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(
            "Binary MPP files are not directly supported. "
            f"Please export the file to XLSX or XML first.\nFile: {path}",
            path,
        )


class ScheduleParseError(ScheduleFormatError):
    """Raised when a schedule file cannot be read or parsed."""
