"""Workspace errors."""

from pathlib import Path


class WorkspaceError(Exception):
    """
    Raised for invalid working-set operations or an unreadable state file.

    Attributes:
        message: Human-readable error message
        path: State file involved, if any
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        return self.message
