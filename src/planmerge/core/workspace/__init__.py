"""
Working set of imported schedule files.

Persists the imported files and the combined task list between CLI
invocations, and applies merge, delete, move and export operations.
"""

from .exceptions import WorkspaceError
from .models import SourceFile, WorkspaceState
from .service import ImportResult, WorkspaceService
from .store import WorkspaceStore

__all__ = [
    "ImportResult",
    "SourceFile",
    "WorkspaceError",
    "WorkspaceService",
    "WorkspaceState",
    "WorkspaceStore",
]
