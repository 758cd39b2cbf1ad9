"""
JSON persistence for the working set.

State is written atomically (temp file + rename) so an interrupted
command never leaves a half-written workspace.json behind.
"""

import json
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .exceptions import WorkspaceError
from .models import WorkspaceState


class WorkspaceStore:
    """
    Load and save a WorkspaceState as JSON.

    Example:
        >>> store = WorkspaceStore(Path(".planmerge/workspace.json"))
        >>> state = store.load()
        >>> store.save(state)
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> WorkspaceState:
        """
        Load the working set.

        Returns:
            Stored state, or an empty state if no file exists yet

        Raises:
            WorkspaceError: If the file is not valid workspace JSON
        """
        if not self.path.exists():
            return WorkspaceState()

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise WorkspaceError(f"Failed to read workspace {self.path}: {e}", self.path) from e

        try:
            return WorkspaceState.model_validate_json(raw)
        except ValidationError as e:
            raise WorkspaceError(
                f"Workspace file {self.path} is corrupted: {e.error_count()} invalid field(s)",
                self.path,
            ) from e

    def save(self, state: WorkspaceState) -> None:
        """
        Save the working set atomically.

        Raises:
            OSError: If the file cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=".workspace_", suffix=".json.tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, self.path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def clear(self) -> bool:
        """Delete the state file. Returns False if there was nothing to delete."""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True
