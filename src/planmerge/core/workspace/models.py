"""
Working-set data models.

The working set is the list of imported source files plus the combined
task list. Tasks carry the index of the file that produced them until a
merge folds everything into source 0.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from planmerge.core.tasks.models import Task


class SourceFile(BaseModel):
    """A file imported into the working set."""

    path: str = Field(..., description="Absolute path of the imported file")
    format: str = Field(..., description="File suffix used to pick the reader, e.g. '.xlsx'")
    task_count: int = Field(default=0, ge=0, description="Tasks read from the file at import")
    imported_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the file was imported",
    )

    @property
    def name(self) -> str:
        return self.path.replace("\\", "/").rsplit("/", 1)[-1]


class WorkspaceState(BaseModel):
    """
    Persisted working set.

    ``files[i]`` is source index ``i``. ``merged`` is set by a merge and
    cleared by the next import.
    """

    version: int = Field(default=1, description="State file format version")
    files: list[SourceFile] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    merged: bool = Field(default=False, description="Whether the task list is a merge result")

    def tasks_for_source(self, index: int) -> list[Task]:
        """Tasks tagged with a source index, in list order."""
        return [t for t in self.tasks if t.source_index == index]
