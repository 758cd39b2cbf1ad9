"""
Task data models for planmerge.

Defines the canonical in-memory record for one schedule line item, the
predecessor link it carries, and the status enum. Every reader produces
these models and every writer consumes them, so the merge engine never
needs to know which file format a task came from.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task status values.

    Statuses are totally ordered for sorting:
    NOT_STARTED < IN_PROGRESS < ON_HOLD < COMPLETED < CANCELLED.
    The order has no effect on how tasks are merged.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def rank(self) -> int:
        """Position in the sort order (0 = NOT_STARTED)."""
        return _STATUS_RANK[self]

    @property
    def label(self) -> str:
        """Human-readable label, e.g. 'In Progress'."""
        return _STATUS_LABELS[self]

    # str's comparisons would order by value text, so all four are overridden
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TaskStatus):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, TaskStatus):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, TaskStatus):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, TaskStatus):
            return NotImplemented
        return self.rank >= other.rank


_STATUS_RANK: dict[TaskStatus, int] = {
    TaskStatus.NOT_STARTED: 0,
    TaskStatus.IN_PROGRESS: 1,
    TaskStatus.ON_HOLD: 2,
    TaskStatus.COMPLETED: 3,
    TaskStatus.CANCELLED: 4,
}

_STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.NOT_STARTED: "Not Started",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.ON_HOLD: "On Hold",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.CANCELLED: "Cancelled",
}


class Predecessor(BaseModel):
    """
    A dependency link from the interchange format.

    Links reference the predecessor by its MSPDI UID, not by WBS. UIDs are
    numbered independently per file, so after a cross-file merge a link may
    point at a different task than it did in its source file.
    """

    predecessor_uid: int = Field(..., description="UID of the predecessor task")
    link_type: int = Field(default=0, description="Interchange link type code (opaque)")
    link_lag: int = Field(default=0, description="Signed lag, in interchange units")


class Task(BaseModel):
    """
    One schedule line item.

    The WBS code, when non-empty, is the only key used to match tasks
    across files. No range validation is performed here: a negative
    duration or a percent above 100 passes through unchanged.

    Example:
        >>> task = Task(name="Design review", wbs="1.2", percent_complete=50)
        >>> task.status
        <TaskStatus.NOT_STARTED: 'not_started'>
        >>> task.has_wbs
        True
    """

    name: str = Field(..., description="Task name")
    description: str = Field(default="", description="Free-text notes")
    start_date: date = Field(default_factory=date.today, description="Planned start")
    end_date: date = Field(default_factory=date.today, description="Planned finish")
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED, description="Current status")
    priority: int = Field(default=0, description="Priority (non-negative by convention)")
    assignee: str = Field(default="", description="Assigned resource")
    duration_days: int = Field(default=0, description="Duration in working days")
    percent_complete: int = Field(default=0, description="Percent complete (0-100)")
    source_index: int = Field(
        default=0, description="Index of the source file that produced this task"
    )
    wbs: str = Field(default="", description="Hierarchical WBS code (may be empty)")
    predecessors: list[Predecessor] = Field(
        default_factory=list, description="Dependency links (interchange UIDs)"
    )

    @property
    def has_wbs(self) -> bool:
        """True when the task carries a WBS code usable for matching."""
        return bool(self.wbs)

    @property
    def wbs_level(self) -> int:
        """Outline depth derived from the WBS code ('1.2.3' -> 3, '' -> 1)."""
        if not self.wbs:
            return 1
        return max(1, len([part for part in self.wbs.split(".") if part]))
