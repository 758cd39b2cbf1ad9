"""
Task models.

This module provides the canonical Task record shared by every reader,
writer and the merge engine.
"""

from .models import Predecessor, Task, TaskStatus

__all__ = [
    "Predecessor",
    "Task",
    "TaskStatus",
]
