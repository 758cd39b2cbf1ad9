"""
planmerge - merge project schedules by WBS code

Reads XLSX and MS Project XML schedules, folds update files into a base
schedule and exports the merged task list.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from planmerge.core.config.models import PlanmergeConfig
from planmerge.core.tasks.models import Predecessor, Task, TaskStatus

__all__ = ["PlanmergeConfig", "Predecessor", "Task", "TaskStatus", "__version__"]
