"""
Merge engine.

Matches overlay tasks to base tasks by WBS code and folds multiple
sources into one task list.
"""

from .engine import MergeStats, apply_overlay, build_wbs_index, fold_sources, merge_projects

__all__ = [
    "MergeStats",
    "apply_overlay",
    "build_wbs_index",
    "fold_sources",
    "merge_projects",
]
