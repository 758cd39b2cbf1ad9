"""
WBS-keyed merge engine.

Folds overlay task lists into a base task list. Tasks are matched by WBS
code only; a matched base task receives the overlay's progress, dates and
duration, plus its assignee and description when those are non-empty.
Everything else in the overlay is appended.

The engine is a pure function over the sequences it is given: it reads no
configuration, performs no I/O and never raises for well-formed tasks.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from planmerge.core.tasks.models import Task

logger = logging.getLogger(__name__)


@dataclass
class MergeStats:
    """Counts describing what a merge did."""

    updated: int = 0
    appended: int = 0
    appended_without_wbs: int = 0

    @property
    def total_appended(self) -> int:
        """Tasks appended for any reason."""
        return self.appended + self.appended_without_wbs

    def __add__(self, other: "MergeStats") -> "MergeStats":
        return MergeStats(
            updated=self.updated + other.updated,
            appended=self.appended + other.appended,
            appended_without_wbs=self.appended_without_wbs + other.appended_without_wbs,
        )


def build_wbs_index(tasks: Sequence[Task]) -> dict[str, int]:
    """
    Map each non-empty WBS code to its position in ``tasks``.

    When several tasks share a WBS, the last one wins the slot.

    Args:
        tasks: Tasks to index

    Returns:
        Dictionary of WBS code -> list position
    """
    index: dict[str, int] = {}
    for position, task in enumerate(tasks):
        if task.wbs:
            index[task.wbs] = position
    return index


def apply_overlay(target: Task, overlay: Task) -> None:
    """
    Copy overlay-authoritative fields from ``overlay`` onto ``target``.

    Progress, status, dates and duration are always taken from the overlay.
    Assignee and description are taken only when the overlay value is
    non-empty, so a sparse overlay never blanks existing data. Name, WBS,
    priority, predecessors and source index stay as they are.
    """
    target.percent_complete = overlay.percent_complete
    target.status = overlay.status
    target.start_date = overlay.start_date
    target.end_date = overlay.end_date
    target.duration_days = overlay.duration_days

    if overlay.assignee:
        target.assignee = overlay.assignee
    if overlay.description:
        target.description = overlay.description


def merge_projects(base: list[Task], overlay: Sequence[Task]) -> MergeStats:
    """
    Merge ``overlay`` into ``base`` in place.

    The WBS index is built once, before any overlay task is processed. Tasks
    appended during this call are therefore not matchable by later overlay
    tasks in the same call: two overlay tasks sharing a WBS that is new to
    the base are both appended.

    Args:
        base: Task list to update (mutated)
        overlay: Tasks to fold in, in application order (not mutated)

    Returns:
        MergeStats with update/append counts

    Example:
        >>> base = [Task(name="Build", wbs="1.1")]
        >>> stats = merge_projects(base, [Task(name="Ship", wbs="1.2")])
        >>> [t.wbs for t in base], stats.appended
        (['1.1', '1.2'], 1)
    """
    index = build_wbs_index(base)
    stats = MergeStats()

    for task in overlay:
        if not task.wbs:
            base.append(task.model_copy(deep=True))
            stats.appended_without_wbs += 1
            logger.debug("Appended task without WBS: %s", task.name)
            continue

        position = index.get(task.wbs)
        if position is None:
            base.append(task.model_copy(deep=True))
            stats.appended += 1
            logger.debug("Appended new WBS %s: %s", task.wbs, task.name)
        else:
            apply_overlay(base[position], task)
            stats.updated += 1
            logger.debug("Updated WBS %s from overlay", task.wbs)

    return stats


def fold_sources(sources: Sequence[Sequence[Task]]) -> tuple[list[Task], MergeStats]:
    """
    Merge several task lists, first to last.

    ``sources[0]`` is the base. Each later source is merged into the running
    result in order, so for a WBS present in several sources the
    unconditionally-copied fields end up with the last source's values and
    assignee/description keep the latest non-empty value.

    The input sequences are never mutated; the base is deep-copied first.

    Args:
        sources: Task lists in merge order

    Returns:
        Tuple of (merged task list, accumulated MergeStats)
    """
    if not sources:
        return [], MergeStats()

    result = [task.model_copy(deep=True) for task in sources[0]]
    total = MergeStats()
    for number, overlay in enumerate(sources[1:], start=1):
        stats = merge_projects(result, overlay)
        logger.debug(
            "Source %d: %d updated, %d appended", number, stats.updated, stats.total_appended
        )
        total = total + stats

    return result, total
