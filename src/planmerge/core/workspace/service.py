"""
Working-set operations.

WorkspaceService wraps a WorkspaceStore and implements the operations
exposed by the ``planmerge workspace`` commands. Each operation loads the
state, applies the change and saves it back.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from planmerge.core.config.models import PlanmergeConfig
from planmerge.core.formats import ScheduleFormatError, read_schedule, write_schedule
from planmerge.core.merge import MergeStats, fold_sources
from planmerge.core.tasks.models import Task
from planmerge.utils.logging import EventLogger

from .exceptions import WorkspaceError
from .models import SourceFile, WorkspaceState
from .store import WorkspaceStore

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of importing several files."""

    added: list[SourceFile] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class WorkspaceService:
    """
    Operations on the persisted working set.

    Example:
        >>> service = WorkspaceService.for_project(Path.cwd(), load_config())
        >>> service.add_files([Path("base.xlsx"), Path("update.xml")])
        >>> stats = service.merge()
        >>> service.export(Path("merged.xml"))
    """

    def __init__(
        self,
        store: WorkspaceStore,
        config: PlanmergeConfig | None = None,
        event_logger: EventLogger | None = None,
    ):
        self.store = store
        self.config = config or PlanmergeConfig()
        self.event_logger = event_logger

    @classmethod
    def for_project(cls, project_dir: Path, config: PlanmergeConfig) -> "WorkspaceService":
        """Build a service for a project directory using its configuration."""
        state_path = Path(config.workspace.path)
        if not state_path.is_absolute():
            state_path = project_dir / state_path

        event_logger = None
        if config.logging.events:
            event_logger = EventLogger.init(project_dir.resolve().name or "default")

        return cls(WorkspaceStore(state_path), config, event_logger)

    def load(self) -> WorkspaceState:
        return self.store.load()

    def list_files(self) -> list[SourceFile]:
        return self.store.load().files

    def list_tasks(self) -> list[Task]:
        return self.store.load().tasks

    def add_files(self, paths: Iterable[Path]) -> ImportResult:
        """
        Import files into the working set.

        Each imported file gets the next source index and its tasks are
        appended to the task list. Paths already in the working set are
        skipped. A file that fails to import is reported in the result and
        the remaining files are still imported.
        """
        state = self.store.load()
        result = ImportResult()
        known = {f.path for f in state.files}

        for path in paths:
            resolved = str(Path(path).resolve())
            if resolved in known:
                logger.debug("Skipping %s: already in workspace", resolved)
                result.skipped.append(resolved)
                continue

            try:
                tasks = read_schedule(path, hours_per_day=self.config.reader.hours_per_day)
            except ScheduleFormatError as e:
                logger.debug("Import of %s failed: %s", path, e)
                result.failed.append((str(path), e.message))
                self._log_error(e.message, {"path": str(path)})
                continue

            source_index = len(state.files)
            for task in tasks:
                task.source_index = source_index
            source = SourceFile(
                path=resolved, format=Path(path).suffix.lower(), task_count=len(tasks)
            )
            state.files.append(source)
            state.tasks.extend(tasks)
            state.merged = False
            known.add(resolved)
            result.added.append(source)

            if self.event_logger:
                self.event_logger.log_file_imported(resolved, source_index, len(tasks))

        if result.added:
            self.store.save(state)
        return result

    def remove_file(self, index: int) -> SourceFile:
        """
        Remove a source file and its tasks.

        Tasks from later files move down one source index so indices stay
        aligned with the file list.

        Raises:
            WorkspaceError: If index is out of range
        """
        state = self.store.load()
        if not 0 <= index < len(state.files):
            raise WorkspaceError(
                f"No source file at index {index} (workspace has {len(state.files)} file(s))"
            )

        removed = state.files.pop(index)
        kept: list[Task] = []
        for task in state.tasks:
            if task.source_index == index:
                continue
            if task.source_index > index:
                task.source_index -= 1
            kept.append(task)
        tasks_removed = len(state.tasks) - len(kept)
        state.tasks = kept
        self.store.save(state)

        logger.debug("Removed %s (%d tasks)", removed.path, tasks_removed)
        if self.event_logger:
            self.event_logger.log_file_removed(removed.path, index, tasks_removed)
        return removed

    def merge(self) -> MergeStats:
        """
        Fold every source into source 0.

        Source 0 is the base and sources 1..n are applied in order. The
        result replaces the task list and every task is re-tagged with
        source index 0, so a later merge only folds files added since.
        """
        state = self.store.load()
        if not state.files:
            return MergeStats()

        sources = [state.tasks_for_source(i) for i in range(len(state.files))]
        merged, stats = fold_sources(sources)
        for task in merged:
            task.source_index = 0

        state.tasks = merged
        state.merged = True
        self.store.save(state)

        logger.debug("Merged %d sources into %d tasks", len(sources), len(merged))
        if self.event_logger:
            self.event_logger.log_merge_completed(
                updated=stats.updated,
                appended=stats.total_appended,
                task_count=len(merged),
                sources=len(sources),
            )
        return stats

    def delete_tasks(self, positions: Iterable[int]) -> int:
        """
        Delete tasks by list position.

        Raises:
            WorkspaceError: If any position is out of range (nothing is deleted)

        Returns:
            Number of tasks deleted
        """
        state = self.store.load()
        unique = sorted(set(positions), reverse=True)
        self._check_positions(unique, len(state.tasks))

        for pos in unique:
            del state.tasks[pos]
        self.store.save(state)
        return len(unique)

    def move_tasks(self, positions: Iterable[int], up: bool) -> list[int]:
        """
        Move the selected tasks one slot up or down.

        A task does not move past the list edge or into a slot whose task
        was also selected, so a contiguous selection at the edge stays put.

        Returns:
            New positions of the selected tasks, sorted
        """
        state = self.store.load()
        selected = set(positions)
        self._check_positions(selected, len(state.tasks))

        tasks = state.tasks
        new_selection = set(selected)
        step = -1 if up else 1
        for pos in sorted(selected, reverse=not up):
            target = pos + step
            if not 0 <= target < len(tasks) or target in selected:
                continue
            tasks[pos], tasks[target] = tasks[target], tasks[pos]
            new_selection.discard(pos)
            new_selection.add(target)

        self.store.save(state)
        return sorted(new_selection)

    def export(self, path: Path) -> Path:
        """
        Write the working task list to a file.

        The format follows the path's suffix. A path without one gets the
        configured default suffix.

        Returns:
            The path actually written
        """
        state = self.store.load()
        try:
            written = write_schedule(
                state.tasks,
                path,
                self.config.write_options(),
                default_suffix=self.config.export.default_suffix,
            )
        except ScheduleFormatError as e:
            self._log_error(e.message, {"path": str(path)})
            raise

        if self.event_logger:
            self.event_logger.log_export_completed(str(written), len(state.tasks))
        return written

    def clear(self) -> bool:
        """Discard the working set. Returns False if it was already empty."""
        return self.store.clear()

    @staticmethod
    def _check_positions(positions: Sequence[int] | set[int], count: int) -> None:
        bad = sorted(p for p in positions if not 0 <= p < count)
        if bad:
            raise WorkspaceError(
                f"Task position(s) out of range: {', '.join(map(str, bad))} "
                f"(workspace has {count} task(s))"
            )

    def _log_error(self, message: str, context: dict[str, str]) -> None:
        if self.event_logger:
            self.event_logger.log_error(message, context)
