"""
Structured JSONL event logging for planmerge.

Provides an EventLogger that appends timestamped JSON Lines events for
workspace operations. Events are written to
~/.local/share/planmerge/logs/{workspace}.jsonl

Each log line is valid JSON with the format:
{
  "timestamp": "2026-01-15T12:34:56.789Z",
  "event_type": "merge_completed",
  "data": { ... event-specific data ... }
}
"""

import json
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Types of events that can be logged."""

    FILE_IMPORTED = "file_imported"
    FILE_REMOVED = "file_removed"
    MERGE_COMPLETED = "merge_completed"
    EXPORT_COMPLETED = "export_completed"
    ERROR = "error"


class LogEntry(BaseModel):
    """A single structured log entry in JSONL format."""

    model_config = ConfigDict(use_enum_values=True)

    timestamp: datetime = Field(..., description="When the event occurred (ISO 8601 format)")
    event_type: EventType = Field(..., description="Type of event")
    data: dict[str, Any] = Field(default_factory=dict, description="Event-specific data")


def get_xdg_data_home() -> Path:
    """Get XDG data home directory (defaults to ~/.local/share)."""
    if xdg_data_home := os.environ.get("XDG_DATA_HOME"):
        return Path(xdg_data_home)
    return Path.home() / ".local" / "share"


class EventLogger:
    """
    Structured JSONL logger for workspace events.

    Example:
        logger = EventLogger.init("my_project")
        logger.log_file_imported("plan.xlsx", source_index=0, task_count=12)
        logger.log_merge_completed(updated=3, appended=2, task_count=14)
    """

    def __init__(self, log_file: Path):
        self.log_file = Path(log_file)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def init(workspace_name: str) -> "EventLogger":
        """
        Initialize a logger for a named workspace.

        Logs are written to $XDG_DATA_HOME/planmerge/logs/{workspace_name}.jsonl

        Raises:
            ValueError: If workspace_name is empty
        """
        if not workspace_name:
            raise ValueError("workspace_name cannot be empty")

        log_file = get_xdg_data_home() / "planmerge" / "logs" / f"{workspace_name}.jsonl"
        return EventLogger(log_file)

    def log_event(self, event_type: EventType, data: dict[str, Any] | None = None) -> None:
        """
        Append an event to the JSONL file.

        Write failures print a warning instead of raising, so a read-only log
        directory never blocks a merge.
        """
        if data is None:
            data = {}

        try:
            entry = LogEntry(timestamp=datetime.now(timezone.utc), event_type=event_type, data=data)
            log_line = entry.model_dump_json(exclude_none=True) + "\n"
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(log_line)
        except OSError as e:
            print(f"Warning: Failed to write to log file {self.log_file}: {e}", flush=True)

    def log_file_imported(self, path: str, source_index: int, task_count: int) -> None:
        self.log_event(
            EventType.FILE_IMPORTED,
            {"path": path, "source_index": source_index, "task_count": task_count},
        )

    def log_file_removed(self, path: str, source_index: int, tasks_removed: int) -> None:
        self.log_event(
            EventType.FILE_REMOVED,
            {"path": path, "source_index": source_index, "tasks_removed": tasks_removed},
        )

    def log_merge_completed(
        self, updated: int, appended: int, task_count: int, sources: int = 0
    ) -> None:
        """
        Log a finished merge.

        Args:
            updated: Base tasks overwritten by an overlay
            appended: Overlay tasks appended to the base
            task_count: Tasks in the merged list
            sources: Number of source files folded
        """
        self.log_event(
            EventType.MERGE_COMPLETED,
            {
                "updated": updated,
                "appended": appended,
                "task_count": task_count,
                "sources": sources,
            },
        )

    def log_export_completed(self, path: str, task_count: int) -> None:
        self.log_event(EventType.EXPORT_COMPLETED, {"path": path, "task_count": task_count})

    def log_error(self, message: str, context: dict[str, Any] | None = None) -> None:
        """
        Log an error event.

        Args:
            message: Error message
            context: Additional error context (optional)
        """
        data: dict[str, Any] = {"message": message}
        if context:
            data["context"] = context

        self.log_event(EventType.ERROR, data)

    def read_events(self) -> list[dict[str, Any]]:
        """Read back all logged events (oldest first). Missing file -> []."""
        if not self.log_file.exists():
            return []
        events: list[dict[str, Any]] = []
        with open(self.log_file, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    events.append(json.loads(line))
        return events

    def get_log_file(self) -> Path:
        """Get the path to the log file."""
        return self.log_file
