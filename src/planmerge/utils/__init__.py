"""Utility modules for planmerge."""

from .logging import EventLogger, EventType, LogEntry

__all__ = ["EventLogger", "EventType", "LogEntry"]
