"""Tests for the JSONL event logger."""

import json
from datetime import datetime

import pytest

from planmerge.utils.logging import EventLogger, EventType, LogEntry


class TestEventLoggerInit:
    """Test logger creation."""

    def test_init_uses_xdg_data_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
        logger = EventLogger.init("site-a")
        assert logger.get_log_file() == tmp_path / "data" / "planmerge" / "logs" / "site-a.jsonl"
        assert logger.get_log_file().parent.is_dir()

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError, match="workspace_name cannot be empty"):
            EventLogger.init("")


class TestLogEvent:
    """Test writing events."""

    def test_line_format(self, tmp_path):
        logger = EventLogger(tmp_path / "events.jsonl")
        logger.log_event(EventType.MERGE_COMPLETED, {"updated": 2})

        line = (tmp_path / "events.jsonl").read_text().strip()
        entry = json.loads(line)
        assert entry["event_type"] == "merge_completed"
        assert entry["data"] == {"updated": 2}
        assert datetime.fromisoformat(entry["timestamp"].replace("Z", "+00:00"))

    def test_appends(self, tmp_path):
        logger = EventLogger(tmp_path / "events.jsonl")
        logger.log_file_imported("/a.xlsx", source_index=0, task_count=3)
        logger.log_file_removed("/a.xlsx", source_index=0, tasks_removed=3)
        logger.log_export_completed("/out.xml", task_count=0)
        assert [e["event_type"] for e in logger.read_events()] == [
            "file_imported",
            "file_removed",
            "export_completed",
        ]

    def test_error_context(self, tmp_path):
        logger = EventLogger(tmp_path / "events.jsonl")
        logger.log_error("boom", {"path": "x.xml"})
        logger.log_error("plain")
        first, second = logger.read_events()
        assert first["data"] == {"message": "boom", "context": {"path": "x.xml"}}
        assert second["data"] == {"message": "plain"}

    def test_merge_completed_payload(self, tmp_path):
        logger = EventLogger(tmp_path / "events.jsonl")
        logger.log_merge_completed(updated=1, appended=2, task_count=9, sources=3)
        assert logger.read_events()[0]["data"] == {
            "updated": 1,
            "appended": 2,
            "task_count": 9,
            "sources": 3,
        }

    def test_write_failure_warns(self, tmp_path, capsys):
        """A log path that is a directory cannot be written; no exception."""
        log_path = tmp_path / "events.jsonl"
        logger = EventLogger(log_path)
        log_path.mkdir()
        logger.log_event(EventType.ERROR, {"message": "x"})
        assert "Warning: Failed to write to log file" in capsys.readouterr().out

    def test_read_missing(self, tmp_path):
        assert EventLogger(tmp_path / "none.jsonl").read_events() == []


class TestLogEntry:
    """Test the LogEntry model."""

    def test_enum_stored_as_value(self):
        entry = LogEntry(timestamp=datetime(2026, 1, 1), event_type=EventType.ERROR)
        assert entry.event_type == "error"
        assert entry.data == {}
