"""
XLSX spreadsheet reader and writer.

The reader detects columns heuristically from the header row of the first
worksheet and tolerates missing columns by falling back to defaults. The
writer emits one row per task with a fixed header; predecessor links are
not written (spreadsheets carry no UID to link against).
"""

import logging
import zipfile
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from planmerge.core.tasks.models import Task, TaskStatus

from .exceptions import ScheduleFormatError, ScheduleParseError
from .parsing import (
    cell_text,
    parse_date,
    parse_duration_days,
    parse_non_negative_int,
    parse_percent,
    parse_status,
)
from .registry import WriteOptions, register_reader, register_writer

logger = logging.getLogger(__name__)

UNNAMED_TASK = "Unnamed Task"

# (header, column width) in output order
EXPORT_COLUMNS: tuple[tuple[str, float], ...] = (
    ("Task Name", 30.0),
    ("Description", 40.0),
    ("Start Date", 12.0),
    ("End Date", 12.0),
    ("Status", 15.0),
    ("Priority", 10.0),
    ("Assignee", 20.0),
    ("Duration (Days)", 15.0),
    ("% Complete", 12.0),
    ("WBS", 10.0),
)


def classify_header(header: str) -> str | None:
    """
    Map one header cell to a task field name.

    Rules are checked in order and the first match wins, so "Start Date"
    is a start column even though it also contains "date".

    Returns:
        Field key ("name", "description", "start", "end", "status",
        "priority", "assignee", "duration", "percent", "wbs") or None
    """
    text = header.lower()
    if ("task" in text and "name" in text) or text == "name":
        return "name"
    if "description" in text:
        return "description"
    if ("start" in text and "date" in text) or text == "start":
        return "start"
    if ("end" in text and "date" in text) or "finish" in text:
        return "end"
    if "status" in text:
        return "status"
    if "priority" in text:
        return "priority"
    if "assignee" in text or "resource" in text:
        return "assignee"
    if "duration" in text:
        return "duration"
    if "percent" in text or "%" in text:
        return "percent"
    if text == "wbs":
        return "wbs"
    return None


def detect_columns(header_row: Sequence[Any]) -> dict[str, int]:
    """
    Detect field columns from a header row.

    When two cells map to the same field the later one wins.

    Returns:
        Dictionary of field key -> zero-based column index
    """
    columns: dict[str, int] = {}
    for idx, cell in enumerate(header_row):
        key = classify_header(cell_text(cell))
        if key is not None:
            columns[key] = idx
    return columns


@register_reader(".xlsx")
class XlsxReader:
    """
    Read tasks from the first worksheet of an .xlsx workbook.

    Example:
        >>> reader = XlsxReader()
        >>> tasks = reader.read(Path("schedule.xlsx"))
    """

    def __init__(self, **_options: object) -> None:
        """Accept reader options. Spreadsheet durations are already in days."""

    def _load_rows(self, path: Path) -> list[tuple[Any, ...]]:
        if not path.exists():
            raise ScheduleParseError(f"File not found: {path}", path)
        try:
            workbook = load_workbook(path, read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise ScheduleParseError(f"Failed to open workbook {path}: {e}", path) from e

        try:
            if not workbook.worksheets:
                return []
            sheet = workbook.worksheets[0]
            return [tuple(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

    def read_header(self, path: Path) -> dict[str, int]:
        """Return the detected column mapping for a workbook's header row."""
        rows = self._load_rows(path)
        if not rows:
            return {}
        return detect_columns(rows[0])

    def read(self, path: Path) -> list[Task]:
        rows = self._load_rows(path)
        if not rows:
            return []

        columns = detect_columns(rows[0])
        logger.debug("Detected columns in %s: %s", path, columns)

        tasks: list[Task] = []
        for row in rows[1:]:
            task = self._parse_row(row, columns)
            if task is not None:
                tasks.append(task)
        return tasks

    def _parse_row(self, row: Sequence[Any], columns: dict[str, int]) -> Task | None:
        def get(key: str) -> Any:
            col = columns.get(key)
            if col is None or col >= len(row):
                return None
            return row[col]

        name = cell_text(get("name"))
        if not name:
            if all(cell_text(cell) == "" for cell in row):
                return None
            name = UNNAMED_TASK

        start_date = parse_date(get("start")) or date.today()
        end_date = parse_date(get("end")) or start_date

        return Task(
            name=name,
            description=cell_text(get("description")),
            start_date=start_date,
            end_date=end_date,
            status=parse_status(get("status")) or TaskStatus.NOT_STARTED,
            priority=parse_non_negative_int(get("priority")) or 0,
            assignee=cell_text(get("assignee")),
            duration_days=parse_duration_days(get("duration")) or 0,
            percent_complete=parse_percent(get("percent")) or 0,
            wbs=cell_text(get("wbs")),
        )


@register_writer(".xlsx")
class XlsxWriter:
    """Write tasks to a single-sheet .xlsx workbook."""

    def __init__(self, options: WriteOptions | None = None) -> None:
        self.options = options or WriteOptions()

    def write(self, tasks: Sequence[Task], path: Path) -> None:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Tasks"

        header_font = Font(bold=True)
        header_alignment = Alignment(horizontal="center")
        for col, (title, width) in enumerate(EXPORT_COLUMNS, start=1):
            cell = sheet.cell(row=1, column=col, value=title)
            cell.font = header_font
            cell.alignment = header_alignment
            sheet.column_dimensions[get_column_letter(col)].width = width

        for task in tasks:
            sheet.append(
                [
                    task.name,
                    task.description,
                    task.start_date.strftime("%Y-%m-%d"),
                    task.end_date.strftime("%Y-%m-%d"),
                    task.status.label,
                    task.priority,
                    task.assignee,
                    task.duration_days,
                    task.percent_complete,
                    task.wbs,
                ]
            )

        try:
            workbook.save(path)
        except OSError as e:
            raise ScheduleFormatError(f"Failed to write {path}: {e}", path) from e
