"""
MSPDI (Microsoft Project XML interchange) reader and writer.

Reads Project/Tasks/Task elements (namespace-agnostic) into Task records
and writes a merged task list back out in the MS Project 2003 XML schema.

Identity caveat: MSPDI links tasks by UID, while merging matches tasks by
WBS. The writer renumbers UIDs 1..n in output order but writes each
predecessor UID exactly as it was read, so links that crossed a merge
boundary may point at a different task after export.
"""

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from xml.etree.ElementTree import Element, ParseError, SubElement, fromstring, indent, tostring

from planmerge.core.tasks.models import Predecessor, Task

from .exceptions import BinaryProjectFileError, ScheduleFormatError, ScheduleParseError
from .parsing import (
    HOURS_PER_DAY,
    format_mspdi_duration,
    parse_mspdi_date,
    parse_mspdi_duration,
    status_from_percent,
)
from .registry import WriteOptions, register_reader, register_writer

logger = logging.getLogger(__name__)

NS = "http://schemas.microsoft.com/project"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
LAG_FORMAT_DAYS = 7


def _local(tag: str) -> str:
    """Strip an ElementTree '{namespace}' prefix from a tag."""
    return tag.rsplit("}", 1)[-1]


def _children(parent: Element, name: str) -> Iterator[Element]:
    for child in parent:
        if _local(child.tag) == name:
            yield child


def _child(parent: Element, name: str) -> Element | None:
    return next(_children(parent, name), None)


def _text(parent: Element, name: str) -> str:
    child = _child(parent, name)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _int(text: str, default: int = 0) -> int:
    try:
        return int(text)
    except ValueError:
        return default


def _se(parent: Element, tag: str, text: object = None) -> Element:
    el = SubElement(parent, tag)
    if text is not None:
        el.text = str(text)
    return el


def looks_like_xml(content: bytes) -> bool:
    """True when content starts with '<' after an optional BOM and whitespace."""
    return content.lstrip(b"\xef\xbb\xbf").lstrip().startswith(b"<")


@register_reader(".xml", ".mpp")
class MspdiReader:
    """
    Read tasks from an MSPDI XML file.

    Native binary .mpp files are rejected with BinaryProjectFileError;
    only XML exports (whatever their suffix) can be read.
    """

    def __init__(self, hours_per_day: int = HOURS_PER_DAY) -> None:
        self.hours_per_day = hours_per_day

    def read(self, path: Path) -> list[Task]:
        try:
            content = path.read_bytes()
        except FileNotFoundError as e:
            raise ScheduleParseError(f"File not found: {path}", path) from e
        except OSError as e:
            raise ScheduleParseError(f"Failed to read {path}: {e}", path) from e

        if not looks_like_xml(content):
            raise BinaryProjectFileError(path)

        try:
            return self.parse(content)
        except ScheduleParseError as e:
            e.path = path
            raise

    def parse(self, content: bytes | str) -> list[Task]:
        """
        Parse MSPDI XML content.

        Args:
            content: Raw XML document

        Returns:
            Tasks in document order (unnamed tasks are skipped)

        Raises:
            ScheduleParseError: If the XML is malformed or not a Project
        """
        # expat rejects anything before the XML declaration
        if isinstance(content, bytes):
            content = content.lstrip(b"\xef\xbb\xbf").lstrip()
        else:
            content = content.lstrip("\ufeff").lstrip()

        try:
            root = fromstring(content)
        except ParseError as e:
            raise ScheduleParseError(f"Malformed project XML: {e}") from e

        if _local(root.tag) != "Project":
            raise ScheduleParseError(
                f"Not an MSPDI project document (root element <{_local(root.tag)}>)"
            )

        assignees = self._assignees_by_task_uid(root)

        tasks: list[Task] = []
        tasks_el = _child(root, "Tasks")
        if tasks_el is None:
            return tasks

        for task_el in _children(tasks_el, "Task"):
            name = _text(task_el, "Name")
            if not name:
                continue
            uid = _text(task_el, "UID")
            tasks.append(self._parse_task(task_el, name, assignees.get(uid, "")))

        logger.debug("Parsed %d MSPDI tasks", len(tasks))
        return tasks

    def _parse_task(self, task_el: Element, name: str, assignee: str) -> Task:
        task = Task(name=name, assignee=assignee)

        start = parse_mspdi_date(_text(task_el, "Start"))
        if start is not None:
            task.start_date = start
        finish = parse_mspdi_date(_text(task_el, "Finish"))
        if finish is not None:
            task.end_date = finish

        task.duration_days = parse_mspdi_duration(_text(task_el, "Duration"), self.hours_per_day)
        task.percent_complete = _int(_text(task_el, "PercentComplete"))
        task.priority = _int(_text(task_el, "Priority"))
        task.description = _text(task_el, "Notes")
        task.wbs = _text(task_el, "WBS")

        for link_el in _children(task_el, "PredecessorLink"):
            uid_text = _text(link_el, "PredecessorUID")
            if not uid_text:
                continue
            task.predecessors.append(
                Predecessor(
                    predecessor_uid=_int(uid_text),
                    link_type=_int(_text(link_el, "Type")),
                    link_lag=_int(_text(link_el, "LinkLag")),
                )
            )

        task.status = status_from_percent(task.percent_complete)
        return task

    def _assignees_by_task_uid(self, root: Element) -> dict[str, str]:
        """Resolve Assignments -> Resources into 'name, name' per task UID."""
        resources_el = _child(root, "Resources")
        assignments_el = _child(root, "Assignments")
        if resources_el is None or assignments_el is None:
            return {}

        names = {
            _text(res, "UID"): _text(res, "Name")
            for res in _children(resources_el, "Resource")
            if _text(res, "Name")
        }

        by_task: dict[str, list[str]] = {}
        for assignment in _children(assignments_el, "Assignment"):
            name = names.get(_text(assignment, "ResourceUID"))
            if name:
                by_task.setdefault(_text(assignment, "TaskUID"), []).append(name)

        return {uid: ", ".join(resource_names) for uid, resource_names in by_task.items()}


@register_writer(".xml")
class MspdiWriter:
    """Write tasks as an MSPDI XML document."""

    def __init__(self, options: WriteOptions | None = None) -> None:
        self.options = options or WriteOptions()

    def build(self, tasks: Sequence[Task]) -> Element:
        """Build the <Project> element tree for a task list."""
        opts = self.options
        root = Element("Project")
        root.set("xmlns", NS)
        _se(root, "Title", opts.project_title)

        tasks_el = _se(root, "Tasks")
        for uid, task in enumerate(tasks, start=1):
            t = _se(tasks_el, "Task")
            _se(t, "UID", uid)
            _se(t, "ID", uid)
            _se(t, "Name", task.name)
            _se(t, "Start", f"{task.start_date.isoformat()}T{opts.start_time}")
            _se(t, "Finish", f"{task.end_date.isoformat()}T{opts.finish_time}")
            _se(t, "Duration", format_mspdi_duration(task.duration_days, opts.hours_per_day))
            _se(t, "PercentComplete", task.percent_complete)
            _se(t, "Active", 1)
            _se(t, "Manual", 0)
            _se(t, "OutlineNumber", task.wbs)
            _se(t, "OutlineLevel", task.wbs_level)
            _se(t, "Priority", task.priority)
            _se(t, "Notes", task.description)
            _se(t, "WBS", task.wbs)

            for pred in task.predecessors:
                pl = _se(t, "PredecessorLink")
                _se(pl, "PredecessorUID", pred.predecessor_uid)
                _se(pl, "Type", pred.link_type)
                _se(pl, "CrossProject", 0)
                _se(pl, "LinkLag", pred.link_lag)
                _se(pl, "LagFormat", LAG_FORMAT_DAYS)

        self._build_assignments(root, tasks)
        indent(root, space="  ")
        return root

    def _build_assignments(self, root: Element, tasks: Sequence[Task]) -> None:
        resource_uids: dict[str, int] = {}
        for task in tasks:
            if task.assignee and task.assignee not in resource_uids:
                resource_uids[task.assignee] = len(resource_uids) + 1
        if not resource_uids:
            return

        resources_el = _se(root, "Resources")
        for name, res_uid in resource_uids.items():
            r = _se(resources_el, "Resource")
            _se(r, "UID", res_uid)
            _se(r, "ID", res_uid)
            _se(r, "Name", name)
            _se(r, "Type", 1)

        assignments_el = _se(root, "Assignments")
        assign_uid = 1
        for task_uid, task in enumerate(tasks, start=1):
            if not task.assignee:
                continue
            a = _se(assignments_el, "Assignment")
            _se(a, "UID", assign_uid)
            _se(a, "TaskUID", task_uid)
            _se(a, "ResourceUID", resource_uids[task.assignee])
            _se(a, "Units", 1)
            assign_uid += 1

    def to_string(self, tasks: Sequence[Task]) -> str:
        """Render the document, including the XML declaration."""
        return XML_DECLARATION + tostring(self.build(tasks), encoding="unicode") + "\n"

    def write(self, tasks: Sequence[Task], path: Path) -> None:
        try:
            path.write_text(self.to_string(tasks), encoding="utf-8")
        except OSError as e:
            raise ScheduleFormatError(f"Failed to write {path}: {e}", path) from e
