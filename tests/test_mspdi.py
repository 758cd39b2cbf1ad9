"""Tests for the MSPDI XML reader and writer."""

from datetime import date
from xml.etree.ElementTree import fromstring

import pytest

from planmerge.core.formats import (
    BinaryProjectFileError,
    ScheduleParseError,
    WriteOptions,
)
from planmerge.core.formats.mspdi import NS, MspdiReader, MspdiWriter, looks_like_xml
from planmerge.core.tasks.models import Predecessor, Task, TaskStatus

Q = f"{{{NS}}}"


# ==============================================================================
# Reader
# ==============================================================================


class TestMspdiReader:
    """Test reading MSPDI documents."""

    def test_reads_named_tasks_in_order(self, mspdi_text):
        """Unnamed tasks are skipped; the summary task is kept."""
        tasks = MspdiReader().parse(mspdi_text)
        assert [t.name for t in tasks] == ["Sample", "Design", "Build"]

    def test_task_fields(self, mspdi_text):
        design = MspdiReader().parse(mspdi_text)[1]
        assert design.wbs == "1.1"
        assert design.start_date == date(2024, 3, 4)
        assert design.end_date == date(2024, 3, 8)
        assert design.duration_days == 5
        assert design.percent_complete == 100
        assert design.priority == 500
        assert design.description == "Signed off"
        assert design.status == TaskStatus.COMPLETED
        assert design.source_index == 0

    def test_duration_rounds_up_and_status_in_progress(self, mspdi_text):
        build = MspdiReader().parse(mspdi_text)[2]
        assert build.duration_days == 4  # 26h / 8 = 3.25
        assert build.status == TaskStatus.IN_PROGRESS

    def test_predecessor_links(self, mspdi_text):
        build = MspdiReader().parse(mspdi_text)[2]
        assert build.predecessors == [Predecessor(predecessor_uid=1, link_type=1, link_lag=4800)]

    def test_assignee_from_assignments(self, mspdi_text):
        tasks = MspdiReader().parse(mspdi_text)
        assert tasks[2].assignee == "Carol"
        assert tasks[1].assignee == ""

    def test_missing_dates_default_to_today(self, mspdi_text):
        summary = MspdiReader().parse(mspdi_text)[0]
        assert summary.start_date == date.today()
        assert summary.end_date == date.today()
        assert summary.duration_days == 0
        assert summary.status == TaskStatus.NOT_STARTED

    def test_without_namespace(self):
        xml = """
            <Project>
              <Tasks>
                <Task><Name>Plain</Name><WBS>3</WBS><PercentComplete>40</PercentComplete></Task>
              </Tasks>
            </Project>
        """
        tasks = MspdiReader().parse(xml)
        assert len(tasks) == 1
        assert tasks[0].wbs == "3"
        assert tasks[0].status == TaskStatus.IN_PROGRESS

    def test_leading_whitespace_before_declaration(self):
        xml = '\n  <?xml version="1.0"?><Project><Tasks><Task><Name>A</Name></Task></Tasks></Project>'
        assert [t.name for t in MspdiReader().parse(xml)] == ["A"]

    def test_link_without_uid_skipped(self):
        xml = """<Project><Tasks><Task><Name>A</Name>
            <PredecessorLink><Type>1</Type></PredecessorLink>
            <PredecessorLink><PredecessorUID>4</PredecessorUID></PredecessorLink>
        </Task></Tasks></Project>"""
        task = MspdiReader().parse(xml)[0]
        assert task.predecessors == [Predecessor(predecessor_uid=4)]

    def test_no_tasks_element(self):
        assert MspdiReader().parse("<Project><Title>Empty</Title></Project>") == []

    def test_custom_hours_per_day(self):
        xml = "<Project><Tasks><Task><Name>A</Name><Duration>PT20H0M0S</Duration></Task></Tasks></Project>"
        assert MspdiReader(hours_per_day=10).parse(xml)[0].duration_days == 2

    def test_malformed_xml(self):
        with pytest.raises(ScheduleParseError, match="Malformed"):
            MspdiReader().parse("<Project><Tasks>")

    def test_wrong_root(self):
        with pytest.raises(ScheduleParseError, match="root element"):
            MspdiReader().parse("<Workbook/>")

    def test_read_file(self, mspdi_file):
        assert len(MspdiReader().read(mspdi_file)) == 3

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(ScheduleParseError) as exc_info:
            MspdiReader().read(tmp_path / "missing.xml")
        assert exc_info.value.path == tmp_path / "missing.xml"

    def test_parse_error_carries_path(self, tmp_path):
        path = tmp_path / "broken.xml"
        path.write_text("<Project><Tasks>")
        with pytest.raises(ScheduleParseError) as exc_info:
            MspdiReader().read(path)
        assert exc_info.value.path == path

    def test_binary_mpp_rejected(self, tmp_path):
        """Native .mpp content (an OLE compound file) is not XML."""
        path = tmp_path / "plan.mpp"
        path.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64)
        with pytest.raises(BinaryProjectFileError) as exc_info:
            MspdiReader().read(path)
        assert "export the file to XLSX or XML" in str(exc_info.value)
        assert exc_info.value.path == path

    def test_xml_saved_as_mpp_is_read(self, tmp_path, mspdi_text):
        path = tmp_path / "plan.mpp"
        path.write_text(mspdi_text, encoding="utf-8")
        assert len(MspdiReader().read(path)) == 3

    def test_looks_like_xml(self):
        assert looks_like_xml(b"\xef\xbb\xbf  <Project/>")
        assert not looks_like_xml(b"PK\x03\x04")
        assert not looks_like_xml(b"")


# ==============================================================================
# Writer
# ==============================================================================


class TestMspdiWriter:
    """Test writing MSPDI documents."""

    def _tasks(self) -> list[Task]:
        return [
            Task(
                name="Design",
                wbs="1.1",
                start_date=date(2024, 3, 4),
                end_date=date(2024, 3, 8),
                duration_days=5,
                percent_complete=100,
                priority=500,
                description="Signed off",
                assignee="Alice",
            ),
            Task(
                name="Build",
                wbs="1.2.1",
                start_date=date(2024, 3, 11),
                end_date=date(2024, 3, 14),
                duration_days=4,
                percent_complete=25,
                assignee="Bob",
                predecessors=[Predecessor(predecessor_uid=1, link_type=1, link_lag=480)],
            ),
            Task(name="Loose end", start_date=date(2024, 4, 1), end_date=date(2024, 4, 1)),
        ]

    def test_declaration_and_root(self):
        text = MspdiWriter().to_string(self._tasks())
        assert text.startswith('<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n')
        root = fromstring(text.split("\n", 1)[1])
        assert root.tag == f"{Q}Project"
        assert root.findtext(f"{Q}Title") == "Merged Project"

    def test_task_elements(self):
        root = MspdiWriter().build(self._tasks())
        task_els = root.find("Tasks").findall("Task")
        assert [el.findtext("UID") for el in task_els] == ["1", "2", "3"]
        assert [el.findtext("ID") for el in task_els] == ["1", "2", "3"]

        design = task_els[0]
        assert design.findtext("Name") == "Design"
        assert design.findtext("Start") == "2024-03-04T08:00:00"
        assert design.findtext("Finish") == "2024-03-08T17:00:00"
        assert design.findtext("Duration") == "PT40H0M0S"
        assert design.findtext("PercentComplete") == "100"
        assert design.findtext("Active") == "1"
        assert design.findtext("Manual") == "0"
        assert design.findtext("OutlineNumber") == "1.1"
        assert design.findtext("OutlineLevel") == "2"
        assert design.findtext("Priority") == "500"
        assert design.findtext("Notes") == "Signed off"
        assert design.findtext("WBS") == "1.1"

    def test_outline_level_without_wbs(self):
        root = MspdiWriter().build(self._tasks())
        loose = root.find("Tasks").findall("Task")[2]
        assert loose.findtext("OutlineLevel") == "1"
        assert loose.findtext("WBS") == ""

    def test_predecessor_link(self):
        root = MspdiWriter().build(self._tasks())
        link = root.find("Tasks").findall("Task")[1].find("PredecessorLink")
        assert link.findtext("PredecessorUID") == "1"
        assert link.findtext("Type") == "1"
        assert link.findtext("CrossProject") == "0"
        assert link.findtext("LinkLag") == "480"
        assert link.findtext("LagFormat") == "7"

    def test_resources_and_assignments(self):
        root = MspdiWriter().build(self._tasks())
        resources = root.find("Resources").findall("Resource")
        assert [r.findtext("Name") for r in resources] == ["Alice", "Bob"]
        assignments = root.find("Assignments").findall("Assignment")
        assert [(a.findtext("TaskUID"), a.findtext("ResourceUID")) for a in assignments] == [
            ("1", "1"),
            ("2", "2"),
        ]

    def test_no_resources_without_assignees(self):
        root = MspdiWriter().build([Task(name="Solo")])
        assert root.find("Resources") is None
        assert root.find("Assignments") is None

    def test_options(self):
        options = WriteOptions(
            project_title="Release 2",
            start_time="09:00:00",
            finish_time="18:00:00",
            hours_per_day=10,
        )
        root = MspdiWriter(options).build(self._tasks()[:1])
        assert root.findtext("Title") == "Release 2"
        task_el = root.find("Tasks").find("Task")
        assert task_el.findtext("Start") == "2024-03-04T09:00:00"
        assert task_el.findtext("Finish") == "2024-03-08T18:00:00"
        assert task_el.findtext("Duration") == "PT50H0M0S"

    def test_write_then_read(self, tmp_path):
        """Fields survive a write/read cycle; status comes back from percent."""
        tasks = self._tasks()
        path = tmp_path / "out.xml"
        MspdiWriter().write(tasks, path)
        read_back = MspdiReader().read(path)

        assert len(read_back) == len(tasks)
        for original, loaded in zip(tasks, read_back):
            assert loaded.name == original.name
            assert loaded.start_date == original.start_date
            assert loaded.end_date == original.end_date
            assert loaded.duration_days == original.duration_days
            assert loaded.percent_complete == original.percent_complete
            assert loaded.priority == original.priority
            assert loaded.description == original.description
            assert loaded.wbs == original.wbs
            assert loaded.assignee == original.assignee
            assert loaded.predecessors == original.predecessors
        assert read_back[0].status == TaskStatus.COMPLETED
        assert read_back[1].status == TaskStatus.IN_PROGRESS

    def test_special_characters_escaped(self, tmp_path):
        task = Task(name="R&D <phase 1>", description='Say "hi" & go')
        path = tmp_path / "out.xml"
        MspdiWriter().write([task], path)
        loaded = MspdiReader().read(path)[0]
        assert loaded.name == "R&D <phase 1>"
        assert loaded.description == 'Say "hi" & go'
