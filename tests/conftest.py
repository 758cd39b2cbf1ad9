"""
Pytest configuration and shared fixtures.

Provides fixtures for isolated config/data directories, sample tasks,
MSPDI documents and spreadsheet builders used across the test suite.
"""

import os
from collections.abc import Callable, Sequence
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

from planmerge.core.config import clear_cache
from planmerge.core.tasks.models import Predecessor, Task, TaskStatus

# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Drop the cached config before and after every test."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Provide a clean environment without PLANMERGE_* env vars.

    XDG config and data homes point into tmp_path so no user config is
    read and event logs never land in the real home directory.
    """
    for key in list(os.environ.keys()):
        if key.startswith("PLANMERGE_"):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))

    return monkeypatch


@pytest.fixture
def isolated_config(clean_env, tmp_path):
    """Provide an empty XDG_CONFIG_HOME and return it."""
    config_home = tmp_path / "xdg-config"
    config_home.mkdir(exist_ok=True)
    return config_home


@pytest.fixture
def project_dir(isolated_config, tmp_path, monkeypatch):
    """Provide an empty project directory and make it the cwd."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for tasks with fixed dates, so comparisons are stable."""

    def _make(name: str = "Task", **fields: Any) -> Task:
        fields.setdefault("start_date", date(2024, 1, 1))
        fields.setdefault("end_date", date(2024, 1, 5))
        return Task(name=name, **fields)

    return _make


@pytest.fixture
def sample_tasks(make_task) -> list[Task]:
    """A small base schedule with WBS codes 1, 1.1, 1.2."""
    return [
        make_task("Project", wbs="1", duration_days=10),
        make_task(
            "Design",
            wbs="1.1",
            assignee="Alice",
            description="Initial design",
            duration_days=3,
            priority=500,
        ),
        make_task(
            "Build",
            wbs="1.2",
            assignee="Bob",
            duration_days=5,
            percent_complete=20,
            status=TaskStatus.IN_PROGRESS,
            predecessors=[Predecessor(predecessor_uid=2, link_type=1, link_lag=0)],
        ),
    ]


SAMPLE_MSPDI = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Project xmlns="http://schemas.microsoft.com/project">
  <Title>Sample</Title>
  <Tasks>
    <Task>
      <UID>0</UID>
      <ID>0</ID>
      <Name>Sample</Name>
      <WBS>0</WBS>
    </Task>
    <Task>
      <UID>1</UID>
      <ID>1</ID>
      <Name>Design</Name>
      <Start>2024-03-04T08:00:00</Start>
      <Finish>2024-03-08T17:00:00</Finish>
      <Duration>PT40H0M0S</Duration>
      <PercentComplete>100</PercentComplete>
      <Priority>500</Priority>
      <Notes>Signed off</Notes>
      <WBS>1.1</WBS>
    </Task>
    <Task>
      <UID>2</UID>
      <ID>2</ID>
      <Name>Build</Name>
      <Start>2024-03-11T08:00:00</Start>
      <Finish>2024-03-14T17:00:00</Finish>
      <Duration>PT26H0M0S</Duration>
      <PercentComplete>25</PercentComplete>
      <WBS>1.2</WBS>
      <PredecessorLink>
        <PredecessorUID>1</PredecessorUID>
        <Type>1</Type>
        <LinkLag>4800</LinkLag>
      </PredecessorLink>
    </Task>
    <Task>
      <UID>3</UID>
      <ID>3</ID>
      <Name></Name>
    </Task>
  </Tasks>
  <Resources>
    <Resource>
      <UID>1</UID>
      <Name>Carol</Name>
    </Resource>
  </Resources>
  <Assignments>
    <Assignment>
      <UID>1</UID>
      <TaskUID>2</TaskUID>
      <ResourceUID>1</ResourceUID>
    </Assignment>
  </Assignments>
</Project>
"""


@pytest.fixture
def mspdi_text() -> str:
    """MSPDI document with a summary task, two real tasks and an unnamed one."""
    return SAMPLE_MSPDI


@pytest.fixture
def mspdi_file(tmp_path, mspdi_text) -> Path:
    path = tmp_path / "update.xml"
    path.write_text(mspdi_text, encoding="utf-8")
    return path


# ==============================================================================
# Spreadsheet Fixtures
# ==============================================================================


@pytest.fixture
def write_xlsx(tmp_path) -> Callable[..., Path]:
    """Factory writing rows (header first) to an .xlsx file."""

    def _write(rows: Sequence[Sequence[Any]], name: str = "plan.xlsx") -> Path:
        workbook = Workbook()
        sheet = workbook.active
        for row in rows:
            sheet.append(list(row))
        path = tmp_path / name
        workbook.save(path)
        return path

    return _write


@pytest.fixture
def base_xlsx(write_xlsx) -> Path:
    """Base schedule spreadsheet with WBS 1.1 and 1.2."""
    return write_xlsx(
        [
            ["WBS", "Task Name", "Start Date", "End Date", "Status", "Assignee", "% Complete"],
            ["1.1", "Design", "2024-03-01", "2024-03-07", "Not Started", "Alice", "0"],
            ["1.2", "Build", "2024-03-08", "2024-03-20", "Not Started", "Bob", "0"],
        ],
        name="base.xlsx",
    )
