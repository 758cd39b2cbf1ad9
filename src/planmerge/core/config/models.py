"""
Configuration data models for planmerge.

These models define the structure of .planmerge.json and
~/.config/planmerge/config.json files, with validation via Pydantic.
"""

from pydantic import BaseModel, ConfigDict, Field

from planmerge.core.formats.registry import WriteOptions


class ReaderConfig(BaseModel):
    """Settings applied when importing schedule files."""

    hours_per_day: int = Field(
        default=8,
        ge=1,
        description="Working hours per day when converting MSPDI durations to days",
    )


class ExportConfig(BaseModel):
    """
    Settings applied when exporting a task list.

    Times are written as the time-of-day part of MSPDI Start/Finish values.
    """

    project_title: str = Field(
        default="Merged Project", description="Title written to exported MSPDI files"
    )
    start_time: str = Field(default="08:00:00", description="Time of day for task starts")
    finish_time: str = Field(default="17:00:00", description="Time of day for task finishes")
    default_suffix: str = Field(
        default=".xml", description="Suffix appended when an export path has none"
    )


class WorkspaceConfig(BaseModel):
    """Where the working set is persisted."""

    path: str = Field(
        default=".planmerge/workspace.json",
        description="Workspace state file, relative to the project directory",
    )


class LoggingConfig(BaseModel):
    """Structured event log settings."""

    events: bool = Field(default=True, description="Write a JSONL event log of workspace operations")


class PlanmergeConfig(BaseModel):
    """
    Root configuration model.

    Unknown keys are ignored so older config files keep loading.
    """

    model_config = ConfigDict(extra="ignore")

    reader: ReaderConfig = Field(default_factory=ReaderConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def write_options(self) -> WriteOptions:
        """Writer settings derived from the export and reader sections."""
        return WriteOptions(
            project_title=self.export.project_title,
            start_time=self.export.start_time,
            finish_time=self.export.finish_time,
            hours_per_day=self.reader.hours_per_day,
        )
