"""
Schedule file formats.

Readers turn XLSX workbooks and MSPDI XML files into Task records and
writers serialize a task list back to either format. Formats are looked
up by file suffix through the registry.
"""

from .exceptions import (
    BinaryProjectFileError,
    ScheduleFormatError,
    ScheduleParseError,
    UnsupportedFormatError,
)
from .registry import (
    ScheduleReader,
    ScheduleWriter,
    WriteOptions,
    get_reader,
    get_writer,
    list_formats,
    read_schedule,
    register_reader,
    register_writer,
    write_schedule,
)

# Import implementations to trigger registration
from . import mspdi, xlsx  # noqa: F401

__all__ = [
    # Errors
    "BinaryProjectFileError",
    "ScheduleFormatError",
    "ScheduleParseError",
    "UnsupportedFormatError",
    # Protocols and registry
    "ScheduleReader",
    "ScheduleWriter",
    "WriteOptions",
    "get_reader",
    "get_writer",
    "list_formats",
    "read_schedule",
    "register_reader",
    "register_writer",
    "write_schedule",
]
