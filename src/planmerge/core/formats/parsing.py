"""
Cell and element value parsers shared by the readers.

Every parser returns None (or a documented default) instead of raising,
so one malformed value never fails a whole import.
"""

import math
import re
from datetime import date, datetime, timedelta

from planmerge.core.tasks.models import TaskStatus

HOURS_PER_DAY = 8

SPREADSHEET_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%d-%m-%Y",
)

# Excel serial day 0, accounting for the 1900 leap-year bug
EXCEL_EPOCH = date(1899, 12, 30)

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_MSPDI_HOURS_RE = re.compile(r"^PT(\d+)H", re.IGNORECASE)


def cell_text(value: object) -> str:
    """
    Render a spreadsheet cell value as text.

    None becomes "", integral floats drop their ".0" (so a WBS of 2 read
    back as 2.0 stays "2"), and dates render as ISO strings.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def parse_date(value: object) -> date | None:
    """
    Parse a spreadsheet date.

    Accepts date/datetime cells, the text formats in
    SPREADSHEET_DATE_FORMATS (tried in order), and Excel serial numbers.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = cell_text(value)
    if not text:
        return None

    for fmt in SPREADSHEET_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        serial = float(text)
    except ValueError:
        return None
    try:
        return EXCEL_EPOCH + timedelta(days=int(serial))
    except (OverflowError, ValueError):
        return None


def parse_status(value: object) -> TaskStatus | None:
    """
    Fuzzy-match a status cell.

    Matches "not started", "in progress", "complete(d)", "on hold" and
    "cancel(led)" in any case or spacing ("NotStarted" works too).
    """
    text = cell_text(value).lower()
    if not text:
        return None
    if "not" in text and "start" in text:
        return TaskStatus.NOT_STARTED
    if "in" in text and "progress" in text:
        return TaskStatus.IN_PROGRESS
    if "complete" in text:
        return TaskStatus.COMPLETED
    if "hold" in text:
        return TaskStatus.ON_HOLD
    if "cancel" in text:
        return TaskStatus.CANCELLED
    return None


def parse_non_negative_int(value: object) -> int | None:
    """Parse a whole, non-negative number ("3", 3, 3.0). Anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if value.is_integer() and value >= 0:
            return int(value)
        return None
    text = cell_text(value)
    if text.isdecimal():
        return int(text)
    return None


def parse_duration_days(value: object) -> int | None:
    """Parse a spreadsheet duration such as "5", "5 days" or "5d"."""
    exact = parse_non_negative_int(value)
    if exact is not None:
        return exact
    match = _LEADING_INT_RE.match(cell_text(value))
    if match:
        return int(match.group(1))
    return None


def parse_percent(value: object) -> int | None:
    """Parse a percent-complete cell such as "50", "50%" or 50."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return parse_non_negative_int(value)
    return parse_non_negative_int(cell_text(value).replace("%", "").strip())


def parse_mspdi_date(text: str | None) -> date | None:
    """Parse an MSPDI timestamp (YYYY-MM-DDTHH:MM:SS) or plain date."""
    if not text:
        return None
    text = text.strip()
    for fmt in ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_mspdi_duration(text: str | None, hours_per_day: int = HOURS_PER_DAY) -> int:
    """
    Convert an MSPDI duration ("PT32H0M0S") to whole working days.

    Only the hours component is considered; days are rounded up, so
    "PT10H0M0S" is 2 days at 8 hours per day. Missing or zero hours -> 0.
    """
    if not text:
        return 0
    match = _MSPDI_HOURS_RE.match(text.strip())
    if not match:
        return 0
    hours = int(match.group(1))
    if hours <= 0:
        return 0
    return math.ceil(hours / hours_per_day)


def format_mspdi_duration(days: int, hours_per_day: int = HOURS_PER_DAY) -> str:
    """Render whole days as an MSPDI duration string."""
    return f"PT{days * hours_per_day}H0M0S"


def status_from_percent(percent: int) -> TaskStatus:
    """Derive a status from percent complete (100 -> completed, >0 -> in progress)."""
    if percent == 100:
        return TaskStatus.COMPLETED
    if percent > 0:
        return TaskStatus.IN_PROGRESS
    return TaskStatus.NOT_STARTED
