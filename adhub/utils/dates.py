"""
Date and clock-time parsing/formatting shared by CSV exchange and calendar sync.
"""
import re
from datetime import date, datetime, time
from typing import Any

DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%m-%d-%Y",
)

_CLOCK_RE = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?::(?P<second>\d{2}))?"
    r"\s*(?:(?P<meridiem>[ap])\.?\s*m?\.?)?$",
    re.IGNORECASE,
)


def parse_date(value: Any) -> date | None:
    """Parse a calendar date from common spreadsheet formats or return None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    cleaned = value.strip()
    if not cleaned:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    # ISO datetimes, e.g. "2025-09-05T00:00:00.000Z"
    try:
        return datetime.fromisoformat(cleaned.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_clock(value: Any) -> time | None:
    """Parse "19:00", "19:00:00", "7:00 PM", "7pm" into a time or return None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None

    match = _CLOCK_RE.match(value.strip())
    if not match:
        return None

    hour = int(match.group("hour"))
    minute = int(match.group("minute") or 0)
    second = int(match.group("second") or 0)
    meridiem = (match.group("meridiem") or "").lower()

    if meridiem:
        if not 1 <= hour <= 12:
            return None
        if meridiem == "a":
            hour = 0 if hour == 12 else hour
        else:
            hour = 12 if hour == 12 else hour + 12
    elif match.group("minute") is None:
        # A bare number like "7" is too ambiguous to be a clock time
        return None

    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute, second)


def format_clock(value: time | datetime | None) -> str:
    """Render a clock time as "h:mm AM/PM"."""
    if value is None:
        return ""
    hour12 = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour12}:{value.minute:02d} {meridiem}"


def normalize_time_string(value: Any) -> str | None:
    """Store game times as "HH:MM"; unparseable text is kept as entered."""
    if value is None:
        return None
    parsed = parse_clock(value)
    if parsed is not None:
        return parsed.strftime("%H:%M")
    cleaned = str(value).strip()
    return cleaned or None


def combine_date_clock(day: date, value: Any) -> datetime | None:
    """Attach a parsed clock value to a date, or None when it does not parse."""
    clock = parse_clock(value)
    if clock is None:
        return None
    return datetime.combine(day, clock)
