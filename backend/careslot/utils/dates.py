"""Calendar helpers shared by the slot calculator, dashboards and analytics.

Weekday names are produced from ``date.weekday()`` rather than ``strftime``
so they never depend on the process locale.
"""
import re
from datetime import date, timedelta
from typing import Optional


WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def weekday_name(value: date) -> str:
    """Lowercase full English weekday name, e.g. ``"monday"``."""
    return WEEKDAY_NAMES[value.weekday()]


def parse_hour(value: Optional[str]) -> Optional[int]:
    """Hour component of an ``"HH:MM"`` string, or None if unusable."""
    if value is None:
        return None
    head = str(value).strip().split(":")[0]
    if not head.isdigit():
        return None
    hour = int(head)
    if hour > 24:
        return None
    return hour


def format_hour(hour: int) -> str:
    return f"{hour:02d}:00"


def normalize_time(value: str) -> str:
    """Normalize ``"9:00"`` / ``"09:00:00"`` to ``"09:00"``.

    Raises:
        ValueError: if the value is not a valid 24h clock time.
    """
    match = _TIME_PATTERN.match(str(value).strip())
    if not match:
        raise ValueError(f"Invalid time format: {value!r} (expected HH:MM)")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return f"{hour:02d}:{minute:02d}"


def end_of_month(value: date) -> date:
    return shift_months(value, 1) - timedelta(days=1)


def shift_months(value: date, months: int) -> date:
    """First day of the month ``months`` away from ``value``'s month."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def day_label(value: date, today: date) -> str:
    """Short label used on dashboards: Today, Tomorrow or ``Oct 5``."""
    if value == today:
        return "Today"
    if value == today + timedelta(days=1):
        return "Tomorrow"
    return f"{value.strftime('%b')} {value.day}"
