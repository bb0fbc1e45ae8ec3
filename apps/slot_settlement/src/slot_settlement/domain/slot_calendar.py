"""Date and time-range helpers for slot records.

Record dates are stored as ``DD.MM`` without a year; the year is inferred as
the current calendar year of the configured timezone.
"""

from __future__ import annotations

from datetime import date, datetime
from re import IGNORECASE, compile
from zoneinfo import ZoneInfo

TIME_RANGE_PATTERN = compile(
    r"(\d{1,2}):(\d{2})\s*(?:[-–—]|to|until)\s*(\d{1,2}):(\d{2})",
    IGNORECASE,
)
DAY_MONTH_PATTERN = compile(r"^\s*(\d{1,2})\.(\d{1,2})\.?\s*$")

TWO_HOUR_MIN_DURATION = 1.8
TWO_HOUR_MAX_DURATION = 2.2


def current_year(timezone_name: str) -> int:
    """Return the calendar year in the given timezone."""

    return datetime.now(tz=ZoneInfo(timezone_name)).year


def parse_day_month(value: str | None, *, year: int) -> date | None:
    """Parse a ``DD.MM`` label into a date of ``year``; None when malformed."""

    if not value:
        return None
    match = DAY_MONTH_PATTERN.match(value)
    if match is None:
        return None
    day, month = int(match.group(1)), int(match.group(2))
    try:
        return date(year=year, month=month, day=day)
    except ValueError:
        return None


def format_day_month(value: date) -> str:
    """Render a date as ``DD.MM``."""

    return f"{value.day:02d}.{value.month:02d}"


def normalize_day_month(value: str | None) -> str:
    """Rewrite ``D.M.``-style labels as ``DD.MM``; other text is only stripped."""

    if not value:
        return ""
    match = DAY_MONTH_PATTERN.match(value)
    if match is None:
        return value.strip()
    day, month = int(match.group(1)), int(match.group(2))
    if not (1 <= day <= 31 and 1 <= month <= 12):
        return value.strip()
    return f"{day:02d}.{month:02d}"


def parse_time_range(value: str | None) -> tuple[float, float] | None:
    """Return (start, end) as fractional hours, or None when unparseable."""

    if not value:
        return None
    match = TIME_RANGE_PATTERN.search(value.strip())
    if match is None:
        return None
    start_hour, start_minute, end_hour, end_minute = (
        int(group) for group in match.groups()
    )
    return start_hour + start_minute / 60, end_hour + end_minute / 60


def slot_duration_hours(value: str | None) -> float | None:
    """Return the slot duration in hours, or None when unparseable."""

    bounds = parse_time_range(value)
    if bounds is None:
        return None
    start, end = bounds
    return end - start


def is_two_hour_slot(value: str | None) -> bool:
    """Return whether the range spans two hours within the pricing tolerance."""

    duration = slot_duration_hours(value)
    if duration is None:
        return False
    return TWO_HOUR_MIN_DURATION <= duration <= TWO_HOUR_MAX_DURATION


def chronological_key(
    day_month: str | None, time_range: str | None, *, year: int
) -> tuple[int, date, float]:
    """Sort key ordering records by date then start time, malformed dates last."""

    parsed_date = parse_day_month(day_month, year=year)
    bounds = parse_time_range(time_range)
    start = bounds[0] if bounds is not None else 0.0
    if parsed_date is None:
        return 1, date.max, start
    return 0, parsed_date, start
