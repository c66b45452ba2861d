"""
Attendance and leave arithmetic.

Pure functions over timestamps and dates; the endpoints do the I/O.
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo

NOTES_DELIMITER = " | "


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp to UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def local_day(ts: datetime, tz: tzinfo) -> str:
    """Calendar day (YYYY-MM-DD) of *ts* in the local zone."""
    return ensure_utc(ts).astimezone(tz).strftime("%Y-%m-%d")


def check_in_status(ts: datetime, tz: tzinfo, work_start_hour: int) -> str:
    """Classify a check-in as ``present`` or ``late``.

    Late means strictly after ``work_start_hour:00`` local time, compared at
    minute granularity: with a start hour of 8, 07:59 and 08:00 are present,
    08:01 and 08:59 are late.
    """
    local = ensure_utc(ts).astimezone(tz)
    return "late" if (local.hour, local.minute) > (work_start_hour, 0) else "present"


def work_hours_between(check_in: datetime, check_out: datetime) -> float:
    """Elapsed time between two timestamps in fractional hours."""
    seconds = (ensure_utc(check_out) - ensure_utc(check_in)).total_seconds()
    return seconds / 3600


def overtime_hours(work_hours: float, standard_hours: float) -> float:
    return max(0.0, work_hours - standard_hours)


def append_notes(existing: str | None, new: str | None) -> str | None:
    """Append *new* to *existing* notes.

    The delimiter is only inserted when there are prior notes.
    """
    if not new:
        return existing
    if not existing:
        return new
    return f"{existing}{NOTES_DELIMITER}{new}"


def leave_days(start: date, end: date) -> int:
    """Inclusive number of calendar days between *start* and *end*."""
    return (end - start).days + 1
