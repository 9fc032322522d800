"""
Half-open time interval helpers — pure functions, no ORM access.

Every interval is [start, end): a slot ending exactly when another one
begins does not overlap it.
"""
from dataclasses import dataclass
from datetime import date as date_type, datetime, time as time_type, timedelta, timezone as dt_timezone, tzinfo


@dataclass(frozen=True)
class TimeInterval:
    start: datetime  # inclusive
    end: datetime    # exclusive


def intervals_overlap(a: TimeInterval, b: TimeInterval) -> bool:
    """True if [a.start, a.end) overlaps [b.start, b.end)."""
    return a.start < b.end and b.start < a.end


def start_of_day(day: date_type, tz: tzinfo = dt_timezone.utc) -> datetime:
    """First instant of `day` in `tz`."""
    return datetime.combine(day, time_type.min, tzinfo=tz)


def end_of_day(day: date_type, tz: tzinfo = dt_timezone.utc) -> datetime:
    """Last representable instant of `day` in `tz` (inclusive bound)."""
    return datetime.combine(day, time_type.max, tzinfo=tz)


def add_minutes(moment: datetime, minutes: int) -> datetime:
    return moment + timedelta(minutes=minutes)


def clip_interval(interval: TimeInterval, lower: datetime, upper: datetime):
    """
    Clip `interval` to [lower, upper].
    Returns None when nothing is left (empty or inverted result).
    """
    start = max(interval.start, lower)
    end = min(interval.end, upper)
    if end <= start:
        return None
    return TimeInterval(start, end)


def date_range(start: date_type, end: date_type) -> list:
    """Every date in the inclusive range [start, end]; empty if start > end."""
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days
