"""Minute-of-day arithmetic, conversions and formatting helpers."""
from __future__ import annotations

import uuid
from datetime import datetime

from .models import Meridiem, TimeInput

MINUTES_PER_DAY = 24 * 60


def to_minutes(time: TimeInput) -> int:
    """Convert a TimeInput to minutes from midnight (0-1439)."""
    hours = time.hours % 12
    if time.meridiem is Meridiem.PM:
        hours += 12
    return hours * 60 + time.minutes


def wrap_minutes(minutes: int) -> int:
    return ((minutes % MINUTES_PER_DAY) + MINUTES_PER_DAY) % MINUTES_PER_DAY


def minutes_to_time_input(total_minutes: int) -> TimeInput:
    """Convert minutes from midnight back into the editable form."""
    total_minutes = wrap_minutes(total_minutes)
    hours, minutes = divmod(total_minutes, 60)
    meridiem = Meridiem.PM if hours >= 12 else Meridiem.AM
    if hours > 12:
        hours -= 12
    if hours == 0:
        hours = 12
    return TimeInput(hours=hours, minutes=minutes, meridiem=meridiem)


def add_minutes(start: TimeInput, minutes_to_add: int) -> TimeInput:
    """Return a new TimeInput shifted by a signed number of minutes, wrapping at 24h."""
    return minutes_to_time_input(to_minutes(start) + minutes_to_add)


def format_minutes_to_time(total_minutes: int) -> str:
    """Format minutes from midnight as a readable string, e.g. "4:30 PM"."""
    time = minutes_to_time_input(total_minutes)
    return f"{time.hours}:{time.minutes:02d} {time.meridiem.value}"


def format_duration(start: TimeInput, end: TimeInput) -> str:
    """Format the span between two times, e.g. "1h 30m"."""
    diff = to_minutes(end) - to_minutes(start)
    hours, minutes = divmod(diff, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_countdown(total_seconds: int) -> str:
    hours, rest = divmod(max(0, int(total_seconds)), 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def minutes_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def seconds_of_day(now: datetime) -> int:
    """Second-of-day for an instant; sub-second precision is dropped."""
    return minutes_of_day(now) * 60 + now.second


def generate_id() -> str:
    """Generate an opaque unique identifier for tasks and plans."""
    return uuid.uuid4().hex
