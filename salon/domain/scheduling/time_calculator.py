"""Time parsing and interval arithmetic for wall-clock HH:MM values"""

import re
from typing import NamedTuple

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time(value: str) -> int:
    """
    Parse a wall-clock time into minutes since midnight.

    Accepts ``H:MM``, ``HH:MM`` and ``HH:MM:SS`` (seconds are ignored, some
    drivers return TIME columns that way).

    Raises:
        ValueError: If the value is not a valid time of day
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid time: {value!r}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time format: {value!r}. Expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Format minutes since midnight as zero-padded HH:MM"""
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    """'9:5' style inputs are rejected, '9:05' becomes '09:05'"""
    return format_time(parse_time(value))


def add_minutes(value: str, minutes: int) -> str:
    """
    Add a duration to a wall-clock time.

    Hours roll over, dates do not: a result past midnight is an error
    because a booking never spans two days.
    """
    total = parse_time(value) + minutes
    if total > MINUTES_PER_DAY:
        raise ValueError(f"{value} + {minutes} min crosses midnight")
    return format_time(total)


class TimeInterval(NamedTuple):
    """Half-open [start, end) interval in minutes since midnight"""

    start: int
    end: int

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeInterval":
        interval = cls(parse_time(start), parse_time(end))
        if interval.end <= interval.start:
            raise ValueError(f"End time {end} must be after start time {start}")
        return interval

    @classmethod
    def starting_at(cls, start: str, duration_minutes: int) -> "TimeInterval":
        begin = parse_time(start)
        return cls(begin, begin + duration_minutes)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def intersects(self, other: "TimeInterval") -> bool:
        """True when the two intervals share at least one minute"""
        return self.start < other.end and self.end > other.start

    def start_label(self) -> str:
        return format_time(self.start)

    def end_label(self) -> str:
        return format_time(self.end)
