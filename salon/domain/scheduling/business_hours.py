"""Business calendar policy: which weekdays the salon is open and for how long."""

from datetime import date
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional


class OpeningHours(NamedTuple):
    open_hour: int
    close_hour: int

    @property
    def is_closed(self) -> bool:
        return self.open_hour == 0 and self.close_hour == 0


CLOSED = OpeningHours(0, 0)

# Weekday numbering follows the booking frontend: 0=Sunday .. 6=Saturday
DEFAULT_BUSINESS_HOURS: Mapping[int, OpeningHours] = MappingProxyType(
    {
        0: CLOSED,  # Sunday
        1: OpeningHours(9, 19),  # Monday
        2: OpeningHours(9, 19),  # Tuesday
        3: OpeningHours(9, 19),  # Wednesday
        4: OpeningHours(9, 19),  # Thursday
        5: OpeningHours(9, 19),  # Friday
        6: OpeningHours(9, 14),  # Saturday
    }
)


def sunday_based_weekday(day: date) -> int:
    """Convert Python's Monday=0 weekday to the Sunday=0 convention"""
    return (day.weekday() + 1) % 7


class BusinessCalendar:
    """Read-only view over a weekday -> opening hours table"""

    def __init__(self, hours: Optional[Mapping[int, OpeningHours]] = None):
        table = dict(hours if hours is not None else DEFAULT_BUSINESS_HOURS)
        for weekday in range(7):
            hours_for_day = table.get(weekday, CLOSED)
            if not hours_for_day.is_closed and not (
                0 <= hours_for_day.open_hour < hours_for_day.close_hour <= 24
            ):
                raise ValueError(f"Invalid opening hours for weekday {weekday}: {hours_for_day}")
            table[weekday] = hours_for_day
        self._hours = MappingProxyType(table)

    def hours_for(self, weekday: int) -> Optional[OpeningHours]:
        """Opening hours for a Sunday-based weekday, or None when closed"""
        hours = self._hours.get(weekday % 7, CLOSED)
        if hours.is_closed:
            return None
        return hours

    def hours_on(self, day: date) -> Optional[OpeningHours]:
        return self.hours_for(sunday_based_weekday(day))

    def is_open(self, day: date) -> bool:
        return self.hours_on(day) is not None

    def as_dict(self) -> dict[int, dict[str, int]]:
        """Weekday map in the shape the admin calendar renders ({0,0} = closed)"""
        return {
            weekday: {"start": hours.open_hour, "end": hours.close_hour}
            for weekday, hours in sorted(self._hours.items())
        }


default_calendar = BusinessCalendar()
