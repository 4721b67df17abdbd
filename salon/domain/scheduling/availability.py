"""
Slot generation and overlap filtering.

Pure functions: callers hand in the confirmed intervals of the day, nothing
here touches the database.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from .business_hours import BusinessCalendar, default_calendar
from .time_calculator import MINUTES_PER_DAY, TimeInterval, format_time

logger = logging.getLogger(__name__)

DEFAULT_SLOT_INTERVAL = 30


def is_slot_free(candidate: TimeInterval, booked: Iterable[TimeInterval]) -> bool:
    """A candidate is free when it intersects none of the booked intervals"""
    return not any(candidate.intersects(existing) for existing in booked)


def candidate_slots(
    day: date,
    duration_minutes: int,
    calendar: Optional[BusinessCalendar] = None,
    interval_minutes: int = DEFAULT_SLOT_INTERVAL,
    not_before: Optional[int] = None,
) -> list[TimeInterval]:
    """
    Every slot of the given duration that fits inside the day's opening hours.

    Starts are aligned to ``interval_minutes`` from the opening hour. A slot is
    kept only if it ends no later than closing time (and never past midnight).
    Starts earlier than ``not_before`` (minutes after midnight) are dropped.
    """
    if duration_minutes <= 0:
        raise ValueError("Service duration must be positive")
    if interval_minutes <= 0:
        raise ValueError("Slot interval must be positive")

    hours = (calendar or default_calendar).hours_on(day)
    if hours is None:
        return []

    opening = hours.open_hour * 60
    closing = min(hours.close_hour * 60, MINUTES_PER_DAY)

    slots = []
    start = opening
    while start < closing:
        slot = TimeInterval(start, start + duration_minutes)
        if slot.end <= closing and (not_before is None or start >= not_before):
            slots.append(slot)
        start += interval_minutes
    return slots


def available_slots(
    day: date,
    duration_minutes: int,
    booked: Iterable[TimeInterval],
    calendar: Optional[BusinessCalendar] = None,
    interval_minutes: int = DEFAULT_SLOT_INTERVAL,
    not_before: Optional[int] = None,
) -> list[str]:
    """Ordered, de-duplicated HH:MM starts that do not overlap any booked interval"""
    booked = list(booked)
    starts = []
    for slot in candidate_slots(day, duration_minutes, calendar, interval_minutes, not_before):
        if is_slot_free(slot, booked):
            starts.append(slot.start)

    result = [format_time(start) for start in sorted(set(starts))]
    logger.debug(
        f"🗓️ {len(result)} free slots on {day} for {duration_minutes} min "
        f"({len(booked)} confirmed bookings)"
    )
    return result
