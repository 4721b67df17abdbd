"""Booking status values and the transitions the status action allows"""

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"
COMPLETED = "completed"

BOOKING_STATUSES = (PENDING, CONFIRMED, CANCELLED, COMPLETED)

# Only confirmed bookings occupy a slot
BLOCKING_STATUSES = (CONFIRMED,)

ALLOWED_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED},
    CONFIRMED: {CANCELLED, COMPLETED},
    CANCELLED: set(),
    COMPLETED: set(),
}


def is_valid_status(status: str) -> bool:
    return status in BOOKING_STATUSES


def can_transition(current: str, new: str) -> bool:
    """Setting the current status again is always allowed (no-op)"""
    if current == new:
        return True
    return new in ALLOWED_TRANSITIONS.get(current, set())
