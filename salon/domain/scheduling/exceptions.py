"""
Booking engine exception hierarchy.

Services raise these; the application exception handler in ``salon.main``
turns them into ``{"success": false, "message": ...}`` responses so that no
failure crosses the HTTP boundary as an unhandled fault.
"""

from typing import Optional


class BookingEngineError(Exception):
    """Base class for all booking engine failures."""

    status_code = 500
    public_message = "Request could not be completed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(BookingEngineError):
    """Malformed or missing input (bad date, closed day, unknown status...)."""

    status_code = 400
    public_message = "Invalid booking request"


class NotFoundError(BookingEngineError):
    """Referenced service, client or booking does not exist."""

    status_code = 404
    public_message = "Not found"


class ConflictError(BookingEngineError):
    """
    The requested slot is already taken.

    Raised both by the in-transaction availability check and when a storage
    constraint rejects an overlapping confirmed booking. Callers should list
    slots again and resubmit.
    """

    status_code = 409
    public_message = "The selected time is no longer available"


class StoreError(BookingEngineError):
    """
    Any failure talking to the database.

    The original exception is logged where it happens; only the generic
    message is ever returned to the caller.
    """

    status_code = 500
    public_message = "Failed to process booking"

    def __init__(self, message: Optional[str] = None):
        # Internal details never leave the process
        super().__init__(self.public_message)
        self.detail = message
