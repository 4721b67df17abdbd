"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import validate_email, validate_person_name, validate_phone
from ...utils.sanitization import validate_text_input
from .status import BOOKING_STATUSES

MAX_NOTES_LENGTH = 1000


def _check_status(v: str) -> str:
    if v not in BOOKING_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(BOOKING_STATUSES)}")
    return v


class BookingRequest(BaseModel):
    """Public booking form submission"""

    service_id: int
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    name: str
    email: str
    phone: str
    notes: Optional[str] = None

    @field_validator("date", "time")
    @classmethod
    def check_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return validate_person_name(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if not v:
            raise ValueError("Email is required")
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v):
        return validate_text_input(v, max_length=MAX_NOTES_LENGTH)


class BookingResult(BaseModel):
    """Outcome of a booking submission"""

    success: bool
    message: str
    booking_id: Optional[int] = None
    booking_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class AvailableSlotsResponse(BaseModel):
    date: str
    service_id: int
    time_slots: list[str]


class CalendarBookingCreate(BaseModel):
    """
    Booking created from the admin calendar.

    Either ``client_id`` references an existing client or the contact fields
    describe a client to upsert by email.
    """

    service_id: int
    booking_date: str
    start_time: str
    end_time: str
    status: str = "confirmed"
    notes: Optional[str] = None
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return _check_status(v)

    @field_validator("client_email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v):
        return validate_text_input(v, max_length=MAX_NOTES_LENGTH)

    @model_validator(mode="after")
    def check_client(self):
        if not self.client_id and not (self.client_name and self.client_email):
            raise ValueError("Either client_id or client_name and client_email are required")
        return self


class BookingStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return _check_status(v)


class BookingUpdate(BaseModel):
    """Admin edit form: every field is overwritten as submitted"""

    booking_date: str
    start_time: str
    end_time: str
    status: str
    notes: Optional[str] = None
    client_id: int
    service_id: int

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return _check_status(v)

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v):
        return validate_text_input(v, max_length=MAX_NOTES_LENGTH)


class BookingResponse(BaseModel):
    """Booking joined with client and service data for list and calendar views"""

    id: int
    booking_date: date
    start_time: str
    end_time: str
    status: str
    notes: Optional[str] = None
    client_name: str
    client_email: str
    client_phone: Optional[str] = None
    service_name: str
    service_price: Decimal
    service_duration: int


class BookingDetailResponse(BookingResponse):
    client_id: int
    service_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CalendarResponse(BaseModel):
    view: str
    start_date: date
    end_date: date
    bookings: list[BookingResponse]
    business_hours: dict[int, dict[str, int]]


class OperationResult(BaseModel):
    success: bool
    message: Optional[str] = None
