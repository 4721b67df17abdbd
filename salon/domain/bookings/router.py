"""Booking routers - public booking form and back office calendar"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...config import BOOKING_RATE_LIMIT, BOOKING_RATE_WINDOW_SECONDS
from ...database import get_db
from ...models import Booking
from ...rate_limiter import create_rate_limiter
from ...utils.sanitization import sanitize_string
from .schemas import (
    AvailableSlotsResponse,
    BookingDetailResponse,
    BookingRequest,
    BookingResponse,
    BookingResult,
    BookingStatusUpdate,
    BookingUpdate,
    CalendarBookingCreate,
    CalendarResponse,
    OperationResult,
)
from .service import BookingService

router = APIRouter(prefix="/booking", tags=["Booking"])
admin_router = APIRouter(prefix="/admin", tags=["Admin Bookings"], dependencies=[Depends(get_current_admin)])

booking_rate_limit = create_rate_limiter(
    limit=BOOKING_RATE_LIMIT, window_seconds=BOOKING_RATE_WINDOW_SECONDS, key_prefix="booking"
)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def _booking_row(b: Booking) -> BookingResponse:
    return BookingResponse(
        id=b.id,
        booking_date=b.booking_date,
        start_time=b.start_time,
        end_time=b.end_time,
        status=b.status,
        notes=b.notes,
        client_name=b.client.name,
        client_email=b.client.email,
        client_phone=b.client.phone,
        service_name=b.service.name,
        service_price=b.service.price,
        service_duration=b.service.duration,
    )


def _booking_detail(b: Booking) -> BookingDetailResponse:
    return BookingDetailResponse(
        **_booking_row(b).model_dump(),
        client_id=b.client_id,
        service_id=b.service_id,
        created_at=b.created_at,
        updated_at=b.updated_at,
    )


# ============================================================================
# PUBLIC BOOKING FORM
# ============================================================================


@router.get("/slots", response_model=AvailableSlotsResponse)
async def get_available_time_slots(
    date: str = Query(..., description="YYYY-MM-DD"),
    service_id: int = Query(...),
    service: BookingService = Depends(get_booking_service),
):
    """Free start times for a service on a date"""
    slots = service.get_available_time_slots(date, service_id)
    return AvailableSlotsResponse(date=date, service_id=service_id, time_slots=slots)


@router.post("", response_model=BookingResult)
async def create_booking(
    data: BookingRequest,
    _: None = Depends(booking_rate_limit),
    service: BookingService = Depends(get_booking_service),
):
    """Submit the public booking form"""
    booking = service.create_booking(data)
    return BookingResult(
        success=True,
        message=f"Thank you {sanitize_string(data.name)}, your booking is confirmed",
        booking_id=booking.id,
        booking_date=booking.booking_date,
        start_time=booking.start_time,
        end_time=booking.end_time,
    )


# ============================================================================
# BACK OFFICE CALENDAR
# ============================================================================


@admin_router.get("/business-hours")
async def get_business_hours(service: BookingService = Depends(get_booking_service)):
    """Weekday (0=Sunday) -> {"start", "end"}; start == end == 0 means closed"""
    return service.get_business_hours()


@admin_router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(
    view: str = Query("week", description="day, week or month"),
    date: str = Query(..., description="Reference date YYYY-MM-DD"),
    service: BookingService = Depends(get_booking_service),
):
    start, end, bookings = service.get_calendar(view, date)
    return CalendarResponse(
        view=view,
        start_date=start,
        end_date=end,
        bookings=[_booking_row(b) for b in bookings],
        business_hours=service.get_business_hours(),
    )


@admin_router.get("/calendar/range", response_model=list[BookingResponse])
async def get_bookings_for_calendar(
    start_date: str = Query(...),
    end_date: str = Query(...),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings between two dates inclusive, ordered by date and start time"""
    return [_booking_row(b) for b in service.get_bookings_for_calendar(start_date, end_date)]


@admin_router.get("/calendar/slot", response_model=list[BookingResponse])
async def get_bookings_at(
    date: str = Query(...),
    time: str = Query(..., description="HH:MM"),
    service: BookingService = Depends(get_booking_service),
):
    return [_booking_row(b) for b in service.get_bookings_at(date, time)]


@admin_router.post("/bookings", response_model=BookingDetailResponse, status_code=201)
async def create_booking_from_calendar(
    data: CalendarBookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    booking = service.create_booking_from_calendar(data)
    return _booking_detail(service.get_booking_detail(booking.id))


@admin_router.get("/bookings", response_model=list[BookingResponse])
async def list_bookings(
    date: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Match on client name, email or phone"),
    service: BookingService = Depends(get_booking_service),
):
    return [_booking_row(b) for b in service.list_bookings(date, status, search)]


@admin_router.get("/bookings/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    return _booking_detail(service.get_booking_detail(booking_id))


@admin_router.put("/bookings/{booking_id}", response_model=BookingDetailResponse)
async def update_booking(
    booking_id: int,
    data: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
):
    """Overwrite every field of a booking"""
    return _booking_detail(service.update_booking(booking_id, data))


@admin_router.patch("/bookings/{booking_id}/status", response_model=BookingDetailResponse)
async def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
):
    return _booking_detail(service.update_booking_status(booking_id, data.status))


@admin_router.delete("/bookings/{booking_id}", response_model=OperationResult)
async def delete_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    service.delete_booking(booking_id)
    return OperationResult(success=True, message="Booking deleted")
