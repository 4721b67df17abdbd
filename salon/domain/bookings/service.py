"""Booking service - availability, reservations and the back office calendar"""

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import DEFAULT_SERVICE_DURATION_MINUTES, SLOT_INTERVAL_MINUTES
from ...models import Booking, Service
from ...shared.validators import parse_iso_date
from ..catalog.repository import ServiceRepository
from ..clients.service import ClientRegistry
from ..scheduling.availability import available_slots, candidate_slots, is_slot_free
from ..scheduling.business_hours import BusinessCalendar, default_calendar
from ..scheduling.calendar import calendar_window
from ..scheduling.exceptions import (
    BookingEngineError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from ..scheduling.time_calculator import TimeInterval, add_minutes, normalize_time
from . import status as booking_status
from .repository import BookingRepository
from .schemas import BookingRequest, BookingUpdate, CalendarBookingCreate

logger = logging.getLogger(__name__)

DateLike = Union[date, str]

# Storage constraints that reject a second confirmed booking for a slot.
# SQLite reports the unique index by its columns instead of its name.
SLOT_CONSTRAINT_MARKERS = (
    "uq_bookings_confirmed_slot",
    "bookings_no_confirmed_overlap",
    "bookings.booking_date, bookings.start_time",
)


def is_slot_conflict(error: IntegrityError) -> bool:
    """True when the violation comes from one of the double booking constraints"""
    message = str(error.orig)
    return any(marker in message for marker in SLOT_CONSTRAINT_MARKERS)


class BookingService:
    """Service layer for the booking engine"""

    def __init__(
        self,
        db: Session,
        calendar: Optional[BusinessCalendar] = None,
        interval_minutes: int = SLOT_INTERVAL_MINUTES,
        now: Optional[datetime] = None,
    ):
        self.db = db
        self.calendar = calendar or default_calendar
        self.interval_minutes = interval_minutes
        self.repo = BookingRepository()
        self.services = ServiceRepository()
        self.clients = ClientRegistry(db)
        self._now = now

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def now(self) -> datetime:
        return self._now or datetime.now()

    def today(self) -> date:
        return self.now().date()

    def _not_before(self, day: date) -> Optional[int]:
        """Earliest bookable minute of ``day``; slots that already started today are gone"""
        if day != self.today():
            return None
        current = self.now()
        return current.hour * 60 + current.minute

    @staticmethod
    def _parse_date(value: DateLike) -> date:
        if isinstance(value, date):
            return value
        try:
            return parse_iso_date(value)
        except ValueError as e:
            raise ValidationError(str(e)) from None

    @staticmethod
    def _parse_interval(start_time: str, end_time: str) -> TimeInterval:
        try:
            return TimeInterval.from_strings(start_time, end_time)
        except ValueError as e:
            raise ValidationError(str(e)) from None

    @staticmethod
    def _check_status(value: str) -> str:
        if not booking_status.is_valid_status(value):
            raise ValidationError(
                f"Status must be one of: {', '.join(booking_status.BOOKING_STATUSES)}"
            )
        return value

    @contextmanager
    def _read(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.exception(f"❌ Failed to {action}: {e}")
            raise StoreError(str(e)) from e

    @contextmanager
    def _write(self, action: str):
        """One transaction per write; any failure rolls back everything done inside"""
        try:
            yield
            self.db.commit()
        except BookingEngineError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            if is_slot_conflict(e):
                logger.warning(f"⚠️ Constraint rejected attempt to {action}: {e.orig}")
                raise ConflictError() from e
            logger.exception(f"❌ Failed to {action}: {e}")
            raise StoreError(str(e)) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Failed to {action}: {e}")
            raise StoreError(str(e)) from e

    def _get_service(self, service_id: int) -> Service:
        service = self.services.get_service_by_id(self.db, service_id)
        if not service:
            raise NotFoundError("Service not found")
        return service

    def _get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def _confirmed_intervals(self, booking_date: date, exclude_id: Optional[int] = None) -> list[TimeInterval]:
        """Intervals of the day's blocking bookings"""
        bookings = self.repo.list_bookings_by_date(
            self.db, booking_date, statuses=booking_status.BLOCKING_STATUSES
        )
        intervals = []
        for b in bookings:
            if exclude_id is not None and b.id == exclude_id:
                continue
            try:
                intervals.append(TimeInterval.from_strings(b.start_time, b.end_time))
            except ValueError:
                logger.warning(f"⚠️ Booking {b.id} has unreadable times {b.start_time}-{b.end_time}, ignoring")
        return intervals

    def _ensure_no_overlap(
        self, booking_date: date, interval: TimeInterval, exclude_id: Optional[int] = None
    ) -> None:
        self.repo.lock_day(self.db, booking_date)
        if not is_slot_free(interval, self._confirmed_intervals(booking_date, exclude_id)):
            logger.warning(
                f"⚠️ {interval.start_label()}-{interval.end_label()} on {booking_date} overlaps a confirmed booking"
            )
            raise ConflictError()

    # ------------------------------------------------------------------
    # Public booking flow
    # ------------------------------------------------------------------

    def get_business_hours(self) -> dict[int, dict[str, int]]:
        return self.calendar.as_dict()

    def get_available_time_slots(self, booking_date: DateLike, service_id: int) -> list[str]:
        """
        Free HH:MM start times for a service on a date.

        Closed and past days yield an empty list, and on the current day only
        starts that have not passed yet are offered. An unknown service id falls
        back to the default duration instead of failing, which hides bad ids
        from the caller, so it is logged.
        """
        day = self._parse_date(booking_date)
        if day < self.today() or not self.calendar.is_open(day):
            return []

        with self._read("fetch available time slots"):
            duration = self.services.get_duration(self.db, service_id)
            if duration is None:
                logger.warning(
                    f"⚠️ Unknown service {service_id}, assuming {DEFAULT_SERVICE_DURATION_MINUTES} min"
                )
                duration = DEFAULT_SERVICE_DURATION_MINUTES
            booked = self._confirmed_intervals(day)

        return available_slots(
            day, duration, booked, self.calendar, self.interval_minutes, self._not_before(day)
        )

    def create_booking(self, data: BookingRequest) -> Booking:
        """
        Reserve a slot for a client.

        Client upsert and booking insert share one transaction, and the slot
        is checked again inside it so two submissions for the same freshly
        listed slot cannot both succeed.
        """
        day = self._parse_date(data.date)
        try:
            start_time = normalize_time(data.time)
        except ValueError as e:
            raise ValidationError(str(e)) from None

        if day < self.today():
            raise ValidationError("Bookings cannot be made for past dates")
        if not self.calendar.is_open(day):
            raise ValidationError(f"The salon is closed on {day.isoformat()}")

        logger.info(f"📅 Booking request for service {data.service_id} on {day} at {start_time}")

        with self._write("create booking"):
            service = self._get_service(data.service_id)
            try:
                end_time = add_minutes(start_time, service.duration)
            except ValueError as e:
                raise ValidationError(str(e)) from None

            requested = TimeInterval.starting_at(start_time, service.duration)
            bookable = candidate_slots(
                day, service.duration, self.calendar, self.interval_minutes, self._not_before(day)
            )
            if requested not in bookable:
                raise ValidationError(f"{start_time} is not a bookable time on {day.isoformat()}")

            self._ensure_no_overlap(day, requested)

            client_id = self.clients.upsert(data.name, data.email, data.phone)
            booking = self.repo.insert_booking(
                self.db,
                client_id=client_id,
                service_id=service.id,
                booking_date=day,
                start_time=start_time,
                end_time=end_time,
                status=booking_status.CONFIRMED,
                notes=data.notes or None,
            )

        logger.info(f"✅ Booking {booking.id} confirmed: {day} {start_time}-{end_time}")
        return booking

    # ------------------------------------------------------------------
    # Back office
    # ------------------------------------------------------------------

    def create_booking_from_calendar(self, data: CalendarBookingCreate) -> Booking:
        """Admin booking with explicit end time and status; business hours are not enforced"""
        day = self._parse_date(data.booking_date)
        interval = self._parse_interval(data.start_time, data.end_time)
        status = self._check_status(data.status)

        with self._write("create booking from calendar"):
            service = self._get_service(data.service_id)

            if data.client_id:
                client_id = self.clients.get_client(data.client_id).id
            else:
                client_id = self.clients.upsert(data.client_name, data.client_email, data.client_phone)

            if status in booking_status.BLOCKING_STATUSES:
                self._ensure_no_overlap(day, interval)

            booking = self.repo.insert_booking(
                self.db,
                client_id=client_id,
                service_id=service.id,
                booking_date=day,
                start_time=interval.start_label(),
                end_time=interval.end_label(),
                status=status,
                notes=data.notes or None,
            )

        logger.info(f"✅ Calendar booking {booking.id} created ({status})")
        return booking

    def update_booking_status(self, booking_id: int, status: str) -> Booking:
        status = self._check_status(status)

        with self._write("update booking status"):
            booking = self._get_booking(booking_id)
            if not booking_status.can_transition(booking.status, status):
                raise ValidationError(f"Cannot change status from {booking.status} to {status}")

            if status != booking.status:
                if status in booking_status.BLOCKING_STATUSES:
                    interval = self._parse_interval(booking.start_time, booking.end_time)
                    self._ensure_no_overlap(booking.booking_date, interval, exclude_id=booking.id)
                self.repo.update_booking_status(self.db, booking, status)

        logger.info(f"🔄 Booking {booking_id} status set to {status}")
        return booking

    def update_booking(self, booking_id: int, data: BookingUpdate) -> Booking:
        """
        Raw overwrite from the admin edit form.

        End time is taken as submitted, not derived from the service. The
        overlap guard still applies when the result is confirmed.
        """
        day = self._parse_date(data.booking_date)
        interval = self._parse_interval(data.start_time, data.end_time)
        status = self._check_status(data.status)

        with self._write("update booking"):
            booking = self._get_booking(booking_id)
            self.clients.get_client(data.client_id)
            self._get_service(data.service_id)

            if status in booking_status.BLOCKING_STATUSES:
                self._ensure_no_overlap(day, interval, exclude_id=booking.id)

            self.repo.update_booking(
                self.db,
                booking,
                booking_date=day,
                start_time=interval.start_label(),
                end_time=interval.end_label(),
                status=status,
                notes=data.notes or None,
                client_id=data.client_id,
                service_id=data.service_id,
            )

        logger.info(f"✏️ Booking {booking_id} updated")
        return self.get_booking_detail(booking_id)

    def delete_booking(self, booking_id: int) -> None:
        with self._write("delete booking"):
            booking = self._get_booking(booking_id)
            self.repo.delete_booking(self.db, booking)
        logger.info(f"🗑️ Booking {booking_id} deleted")

    def get_booking_detail(self, booking_id: int) -> Booking:
        with self._read("fetch booking detail"):
            return self._get_booking(booking_id)

    def list_bookings(
        self,
        booking_date: Optional[DateLike] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Booking]:
        day = self._parse_date(booking_date) if booking_date else None
        if status:
            self._check_status(status)
        with self._read("fetch bookings"):
            return self.repo.search_bookings(self.db, day, status, search)

    def get_bookings_for_calendar(self, start_date: DateLike, end_date: DateLike) -> list[Booking]:
        start = self._parse_date(start_date)
        end = self._parse_date(end_date)
        if end < start:
            raise ValidationError("End date must not be before start date")
        with self._read("fetch bookings for calendar"):
            return self.repo.list_bookings_in_range(self.db, start, end)

    def get_calendar(self, view: str, reference: DateLike) -> tuple[date, date, list[Booking]]:
        """Bookings inside the display window of a day, week or month view"""
        day = self._parse_date(reference)
        try:
            start, end = calendar_window(view, day)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        return start, end, self.get_bookings_for_calendar(start, end)

    def get_bookings_at(self, booking_date: DateLike, start_time: str) -> list[Booking]:
        """Bookings starting in one calendar slot"""
        day = self._parse_date(booking_date)
        try:
            start = normalize_time(start_time)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        with self._read("fetch slot bookings"):
            return self.repo.list_bookings_by_date_and_time(self.db, day, start)
