"""Booking repository - Database operations for bookings"""

from datetime import date
from typing import Iterable, Optional

from sqlalchemy import func, or_, text
from sqlalchemy.orm import Session, joinedload

from ...models import Booking, Client


class BookingRepository:
    """
    Repository for booking database operations.

    Write methods flush so ids and constraint violations surface immediately,
    but never commit: the service owns the transaction.
    """

    @staticmethod
    def _with_details(db: Session):
        return db.query(Booking).options(joinedload(Booking.client), joinedload(Booking.service))

    @staticmethod
    def lock_day(db: Session, booking_date: date) -> None:
        """
        Serialize writers for one booking date until the transaction ends.

        PostgreSQL only; other backends rely on the unique slot index.
        """
        if db.get_bind().dialect.name == "postgresql":
            db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": booking_date.toordinal()})

    @staticmethod
    def insert_booking(
        db: Session,
        client_id: int,
        service_id: int,
        booking_date: date,
        start_time: str,
        end_time: str,
        status: str,
        notes: Optional[str] = None,
    ) -> Booking:
        booking = Booking(
            client_id=client_id,
            service_id=service_id,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            status=status,
            notes=notes,
        )
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        return BookingRepository._with_details(db).filter(Booking.id == booking_id).first()

    @staticmethod
    def list_bookings_by_date(
        db: Session, booking_date: date, statuses: Optional[Iterable[str]] = None
    ) -> list[Booking]:
        query = db.query(Booking).filter(Booking.booking_date == booking_date)
        if statuses is not None:
            query = query.filter(Booking.status.in_(list(statuses)))
        return query.order_by(Booking.start_time.asc()).all()

    @staticmethod
    def list_bookings_in_range(db: Session, start_date: date, end_date: date) -> list[Booking]:
        """Bookings between two dates (inclusive) ordered by date then start time"""
        return (
            BookingRepository._with_details(db)
            .filter(Booking.booking_date >= start_date, Booking.booking_date <= end_date)
            .order_by(Booking.booking_date.asc(), Booking.start_time.asc(), Booking.id.asc())
            .all()
        )

    @staticmethod
    def list_bookings_by_date_and_time(db: Session, booking_date: date, start_time: str) -> list[Booking]:
        """Occupants of a single calendar slot"""
        return (
            BookingRepository._with_details(db)
            .filter(Booking.booking_date == booking_date, Booking.start_time == start_time)
            .order_by(Booking.id.asc())
            .all()
        )

    @staticmethod
    def search_bookings(
        db: Session,
        booking_date: Optional[date] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Booking]:
        """Back office booking list: newest dates first, earliest start first within a day"""
        query = BookingRepository._with_details(db).join(Booking.client)

        if booking_date:
            query = query.filter(Booking.booking_date == booking_date)

        if status:
            query = query.filter(Booking.status == status)

        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    Client.name.ilike(search_term),
                    Client.email.ilike(search_term),
                    Client.phone.ilike(search_term),
                )
            )

        return query.order_by(Booking.booking_date.desc(), Booking.start_time.asc()).all()

    @staticmethod
    def update_booking_status(db: Session, booking: Booking, status: str) -> Booking:
        booking.status = status
        booking.updated_at = func.now()
        db.flush()
        return booking

    @staticmethod
    def update_booking(db: Session, booking: Booking, **fields) -> Booking:
        """Raw overwrite of the given columns"""
        for key, value in fields.items():
            if hasattr(booking, key):
                setattr(booking, key, value)
        booking.updated_at = func.now()
        db.flush()
        return booking

    @staticmethod
    def delete_booking(db: Session, booking: Booking) -> None:
        db.delete(booking)
        db.flush()
