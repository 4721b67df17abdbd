"""
Unit Tests for the booking service

Tests cover:
- Slot listing (closed days, past days, unknown services)
- Public booking creation and its validation rules
- Double booking protection inside the write transaction
- Status transitions, raw edits and deletes from the back office
- Calendar queries
"""

from datetime import date, datetime
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from salon.domain.bookings.repository import BookingRepository
from salon.domain.bookings.schemas import BookingRequest, BookingUpdate, CalendarBookingCreate
from salon.domain.bookings.service import BookingService
from salon.domain.scheduling.exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from salon.domain.scheduling.time_calculator import TimeInterval
from salon.models import Booking, Client

MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
SUNDAY = date(2030, 1, 6)


def booking_request(service_id, day=MONDAY, time="10:00", **overrides):
    data = {
        "service_id": service_id,
        "date": day.isoformat(),
        "time": time,
        "name": "Jana Novak",
        "email": "jana@example.com",
        "phone": "+420 777 123 456",
    }
    data.update(overrides)
    return BookingRequest(**data)


def confirmed_intervals(db_session, day):
    rows = db_session.query(Booking).filter(Booking.booking_date == day, Booking.status == "confirmed").all()
    return [TimeInterval.from_strings(b.start_time, b.end_time) for b in rows]


class TestAvailableTimeSlots:
    def test_empty_weekday(self, booking_service, services):
        slots = booking_service.get_available_time_slots(MONDAY, services["short"].id)

        assert slots[0] == "09:00"
        assert slots[-1] == "18:00"

    def test_accepts_iso_string(self, booking_service, services):
        assert booking_service.get_available_time_slots("2030-01-07", services["short"].id)

    def test_closed_day(self, booking_service, services, make_client, make_booking):
        make_booking(make_client(), services["short"], SUNDAY, "10:00", "10:50")

        assert booking_service.get_available_time_slots(SUNDAY, services["short"].id) == []

    def test_past_day(self, booking_service, services):
        assert booking_service.get_available_time_slots(date(2029, 12, 31), services["short"].id) == []

    def test_today_drops_started_slots(self, db_session, services):
        service = BookingService(db_session, now=datetime(2030, 1, 7, 15, 10))

        slots = service.get_available_time_slots(MONDAY, services["short"].id)

        assert slots[0] == "15:30"
        assert slots[-1] == "18:00"

    def test_later_days_keep_every_slot(self, db_session, services):
        service = BookingService(db_session, now=datetime(2030, 1, 7, 15, 10))

        assert service.get_available_time_slots(TUESDAY, services["short"].id)[0] == "09:00"

    def test_only_confirmed_bookings_block(self, booking_service, services, make_client, make_booking):
        client = make_client()
        make_booking(client, services["short"], MONDAY, "10:00", "10:50", status="confirmed")
        make_booking(client, services["short"], MONDAY, "12:00", "12:50", status="pending")
        make_booking(client, services["short"], MONDAY, "14:00", "14:50", status="cancelled")

        slots = booking_service.get_available_time_slots(MONDAY, services["short"].id)

        assert "10:00" not in slots
        assert "09:30" not in slots
        assert "12:00" in slots
        assert "14:00" in slots

    def test_unknown_service_defaults_to_one_hour(self, booking_service, services):
        slots = booking_service.get_available_time_slots(MONDAY, 999)

        assert slots[-1] == "18:00"
        assert "18:30" not in slots

    def test_invalid_date(self, booking_service, services):
        with pytest.raises(ValidationError):
            booking_service.get_available_time_slots("07.01.2030", services["short"].id)

    def test_store_failure(self, booking_service, services):
        with patch.object(BookingRepository, "list_bookings_by_date", side_effect=SQLAlchemyError("down")):
            with pytest.raises(StoreError):
                booking_service.get_available_time_slots(MONDAY, services["short"].id)


class TestCreateBooking:
    def test_creates_confirmed_booking_with_derived_end(self, booking_service, services, db_session):
        booking = booking_service.create_booking(booking_request(services["long"].id, time="9:30"))

        stored = db_session.get(Booking, booking.id)
        assert stored.status == "confirmed"
        assert stored.start_time == "09:30"
        assert stored.end_time == "11:10"
        assert stored.client.email == "jana@example.com"

    def test_same_email_twice_keeps_one_client(self, booking_service, services, db_session):
        booking_service.create_booking(booking_request(services["short"].id, time="10:00"))
        booking_service.create_booking(
            booking_request(services["short"].id, time="13:00", name="Jana Novakova", phone="999 888 777")
        )

        clients = db_session.query(Client).all()
        assert len(clients) == 1
        assert clients[0].name == "Jana Novakova"
        assert clients[0].phone == "999 888 777"
        assert db_session.query(Booking).count() == 2

    def test_taken_slot_is_a_conflict(self, booking_service, services, db_session):
        booking_service.create_booking(booking_request(services["short"].id, time="10:00"))

        with pytest.raises(ConflictError):
            booking_service.create_booking(
                booking_request(services["long"].id, time="09:30", email="petra@example.com")
            )

        assert db_session.query(Booking).count() == 1
        assert db_session.query(Client).count() == 1

    def test_started_slot_today_rejected(self, db_session, services):
        service = BookingService(db_session, now=datetime(2030, 1, 7, 15, 10))

        with pytest.raises(ValidationError, match="not a bookable time"):
            service.create_booking(booking_request(services["short"].id, time="09:00"))

        booking = service.create_booking(booking_request(services["short"].id, time="15:30"))
        assert booking.start_time == "15:30"

    def test_slot_constraint_violation_is_a_conflict(self, booking_service, services):
        error = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed: bookings.booking_date, bookings.start_time")
        )

        with patch.object(BookingRepository, "insert_booking", side_effect=error):
            with pytest.raises(ConflictError):
                booking_service.create_booking(booking_request(services["short"].id))

    def test_other_integrity_error_is_a_store_error(self, booking_service, services, db_session):
        error = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: bookings.client_id"))

        with patch.object(BookingRepository, "insert_booking", side_effect=error):
            with pytest.raises(StoreError):
                booking_service.create_booking(booking_request(services["short"].id))

        assert db_session.query(Client).count() == 0

    def test_listed_slots_can_all_be_booked_without_overlap(self, booking_service, services, db_session):
        for i, slot in enumerate(booking_service.get_available_time_slots(MONDAY, services["long"].id)):
            try:
                booking_service.create_booking(
                    booking_request(services["long"].id, time=slot, email=f"client{i}@example.com")
                )
            except ConflictError:
                continue

        intervals = confirmed_intervals(db_session, MONDAY)
        assert len(intervals) == 5
        for a in intervals:
            for b in intervals:
                if a is not b:
                    assert not a.intersects(b)

    def test_closed_day_rejected(self, booking_service, services):
        with pytest.raises(ValidationError, match="closed"):
            booking_service.create_booking(booking_request(services["short"].id, day=SUNDAY))

    def test_past_date_rejected(self, booking_service, services):
        with pytest.raises(ValidationError, match="past"):
            booking_service.create_booking(booking_request(services["short"].id, day=date(2029, 12, 31)))

    @pytest.mark.parametrize("time", ["08:30", "18:30", "10:15"])
    def test_time_outside_generated_slots_rejected(self, booking_service, services, time):
        with pytest.raises(ValidationError):
            booking_service.create_booking(booking_request(services["short"].id, time=time))

    def test_unknown_service(self, booking_service, services):
        with pytest.raises(NotFoundError):
            booking_service.create_booking(booking_request(999))

    def test_failed_insert_leaves_no_client(self, booking_service, services, db_session):
        with patch.object(BookingRepository, "insert_booking", side_effect=SQLAlchemyError("down")):
            with pytest.raises(StoreError):
                booking_service.create_booking(booking_request(services["short"].id))

        assert db_session.query(Client).count() == 0

    def test_round_trip_through_calendar(self, booking_service, services):
        booking_service.create_booking(booking_request(services["short"].id, time="11:00"))

        bookings = booking_service.get_bookings_for_calendar(date(2030, 1, 1), date(2030, 1, 31))

        assert len(bookings) == 1
        assert bookings[0].booking_date == MONDAY
        assert bookings[0].start_time == "11:00"
        assert bookings[0].end_time == "11:50"
        assert bookings[0].service.name == "Wood therapy"


class TestCalendarBookings:
    def test_create_for_existing_client_outside_hours(self, booking_service, services, make_client):
        client = make_client()

        booking = booking_service.create_booking_from_calendar(
            CalendarBookingCreate(
                service_id=services["short"].id,
                booking_date=SUNDAY.isoformat(),
                start_time="8:00",
                end_time="9:15",
                client_id=client.id,
                status="pending",
            )
        )

        assert booking.client_id == client.id
        assert booking.start_time == "08:00"
        assert booking.end_time == "09:15"
        assert booking.status == "pending"

    def test_create_upserts_contact(self, booking_service, services, db_session):
        booking = booking_service.create_booking_from_calendar(
            CalendarBookingCreate(
                service_id=services["short"].id,
                booking_date=MONDAY.isoformat(),
                start_time="10:00",
                end_time="10:50",
                client_name="Petra Svobodova",
                client_email="Petra@Example.com",
            )
        )

        assert booking.client.email == "petra@example.com"
        assert db_session.query(Client).count() == 1

    def test_create_confirmed_overlap_is_a_conflict(self, booking_service, services, make_client, make_booking):
        client = make_client()
        make_booking(client, services["short"], MONDAY, "10:00", "10:50")

        with pytest.raises(ConflictError):
            booking_service.create_booking_from_calendar(
                CalendarBookingCreate(
                    service_id=services["short"].id,
                    booking_date=MONDAY.isoformat(),
                    start_time="10:30",
                    end_time="11:00",
                    client_id=client.id,
                )
            )

    def test_create_for_missing_client(self, booking_service, services):
        with pytest.raises(NotFoundError):
            booking_service.create_booking_from_calendar(
                CalendarBookingCreate(
                    service_id=services["short"].id,
                    booking_date=MONDAY.isoformat(),
                    start_time="10:00",
                    end_time="10:50",
                    client_id=999,
                )
            )

    def test_end_before_start(self, booking_service, services, make_client):
        with pytest.raises(ValidationError):
            booking_service.create_booking_from_calendar(
                CalendarBookingCreate(
                    service_id=services["short"].id,
                    booking_date=MONDAY.isoformat(),
                    start_time="11:00",
                    end_time="10:00",
                    client_id=make_client().id,
                )
            )


class TestStatusTransitions:
    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "confirmed"),
            ("pending", "cancelled"),
            ("confirmed", "cancelled"),
            ("confirmed", "completed"),
            ("confirmed", "confirmed"),
        ],
    )
    def test_allowed(self, booking_service, services, make_client, make_booking, current, new):
        booking = make_booking(make_client(), services["short"], MONDAY, "10:00", "10:50", status=current)

        assert booking_service.update_booking_status(booking.id, new).status == new

    @pytest.mark.parametrize(
        "current,new",
        [("cancelled", "confirmed"), ("completed", "pending"), ("confirmed", "pending")],
    )
    def test_rejected(self, booking_service, services, make_client, make_booking, current, new):
        booking = make_booking(make_client(), services["short"], MONDAY, "10:00", "10:50", status=current)

        with pytest.raises(ValidationError):
            booking_service.update_booking_status(booking.id, new)

    def test_confirming_into_an_overlap_is_a_conflict(self, booking_service, services, make_client, make_booking):
        client = make_client()
        make_booking(client, services["short"], MONDAY, "10:00", "10:50")
        pending = make_booking(client, services["short"], MONDAY, "10:30", "11:20", status="pending")

        with pytest.raises(ConflictError):
            booking_service.update_booking_status(pending.id, "confirmed")

    def test_unknown_status(self, booking_service, services, make_client, make_booking):
        booking = make_booking(make_client(), services["short"], MONDAY, "10:00", "10:50")

        with pytest.raises(ValidationError):
            booking_service.update_booking_status(booking.id, "archived")

    def test_missing_booking(self, booking_service, services):
        with pytest.raises(NotFoundError):
            booking_service.update_booking_status(999, "cancelled")


class TestUpdateAndDelete:
    def test_raw_update_overwrites_fields(self, booking_service, services, make_client, make_booking):
        client = make_client()
        other = make_client(name="Petra", email="petra@example.com")
        booking = make_booking(client, services["short"], MONDAY, "10:00", "10:50", status="confirmed")

        updated = booking_service.update_booking(
            booking.id,
            BookingUpdate(
                booking_date=TUESDAY.isoformat(),
                start_time="15:00",
                end_time="17:00",
                status="cancelled",
                notes="moved by phone",
                client_id=other.id,
                service_id=services["long"].id,
            ),
        )

        assert updated.booking_date == TUESDAY
        assert updated.start_time == "15:00"
        assert updated.end_time == "17:00"
        assert updated.status == "cancelled"
        assert updated.notes == "moved by phone"
        assert updated.client.email == "petra@example.com"
        assert updated.service.duration == 100

    def test_raw_update_may_skip_transitions(self, booking_service, services, make_client, make_booking):
        booking = make_booking(make_client(), services["short"], MONDAY, "10:00", "10:50", status="completed")

        updated = booking_service.update_booking(
            booking.id,
            BookingUpdate(
                booking_date=MONDAY.isoformat(),
                start_time="10:00",
                end_time="10:50",
                status="pending",
                client_id=booking.client_id,
                service_id=booking.service_id,
            ),
        )

        assert updated.status == "pending"

    def test_unchanged_edit_keeps_notes(self, booking_service, services):
        created = booking_service.create_booking(
            booking_request(services["short"].id, notes="Allergy: nuts & latex")
        )
        assert created.notes == "Allergy: nuts & latex"

        for _ in range(2):
            stored = booking_service.get_booking_detail(created.id)
            updated = booking_service.update_booking(
                created.id,
                BookingUpdate(
                    booking_date=stored.booking_date.isoformat(),
                    start_time=stored.start_time,
                    end_time=stored.end_time,
                    status=stored.status,
                    notes=stored.notes,
                    client_id=stored.client_id,
                    service_id=stored.service_id,
                ),
            )

        assert updated.notes == "Allergy: nuts & latex"

    def test_update_does_not_conflict_with_itself(self, booking_service, services, make_client, make_booking):
        booking = make_booking(make_client(), services["short"], MONDAY, "10:00", "10:50")

        updated = booking_service.update_booking(
            booking.id,
            BookingUpdate(
                booking_date=MONDAY.isoformat(),
                start_time="10:20",
                end_time="11:10",
                status="confirmed",
                client_id=booking.client_id,
                service_id=booking.service_id,
            ),
        )

        assert updated.start_time == "10:20"

    def test_update_into_overlap_is_a_conflict(self, booking_service, services, make_client, make_booking):
        client = make_client()
        make_booking(client, services["short"], MONDAY, "10:00", "10:50")
        other = make_booking(client, services["short"], MONDAY, "13:00", "13:50")

        with pytest.raises(ConflictError):
            booking_service.update_booking(
                other.id,
                BookingUpdate(
                    booking_date=MONDAY.isoformat(),
                    start_time="10:40",
                    end_time="11:30",
                    status="confirmed",
                    client_id=client.id,
                    service_id=services["short"].id,
                ),
            )

    def test_update_missing_references(self, booking_service, services, make_client, make_booking):
        booking = make_booking(make_client(), services["short"], MONDAY, "10:00", "10:50")

        with pytest.raises(NotFoundError):
            booking_service.update_booking(
                booking.id,
                BookingUpdate(
                    booking_date=MONDAY.isoformat(),
                    start_time="10:00",
                    end_time="10:50",
                    status="confirmed",
                    client_id=booking.client_id,
                    service_id=999,
                ),
            )

    def test_delete(self, booking_service, services, make_client, make_booking, db_session):
        booking = make_booking(make_client(), services["short"], MONDAY, "10:00", "10:50")

        booking_service.delete_booking(booking.id)

        assert db_session.query(Booking).count() == 0
        assert db_session.query(Client).count() == 1

    def test_delete_missing(self, booking_service, services):
        with pytest.raises(NotFoundError):
            booking_service.delete_booking(999)


class TestCalendarQueries:
    def test_range_is_ordered_and_inclusive(self, booking_service, services, make_client, make_booking):
        client = make_client()
        make_booking(client, services["short"], TUESDAY, "09:00", "09:50")
        make_booking(client, services["short"], MONDAY, "14:00", "14:50")
        make_booking(client, services["short"], MONDAY, "09:00", "09:50", status="cancelled")
        make_booking(client, services["short"], date(2030, 1, 9), "09:00", "09:50")

        bookings = booking_service.get_bookings_for_calendar(MONDAY, TUESDAY)

        assert [(b.booking_date, b.start_time) for b in bookings] == [
            (MONDAY, "09:00"),
            (MONDAY, "14:00"),
            (TUESDAY, "09:00"),
        ]

    def test_range_end_before_start(self, booking_service):
        with pytest.raises(ValidationError):
            booking_service.get_bookings_for_calendar(TUESDAY, MONDAY)

    def test_week_view(self, booking_service, services, make_client, make_booking):
        make_booking(make_client(), services["short"], date(2030, 1, 12), "10:00", "10:50")

        start, end, bookings = booking_service.get_calendar("week", "2030-01-09")

        assert (start, end) == (MONDAY, date(2030, 1, 13))
        assert len(bookings) == 1

    def test_unknown_view(self, booking_service):
        with pytest.raises(ValidationError):
            booking_service.get_calendar("year", MONDAY)

    def test_slot_occupants(self, booking_service, services, make_client, make_booking):
        client = make_client()
        make_booking(client, services["short"], MONDAY, "10:00", "10:50")
        make_booking(client, services["short"], MONDAY, "10:00", "10:50", status="cancelled")
        make_booking(client, services["short"], MONDAY, "11:00", "11:50")

        assert len(booking_service.get_bookings_at(MONDAY, "10:00")) == 2

    def test_list_bookings_filters(self, booking_service, services, make_client, make_booking):
        jana = make_client()
        petra = make_client(name="Petra Svobodova", email="petra@example.com", phone="602 111 222")
        make_booking(jana, services["short"], MONDAY, "10:00", "10:50")
        make_booking(petra, services["short"], TUESDAY, "09:00", "09:50", status="pending")
        make_booking(petra, services["short"], TUESDAY, "08:00", "08:50", status="cancelled")

        assert [b.booking_date for b in booking_service.list_bookings()] == [TUESDAY, TUESDAY, MONDAY]
        assert [b.start_time for b in booking_service.list_bookings(booking_date=TUESDAY)] == ["08:00", "09:00"]
        assert len(booking_service.list_bookings(status="pending")) == 1
        assert len(booking_service.list_bookings(search="PETRA")) == 2
        assert len(booking_service.list_bookings(search="602")) == 2

    def test_booking_detail(self, booking_service, services, make_client, make_booking):
        booking = make_booking(make_client(), services["long"], MONDAY, "10:00", "11:40")

        detail = booking_service.get_booking_detail(booking.id)

        assert detail.service.duration == 100
        with pytest.raises(NotFoundError):
            booking_service.get_booking_detail(999)

    def test_business_hours(self, booking_service):
        assert booking_service.get_business_hours()[0] == {"start": 0, "end": 0}
