"""
Shared pytest fixtures

The application reads its configuration at import time, so the environment
is prepared here before anything from ``salon`` is imported.
"""

import os

from passlib.hash import bcrypt

ADMIN_PASSWORD = "salon-test-password"

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD_HASH"] = bcrypt.using(rounds=4).hash(ADMIN_PASSWORD)

from datetime import datetime  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from salon.database import Base, SessionLocal, engine, get_db  # noqa: E402
from salon.domain.bookings.service import BookingService  # noqa: E402
from salon.main import app  # noqa: E402
from salon.models import Booking, Client, Service  # noqa: E402
from salon.security_utils import create_jwt_token  # noqa: E402

# Booking tests run against January 2030 (2030-01-07 is a Monday)
NOW = datetime(2030, 1, 1, 8, 0)


@pytest.fixture
def db_session():
    """Fresh in-memory schema per test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def services(db_session):
    """Two services: a 50 minute and a 100 minute treatment"""
    short = Service(name="Wood therapy", description="Full body", duration=50, price=Decimal("890.00"))
    long = Service(name="Lymphatic drainage", description="Full body", duration=100, price=Decimal("3890.00"))
    db_session.add_all([long, short])
    db_session.commit()
    return {"short": short, "long": long}


@pytest.fixture
def booking_service(db_session):
    return BookingService(db_session, now=NOW)


@pytest.fixture
def make_client(db_session):
    def _make(name="Jana Novak", email="jana@example.com", phone="+420 777 123 456"):
        client = Client(name=name, email=email, phone=phone)
        db_session.add(client)
        db_session.commit()
        return client

    return _make


@pytest.fixture
def make_booking(db_session):
    """Insert a booking row directly, bypassing the engine's checks"""

    def _make(client, service, day, start, end, status="confirmed", notes=None):
        booking = Booking(
            client_id=client.id,
            service_id=service.id,
            booking_date=day,
            start_time=start,
            end_time=end,
            status=status,
            notes=notes,
        )
        db_session.add(booking)
        db_session.commit()
        return booking

    return _make


@pytest.fixture
def client(db_session):
    """HTTP client sharing the test session"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_jwt_token({"sub": "admin", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}
