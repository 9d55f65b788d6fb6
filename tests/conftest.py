"""Shared fixtures: in-memory SQLite database, booking factory, API client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_API_TOKEN", "test-admin-token")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from datetime import date, datetime

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from cleanbook import models  # noqa: F401
from cleanbook.database import Base, build_engine, get_db
from cleanbook.domain.cancellations.payment_gateway import SquarePaymentGateway
from cleanbook.domain.cancellations.router import get_payment_gateway
from cleanbook.domain.scheduling.router import get_booking_service
from cleanbook.domain.scheduling.service import BookingService
from cleanbook.domain.scheduling.slot_lock import SlotGuard
from cleanbook.main import app
from cleanbook.models import Booking

# Monday 3 June 2030, 08:00 local wall-clock
FIXED_NOW = datetime(2030, 6, 3, 8, 0)


@pytest.fixture
def db():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def make_booking(db):
    """Insert a booking directly, bypassing validation."""

    def _make(
        booking_date: date = date(2030, 6, 10),
        time_slot: str = "9:00 AM - 11:00 AM",
        status: str = "pending",
        **overrides,
    ) -> Booking:
        fields = {
            "service": "standard",
            "property_size": "1000-1500 sq ft",
            "date": booking_date,
            "time_slot": time_slot,
            "name": "Jamie Rivera",
            "email": "jamie@example.com",
            "phone": "+15555550123",
            "address": "12 Elm St",
            "status": status,
        }
        fields.update(overrides)
        booking = Booking(**fields)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


@pytest.fixture
def square_requests():
    """Requests captured by the mock Square transport."""
    return []


@pytest.fixture
def square_response():
    """Mutable response the mock Square transport returns."""
    return {
        "status_code": 200,
        "json": {"payment": {"id": "pay_123", "status": "COMPLETED"}},
    }


@pytest.fixture
def gateway(square_requests, square_response):
    def handler(request: httpx.Request) -> httpx.Response:
        square_requests.append(request)
        return httpx.Response(square_response["status_code"], json=square_response["json"])

    return SquarePaymentGateway(
        access_token="sq-test-token",
        location_id="LOC1",
        environment="sandbox",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def client(db, gateway):
    """API client bound to the test database, a fixed clock and the mock gateway."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_service] = lambda: BookingService(
        db, slot_guard=SlotGuard("local", timeout=1.0), clock=lambda: FIXED_NOW
    )
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()
