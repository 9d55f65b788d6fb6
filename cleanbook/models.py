import uuid

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled", "rejected")
# Bookings in these statuses no longer hold a place in their slot
NON_BLOCKING_STATUSES = ("cancelled", "rejected")

FEE_NOT_APPLICABLE = "not_applicable"
FEE_PENDING = "pending"
FEE_DISMISSED = "dismissed"
FEE_CHARGED = "charged"
CANCELLATION_FEE_STATUSES = (FEE_NOT_APPLICABLE, FEE_PENDING, FEE_DISMISSED, FEE_CHARGED)

RESCHEDULE_STATUSES = ("pending", "approved", "denied")


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class BusinessSettings(Base):
    __tablename__ = "business_settings"

    id = Column(Integer, primary_key=True, index=True)
    business_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    cancellation_policy = Column(Text, nullable=True)
    # Scheduling rules; NULL means "use the environment default"
    max_bookings_per_slot = Column(Integer, nullable=True)
    min_lead_hours = Column(Float, nullable=True)
    time_slots = Column(JSON, nullable=True)  # e.g. ["9:00 AM - 11:00 AM", ...]
    cancellation_fee_window_hours = Column(Float, nullable=True)
    cancellation_fee_cents = Column(Integer, nullable=True)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_date_time_slot", "date", "time_slot"),)

    id = Column(String(36), primary_key=True, default=generate_public_id)
    service = Column(String(100), nullable=False)  # standard, deep-clean, move-in, move-out
    property_size = Column(String(100), nullable=False)
    date = Column(Date, nullable=False)  # Wall-clock local date, no timezone conversion
    time_slot = Column(String(50), nullable=False)  # e.g. "9:00 AM - 11:00 AM"
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    address = Column(String(500), nullable=False)
    status = Column(String(50), default="pending", nullable=False)
    # not_applicable, pending, dismissed, charged
    cancellation_fee_status = Column(String(50), default=FEE_NOT_APPLICABLE, nullable=False)
    cancelled_at = Column(DateTime, nullable=True)
    payment_method_id = Column(String(255), nullable=True)  # Square card-on-file id
    # Failed captures so far; part of the payment idempotency key
    fee_charge_attempts = Column(Integer, default=0, nullable=False)
    customer_notes = Column(Text, nullable=True)
    management_token = Column(
        String(36), unique=True, index=True, default=generate_public_id, nullable=False
    )

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def has_payment_method(self) -> bool:
        return bool(self.payment_method_id)

    reschedule_requests = relationship(
        "RescheduleRequest", back_populates="booking", cascade="all, delete-orphan"
    )


class RescheduleRequest(Base):
    __tablename__ = "reschedule_requests"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False, index=True)
    original_date = Column(Date, nullable=False)
    original_time_slot = Column(String(50), nullable=False)
    requested_date = Column(Date, nullable=False)
    requested_time_slot = Column(String(50), nullable=False)
    customer_notes = Column(Text, nullable=True)
    status = Column(String(50), default="pending", nullable=False)  # pending, approved, denied
    decision_reason = Column(Text, nullable=True)
    decided_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking", back_populates="reschedule_requests")
