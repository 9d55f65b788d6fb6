"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...config import (
    CANCELLATION_FEE_CENTS,
    CANCELLATION_FEE_WINDOW_HOURS,
    DEFAULT_MAX_BOOKINGS_PER_SLOT,
    DEFAULT_MIN_LEAD_HOURS,
    DEFAULT_TIME_SLOTS,
)
from ...models import BOOKING_STATUSES
from ...shared.validators import validate_email, validate_us_phone


class SchedulingPolicy(BaseModel):
    """Business-wide scheduling rules resolved once per request"""

    max_bookings_per_slot: int = DEFAULT_MAX_BOOKINGS_PER_SLOT
    min_lead_hours: float = DEFAULT_MIN_LEAD_HOURS
    time_slots: list[str] = Field(default_factory=lambda: list(DEFAULT_TIME_SLOTS))
    cancellation_fee_window_hours: float = CANCELLATION_FEE_WINDOW_HOURS
    cancellation_fee_cents: int = CANCELLATION_FEE_CENTS

    model_config = {"frozen": True}


class ValidationResult(BaseModel):
    """Outcome of a temporal check; reason is user-facing"""

    valid: bool
    reason: Optional[str] = None


class SlotCapacityResult(BaseModel):
    """Outcome of a capacity check for one (date, slot)"""

    available: bool
    current_count: int
    max_count: int
    reason: Optional[str] = None
    # True when the store could not be read and the check failed closed
    system_error: bool = False


class SlotAvailability(BaseModel):
    slot: str
    available: int  # ceiling - current count; may be zero or negative
    total: int


class BookingCreate(BaseModel):
    """Schema for a public booking request"""

    service: str
    propertySize: str
    date: date
    timeSlot: str
    name: str
    email: str
    phone: str
    address: str
    paymentMethodId: Optional[str] = None
    customerNotes: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_us_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v):
        return validate_email(v)

    @field_validator("timeSlot")
    @classmethod
    def validate_time_slot(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("timeSlot is required")
        return v.strip()


class BookingStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in BOOKING_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(BOOKING_STATUSES)}")
        return v


class RescheduleCreate(BaseModel):
    """Schema for a new date/slot on an existing booking"""

    date: date
    timeSlot: str
    customerNotes: Optional[str] = None


class RescheduleDecision(BaseModel):
    reason: Optional[str] = None


class BookingResponse(BaseModel):
    id: str
    service: str
    property_size: str
    date: date
    time_slot: str
    name: str
    email: str
    phone: str
    address: str
    status: str
    cancellation_fee_status: str
    cancelled_at: Optional[datetime] = None
    has_payment_method: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RescheduleRequestResponse(BaseModel):
    id: str
    booking_id: str
    original_date: date
    original_time_slot: str
    requested_date: date
    requested_time_slot: str
    customer_notes: Optional[str] = None
    status: str
    decision_reason: Optional[str] = None
    decided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AvailableSlotsResponse(BaseModel):
    date: date
    slots: list[SlotAvailability]
