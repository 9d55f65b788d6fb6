"""Resolve the business scheduling rules for one request"""

from sqlalchemy.orm import Session

from .repository import BookingRepository
from .schemas import SchedulingPolicy


def load_scheduling_policy(db: Session) -> SchedulingPolicy:
    """Business settings row over environment defaults; unset columns keep the default"""
    settings = BookingRepository.get_business_settings(db)
    if not settings:
        return SchedulingPolicy()

    overrides = {
        "max_bookings_per_slot": settings.max_bookings_per_slot,
        "min_lead_hours": settings.min_lead_hours,
        "time_slots": settings.time_slots or None,
        "cancellation_fee_window_hours": settings.cancellation_fee_window_hours,
        "cancellation_fee_cents": settings.cancellation_fee_cents,
    }
    return SchedulingPolicy(**{k: v for k, v in overrides.items() if v is not None})
