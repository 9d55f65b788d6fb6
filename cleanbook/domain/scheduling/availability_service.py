"""
Slot capacity checks.

Capacity is a snapshot: the count is read, compared with the ceiling, and the
caller inserts afterwards. Two concurrent requests for the same slot can both
see room and both insert, leaving the slot one over its ceiling. Deployments
that need exact enforcement wrap the check and the insert in a slot guard
(see slot_lock.py). Counts are never cached between calls.
"""

import logging
from datetime import date
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .repository import BookingRepository
from .schemas import SlotAvailability, SlotCapacityResult
from .time_calculator import ParseError, parse_booking_date

logger = logging.getLogger(__name__)

STORE_ERROR_REASON = "Error checking availability"


def check_slot_capacity(
    db: Session,
    slot_date: Union[date, str],
    slot_label: str,
    max_per_slot: int,
    exclude_booking_id: Optional[str] = None,
) -> SlotCapacityResult:
    """
    Check whether (date, slot) still has room under the ceiling.

    Cancelled and rejected bookings never count. exclude_booking_id removes a
    booking that is being edited in place from its own count. A store failure
    fails closed: the slot is reported unavailable with system_error set.
    """
    try:
        booking_date = parse_booking_date(slot_date)
    except ParseError:
        return SlotCapacityResult(
            available=False,
            current_count=0,
            max_count=max_per_slot,
            reason="Invalid date or time format",
        )

    try:
        current = BookingRepository.count_slot_bookings(
            db, booking_date, slot_label, exclude_booking_id
        )
    except SQLAlchemyError as e:
        logger.error(f"❌ Error checking slot capacity for {booking_date} {slot_label}: {e}")
        db.rollback()
        return SlotCapacityResult(
            available=False,
            current_count=0,
            max_count=max_per_slot,
            reason=STORE_ERROR_REASON,
            system_error=True,
        )

    if current >= max_per_slot:
        logger.info(f"🚫 Slot full: {booking_date} {slot_label} ({current}/{max_per_slot})")
        return SlotCapacityResult(
            available=False,
            current_count=current,
            max_count=max_per_slot,
            reason=(
                f"This time slot is fully booked ({current}/{max_per_slot}). "
                "Please select a different time."
            ),
        )

    return SlotCapacityResult(available=True, current_count=current, max_count=max_per_slot)


def get_available_slots(
    db: Session,
    slot_date: Union[date, str],
    max_per_slot: int,
    all_slot_labels: list[str],
) -> list[SlotAvailability]:
    """
    Slot-by-slot summary for one day.

    available is the raw ceiling minus the current count and goes negative when
    the ceiling was lowered below existing bookings; clamping is left to display.
    Store errors propagate to the caller.
    """
    counts = BookingRepository.count_bookings_by_slot(db, parse_booking_date(slot_date))
    return [
        SlotAvailability(slot=slot, available=max_per_slot - counts.get(slot, 0), total=max_per_slot)
        for slot in all_slot_labels
    ]
