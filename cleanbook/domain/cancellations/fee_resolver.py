"""
Late-cancellation fee state machine.

    not_applicable -> pending -> dismissed
                              -> charged

A fee becomes pending when a booking with a card on file is cancelled inside
the fee window before its slot starts. An operator then dismisses or charges
it; both outcomes are terminal. Every transition out of pending is a single
conditional UPDATE, so a fee is charged at most once however many requests race.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import FEE_CHARGED, FEE_DISMISSED, FEE_NOT_APPLICABLE, FEE_PENDING, Booking
from ..scheduling.repository import BookingRepository
from ..scheduling.time_calculator import ParseError, hours_until, parse_slot_start
from .payment_gateway import SquarePaymentGateway
from .repository import CancellationRepository

logger = logging.getLogger(__name__)


class BookingNotFoundError(LookupError):
    """Raised when a booking id does not exist"""


class FeeTransitionError(ValueError):
    """Raised when dismissing or charging a fee that is not pending"""


class PaymentMethodMissingError(ValueError):
    """Raised when charging a booking without a stored payment method"""


def resolve_cancellation_fee(
    booking: Booking,
    cancelled_at: datetime,
    window_hours: float,
) -> str:
    """Fee status for a booking cancelled at cancelled_at"""
    if not booking.payment_method_id:
        return FEE_NOT_APPLICABLE

    try:
        start = parse_slot_start(booking.date, booking.time_slot)
    except ParseError as e:
        # Without a known start time there is no late cancellation to charge for
        logger.warning(f"⚠️ Booking {booking.id} has an unparseable slot, no fee assigned: {e}")
        return FEE_NOT_APPLICABLE

    if hours_until(start, cancelled_at) < window_hours:
        return FEE_PENDING
    return FEE_NOT_APPLICABLE


def _get_booking(db: Session, booking_id: str) -> Booking:
    booking = BookingRepository.get_booking(db, booking_id)
    if not booking:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    return booking


def _ensure_cancelled(booking: Booking) -> None:
    if booking.status != "cancelled":
        raise FeeTransitionError(
            f"Cancellation fees apply only to cancelled bookings (status: {booking.status})"
        )


def dismiss_fee(db: Session, booking_id: str) -> Booking:
    """Waive a pending fee; no money moves"""
    booking = _get_booking(db, booking_id)
    _ensure_cancelled(booking)

    if not CancellationRepository.transition_fee_status(db, booking_id, FEE_PENDING, FEE_DISMISSED):
        db.refresh(booking)
        raise FeeTransitionError(
            f"Cancellation fee is not pending (current: {booking.cancellation_fee_status})"
        )

    db.refresh(booking)
    logger.info(f"✅ Dismissed cancellation fee for booking {booking_id}")
    return booking


async def charge_fee(
    db: Session,
    booking_id: str,
    gateway: SquarePaymentGateway,
    amount_cents: int,
    currency: str = "USD",
) -> Booking:
    """
    Charge a pending fee against the booking's stored payment method.

    The booking is moved to charged before the capture is attempted; any
    failure during the capture puts it back to pending so the operator can
    retry or dismiss. Each retry uses a fresh idempotency key, since Square
    replays the stored outcome of a reused key.

    Raises:
        BookingNotFoundError: Unknown booking id
        FeeTransitionError: Booking not cancelled, or fee not pending (including a second charge attempt)
        PaymentMethodMissingError: No card on file
        PaymentCaptureError: Provider did not complete the payment
    """
    booking = _get_booking(db, booking_id)
    _ensure_cancelled(booking)

    if booking.cancellation_fee_status != FEE_PENDING:
        raise FeeTransitionError(
            f"Cancellation fee is not pending (current: {booking.cancellation_fee_status})"
        )
    if not booking.payment_method_id:
        raise PaymentMethodMissingError("No payment method on file for this booking")

    payment_method_id = booking.payment_method_id
    idempotency_key = f"cxl-fee-{booking_id}-{booking.fee_charge_attempts or 0}"

    if not CancellationRepository.transition_fee_status(db, booking_id, FEE_PENDING, FEE_CHARGED):
        raise FeeTransitionError("Cancellation fee is no longer pending")

    try:
        payment_id = await gateway.charge(
            payment_method_id=payment_method_id,
            amount_cents=amount_cents,
            currency=currency,
            idempotency_key=idempotency_key,
            reference_id=booking_id,
            note=f"Cancellation fee for booking {booking_id}",
        )
    except Exception as e:
        CancellationRepository.release_charge_claim(db, booking_id)
        logger.warning(
            f"⚠️ Cancellation fee capture failed for booking {booking_id}, fee back to pending: {e}"
        )
        raise

    db.refresh(booking)
    logger.info(
        f"💳 Charged cancellation fee for booking {booking_id} ({amount_cents} {currency}, payment {payment_id})"
    )
    return booking


def fee_status_after_cancel(
    booking: Booking,
    window_hours: float,
    now: Optional[datetime] = None,
) -> dict:
    """Fields to write when a booking moves into cancelled"""
    now = now or datetime.now()
    return {
        "status": "cancelled",
        "cancelled_at": now,
        "cancellation_fee_status": resolve_cancellation_fee(booking, now, window_hours),
    }
