"""Cancellation service - operator fee actions"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import CANCELLATION_FEE_CURRENCY
from ...models import FEE_PENDING, Booking
from ..scheduling.policy import load_scheduling_policy
from ..scheduling.repository import BookingRepository
from ..scheduling.schemas import BookingResponse
from . import fee_resolver
from .fee_resolver import BookingNotFoundError, FeeTransitionError, PaymentMethodMissingError
from .payment_gateway import PaymentCaptureError, SquarePaymentGateway

logger = logging.getLogger(__name__)


class CancellationService:
    """Service layer for late-cancellation fees"""

    def __init__(self, db: Session, gateway: Optional[SquarePaymentGateway] = None):
        self.db = db
        self.gateway = gateway or SquarePaymentGateway()

    def list_cancellations(self) -> list[dict]:
        """Cancelled bookings, newest first, with the fee owed where one is pending"""
        fee_cents = load_scheduling_policy(self.db).cancellation_fee_cents
        cancellations = []
        for booking in BookingRepository.get_cancelled_bookings(self.db):
            cancellations.append(
                {
                    "id": booking.id,
                    "service": booking.service,
                    "property_size": booking.property_size,
                    "date": booking.date,
                    "time_slot": booking.time_slot,
                    "name": booking.name,
                    "email": booking.email,
                    "phone": booking.phone,
                    "address": booking.address,
                    "status": booking.status,
                    "cancellation_fee_status": booking.cancellation_fee_status,
                    "cancelled_at": booking.cancelled_at,
                    "has_payment_method": booking.has_payment_method,
                    "created_at": booking.created_at,
                    "fee_amount_cents": (
                        fee_cents if booking.cancellation_fee_status == FEE_PENDING else None
                    ),
                }
            )
        return cancellations

    def dismiss_fee(self, booking_id: str) -> Booking:
        try:
            return fee_resolver.dismiss_fee(self.db, booking_id)
        except BookingNotFoundError:
            raise HTTPException(status_code=404, detail="Booking not found") from None
        except FeeTransitionError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    async def charge_fee(self, booking_id: str) -> dict:
        amount_cents = load_scheduling_policy(self.db).cancellation_fee_cents
        try:
            booking = await fee_resolver.charge_fee(
                self.db,
                booking_id,
                self.gateway,
                amount_cents=amount_cents,
                currency=CANCELLATION_FEE_CURRENCY,
            )
        except BookingNotFoundError:
            raise HTTPException(status_code=404, detail="Booking not found") from None
        except (FeeTransitionError, PaymentMethodMissingError) as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except PaymentCaptureError as e:
            raise HTTPException(status_code=402, detail=str(e)) from e

        return {
            "success": True,
            "amount_cents": amount_cents,
            "booking": BookingResponse.model_validate(booking),
        }
