"""Cancellation domain schemas - Pydantic models for fee actions"""

from typing import Optional

from pydantic import BaseModel

from ..scheduling.schemas import BookingResponse


class CancellationResponse(BookingResponse):
    """Cancelled booking as shown in the cancellations queue"""

    fee_amount_cents: Optional[int] = None


class ChargeFeeResponse(BaseModel):
    success: bool
    amount_cents: int
    booking: BookingResponse
