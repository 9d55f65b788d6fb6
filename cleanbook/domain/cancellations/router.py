"""Cancellation router - back-office endpoints for late-cancellation fees"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ..scheduling.schemas import BookingResponse
from .payment_gateway import SquarePaymentGateway
from .schemas import CancellationResponse, ChargeFeeResponse
from .service import CancellationService

router = APIRouter(prefix="/admin/cancellations", tags=["Cancellations"])


def get_payment_gateway() -> SquarePaymentGateway:
    return SquarePaymentGateway()


def get_cancellation_service(
    db: Session = Depends(get_db),
    gateway: SquarePaymentGateway = Depends(get_payment_gateway),
) -> CancellationService:
    """Dependency injection for CancellationService"""
    return CancellationService(db, gateway)


@router.get("", response_model=list[CancellationResponse])
async def list_cancellations(
    _: str = Depends(require_admin),
    service: CancellationService = Depends(get_cancellation_service),
):
    """Cancelled bookings, most recently cancelled first"""
    return service.list_cancellations()


@router.patch("/{booking_id}/dismiss", response_model=BookingResponse)
async def dismiss_cancellation_fee(
    booking_id: str,
    _: str = Depends(require_admin),
    service: CancellationService = Depends(get_cancellation_service),
):
    """Waive a pending late-cancellation fee"""
    return service.dismiss_fee(booking_id)


@router.post("/{booking_id}/charge", response_model=ChargeFeeResponse)
async def charge_cancellation_fee(
    booking_id: str,
    _: str = Depends(require_admin),
    service: CancellationService = Depends(get_cancellation_service),
):
    """Charge a pending late-cancellation fee to the card on file"""
    return await service.charge_fee(booking_id)
