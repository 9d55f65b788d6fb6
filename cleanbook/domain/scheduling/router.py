"""Scheduling router - FastAPI endpoints for bookings, slots and reschedules"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...shared.validators import is_iso_date
from .schemas import (
    AvailableSlotsResponse,
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    RescheduleCreate,
    RescheduleDecision,
    RescheduleRequestResponse,
)
from .service import BookingService
from .time_calculator import parse_booking_date

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Scheduling"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# PUBLIC BOOKING
# ============================================================================


@router.post("/bookings", response_model=BookingResponse, status_code=201)
async def create_booking(
    body: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    """Public booking request; checked for timing and slot capacity"""
    return service.create_booking(body)


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    service: BookingService = Depends(get_booking_service),
):
    """Slot-by-slot availability for one day"""
    if not date:
        raise HTTPException(status_code=400, detail="Date parameter is required")
    if not is_iso_date(date):
        raise HTTPException(status_code=400, detail="Invalid date format. Expected YYYY-MM-DD")

    try:
        day = parse_booking_date(date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format. Expected YYYY-MM-DD") from None

    try:
        slots = service.list_available_slots(day)
    except SQLAlchemyError as e:
        logger.error(f"❌ Error fetching available slots for {date}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch available slots") from e

    return {"date": day, "slots": slots}


@router.get("/manage/{token}", response_model=BookingResponse)
async def get_managed_booking(token: str, service: BookingService = Depends(get_booking_service)):
    """Customer view of their booking through the management link"""
    return service.get_booking_by_token(token)


@router.post("/manage/{token}/cancel", response_model=BookingResponse)
async def cancel_managed_booking(token: str, service: BookingService = Depends(get_booking_service)):
    """Customer cancellation; a late cancellation with a card on file leaves a pending fee"""
    return service.cancel_by_token(token)


@router.post("/manage/{token}/reschedule", response_model=RescheduleRequestResponse, status_code=201)
async def request_reschedule(
    token: str,
    body: RescheduleCreate,
    service: BookingService = Depends(get_booking_service),
):
    """Customer reschedule request, pending operator approval"""
    return service.request_reschedule(token, body)


# ============================================================================
# BACK OFFICE
# ============================================================================


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    _: str = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_booking(booking_id)


@router.patch("/bookings/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    _: str = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Lifecycle transition; cancelling assigns the cancellation fee status"""
    return service.update_status(booking_id, body.status)


@router.patch("/bookings/{booking_id}/reschedule", response_model=BookingResponse)
async def reschedule_booking(
    booking_id: str,
    body: RescheduleCreate,
    _: str = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Move a booking in place"""
    return service.reschedule_booking(booking_id, body)


@router.get("/admin/reschedule-requests", response_model=list[RescheduleRequestResponse])
async def list_reschedule_requests(
    status: Optional[str] = None,
    _: str = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    return service.list_reschedule_requests(status)


@router.patch(
    "/admin/reschedule-requests/{request_id}/approve", response_model=RescheduleRequestResponse
)
async def approve_reschedule_request(
    request_id: str,
    body: Optional[RescheduleDecision] = None,
    _: str = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    return service.approve_reschedule(request_id, body.reason if body else None)


@router.patch("/admin/reschedule-requests/{request_id}/deny", response_model=RescheduleRequestResponse)
async def deny_reschedule_request(
    request_id: str,
    body: RescheduleDecision,
    _: str = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    return service.deny_reschedule(request_id, body.reason)
