"""Booking service - Business logic for booking, cancellation and rescheduling"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import (
    FEE_CHARGED,
    FEE_DISMISSED,
    FEE_NOT_APPLICABLE,
    NON_BLOCKING_STATUSES,
    RESCHEDULE_STATUSES,
    Booking,
    RescheduleRequest,
)
from ..cancellations.fee_resolver import fee_status_after_cancel
from .availability_service import check_slot_capacity, get_available_slots
from .policy import load_scheduling_policy
from .repository import BookingRepository
from .schemas import (
    BookingCreate,
    RescheduleCreate,
    SchedulingPolicy,
    SlotAvailability,
)
from .slot_lock import SlotGuard, SlotLockError, get_slot_guard
from .temporal_validator import validate_booking_time, validate_not_past_date

logger = logging.getLogger(__name__)

# A booking in one of these states can no longer be moved to another slot
FINAL_STATUSES = ("completed", "cancelled", "rejected")


class BookingService:
    """Service layer for booking business logic"""

    def __init__(
        self,
        db: Session,
        slot_guard: Optional[SlotGuard] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.repo = BookingRepository()
        self.slot_guard = slot_guard or get_slot_guard()
        self.clock = clock

    def get_policy(self) -> SchedulingPolicy:
        return load_scheduling_policy(self.db)

    def _ensure_slot_open(
        self,
        slot_date: date,
        time_slot: str,
        policy: SchedulingPolicy,
        exclude_booking_id: Optional[str] = None,
        enforce_lead_time: bool = True,
    ) -> None:
        """Temporal checks, then capacity; raises HTTPException on the first failure"""
        now = self.clock()
        if enforce_lead_time:
            timing = validate_booking_time(slot_date, time_slot, policy.min_lead_hours, now=now)
        else:
            timing = validate_not_past_date(slot_date, time_slot, now=now)
        if not timing.valid:
            raise HTTPException(status_code=400, detail=timing.reason)

        capacity = check_slot_capacity(
            self.db, slot_date, time_slot, policy.max_bookings_per_slot, exclude_booking_id
        )
        if not capacity.available:
            if capacity.system_error:
                raise HTTPException(status_code=503, detail=capacity.reason)
            raise HTTPException(status_code=400, detail=capacity.reason)

    def _slot_locked(self, slot_date: date, time_slot: str):
        return self.slot_guard.hold(slot_date, time_slot)

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def get_booking_by_token(self, token: str) -> Booking:
        booking = self.repo.get_booking_by_token(self.db, token)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found or invalid token")
        return booking

    def create_booking(self, data: BookingCreate) -> Booking:
        """Validate timing and capacity, then store a pending booking"""
        policy = self.get_policy()
        logger.info(f"📅 Booking request for {data.date} {data.timeSlot}")

        try:
            with self._slot_locked(data.date, data.timeSlot):
                self._ensure_slot_open(data.date, data.timeSlot, policy)
                booking = self.repo.create_booking(
                    self.db,
                    service=data.service,
                    property_size=data.propertySize,
                    date=data.date,
                    time_slot=data.timeSlot,
                    name=data.name,
                    email=data.email,
                    phone=data.phone,
                    address=data.address,
                    payment_method_id=data.paymentMethodId,
                    customer_notes=data.customerNotes,
                    status="pending",
                    cancellation_fee_status=FEE_NOT_APPLICABLE,
                )
        except SlotLockError as e:
            logger.error(f"❌ Could not lock slot {data.date} {data.timeSlot}: {e}")
            raise HTTPException(status_code=503, detail="Booking is temporarily unavailable") from e

        logger.info(f"✅ Booking {booking.id} created for {booking.date} {booking.time_slot}")
        return booking

    def _cancel(self, booking: Booking, policy: SchedulingPolicy) -> Booking:
        updates = fee_status_after_cancel(
            booking, policy.cancellation_fee_window_hours, now=self.clock()
        )
        booking = self.repo.update_booking(self.db, booking, **updates)
        logger.info(
            f"🗑️ Booking {booking.id} cancelled (fee status: {booking.cancellation_fee_status})"
        )
        return booking

    def update_status(self, booking_id: str, status: str) -> Booking:
        """Operator lifecycle transition"""
        booking = self.get_booking(booking_id)
        policy = self.get_policy()

        if status == booking.status:
            return booking

        if status == "cancelled":
            return self._cancel(booking, policy)

        # A fee only exists while the booking is cancelled
        if booking.cancellation_fee_status in (FEE_DISMISSED, FEE_CHARGED):
            raise HTTPException(
                status_code=400,
                detail="A cancelled booking with a resolved fee cannot change status",
            )
        updates = {
            "status": status,
            "cancellation_fee_status": FEE_NOT_APPLICABLE,
            "cancelled_at": None,
        }

        if booking.status in NON_BLOCKING_STATUSES and status not in NON_BLOCKING_STATUSES:
            # Reactivation takes a place in the slot again
            capacity = check_slot_capacity(
                self.db, booking.date, booking.time_slot, policy.max_bookings_per_slot, booking.id
            )
            if not capacity.available:
                raise HTTPException(
                    status_code=503 if capacity.system_error else 400, detail=capacity.reason
                )

        booking = self.repo.update_booking(self.db, booking, **updates)
        logger.info(f"✅ Booking {booking.id} status → {status}")
        return booking

    def cancel_by_token(self, token: str) -> Booking:
        """Customer self-service cancellation"""
        booking = self.get_booking_by_token(token)
        if booking.status == "cancelled":
            return booking
        if booking.status in FINAL_STATUSES:
            raise HTTPException(status_code=400, detail=f"Booking is already {booking.status}")
        return self._cancel(booking, self.get_policy())

    def reschedule_booking(self, booking_id: str, data: RescheduleCreate) -> Booking:
        """Operator moves a booking in place; it does not count against its own new slot"""
        booking = self.get_booking(booking_id)
        if booking.status in FINAL_STATUSES:
            raise HTTPException(status_code=400, detail=f"Cannot reschedule a {booking.status} booking")

        policy = self.get_policy()
        try:
            with self._slot_locked(data.date, data.timeSlot):
                self._ensure_slot_open(data.date, data.timeSlot, policy, exclude_booking_id=booking.id)
                booking = self.repo.update_booking(
                    self.db, booking, date=data.date, time_slot=data.timeSlot
                )
        except SlotLockError as e:
            raise HTTPException(status_code=503, detail="Booking is temporarily unavailable") from e

        logger.info(f"📅 Booking {booking.id} moved to {booking.date} {booking.time_slot}")
        return booking

    # Reschedule Request Methods
    def request_reschedule(self, token: str, data: RescheduleCreate) -> RescheduleRequest:
        """Customer asks to move a booking; an operator approves or denies it later"""
        booking = self.get_booking_by_token(token)
        if booking.status in FINAL_STATUSES:
            raise HTTPException(status_code=400, detail=f"Cannot reschedule a {booking.status} booking")
        if self.repo.has_pending_reschedule(self.db, booking.id):
            raise HTTPException(
                status_code=400, detail="A reschedule request is already pending for this booking"
            )

        self._ensure_slot_open(data.date, data.timeSlot, self.get_policy(), exclude_booking_id=booking.id)

        request = self.repo.create_reschedule_request(
            self.db,
            booking_id=booking.id,
            original_date=booking.date,
            original_time_slot=booking.time_slot,
            requested_date=data.date,
            requested_time_slot=data.timeSlot,
            customer_notes=data.customerNotes,
            status="pending",
        )
        logger.info(f"📨 Reschedule request {request.id} for booking {booking.id}")
        return request

    def _get_pending_request(self, request_id: str) -> RescheduleRequest:
        request = self.repo.get_reschedule_request(self.db, request_id)
        if not request:
            raise HTTPException(status_code=404, detail="Reschedule request not found")
        if request.status != "pending":
            raise HTTPException(status_code=400, detail="Reschedule request is not pending")
        return request

    def approve_reschedule(self, request_id: str, reason: Optional[str] = None) -> RescheduleRequest:
        """Move the booking to the requested slot and confirm it"""
        request = self._get_pending_request(request_id)
        booking = self.get_booking(request.booking_id)
        if booking.status in FINAL_STATUSES:
            raise HTTPException(status_code=400, detail=f"Cannot reschedule a {booking.status} booking")

        policy = self.get_policy()
        try:
            with self._slot_locked(request.requested_date, request.requested_time_slot):
                # Lead time was checked when the customer asked; the slot must still be ahead and open
                self._ensure_slot_open(
                    request.requested_date,
                    request.requested_time_slot,
                    policy,
                    exclude_booking_id=booking.id,
                    enforce_lead_time=False,
                )
                self.repo.update_booking(
                    self.db,
                    booking,
                    date=request.requested_date,
                    time_slot=request.requested_time_slot,
                    status="confirmed",
                )
        except SlotLockError as e:
            raise HTTPException(status_code=503, detail="Booking is temporarily unavailable") from e

        request = self.repo.decide_reschedule_request(self.db, request, "approved", reason)
        logger.info(f"✅ Reschedule request {request.id} approved")
        return request

    def deny_reschedule(self, request_id: str, reason: Optional[str]) -> RescheduleRequest:
        if not reason or not reason.strip():
            raise HTTPException(status_code=400, detail="Reason is required when denying")
        request = self._get_pending_request(request_id)
        request = self.repo.decide_reschedule_request(self.db, request, "denied", reason.strip())
        logger.info(f"🚫 Reschedule request {request.id} denied")
        return request

    def list_reschedule_requests(self, status: Optional[str] = None) -> list[RescheduleRequest]:
        if status and status not in RESCHEDULE_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status filter. Expected one of: {', '.join(RESCHEDULE_STATUSES)}",
            )
        return self.repo.get_reschedule_requests(self.db, status)

    def list_available_slots(self, slot_date: date) -> list[SlotAvailability]:
        policy = self.get_policy()
        return get_available_slots(
            self.db, slot_date, policy.max_bookings_per_slot, policy.time_slots
        )

    def list_cancellations(self) -> list[Booking]:
        return self.repo.get_cancelled_bookings(self.db)
