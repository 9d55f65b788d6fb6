"""Booking repository - Database operations for bookings and reschedule requests"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import NON_BLOCKING_STATUSES, Booking, BusinessSettings, RescheduleRequest


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_business_settings(db: Session) -> Optional[BusinessSettings]:
        """Get the single business settings row, if configured"""
        return db.query(BusinessSettings).order_by(BusinessSettings.id.asc()).first()

    @staticmethod
    def count_slot_bookings(
        db: Session,
        booking_date: date,
        time_slot: str,
        exclude_booking_id: Optional[str] = None,
    ) -> int:
        """Count bookings holding a place in (date, slot)"""
        query = db.query(func.count(Booking.id)).filter(
            Booking.date == booking_date,
            Booking.time_slot == time_slot,
            Booking.status.notin_(NON_BLOCKING_STATUSES),
        )

        # Exclude current booking if editing
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)

        return query.scalar() or 0

    @staticmethod
    def count_bookings_by_slot(db: Session, booking_date: date) -> dict[str, int]:
        """Count bookings holding a place for every slot label used on a date"""
        rows = (
            db.query(Booking.time_slot, func.count(Booking.id))
            .filter(
                Booking.date == booking_date,
                Booking.status.notin_(NON_BLOCKING_STATUSES),
            )
            .group_by(Booking.time_slot)
            .all()
        )
        return {time_slot: count for time_slot, count in rows}

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_booking_by_token(db: Session, management_token: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.management_token == management_token).first()

    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        """Update a booking with provided fields"""
        for key, value in updates.items():
            if hasattr(booking, key):
                setattr(booking, key, value)

        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def get_cancelled_bookings(db: Session) -> list[Booking]:
        """Cancelled bookings, most recently cancelled first"""
        return (
            db.query(Booking)
            .filter(Booking.status == "cancelled")
            .order_by(Booking.cancelled_at.is_(None), Booking.cancelled_at.desc())
            .all()
        )

    # Reschedule Request Methods
    @staticmethod
    def create_reschedule_request(db: Session, **request_data) -> RescheduleRequest:
        request = RescheduleRequest(**request_data)
        db.add(request)
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def get_reschedule_request(db: Session, request_id: str) -> Optional[RescheduleRequest]:
        return db.query(RescheduleRequest).filter(RescheduleRequest.id == request_id).first()

    @staticmethod
    def get_reschedule_requests(db: Session, status: Optional[str] = None) -> list[RescheduleRequest]:
        query = db.query(RescheduleRequest)
        if status:
            query = query.filter(RescheduleRequest.status == status)
        return query.order_by(RescheduleRequest.created_at.desc()).all()

    @staticmethod
    def has_pending_reschedule(db: Session, booking_id: str) -> bool:
        return (
            db.query(RescheduleRequest.id)
            .filter(
                RescheduleRequest.booking_id == booking_id,
                RescheduleRequest.status == "pending",
            )
            .first()
            is not None
        )

    @staticmethod
    def decide_reschedule_request(
        db: Session, request: RescheduleRequest, status: str, reason: Optional[str]
    ) -> RescheduleRequest:
        request.status = status
        request.decision_reason = reason
        request.decided_at = datetime.now()
        db.commit()
        db.refresh(request)
        return request
