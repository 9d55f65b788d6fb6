"""Cancellation fee repository - conditional fee status updates"""

from sqlalchemy.orm import Session

from ...models import CANCELLATION_FEE_STATUSES, FEE_CHARGED, FEE_PENDING, Booking


class CancellationRepository:
    """Repository for cancellation fee database operations"""

    @staticmethod
    def transition_fee_status(db: Session, booking_id: str, from_status: str, to_status: str) -> bool:
        """
        Move a cancelled booking's fee status only if it still holds from_status.

        The check and the write are one UPDATE statement, so two concurrent
        callers cannot both succeed. Returns True when this caller won.
        """
        if to_status not in CANCELLATION_FEE_STATUSES:
            raise ValueError(f"Unknown cancellation fee status '{to_status}'")

        updated = (
            db.query(Booking)
            .filter(
                Booking.id == booking_id,
                Booking.status == "cancelled",
                Booking.cancellation_fee_status == from_status,
            )
            .update({Booking.cancellation_fee_status: to_status}, synchronize_session=False)
        )
        db.commit()
        return updated == 1

    @staticmethod
    def release_charge_claim(db: Session, booking_id: str) -> bool:
        """Put a claimed charge back to pending and count the failed attempt"""
        updated = (
            db.query(Booking)
            .filter(Booking.id == booking_id, Booking.cancellation_fee_status == FEE_CHARGED)
            .update(
                {
                    Booking.cancellation_fee_status: FEE_PENDING,
                    Booking.fee_charge_attempts: Booking.fee_charge_attempts + 1,
                },
                synchronize_session=False,
            )
        )
        db.commit()
        return updated == 1
