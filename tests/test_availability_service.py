"""Tests for slot capacity checks and the day summary."""

from datetime import date
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from cleanbook.domain.scheduling.availability_service import (
    STORE_ERROR_REASON,
    check_slot_capacity,
    get_available_slots,
)

DAY = date(2030, 6, 10)
SLOT = "9:00 AM - 11:00 AM"


class TestCheckSlotCapacity:
    def test_empty_slot_is_available(self, db):
        result = check_slot_capacity(db, DAY, SLOT, 3)
        assert result.available
        assert result.current_count == 0
        assert result.max_count == 3
        assert result.reason is None

    def test_full_slot(self, db, make_booking):
        for _ in range(5):
            make_booking(DAY, SLOT)
        result = check_slot_capacity(db, DAY, SLOT, 5)
        assert not result.available
        assert result.current_count == 5
        assert result.reason == (
            "This time slot is fully booked (5/5). Please select a different time."
        )
        assert not result.system_error

    def test_one_place_left(self, db, make_booking):
        for _ in range(4):
            make_booking(DAY, SLOT, status="confirmed")
        result = check_slot_capacity(db, DAY, SLOT, 5)
        assert result.available
        assert result.current_count == 4

    def test_cancelled_and_rejected_do_not_count(self, db, make_booking):
        make_booking(DAY, SLOT, status="cancelled")
        make_booking(DAY, SLOT, status="rejected")
        make_booking(DAY, SLOT, status="completed")
        result = check_slot_capacity(db, DAY, SLOT, 2)
        assert result.available
        assert result.current_count == 1

    def test_excluded_booking_does_not_count_against_itself(self, db, make_booking):
        make_booking(DAY, SLOT)
        editing = make_booking(DAY, SLOT)
        assert not check_slot_capacity(db, DAY, SLOT, 2).available
        result = check_slot_capacity(db, DAY, SLOT, 2, exclude_booking_id=editing.id)
        assert result.available
        assert result.current_count == 1

    def test_other_slots_and_days_are_separate(self, db, make_booking):
        make_booking(DAY, "11:00 AM - 1:00 PM")
        make_booking(date(2030, 6, 11), SLOT)
        assert check_slot_capacity(db, DAY, SLOT, 1).available

    def test_iso_string_date(self, db, make_booking):
        make_booking(DAY, SLOT)
        assert check_slot_capacity(db, "2030-06-10", SLOT, 1).current_count == 1

    def test_invalid_date(self, db):
        result = check_slot_capacity(db, "10/06/2030", SLOT, 3)
        assert not result.available
        assert not result.system_error

    def test_store_failure_fails_closed(self):
        session = MagicMock()
        session.query.side_effect = OperationalError("SELECT", {}, Exception("database is down"))
        result = check_slot_capacity(session, DAY, SLOT, 3)
        assert not result.available
        assert result.system_error
        assert result.reason == STORE_ERROR_REASON
        session.rollback.assert_called_once()


class TestAvailableSlots:
    def test_day_summary(self, db, make_booking):
        make_booking(DAY, "9:00 AM - 11:00 AM")
        make_booking(DAY, "9:00 AM - 11:00 AM")
        make_booking(DAY, "11:00 AM - 1:00 PM", status="cancelled")
        slots = get_available_slots(
            db, DAY, 3, ["9:00 AM - 11:00 AM", "11:00 AM - 1:00 PM", "1:00 PM - 3:00 PM"]
        )
        assert [(s.slot, s.available, s.total) for s in slots] == [
            ("9:00 AM - 11:00 AM", 1, 3),
            ("11:00 AM - 1:00 PM", 3, 3),
            ("1:00 PM - 3:00 PM", 3, 3),
        ]

    def test_lowered_ceiling_goes_negative(self, db, make_booking):
        for _ in range(4):
            make_booking(DAY, SLOT)
        (slot,) = get_available_slots(db, DAY, 2, [SLOT])
        assert slot.available == -2
        assert slot.total == 2

    def test_unlisted_labels_are_ignored(self, db, make_booking):
        make_booking(DAY, "7:00 PM - 9:00 PM")
        slots = get_available_slots(db, DAY, 3, [SLOT])
        assert len(slots) == 1
        assert slots[0].available == 3
