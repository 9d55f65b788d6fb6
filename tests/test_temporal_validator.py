"""Tests for past-date and minimum lead time rules."""

from datetime import date, datetime

from cleanbook.domain.scheduling.temporal_validator import (
    INVALID_FORMAT_REASON,
    PAST_DATE_REASON,
    validate_booking_time,
    validate_minimum_lead_time,
    validate_not_past_date,
)

NOW = datetime(2030, 6, 3, 8, 0)


class TestNotPastDate:
    def test_yesterday_is_rejected(self):
        result = validate_not_past_date("2030-06-02", "9:00 AM - 11:00 AM", now=NOW)
        assert not result.valid
        assert result.reason == PAST_DATE_REASON

    def test_slot_starting_now_is_rejected(self):
        result = validate_not_past_date(date(2030, 6, 3), "8:00 AM - 10:00 AM", now=NOW)
        assert not result.valid

    def test_one_minute_ahead_is_accepted(self):
        result = validate_not_past_date(date(2030, 6, 3), "8:01 AM", now=NOW)
        assert result.valid
        assert result.reason is None

    def test_unparseable_label(self):
        result = validate_not_past_date("2030-06-10", "mid-morning", now=NOW)
        assert not result.valid
        assert result.reason == INVALID_FORMAT_REASON


class TestMinimumLeadTime:
    def test_exactly_at_threshold_is_accepted(self):
        # 20:00 is exactly 12 hours after 08:00
        result = validate_minimum_lead_time("2030-06-03", "8:00 PM", 12, now=NOW)
        assert result.valid

    def test_one_minute_short_is_rejected(self):
        result = validate_minimum_lead_time("2030-06-03", "7:59 PM", 12, now=NOW)
        assert not result.valid
        assert result.reason == (
            "Bookings must be made at least 12 hours in advance. Please select a later time."
        )

    def test_fractional_hours_are_not_truncated(self):
        # 11h59m out must not be treated as 12 hours
        result = validate_minimum_lead_time("2030-06-03", "7:59 PM", 11.98, now=NOW)
        assert result.valid
        result = validate_minimum_lead_time("2030-06-03", "7:59 PM", 12.0, now=NOW)
        assert not result.valid

    def test_fractional_threshold_in_message(self):
        result = validate_minimum_lead_time("2030-06-03", "9:00 AM", 1.5, now=NOW)
        assert "at least 1.5 hours" in result.reason

    def test_zero_lead_time(self):
        assert validate_minimum_lead_time("2030-06-03", "8:30 AM", 0, now=NOW).valid

    def test_invalid_date(self):
        result = validate_minimum_lead_time("2030-13-40", "9:00 AM", 12, now=NOW)
        assert result.reason == INVALID_FORMAT_REASON


class TestBookingTime:
    def test_past_reason_wins_over_lead_time(self):
        result = validate_booking_time("2030-06-01", "9:00 AM", 12, now=NOW)
        assert result.reason == PAST_DATE_REASON

    def test_short_notice(self):
        result = validate_booking_time("2030-06-03", "1:00 PM - 3:00 PM", 12, now=NOW)
        assert not result.valid
        assert "12 hours in advance" in result.reason

    def test_valid_request(self):
        assert validate_booking_time("2030-06-05", "9:00 AM - 11:00 AM", 12, now=NOW).valid
