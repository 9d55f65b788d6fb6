"""Tests for slot label parsing."""

from datetime import date, datetime, time

import pytest

from cleanbook.domain.scheduling.time_calculator import (
    ParseError,
    hours_until,
    parse_booking_date,
    parse_slot_start,
    parse_start_time,
    slot_start_label,
)


class TestParseStartTime:
    @pytest.mark.parametrize(
        "label,expected",
        [
            ("9:00 AM", time(9, 0)),
            ("09:00AM", time(9, 0)),
            ("11:30 PM", time(23, 30)),
            ("11:30pm", time(23, 30)),
            ("12:00 AM", time(0, 0)),
            ("12:15 PM", time(12, 15)),
            ("1:00 PM - 3:00 PM", time(13, 0)),
            ("  3:45   pm  ", time(15, 45)),
        ],
    )
    def test_twelve_hour_labels(self, label, expected):
        assert parse_start_time(label) == expected

    def test_range_uses_text_before_first_dash(self):
        """Only the start of a range is read, even if the end is malformed."""
        assert parse_start_time("11:00 AM - whenever") == time(11, 0)

    @pytest.mark.parametrize(
        "label",
        ["", "morning", "9-11", "13:00", "9:00", "- 9:00 AM", "13:00 PM", "0:30 AM", "9:75 AM"],
    )
    def test_unrecognizable_labels_fail(self, label):
        with pytest.raises(ParseError):
            parse_start_time(label)

    def test_none_label_fails(self):
        with pytest.raises(ParseError):
            parse_start_time(None)


class TestParseSlotStart:
    def test_combines_date_and_start(self):
        assert parse_slot_start("2030-06-10", "9:00 AM - 11:00 AM") == datetime(2030, 6, 10, 9, 0)

    def test_accepts_date_objects(self):
        assert parse_slot_start(date(2030, 6, 10), "1:00 PM") == datetime(2030, 6, 10, 13, 0)

    def test_bad_date_fails(self):
        with pytest.raises(ParseError):
            parse_slot_start("06/10/2030", "9:00 AM")

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_booking_date("not-a-date")


def test_slot_start_label():
    assert slot_start_label("9:00 AM - 11:00 AM") == "9:00 AM"
    assert slot_start_label("") == ""


def test_hours_until_is_fractional():
    now = datetime(2030, 6, 3, 8, 0)
    assert hours_until(datetime(2030, 6, 3, 9, 30), now) == 1.5
    assert hours_until(datetime(2030, 6, 3, 7, 0), now) == -1.0
