"""Time slot parsing - turns a (date, slot label) pair into the slot's start time"""

import re
from datetime import date, datetime, time
from typing import Union

# "9:00 AM", "09:00AM", "11:30 pm"
TIME_TOKEN_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)


class ParseError(ValueError):
    """Raised when a date or slot label cannot be turned into a point in time"""


def parse_booking_date(value: Union[date, str]) -> date:
    """Accept a date or a YYYY-MM-DD string"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ParseError(f"Invalid date: {value!r}") from e


def slot_start_label(slot_label: str) -> str:
    """Text before the first '-' of a slot range ("9:00 AM - 11:00 AM" -> "9:00 AM")"""
    return (slot_label or "").split("-")[0].strip()


def parse_start_time(slot_label: str) -> time:
    """
    Parse the start of a slot label into a 24-hour time.

    12 AM is midnight, 12 PM stays noon, any other PM hour adds 12.

    Raises:
        ParseError: If no H:MM AM/PM token is present or the token is out of range
    """
    match = TIME_TOKEN_PATTERN.search(slot_start_label(slot_label))
    if not match:
        raise ParseError(f"Invalid time format: {slot_label!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = match.group(3).upper()

    if not 1 <= hours <= 12 or minutes > 59:
        raise ParseError(f"Time out of range: {slot_label!r}")

    if meridiem == "PM" and hours != 12:
        hours += 12
    elif meridiem == "AM" and hours == 12:
        hours = 0

    return time(hours, minutes)


def parse_slot_start(slot_date: Union[date, str], slot_label: str) -> datetime:
    """Absolute (naive, wall-clock) start of a slot on a given date"""
    return datetime.combine(parse_booking_date(slot_date), parse_start_time(slot_label))


def hours_until(start: datetime, now: datetime) -> float:
    """Fractional hours from now until start (negative once start has passed)"""
    return (start - now).total_seconds() / 3600
