"""
Temporal booking rules.

Both checks return a ValidationResult instead of raising: a past date or a
short-notice request is an expected business outcome. A date or slot label
that cannot be parsed is reported as an invalid-format result as well.
"""

import logging
from datetime import date, datetime
from typing import Optional, Union

from .schemas import ValidationResult
from .time_calculator import ParseError, hours_until, parse_slot_start

logger = logging.getLogger(__name__)

INVALID_FORMAT_REASON = "Invalid date or time format"
PAST_DATE_REASON = "Cannot book appointments in the past. Please select a future date and time."


def _format_hours(hours: float) -> str:
    return str(int(hours)) if float(hours).is_integer() else f"{hours:g}"


def validate_not_past_date(
    slot_date: Union[date, str],
    slot_label: str,
    now: Optional[datetime] = None,
) -> ValidationResult:
    """The slot must start strictly after now"""
    now = now or datetime.now()
    try:
        start = parse_slot_start(slot_date, slot_label)
    except ParseError as e:
        logger.warning(f"⚠️ Rejected unparseable booking time ({slot_date}, {slot_label}): {e}")
        return ValidationResult(valid=False, reason=INVALID_FORMAT_REASON)

    if start <= now:
        return ValidationResult(valid=False, reason=PAST_DATE_REASON)
    return ValidationResult(valid=True)


def validate_minimum_lead_time(
    slot_date: Union[date, str],
    slot_label: str,
    min_hours: float,
    now: Optional[datetime] = None,
) -> ValidationResult:
    """The slot must start at least min_hours (fractional, not truncated) after now"""
    now = now or datetime.now()
    try:
        start = parse_slot_start(slot_date, slot_label)
    except ParseError as e:
        logger.warning(f"⚠️ Rejected unparseable booking time ({slot_date}, {slot_label}): {e}")
        return ValidationResult(valid=False, reason=INVALID_FORMAT_REASON)

    if hours_until(start, now) < min_hours:
        return ValidationResult(
            valid=False,
            reason=(
                f"Bookings must be made at least {_format_hours(min_hours)} hours in advance. "
                "Please select a later time."
            ),
        )
    return ValidationResult(valid=True)


def validate_booking_time(
    slot_date: Union[date, str],
    slot_label: str,
    min_hours: float,
    now: Optional[datetime] = None,
) -> ValidationResult:
    """Past-date check followed by the lead-time check, sharing one evaluation instant"""
    now = now or datetime.now()
    result = validate_not_past_date(slot_date, slot_label, now=now)
    if not result.valid:
        return result
    return validate_minimum_lead_time(slot_date, slot_label, min_hours, now=now)
