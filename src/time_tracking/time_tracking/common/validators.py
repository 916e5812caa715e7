from __future__ import annotations

from datetime import date
from typing import Any

from ..core.enums import FailureReason
from ..core.exceptions import ValidationError


def require_id(value: Any, field_name: str) -> int:
    """Return ``value`` as a positive int identifier."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required", errors=[f"{field_name}: missing"])
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid", errors=[f"{field_name}: not an integer"])
    if ident <= 0:
        raise ValidationError(f"{field_name} is invalid", errors=[f"{field_name}: must be positive"])
    return ident


def require_date_range(start_date: date, end_date: date) -> tuple[date, date]:
    if start_date is None or end_date is None:
        raise ValidationError(
            "start_date and end_date are required",
            reason=FailureReason.INVALID_DATE_RANGE,
            errors=["start_date/end_date: missing"],
        )
    if start_date >= end_date:
        raise ValidationError(
            "start_date must be before end_date",
            reason=FailureReason.INVALID_DATE_RANGE,
            errors=[f"start_date {start_date.isoformat()} >= end_date {end_date.isoformat()}"],
        )
    return start_date, end_date


def require_positive_int(value: Any, field_name: str, *, maximum: int | None = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", errors=[f"{field_name}: not an integer"])
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive", errors=[f"{field_name}: must be positive"])
    if maximum is not None:
        number = min(number, maximum)
    return number


def require_ordered_dates(start_date: date | None, end_date: date | None) -> tuple[date | None, date | None]:
    """Optional bounds; when both are given start must not be after end."""
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationError(
            "start_date must not be after end_date",
            reason=FailureReason.INVALID_DATE_RANGE,
            errors=[f"start_date {start_date.isoformat()} > end_date {end_date.isoformat()}"],
        )
    return start_date, end_date
