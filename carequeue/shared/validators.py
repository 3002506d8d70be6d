"""Shared validation utilities"""

from datetime import date, datetime
from typing import Optional

from ..exceptions import ValidationError
from . import dates


def validate_display_name(value: Optional[str], field: str = "Name") -> Optional[str]:
    """
    Strip and validate a person or service name.

    Args:
        value: Raw name string
        field: Label used in the error message

    Returns:
        Stripped name

    Raises:
        ValueError: If the name is shorter than 2 characters
    """
    if value is None:
        return value

    value = value.strip()
    if len(value) < 2:
        raise ValueError(f"{field} must be at least 2 characters")

    return value


def validate_future(appointment_at: datetime) -> datetime:
    """
    Normalize an appointment time and require it to be in the future.

    Args:
        appointment_at: Incoming datetime, aware or business-local

    Returns:
        Naive UTC datetime for storage

    Raises:
        ValidationError: If the time is not strictly after now
    """
    stored = dates.to_storage(appointment_at)
    if stored <= dates.utcnow():
        raise ValidationError("Appointment time must be in the future")
    return stored


def parse_date_filter(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD query parameter"""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
