"""Shared validation utilities"""

import re
import uuid
from typing import Optional

import pytz


def validate_uuid(value: Optional[str]) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def normalize_slug(value: str) -> str:
    """
    Normalize a tenant slug to lowercase, dash-separated form.

    Raises:
        ValueError: If nothing usable is left after normalization
    """
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").strip().lower()).strip("-")
    if not slug:
        raise ValueError("Slug must contain at least one letter or digit")
    return slug


def validate_timezone(name: Optional[str]) -> str:
    """Return the IANA timezone name, defaulting to UTC"""
    if not name:
        return "UTC"
    try:
        return pytz.timezone(name).zone
    except pytz.UnknownTimeZoneError as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def validate_currency(code: Optional[str]) -> str:
    """ISO 4217 style three-letter code, uppercased"""
    if not code:
        return "USD"
    code = code.strip().upper()
    if not re.match(r"^[A-Z]{3}$", code):
        raise ValueError("Currency must be a three-letter code")
    return code
