"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(r"^\+?[0-9 ()\-]+$")
MIN_PHONE_LENGTH = 9
MIN_NAME_LENGTH = 2


def normalize_email(email: str) -> str:
    """Lookup key for clients: emails match case-insensitively"""
    return email.strip().lower()


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

    email = normalize_email(email)

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email address")

    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a contact phone number.

    International formats are accepted as typed (digits, spaces, dashes,
    parentheses and a leading +); only the length and character set are checked.

    Raises:
        ValueError: If phone number is too short or contains letters
    """
    if phone is None:
        return phone

    phone = phone.strip()

    if len(phone) < MIN_PHONE_LENGTH:
        raise ValueError(f"Phone must be at least {MIN_PHONE_LENGTH} characters")

    if not PHONE_PATTERN.match(phone):
        raise ValueError("Phone number contains invalid characters")

    return phone


def validate_person_name(name: str) -> str:
    name = (name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        raise ValueError(f"Name must be at least {MIN_NAME_LENGTH} characters")
    return name


def parse_iso_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD date.

    Raises:
        ValueError: If the value is not an ISO calendar date
    """
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, TypeError, ValueError):
        raise ValueError(f"Invalid date format: {value!r}. Expected YYYY-MM-DD") from None
