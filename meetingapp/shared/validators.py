"""Shared validation utilities"""

import re
from typing import Optional

from ..exceptions import ValidationError

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


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

    if not re.match(EMAIL_PATTERN, email):
        raise ValueError("Invalid email format")

    return email


def normalize_email(email: Optional[str]) -> str:
    """Trim and lower-case an email without validating it"""
    return (email or "").strip().lower()


def normalize_email_list(emails: Optional[list[str]], exclude: Optional[str] = None) -> list[str]:
    """
    Normalize a list of emails, dropping blanks, duplicates and `exclude`.
    Order of first appearance is kept.
    """
    excluded = normalize_email(exclude)
    seen = []
    for raw in emails or []:
        email = normalize_email(raw)
        if email and email != excluded and email not in seen:
            seen.append(email)
    return seen


def require_text(value: Optional[str], field: str) -> str:
    """
    Return the stripped value of a required text field.

    Raises:
        ValidationError: If the value is missing or blank
    """
    if value is None or not str(value).strip():
        raise ValidationError(f"{field.replace('_', ' ').capitalize()} is required", field=field)
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Strip an optional text field, mapping blank to None"""
    if value is None:
        return None
    value = str(value).strip()
    return value or None
