"""Reusable field validators.

Each validator takes the raw submitted value and returns the normalized value,
or raises ``ValueError`` with a user-facing message. Pydantic schemas attach
the field name, so a failure surfaces as ``{field, message}``.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from pydantic import validate_email as _check_email_syntax
from pydantic_core import PydanticCustomError

INSTITUTIONAL_DOMAIN = "deakin.edu.au"

NAME_MAX_LENGTH = 50
COMMENT_MAX_LENGTH = 1000
ADDRESS_MAX_LENGTH = 200
SUBURB_MAX_LENGTH = 50

# Largest values that still fit a SQLite INTEGER once turned into an OFFSET or id.
MAX_PAGE = 2**31 - 1
MAX_ROW_ID = 2**63 - 1

_NAME_PATTERN = re.compile(r"[a-zA-ZÀ-ÿ\s'-]+")
_RATING_PATTERN = re.compile(r"[1-5]")
_POSTCODE_PATTERN = re.compile(r"[0-9]{4}")
_PHONE_PATTERN = re.compile(r"[0-9\s+\-()]+")


def _trimmed(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(type(value).__name__)
    return value.strip()


def validate_name(value: Any) -> str:
    try:
        name = _trimmed(value)
    except TypeError:
        raise ValueError("This field is required")
    if not name:
        raise ValueError("This field is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValueError(f"Name must be less than {NAME_MAX_LENGTH} characters")
    if not _NAME_PATTERN.fullmatch(name):
        raise ValueError("Name can only contain letters, spaces, hyphens and apostrophes")
    return name


def validate_email(value: Any) -> str:
    """Accept only syntactically valid addresses on the institutional domain."""
    try:
        email = _trimmed(value)
    except TypeError:
        raise ValueError("Invalid email format")
    if not email:
        raise ValueError("Email is required")
    try:
        _check_email_syntax(email)
    except PydanticCustomError:
        raise ValueError("Invalid email format")
    if not email.endswith(f"@{INSTITUTIONAL_DOMAIN}"):
        raise ValueError(f"Email must be a @{INSTITUTIONAL_DOMAIN} address")
    return email


def validate_rating(value: Any) -> str:
    """Return the rating as its single validated digit string."""
    try:
        rating = _trimmed(value)
    except TypeError:
        raise ValueError("Must be a valid rating from 1 to 5")
    if not rating:
        raise ValueError("Rating is required")
    if not _RATING_PATTERN.fullmatch(rating):
        raise ValueError("Must be a valid rating from 1 to 5")
    return rating


def parse_rating(value: Any) -> int:
    return int(validate_rating(value))


def question_rating(number: int) -> Callable[[Any], str]:
    """Build a rating validator whose message names question ``number``."""

    def _validate(value: Any) -> str:
        try:
            return validate_rating(value)
        except ValueError:
            raise ValueError(f"Q{number} rating must be 1-5")

    _validate.__name__ = f"validate_q{number}_rating"
    return _validate


def validate_comment(value: Any) -> str:
    try:
        comment = _trimmed(value)
    except TypeError:
        raise ValueError("Comment is required")
    if not comment:
        raise ValueError("Comment is required")
    if len(comment) > COMMENT_MAX_LENGTH:
        raise ValueError(f"Comment must be less than {COMMENT_MAX_LENGTH} characters")
    return comment


def validate_colour(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("Colour must be text")
    return value.strip()


def validate_address(value: Any) -> str:
    return _bounded_text(value, "Address", ADDRESS_MAX_LENGTH)


def validate_suburb(value: Any) -> str:
    return _bounded_text(value, "Suburb", SUBURB_MAX_LENGTH)


def _bounded_text(value: Any, label: str, max_length: int) -> str:
    try:
        text = _trimmed(value)
    except TypeError:
        raise ValueError(f"{label} is required")
    if not text:
        raise ValueError(f"{label} is required")
    if len(text) > max_length:
        raise ValueError(f"{label} too long")
    return text


def validate_postcode(value: Any) -> str:
    try:
        postcode = _trimmed(value)
    except TypeError:
        raise ValueError("Postcode must be 4 digits")
    if not _POSTCODE_PATTERN.fullmatch(postcode):
        raise ValueError("Postcode must be 4 digits")
    return postcode


def validate_phone(value: Any) -> str:
    try:
        phone = _trimmed(value)
    except TypeError:
        raise ValueError("Invalid phone number format")
    if not _PHONE_PATTERN.fullmatch(phone):
        raise ValueError("Invalid phone number format")
    return phone
