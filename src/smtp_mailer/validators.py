"""Validation of inbound send requests."""

import re
from collections.abc import Mapping
from typing import Any, List, Optional, Tuple

from .exceptions import InvalidAddressError, MissingFieldError
from .models import EmailRequest

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_FIELDS = ["to", "subject", "name", "template"]

MAX_SUBJECT_LENGTH = 200
MAX_NAME_LENGTH = 100
MAX_MESSAGE_LENGTH = 1000


def validate_email_address(email: str) -> Tuple[bool, str]:
    """Validate an email address against the local@domain.tld shape.

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, normalized address or error message)
    """
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        return False, f"Invalid email address: {email!r}"
    return True, email.strip().lower()


def validate_recipient_fields(
    recipient: Mapping[str, Any],
    required_fields: List[str],
    optional_fields: Optional[List[str]] = None,
) -> Tuple[bool, list]:
    """Validate that a payload has all required fields.

    A field counts as missing when it is absent, not a string, or blank.

    Args:
        recipient: Payload dictionary
        required_fields: List of required field names
        optional_fields: List of optional field names

    Returns:
        Tuple of (is_valid, missing_fields)
    """
    optional_fields = optional_fields or []
    missing = []

    for field in required_fields:
        value = recipient.get(field)
        if not isinstance(value, str) or not value.strip():
            missing.append(field)

    return len(missing) == 0, missing


def _clip(value: str, limit: int) -> str:
    # Strip again after cutting so a second pass yields the same value.
    return value.strip()[:limit].strip()


def validate_email_request(payload: Any) -> EmailRequest:
    """Turn an untrusted payload into a normalized EmailRequest.

    Overlong subject, name and message values are truncated, not rejected.
    The template value is passed through as-is.

    Args:
        payload: Decoded JSON body (anything that is not a mapping has no fields)

    Returns:
        Normalized EmailRequest

    Raises:
        MissingFieldError: If a required field is missing
        InvalidAddressError: If the recipient address is malformed
    """
    if not isinstance(payload, Mapping):
        payload = {}

    is_valid, missing = validate_recipient_fields(payload, REQUIRED_FIELDS, ["message"])
    if not is_valid:
        raise MissingFieldError(missing)

    is_valid, address = validate_email_address(payload["to"])
    if not is_valid:
        raise InvalidAddressError(address)

    message = payload.get("message")
    if not isinstance(message, str):
        message = ""

    return EmailRequest(
        to=address,
        subject=_clip(payload["subject"], MAX_SUBJECT_LENGTH),
        name=_clip(payload["name"], MAX_NAME_LENGTH),
        template=payload["template"],
        message=_clip(message, MAX_MESSAGE_LENGTH),
    )
