"""Validation of user payloads submitted to the create and update endpoints.

The validator is a pure function over the decoded JSON body.  It never
consults the store; uniqueness is checked by the service once the payload
is known to be well formed.  Every violated constraint is collected so a
client sees all of its mistakes in a single response.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional

from .models import UserPayload

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 200
AGE_MIN = 0
AGE_MAX = 130

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _validate_name(value: Any) -> List[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return ["The name field is required."]
    if not isinstance(value, str):
        return ["The name field must be a string."]
    length = len(value.strip())
    if length < NAME_MIN_LENGTH or length > NAME_MAX_LENGTH:
        return [
            f"The name field must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters long."
        ]
    return []


def _validate_email(value: Any) -> List[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return ["The email field is required."]
    if not isinstance(value, str):
        return ["The email field must be a string."]

    messages: List[str] = []
    candidate = value.strip()
    if len(candidate) > EMAIL_MAX_LENGTH:
        messages.append(f"The email field must be at most {EMAIL_MAX_LENGTH} characters long.")
    if not _EMAIL_PATTERN.match(candidate):
        messages.append("The email field is not a valid e-mail address.")
    return messages


def _validate_age(value: Any) -> List[str]:
    # bool is an int subclass; JSON true/false is not an age.
    if isinstance(value, bool) or not isinstance(value, int):
        return ["The age field must be an integer."]
    if value < AGE_MIN or value > AGE_MAX:
        return [f"The age field must be between {AGE_MIN} and {AGE_MAX}."]
    return []


def validate_user_payload(payload: Any) -> Optional[Dict[str, List[str]]]:
    """Return ``None`` for a valid payload, otherwise a field to messages mapping.

    ``age`` may be omitted, in which case it defaults to ``0``.
    """

    if not isinstance(payload, Mapping):
        return {"body": ["Request body must be a JSON object."]}

    errors: Dict[str, List[str]] = {}

    name_errors = _validate_name(payload.get("name"))
    if name_errors:
        errors["name"] = name_errors

    email_errors = _validate_email(payload.get("email"))
    if email_errors:
        errors["email"] = email_errors

    age_errors = _validate_age(payload.get("age", 0))
    if age_errors:
        errors["age"] = age_errors

    return errors or None


def parse_user_payload(payload: Mapping[str, Any]) -> UserPayload:
    """Build a normalised :class:`UserPayload` from an already validated body."""

    return UserPayload(
        name=payload["name"].strip(),
        email=normalize_email(payload["email"]),
        age=int(payload.get("age", 0)),
    )


__all__ = [
    "AGE_MAX",
    "AGE_MIN",
    "EMAIL_MAX_LENGTH",
    "NAME_MAX_LENGTH",
    "NAME_MIN_LENGTH",
    "normalize_email",
    "parse_user_payload",
    "validate_user_payload",
]
