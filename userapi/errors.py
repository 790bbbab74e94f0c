"""Exceptions raised by the user service and translated by the HTTP layer."""

from __future__ import annotations

from typing import Dict, List


class UserAPIError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code = 500


class ValidationError(UserAPIError):
    """One or more fields of a submitted payload violated their constraints."""

    status_code = 400

    def __init__(self, errors: Dict[str, List[str]]) -> None:
        super().__init__("One or more validation errors occurred.")
        self.errors = errors


class UserNotFoundError(UserAPIError):
    status_code = 404

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User {user_id!r} not found")
        self.user_id = user_id


class EmailConflictError(UserAPIError):
    """The normalised email already belongs to a different user."""

    status_code = 409

    def __init__(self, email: str) -> None:
        super().__init__("Email already exists.")
        self.email = email


class AuthError(UserAPIError):
    status_code = 401


class ConfigError(UserAPIError):
    """The server is missing configuration it needs to serve requests."""

    status_code = 500


class DuplicateUserIdError(RuntimeError):
    """Raised when a caller inserts a user whose id is already stored."""


__all__ = [
    "AuthError",
    "ConfigError",
    "DuplicateUserIdError",
    "EmailConflictError",
    "UserAPIError",
    "UserNotFoundError",
    "ValidationError",
]
