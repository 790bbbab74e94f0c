"""Domain models for the user management service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Represents a user record held by the :class:`~userapi.store.UserStore`."""

    id: str
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserPayload:
    """Normalised ``name``/``email``/``age`` triple submitted on create or update."""

    name: str
    email: str
    age: int


__all__ = ["User", "UserPayload"]
