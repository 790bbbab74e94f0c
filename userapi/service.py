"""CRUD operations over the user store."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

from .errors import EmailConflictError, ValidationError
from .models import User, UserPayload
from .store import UserStore
from .validation import parse_user_payload, validate_user_payload

logger = logging.getLogger("userapi.service")


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    """Compose payload validation and the store into the five user operations.

    Validation always runs to completion before the store is consulted.  The
    lookup, uniqueness check and write of each mutating operation happen
    inside one store transaction.
    """

    def __init__(self, store: UserStore, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._store = store
        self._clock = clock or _current_timestamp

    def list_users(self) -> List[User]:
        return self._store.list()

    def get_user(self, user_id: str) -> User:
        return self._store.get(user_id)

    def create_user(self, payload: Any) -> User:
        data = self._validated(payload)

        with self._store.transaction() as store:
            if store.email_in_use(data.email):
                raise EmailConflictError(data.email)
            user = User(
                id=store.new_id(),
                name=data.name,
                email=data.email,
                age=data.age,
                created_at=self._clock(),
            )
            store.insert(user)

        logger.info("Created user %s", user.id)
        return user

    def update_user(self, user_id: str, payload: Any) -> User:
        data = self._validated(payload)

        with self._store.transaction() as store:
            current = store.get(user_id)
            if store.email_in_use(data.email, exclude_id=user_id):
                raise EmailConflictError(data.email)
            updated_at = max(self._clock(), current.created_at)
            user = store.update(
                user_id,
                lambda existing: replace(
                    existing,
                    name=data.name,
                    email=data.email,
                    age=data.age,
                    updated_at=updated_at,
                ),
            )

        logger.info("Updated user %s", user.id)
        return user

    def seed(self, payloads: Iterable[UserPayload]) -> int:
        """Populate an empty store with sample users; a non-empty store is left alone."""

        with self._store.transaction() as store:
            if len(store):
                return 0
            now = self._clock()
            users = [
                User(id=store.new_id(), name=item.name, email=item.email, age=item.age, created_at=now)
                for item in payloads
            ]
            return store.seed(users)

    def delete_user(self, user_id: str) -> None:
        self._store.remove(user_id)
        logger.info("Deleted user %s", user_id)

    @staticmethod
    def _validated(payload: Any) -> UserPayload:
        errors = validate_user_payload(payload)
        if errors is not None:
            raise ValidationError(errors)
        return parse_user_payload(payload)


__all__ = ["UserService"]
