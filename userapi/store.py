"""Thread-safe in-memory storage for user records."""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set

from .errors import DuplicateUserIdError, UserNotFoundError
from .models import User
from .validation import normalize_email


class UserStore:
    """Hold users keyed by id and serialise every write behind a single lock.

    Records are immutable snapshots, so readers always observe a user either
    entirely before or entirely after a write.  Compound check-then-act
    sequences must run inside :meth:`transaction` so that two writers cannot
    both pass a uniqueness check before either of them commits.

    Every id ever issued is remembered so none is handed out twice, even
    after deletion.  That set grows by one entry per created user for the
    lifetime of the process.
    """

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}
        self._issued_ids: Set[str] = set()
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["UserStore"]:
        with self._lock:
            yield self

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def list(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def get(self, user_id: str) -> User:
        with self._lock:
            user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def exists(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._users

    def email_in_use(self, email: str, exclude_id: Optional[str] = None) -> bool:
        normalized = normalize_email(email)
        with self._lock:
            return any(
                user.id != exclude_id and normalize_email(user.email) == normalized
                for user in self._users.values()
            )

    def new_id(self) -> str:
        """Return an identifier that this store has never handed out."""

        with self._lock:
            while True:
                candidate = str(uuid.uuid4())
                if candidate not in self._issued_ids:
                    self._issued_ids.add(candidate)
                    return candidate

    def insert(self, user: User) -> User:
        with self._lock:
            if user.id in self._users:
                raise DuplicateUserIdError(f"User id {user.id!r} is already stored")
            self._issued_ids.add(user.id)
            self._users[user.id] = user
        return user

    def update(self, user_id: str, mutator: Callable[[User], User]) -> User:
        """Replace the stored user with ``mutator(current)`` and return the result."""

        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                raise UserNotFoundError(user_id)
            updated = mutator(current)
            if updated.id != user_id:
                raise ValueError("User identifiers are immutable")
            self._users[user_id] = updated
        return updated

    def remove(self, user_id: str) -> User:
        with self._lock:
            try:
                return self._users.pop(user_id)
            except KeyError as exc:
                raise UserNotFoundError(user_id) from exc

    def seed(self, users: Iterable[User]) -> int:
        """Insert ``users`` when the store is empty and return how many were added."""

        with self._lock:
            if self._users:
                return 0
            count = 0
            for user in users:
                self.insert(user)
                count += 1
            return count


__all__ = ["UserStore"]
