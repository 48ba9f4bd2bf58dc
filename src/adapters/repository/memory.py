"""
In-memory repository adapter - Implements UserRepository protocol.

Process-local user table for development and tests. A lock around
check-then-insert gives create_user the same atomic unique-email
behavior the PostgreSQL UNIQUE constraint provides.
"""

import threading
import uuid
from datetime import datetime, timezone

from src.domain.exceptions import DuplicateUserEmail
from src.domain.ports import User


class InMemoryUserRepository:
    """
    Implements UserRepository protocol with dicts and a lock.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, User] = {}
        self._id_by_email: dict[str, str] = {}
        self._lock = threading.Lock()

    def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        with self._lock:
            if email in self._id_by_email:
                raise DuplicateUserEmail(email)
            user = User(
                id=str(uuid.uuid4()),
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                created_at=datetime.now(timezone.utc),
            )
            self._by_id[user.id] = user
            self._id_by_email[email] = user.id
            return user

    def find_by_email(self, email: str) -> User | None:
        with self._lock:
            user_id = self._id_by_email.get(email)
            return self._by_id.get(user_id) if user_id is not None else None

    def find_by_id(self, user_id: str) -> User | None:
        with self._lock:
            return self._by_id.get(user_id)

    def delete_user(self, user_id: str) -> bool:
        """Remove a user; returns False if there was none."""
        with self._lock:
            user = self._by_id.pop(user_id, None)
            if user is None:
                return False
            del self._id_by_email[user.email]
            return True
