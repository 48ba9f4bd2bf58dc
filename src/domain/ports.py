"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the value types shared across the domain and the
interfaces (ports) that the domain requires from infrastructure.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class TokenKind(str, Enum):
    """Kind of signed session token; selects its lifetime."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class User:
    """
    Persistent user record.

    password_hash is opaque and must never leave the service;
    the API layer serializes a public projection instead.
    """

    id: str
    email: str
    password_hash: str
    first_name: str | None = None
    last_name: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class StepState:
    """Onboarding progress carried by the client between requests."""

    email: str
    verified: bool


@dataclass(frozen=True)
class IssuedStepState:
    """
    Serialized step state handed to the transport.

    max_age is the cookie lifetime in seconds; 0 means "expire now".
    """

    token: str
    max_age: int


@dataclass(frozen=True)
class AuthResult:
    """
    Outcome of a flow that authenticates a user.

    step_state is set only by signup, where it carries the cleared state.
    """

    user: User
    tokens: TokenPair
    step_state: IssuedStepState | None = None


class UserRepository(Protocol):
    """Port interface for user persistence."""

    def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """
        Atomically create a user.

        Args:
            email: Normalized email address
            password_hash: Argon2 digest
            first_name: Optional display name
            last_name: Optional display name

        Returns:
            The created user with its server-generated id

        Raises:
            DuplicateUserEmail: If a user with this email already exists
        """
        ...

    def find_by_email(self, email: str) -> User | None:
        """Return the user registered with this normalized email, if any."""
        ...

    def find_by_id(self, user_id: str) -> User | None:
        """Return the user with this id, if any."""
        ...


class CodeStore(Protocol):
    """
    Port interface for the time-bounded one-time code store.

    Entries vanish once their TTL elapses even without explicit deletion.
    Per key, the last set() wins.
    """

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store value under key for ttl_seconds, replacing any live entry."""
        ...

    def get(self, key: str) -> Any | None:
        """Return the live value for key, or None if absent or expired."""
        ...

    def delete(self, key: str) -> bool:
        """
        Remove key.

        Returns:
            True if a live entry was removed, False if there was nothing
            to remove (absent or already expired)
        """
        ...

    def increment(self, key: str, ttl_seconds: float) -> int:
        """
        Atomically add one to the integer counter under key.

        A missing or expired counter starts from zero and gets a fresh TTL;
        a live counter keeps its original expiry.
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, email: str, code: str) -> None:
        """
        Send verification code to email address.

        Args:
            email: Recipient email address
            code: One-time verification code

        Raises:
            Exception: Any delivery failure; the caller classifies it
        """
        ...
