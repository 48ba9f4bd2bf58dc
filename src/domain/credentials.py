"""
Credential service - one-way password hashing with Argon2id.

Argon2id is salted and memory-hard: hashing the same password twice
yields different digests, and each guess costs time_cost passes over
memory_cost KiB. The salt and parameters are embedded in the digest,
so verification needs nothing but the digest itself.
"""

from argon2 import PasswordHasher
from argon2 import exceptions as argon_exc


class CredentialService:
    """Hash and verify passwords."""

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )
        # Verified against when there is no stored digest, so that an
        # unknown account costs the same as a wrong password.
        self._dummy_hash = self._hasher.hash("dummy_password_for_timing_safety")

    def hash(self, plaintext: str) -> str:
        return self._hasher.hash(plaintext)

    def verify(self, digest: str | None, plaintext: str) -> bool:
        """
        Check plaintext against digest.

        Never raises: a malformed digest or a missing one (None) yields False.
        A missing digest still runs a full verification against a dummy hash.
        """
        if digest is None:
            self._check(self._dummy_hash, plaintext)
            return False
        return self._check(digest, plaintext)

    def _check(self, digest: str, plaintext: str) -> bool:
        try:
            return self._hasher.verify(digest, plaintext)
        # InvalidHashError and the UnicodeEncodeError raised for non-ASCII
        # digests are both ValueErrors.
        except (argon_exc.VerificationError, ValueError):
            return False
