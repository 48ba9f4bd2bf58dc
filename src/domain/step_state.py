"""
Signup step state carrier - signed, client-held onboarding progress.

The flow is stateless between requests, so progress ({email, verified})
travels with the client. It is signed with itsdangerous (HMAC) so:
- a client cannot forge verified=true for an address it never proved
- the state expires ttl_seconds after it was last signed

mark_verified() re-signs the state, which gives the verified state a
fresh window rather than the remainder of the pending one.
"""

import logging

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .ports import IssuedStepState, StepState

logger = logging.getLogger(__name__)


class StepStateCarrier:
    """Issue, read and clear signup step state tokens."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 1800,
        salt: str = "authflow-signup-step",
    ) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=salt)
        self.ttl_seconds = ttl_seconds

    def begin(self, email: str) -> IssuedStepState:
        return self._issue(StepState(email=email, verified=False))

    def mark_verified(self, state: StepState) -> IssuedStepState:
        return self._issue(StepState(email=state.email, verified=True))

    def clear(self) -> IssuedStepState:
        """Return an empty state that expires immediately."""
        return IssuedStepState(token="", max_age=0)

    def read(self, token: str | None) -> StepState | None:
        """
        Decode a presented state token.

        Returns None for a missing, expired, tampered or malformed token.
        """
        if not token:
            return None
        try:
            data = self._serializer.loads(token, max_age=self.ttl_seconds)
        except SignatureExpired:
            logger.info("Signup step state expired")
            return None
        except BadSignature:
            logger.warning("Signup step state signature rejected")
            return None

        if not isinstance(data, dict):
            return None
        email = data.get("email")
        verified = data.get("verified")
        if not isinstance(email, str) or not isinstance(verified, bool):
            return None
        return StepState(email=email, verified=verified)

    def _issue(self, state: StepState) -> IssuedStepState:
        token = self._serializer.dumps({"email": state.email, "verified": state.verified})
        return IssuedStepState(token=token, max_age=self.ttl_seconds)
