"""
Token issuer - signed, time-bounded access and refresh tokens.

Tokens are JWTs carrying:
- sub:  user identifier
- type: "access" or "refresh"
- iat / exp: issuance and expiry (lifetime selected by type)
- jti:  random identifier, so two tokens minted in the same second differ

Verification accepts only the configured algorithm and key, requires
an unexpired token of the expected type, and reports every failure as
the same InvalidToken so callers cannot tell a bad signature from an
expired token.
"""

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import jwt

from .exceptions import InvalidToken
from .ports import TokenKind, TokenPair

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Create and verify access/refresh tokens bound to a user id."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=30),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize token issuer.

        Args:
            secret: Signing key
            algorithm: The only algorithm accepted on verification
            access_ttl: Access token lifetime
            refresh_ttl: Refresh token lifetime
            clock: Source of the issuance time (tests back-date tokens with it)
        """
        self._secret = secret
        self.algorithm = algorithm
        self._lifetimes = {
            TokenKind.ACCESS: access_ttl,
            TokenKind.REFRESH: refresh_ttl,
        }
        self._clock = clock

    def issue(self, user_id: str, kind: TokenKind) -> str:
        now = self._clock()
        payload = {
            "sub": user_id,
            "type": kind.value,
            "iat": now,
            "exp": now + self._lifetimes[kind],
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def issue_pair(self, user_id: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue(user_id, TokenKind.ACCESS),
            refresh_token=self.issue(user_id, TokenKind.REFRESH),
        )

    def verify(self, token: str, kind: TokenKind) -> str:
        """
        Validate token and return the user id it is bound to.

        Raises:
            InvalidToken: Bad signature, wrong algorithm, expired,
                malformed, missing claims, or wrong token type
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.PyJWTError as exc:
            logger.debug("Token rejected: %s", type(exc).__name__)
            raise InvalidToken() from None

        if payload.get("type") != kind.value:
            logger.debug("Token rejected: expected %s token", kind.value)
            raise InvalidToken()

        user_id = payload["sub"]
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken()
        return user_id
