"""
Domain exceptions - Semantic error types for signup and session issuance.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class AuthError(Exception):
    """Base class for authentication domain errors."""

    pass


class EmailAlreadyRegistered(AuthError):
    """A user already exists for this email."""

    pass


class StepSkipped(AuthError):
    """The signup step required before this one has not been completed."""

    pass


class InvalidCode(AuthError):
    """Verification code mismatch, expired, consumed or burned."""

    pass


class InvalidCredentials(AuthError):
    """Email or password mismatch (generic on purpose)."""

    pass


class InvalidRefreshToken(AuthError):
    """Refresh token missing, malformed, expired, forged, or user gone."""

    pass


class InvalidAccessToken(AuthError):
    """Access token missing, malformed, expired, forged, or user gone."""

    pass


class UpstreamFailure(AuthError):
    """User store, code store or mail delivery failed."""

    pass


class DuplicateUserEmail(Exception):
    """Raised by user repositories when the unique email constraint fires."""

    pass


class InvalidToken(Exception):
    """Raised by TokenIssuer.verify for any rejected token."""

    pass
