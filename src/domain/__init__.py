"""
Domain layer - Pure business logic with zero framework imports.

This package contains the signup state machine and session issuance
logic. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .auth import AuthService
from .credentials import CredentialService
from .exceptions import (
    AuthError,
    DuplicateUserEmail,
    EmailAlreadyRegistered,
    InvalidAccessToken,
    InvalidCode,
    InvalidCredentials,
    InvalidRefreshToken,
    InvalidToken,
    StepSkipped,
    UpstreamFailure,
)
from .ports import (
    AuthResult,
    CodeStore,
    EmailSender,
    IssuedStepState,
    StepState,
    TokenKind,
    TokenPair,
    User,
    UserRepository,
)
from .step_state import StepStateCarrier
from .tokens import TokenIssuer

__all__ = [
    "AuthError",
    "AuthResult",
    "AuthService",
    "CodeStore",
    "CredentialService",
    "DuplicateUserEmail",
    "EmailAlreadyRegistered",
    "EmailSender",
    "InvalidAccessToken",
    "InvalidCode",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "InvalidToken",
    "IssuedStepState",
    "StepSkipped",
    "StepState",
    "StepStateCarrier",
    "TokenIssuer",
    "TokenKind",
    "TokenPair",
    "UpstreamFailure",
    "User",
    "UserRepository",
]
