"""
Authentication domain service - signup state machine and session issuance.

This module contains the core business logic for onboarding and sign-in.

Signup State Machine (per onboarding attempt)
=============================================

States:
- NoState: no step state presented
- PendingVerification: code sent, step state {email, verified=False}
- Verified: code consumed, step state {email, verified=True}
- Registered: terminal, user created and step state cleared
- Expired: terminal, step state or code TTL elapsed

Valid Transitions:
    NoState             -> PendingVerification  (send_code)
    PendingVerification -> Verified             (verify_code, matching code)
    Verified            -> Registered           (signup)

Skipping a state (verify_code without a pending state, signup without a
verified state) fails with StepSkipped. The orchestrator holds no state
of its own: progress lives in the signed step state, codes live in the
code store, and users live in the user repository.

Sessions
========

signin, signup and refresh each mint a fresh access/refresh pair.
Refresh rotation does not revoke the presented refresh token; it stays
valid until its own expiry.
"""

import logging
import secrets
import string
from dataclasses import dataclass

from .credentials import CredentialService
from .exceptions import (
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
    TokenKind,
    User,
    UserRepository,
)
from .step_state import StepStateCarrier
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class AuthService:
    """
    Domain service for the signup and session flows.

    Composes the code store, credential service, token issuer and step
    state carrier with the user repository and email sender.
    """

    users: UserRepository
    codes: CodeStore
    email_sender: EmailSender
    credentials: CredentialService
    tokens: TokenIssuer
    step_state: StepStateCarrier
    code_ttl_seconds: int = 300
    code_length: int = 6
    max_code_attempts: int = 5

    def send_code(self, email: str) -> IssuedStepState:
        """
        Send a verification code and open a pending signup.

        Args:
            email: Address to verify (will be normalized)

        Returns:
            Pending step state {email, verified=False}

        Raises:
            EmailAlreadyRegistered: If a user already exists for email
            UpstreamFailure: If the user store, code store or mailer fails
        """
        normalized_email = self._normalize_email(email)

        try:
            existing = self.users.find_by_email(normalized_email)
        except Exception as exc:
            logger.exception("User lookup failed while sending code")
            raise UpstreamFailure("user store unavailable") from exc
        if existing is not None:
            raise EmailAlreadyRegistered(normalized_email)

        code = self._generate_verification_code()
        try:
            self.codes.set(self._code_key(normalized_email), code, self.code_ttl_seconds)
            self.codes.delete(self._attempts_key(normalized_email))
        except Exception as exc:
            logger.exception("Code store failed while sending code")
            raise UpstreamFailure("code store unavailable") from exc

        # The stored code is kept if delivery fails; a resend overwrites it.
        try:
            self.email_sender.send_verification_code(normalized_email, code)
        except Exception as exc:
            logger.exception("Error during email sending to %s", normalized_email)
            raise UpstreamFailure("error during email sending") from exc

        logger.info("Verification code issued for %s", normalized_email)
        return self.step_state.begin(normalized_email)

    def verify_code(self, state_token: str | None, code: str) -> IssuedStepState:
        """
        Consume the verification code for a pending signup.

        A mismatch leaves the stored code in place so the user can retry,
        until max_code_attempts failures burn it.

        Args:
            state_token: Step state presented by the client
            code: Code received by email (exact, case-sensitive match)

        Returns:
            Verified step state {email, verified=True}

        Raises:
            StepSkipped: If no pending step state is presented
            InvalidCode: If the code is wrong, expired, consumed or burned
            UpstreamFailure: If the code store fails
        """
        state = self.step_state.read(state_token)
        if state is None or state.verified:
            raise StepSkipped()

        email = state.email
        try:
            stored = self.codes.get(self._code_key(email))
            if stored is None:
                raise InvalidCode()

            if not secrets.compare_digest(str(stored).encode(), code.encode()):
                self._record_failed_attempt(email)
                raise InvalidCode()

            # Only the caller that actually removes the entry may proceed.
            if not self.codes.delete(self._code_key(email)):
                raise InvalidCode()
            self.codes.delete(self._attempts_key(email))
        except InvalidCode:
            raise
        except Exception as exc:
            logger.exception("Code store failed during verification")
            raise UpstreamFailure("code store unavailable") from exc

        logger.info("Email verified for %s", email)
        return self.step_state.mark_verified(state)

    def signup(
        self,
        state_token: str | None,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> AuthResult:
        """
        Register the user behind a verified step state.

        Args:
            state_token: Step state presented by the client
            password: Plaintext password (will be hashed)
            first_name: Optional display name
            last_name: Optional display name

        Returns:
            Created user, a fresh token pair and the cleared step state

        Raises:
            StepSkipped: If the step state is absent or not verified
            EmailAlreadyRegistered: If the email was registered concurrently
            UpstreamFailure: If password hashing or the user store fails
        """
        state = self.step_state.read(state_token)
        if state is None or not state.verified:
            raise StepSkipped()

        try:
            password_hash = self.credentials.hash(password)
        except Exception as exc:
            logger.exception("Password hashing failed")
            raise UpstreamFailure("password hashing failed") from exc

        try:
            user = self.users.create_user(
                email=state.email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
            )
        except DuplicateUserEmail:
            raise EmailAlreadyRegistered(state.email) from None
        except Exception as exc:
            logger.exception("User creation failed")
            raise UpstreamFailure("user store unavailable") from exc

        logger.info("User %s registered", user.id)
        return AuthResult(
            user=user,
            tokens=self.tokens.issue_pair(user.id),
            step_state=self.step_state.clear(),
        )

    def signin(self, email: str, password: str) -> AuthResult:
        """
        Authenticate with email and password.

        Unknown emails and wrong passwords fail identically, and both
        run one full password verification.

        Raises:
            InvalidCredentials: If email or password is wrong
            UpstreamFailure: If the user store fails
        """
        normalized_email = self._normalize_email(email)
        try:
            user = self.users.find_by_email(normalized_email)
        except Exception as exc:
            logger.exception("User lookup failed during signin")
            raise UpstreamFailure("user store unavailable") from exc

        stored_hash = user.password_hash if user is not None else None
        if not self.credentials.verify(stored_hash, password) or user is None:
            logger.warning("Signin failed")
            raise InvalidCredentials()

        logger.info("User %s signed in", user.id)
        return AuthResult(user=user, tokens=self.tokens.issue_pair(user.id))

    def refresh(self, refresh_token: str | None) -> AuthResult:
        """
        Rotate the session: verify the refresh token and mint a new pair.

        Raises:
            InvalidRefreshToken: If the token is missing or invalid, or its
                user no longer exists
            UpstreamFailure: If the user store fails
        """
        user = self._resolve_user(refresh_token, TokenKind.REFRESH, InvalidRefreshToken)
        logger.info("Session refreshed for user %s", user.id)
        return AuthResult(user=user, tokens=self.tokens.issue_pair(user.id))

    def authenticate(self, access_token: str | None) -> User:
        """
        Resolve the user behind a bearer access token.

        Raises:
            InvalidAccessToken: If the token is missing or invalid, or its
                user no longer exists
            UpstreamFailure: If the user store fails
        """
        return self._resolve_user(access_token, TokenKind.ACCESS, InvalidAccessToken)

    def _resolve_user(
        self,
        token: str | None,
        kind: TokenKind,
        failure: type[InvalidRefreshToken] | type[InvalidAccessToken],
    ) -> User:
        if not token:
            raise failure()
        try:
            user_id = self.tokens.verify(token, kind)
        except InvalidToken:
            logger.warning("Rejected %s token", kind.value)
            raise failure() from None

        try:
            user = self.users.find_by_id(user_id)
        except Exception as exc:
            logger.exception("User lookup failed for %s token", kind.value)
            raise UpstreamFailure("user store unavailable") from exc
        if user is None:
            logger.warning("Rejected %s token for missing user", kind.value)
            raise failure()
        return user

    def _record_failed_attempt(self, email: str) -> None:
        attempts = self.codes.increment(self._attempts_key(email), self.code_ttl_seconds)
        logger.warning("Invalid verification code for %s (attempt %d)", email, attempts)
        if attempts >= self.max_code_attempts:
            logger.warning("Verification attempts exhausted for %s; code burned", email)
            self.codes.delete(self._code_key(email))
            self.codes.delete(self._attempts_key(email))

    def _code_key(self, email: str) -> str:
        return f"code:{email}"

    def _attempts_key(self, email: str) -> str:
        return f"attempts:{email}"

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _generate_verification_code(self) -> str:
        """
        Generate a verification code over the 36-symbol uppercase alphabet.

        Uses the secrets module; 6 independent draws give ~31 bits.
        """
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(self.code_length))
