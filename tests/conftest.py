"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Fast security services (low-cost argon2, test signing keys)
- In-memory stores with a controllable clock
- A recording email sender that exposes delivered codes
- A fully wired AuthService
"""

import pytest

from src.adapters.cache.memory import InMemoryCodeStore
from src.adapters.repository.memory import InMemoryUserRepository
from src.domain.auth import AuthService
from src.domain.credentials import CredentialService
from src.domain.step_state import StepStateCarrier
from src.domain.tokens import TokenIssuer

TEST_JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789abcdef"
TEST_STEP_STATE_SECRET = "test-step-state-secret-0123456789abcdef"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingEmailSender:
    """EmailSender that keeps every delivered code in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send_verification_code(self, email: str, code: str) -> None:
        self.sent.append((email, code))

    def last_code_for(self, email: str) -> str:
        for recipient, code in reversed(self.sent):
            if recipient == email:
                return code
        raise AssertionError(f"No code sent to {email}")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def code_store(fake_clock: FakeClock) -> InMemoryCodeStore:
    return InMemoryCodeStore(clock=fake_clock)


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture(scope="session")
def credentials() -> CredentialService:
    """Argon2 with minimal cost so tests stay fast."""
    return CredentialService(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret=TEST_JWT_SECRET)


@pytest.fixture
def step_state() -> StepStateCarrier:
    return StepStateCarrier(secret=TEST_STEP_STATE_SECRET, ttl_seconds=1800)


@pytest.fixture
def auth_service(
    user_repository: InMemoryUserRepository,
    code_store: InMemoryCodeStore,
    email_sender: RecordingEmailSender,
    credentials: CredentialService,
    token_issuer: TokenIssuer,
    step_state: StepStateCarrier,
) -> AuthService:
    return AuthService(
        users=user_repository,
        codes=code_store,
        email_sender=email_sender,
        credentials=credentials,
        tokens=token_issuer,
        step_state=step_state,
        code_ttl_seconds=300,
        code_length=6,
        max_code_attempts=5,
    )


@pytest.fixture
def settings_secrets() -> dict[str, str]:
    """Signing keys for tests that build Settings directly."""
    return {"jwt_secret": TEST_JWT_SECRET, "step_state_secret": TEST_STEP_STATE_SECRET}
