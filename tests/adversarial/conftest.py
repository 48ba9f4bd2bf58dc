"""
Shared fixtures for adversarial tests.

Provides helpers that drive an AuthService to a given signup step.
"""

import pytest

from src.domain.auth import AuthService



def pending_state(service: AuthService, email: str) -> str:
    """Send a code and return the pending step state token."""
    return service.send_code(email).token


def verified_state(service: AuthService, email_sender, email: str) -> str:
    """Send and verify a code; return the verified step state token."""
    token = pending_state(service, email)
    return service.verify_code(token, email_sender.last_code_for(email)).token


@pytest.fixture
def drive():
    """Expose the step helpers to tests."""

    class Drive:
        pending = staticmethod(pending_state)
        verified = staticmethod(verified_state)

    return Drive
