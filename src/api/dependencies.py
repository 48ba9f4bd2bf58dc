"""
FastAPI dependencies - Dependency injection factories.

This module provides the builders used at startup to create the
collaborators from Settings, and the Depends() factories that hand
them to routes. Long-lived collaborators (user repository, code store,
email sender, credential service) live in app.state; nothing here is
a process-wide global.
"""

from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.config.settings import Settings, get_settings
from src.domain.auth import AuthService
from src.domain.credentials import CredentialService
from src.domain.ports import CodeStore, EmailSender, UserRepository
from src.domain.step_state import StepStateCarrier
from src.domain.tokens import TokenIssuer


def build_email_sender(settings: Settings) -> EmailSender:
    """Create the email sender selected by settings.email_backend."""
    if settings.email_backend == "console":
        return ConsoleEmailSender()
    if settings.email_backend == "smtp":
        if not (
            settings.smtp_host
            and settings.smtp_username
            and settings.smtp_password
            and settings.smtp_from
        ):
            raise RuntimeError("SMTP email backend requires SMTP_HOST, SMTP_USERNAME, SMTP_PASSWORD and SMTP_FROM")
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=settings.smtp_from,
            timeout=settings.smtp_timeout_seconds,
        )
    raise RuntimeError(f"Unknown email backend: {settings.email_backend}")


def build_credential_service(settings: Settings) -> CredentialService:
    return CredentialService(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


def build_token_issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        access_ttl=timedelta(minutes=settings.access_token_ttl_minutes),
        refresh_ttl=timedelta(days=settings.refresh_token_ttl_days),
    )


def build_step_state_carrier(settings: Settings) -> StepStateCarrier:
    return StepStateCarrier(
        secret=settings.step_state_secret,
        ttl_seconds=settings.step_state_ttl_seconds,
    )


def get_pool(request: Request) -> ConnectionPool | None:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state;
    it is None when the in-memory user store is configured.
    """
    return request.app.state.pool


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.user_repository


def get_code_store(request: Request) -> CodeStore:
    return request.app.state.code_store


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_auth_service(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AuthService:
    """
    Create auth service with injected dependencies.

    Wires the stores, email sender and security services for the domain service.
    """
    return AuthService(
        users=get_user_repository(request),
        codes=get_code_store(request),
        email_sender=get_email_sender(request),
        credentials=get_credential_service(request),
        tokens=build_token_issuer(settings),
        step_state=build_step_state_carrier(settings),
        code_ttl_seconds=settings.code_ttl_seconds,
        code_length=settings.code_length,
        max_code_attempts=settings.max_code_attempts,
    )


# Bearer security scheme for OpenAPI documentation; a missing header is
# reported by the route as an invalid access token, not by FastAPI.
http_bearer = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
) -> str | None:
    """Extract the raw access token from the Authorization header, if any."""
    if credentials is None:
        return None
    return credentials.credentials
