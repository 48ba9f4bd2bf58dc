"""
API v1 routes.

Defines REST endpoints for the signup and session API. Routes are a
thin transport: they parse requests into service calls, translate
domain errors to HTTP status codes, and move the step state and
refresh token in and out of cookies.
"""

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status

from src.api.dependencies import get_auth_service, get_bearer_token
from src.api.models import (
    AuthResponse,
    CodeVerificationRequest,
    ErrorResponse,
    MessageResponse,
    SendCodeRequest,
    SigninRequest,
    SignupRequest,
    UserResponse,
)
from src.config.settings import Settings, get_settings
from src.domain.auth import AuthService
from src.domain.exceptions import (
    AuthError,
    EmailAlreadyRegistered,
    InvalidAccessToken,
    InvalidCode,
    InvalidCredentials,
    InvalidRefreshToken,
    StepSkipped,
)
from src.domain.ports import AuthResult, IssuedStepState, User

router = APIRouter(tags=["v1"])

STEP_STATE_COOKIE = "signup_state"
REFRESH_TOKEN_COOKIE = "refreshToken"

# Generic details only; UpstreamFailure and anything unlisted become a 500.
_ERROR_RESPONSES: dict[type[AuthError], tuple[int, str]] = {
    EmailAlreadyRegistered: (status.HTTP_409_CONFLICT, "User already exists"),
    StepSkipped: (status.HTTP_401_UNAUTHORIZED, "Signup step skipped"),
    InvalidCode: (status.HTTP_400_BAD_REQUEST, "Invalid code"),
    InvalidCredentials: (status.HTTP_401_UNAUTHORIZED, "Invalid credentials"),
    InvalidRefreshToken: (status.HTTP_401_UNAUTHORIZED, "Invalid refresh token"),
    InvalidAccessToken: (status.HTTP_401_UNAUTHORIZED, "Invalid access token"),
}


def to_http_exception(exc: AuthError) -> HTTPException:
    """Map a domain error to an HTTPException without leaking internals."""
    for error_type, (status_code, detail) in _ERROR_RESPONSES.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def _set_cookie(response: Response, key: str, value: str, max_age: int, settings: Settings) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        domain=settings.cookie_domain,
    )


def _expire_cookie(response: Response, key: str, settings: Settings) -> None:
    response.delete_cookie(
        key=key,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        domain=settings.cookie_domain,
    )


def _apply_step_state(response: Response, issued: IssuedStepState, settings: Settings) -> None:
    if issued.max_age <= 0:
        _expire_cookie(response, STEP_STATE_COOKIE, settings)
    else:
        _set_cookie(response, STEP_STATE_COOKIE, issued.token, issued.max_age, settings)


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
    )


def _session_response(response: Response, result: AuthResult, settings: Settings) -> AuthResponse:
    """Store the refresh token in its cookie and return user + access token."""
    _set_cookie(
        response,
        REFRESH_TOKEN_COOKIE,
        result.tokens.refresh_token,
        settings.refresh_token_ttl_days * 24 * 60 * 60,
        settings,
    )
    return AuthResponse(user=_user_response(result.user), access_token=result.tokens.access_token)


@router.post(
    "/auth/signup/send-email",
    response_model=MessageResponse,
    responses={
        409: {"model": ErrorResponse, "description": "User already exists"},
        422: {"description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Email delivery or store failure"},
    },
    summary="Send a verification code",
    description="Email a 6-character verification code and start a signup "
    "session held in the signup_state cookie.",
)
def send_email(
    request_data: SendCodeRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    try:
        issued = service.send_code(request_data.email)
    except AuthError as exc:
        raise to_http_exception(exc) from None

    _apply_step_state(response, issued, settings)
    return MessageResponse(message="Verification code sent")


@router.post(
    "/auth/signup/code-verification",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid code"},
        401: {"model": ErrorResponse, "description": "Signup step skipped"},
        422: {"description": "Validation error"},
    },
    summary="Verify the emailed code",
    description="Submit the code received by email. Requires the signup_state "
    "cookie set by send-email.",
)
def verify_code(
    request_data: CodeVerificationRequest,
    response: Response,
    signup_state: str | None = Cookie(default=None),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    try:
        issued = service.verify_code(signup_state, request_data.code)
    except AuthError as exc:
        raise to_http_exception(exc) from None

    _apply_step_state(response, issued, settings)
    return MessageResponse(message="Email verified")


@router.post(
    "/auth/signup",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Signup step skipped"},
        409: {"model": ErrorResponse, "description": "User already exists"},
        422: {"description": "Validation error"},
    },
    summary="Create the account",
    description="Complete signup for the verified email. Returns the user and an "
    "access token; the refresh token is set as an http-only cookie.",
)
def signup(
    request_data: SignupRequest,
    response: Response,
    signup_state: str | None = Cookie(default=None),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    try:
        result = service.signup(
            signup_state,
            request_data.password,
            first_name=request_data.first_name,
            last_name=request_data.last_name,
        )
    except AuthError as exc:
        raise to_http_exception(exc) from None

    if result.step_state is not None:
        _apply_step_state(response, result.step_state, settings)
    return _session_response(response, result, settings)


@router.post(
    "/auth/signin",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        422: {"description": "Validation error"},
    },
    summary="Sign in",
    description="Authenticate with email and password.",
)
def signin(
    request_data: SigninRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    try:
        result = service.signin(request_data.email, request_data.password)
    except AuthError as exc:
        raise to_http_exception(exc) from None

    return _session_response(response, result, settings)


@router.post(
    "/auth/refresh",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid refresh token"},
    },
    summary="Rotate the session",
    description="Exchange the refreshToken cookie for a new access token and "
    "a new refresh token.",
)
def refresh(
    response: Response,
    refresh_token: str | None = Cookie(default=None, alias=REFRESH_TOKEN_COOKIE),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    try:
        result = service.refresh(refresh_token)
    except AuthError as exc:
        raise to_http_exception(exc) from None

    return _session_response(response, result, settings)


@router.post(
    "/auth/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Expire the refreshToken cookie. Tokens are not revoked server-side.",
)
def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    _expire_cookie(response, REFRESH_TOKEN_COOKIE, settings)
    return MessageResponse(message="Logged out")


@router.get(
    "/auth/me",
    response_model=UserResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid access token"},
    },
    summary="Current user",
    description="Return the user behind the bearer access token.",
)
def me(
    access_token: str | None = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    try:
        user = service.authenticate(access_token)
    except AuthError as exc:
        raise to_http_exception(exc) from None

    return _user_response(user)
