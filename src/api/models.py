"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase on the wire.
"""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

PASSWORD_SYMBOLS = "@$!%*?&"


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SendCodeRequest(CamelModel):
    """Request model for sending a verification code."""

    email: EmailStr


class CodeVerificationRequest(CamelModel):
    """Request model for verifying the emailed code."""

    code: str = Field(
        ...,
        min_length=6,
        max_length=6,
        pattern=r"^[A-Z0-9]{6}$",
        description="6-character verification code (uppercase letters and digits)",
    )


class SignupRequest(CamelModel):
    """Request model for completing signup after email verification."""

    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    password: str = Field(
        ...,
        min_length=8,
        max_length=15,
        description="8-15 characters with lowercase, uppercase, digit and symbol",
    )

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        if not (
            re.search(r"[a-z]", value)
            and re.search(r"[A-Z]", value)
            and re.search(r"\d", value)
            and re.search(f"[{re.escape(PASSWORD_SYMBOLS)}]", value)
        ):
            raise ValueError(
                "password must contain at least one uppercase and lowercase "
                "Latin letter, a number and symbol"
            )
        return value


class SigninRequest(CamelModel):
    """Request model for email/password sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=15)


class MessageResponse(CamelModel):
    """Response model for steps that only report success."""

    message: str


class UserResponse(CamelModel):
    """Public user projection; never includes the password hash."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None


class AuthResponse(CamelModel):
    """Response model for signup, signin and refresh."""

    user: UserResponse
    access_token: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
