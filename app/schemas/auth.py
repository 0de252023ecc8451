"""Request/response schemas for auth endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from app.models.user import UserRole


def _check_email_length(v: str) -> str:
    if len(v) > EMAIL_MAX_LEN:
        raise ValueError(f"Email must be at most {EMAIL_MAX_LEN} characters")
    return v


class RegisterRequest(BaseModel):
    """Registration form fields."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN, description="Display name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        # Runs before min_length so a blank name is rejected.
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        return _check_email_length(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        return _check_email_length(v)


class VerifyRequest(BaseModel):
    """Verification code mailed after registration or an unverified login."""

    user_id: uuid.UUID
    code: str = Field(..., pattern=r"^\d{6}$", description="Six-digit code")


class RefreshRequest(BaseModel):
    """Optional body for clients that cannot send the RefreshToken cookie."""

    refresh_token: str | None = Field(default=None, max_length=255)


class TokenResponse(BaseModel):
    """Token pair returned by login, verify and refresh (also set as cookies)."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Opaque refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., description="Access token expiry (UTC)")
    user_id: uuid.UUID
    role: UserRole


class UserResponse(BaseModel):
    """User projection without the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    is_blocked: bool
    verification_requested: bool
    is_email_verified: bool
    phone_number: str | None = None
    telegram_username: str | None = None


class CurrentUser(BaseModel):
    """Authenticated user (id, email, role) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    role: UserRole


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class ErrorResponse(BaseModel):
    """Body of every service error response."""

    error: str = Field(..., description="Error kind, e.g. InvalidCredentials")
    detail: str
    user_id: uuid.UUID | None = Field(
        default=None, description="Set for VerificationPending so the client can call /auth/verify"
    )
