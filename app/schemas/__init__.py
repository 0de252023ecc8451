"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    VerifyRequest,
)
from app.schemas.health import HealthResponse
from app.schemas.user import ChangeRoleRequest, UpdateProfileRequest, UsersListResponse

__all__ = [
    "ChangeRoleRequest",
    "CurrentUser",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RefreshRequest",
    "RegisterRequest",
    "TokenResponse",
    "UpdateProfileRequest",
    "UserResponse",
    "UsersListResponse",
    "VerifyRequest",
]
