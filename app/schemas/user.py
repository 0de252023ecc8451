"""Request/response schemas for user administration endpoints."""

from pydantic import BaseModel, Field

from app.models.user import UserRole
from app.schemas.auth import UserResponse


class UpdateProfileRequest(BaseModel):
    """Profile fields; omitted or blank fields are left unchanged."""

    name: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=15, pattern=r"^\+?[0-9 ()-]*$")
    telegram_username: str | None = Field(default=None, max_length=50)


class ChangeRoleRequest(BaseModel):
    role: UserRole


class UsersListResponse(BaseModel):
    """Response for GET /users (administrators only)."""

    users: list[UserResponse]
