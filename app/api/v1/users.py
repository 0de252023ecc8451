"""User endpoints: own profile, verification requests and administrator actions."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin, require_moderator
from app.core.database import get_db
from app.schemas.auth import CurrentUser, ErrorResponse, MessageResponse, UserResponse
from app.schemas.user import ChangeRoleRequest, UpdateProfileRequest, UsersListResponse
from app.services.users import UserAdminService

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse}}


def get_user_admin_service(db: Annotated[Session, Depends(get_db)]) -> UserAdminService:
    return UserAdminService(db)


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> UserResponse:
    """Profile of the authenticated user."""
    return UserResponse.model_validate(service.get(current_user.id))


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> UsersListResponse:
    """List all users (administrators only)."""
    return UsersListResponse(
        users=[UserResponse.model_validate(u) for u in service.list_users()]
    )


@router.post("/request-verification", response_model=MessageResponse)
def request_verification(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> MessageResponse:
    """Ask a moderator to verify the account; it stays pending until decided."""
    service.request_verification(current_user.id)
    return MessageResponse(message="Verification request submitted.")


@router.post("/{user_id}/verify", response_model=UserResponse, responses=NOT_FOUND)
def decide_verification(
    user_id: uuid.UUID,
    _moderator: Annotated[CurrentUser, Depends(require_moderator)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
    is_verified: Annotated[bool, Query(description="Approve (true) or reject (false)")],
) -> UserResponse:
    """Approve (role becomes VerifiedUser) or reject a pending verification request."""
    return UserResponse.model_validate(service.decide_verification(user_id, is_verified))


@router.post("/{user_id}/block", response_model=UserResponse, responses=NOT_FOUND)
def block_user(
    user_id: uuid.UUID,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> UserResponse:
    """Block a user; login and refresh are refused until unblocked."""
    return UserResponse.model_validate(service.block(user_id))


@router.post("/{user_id}/unblock", response_model=UserResponse, responses=NOT_FOUND)
def unblock_user(
    user_id: uuid.UUID,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> UserResponse:
    return UserResponse.model_validate(service.unblock(user_id))


@router.post("/{user_id}/change-role", response_model=UserResponse, responses=NOT_FOUND)
def change_role(
    user_id: uuid.UUID,
    body: ChangeRoleRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> UserResponse:
    """Set a user's role."""
    return UserResponse.model_validate(service.change_role(user_id, body.role))


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    responses={403: {"model": ErrorResponse}, **NOT_FOUND},
)
def update_profile(
    user_id: uuid.UUID,
    body: UpdateProfileRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> UserResponse:
    """Update name, phone number or Telegram username. Only the owner may do this."""
    user = service.update_profile(
        actor_id=current_user.id,
        target_id=user_id,
        name=body.name,
        phone_number=body.phone_number,
        telegram_username=body.telegram_username,
    )
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse, responses=NOT_FOUND)
def delete_user(
    user_id: uuid.UUID,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> MessageResponse:
    """Delete a user together with their refresh tokens and verification codes."""
    service.delete(user_id)
    return MessageResponse(message="User deleted.")
