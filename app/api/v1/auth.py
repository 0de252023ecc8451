"""Auth endpoints (register, login, verify, refresh, logout) and auth dependencies."""

import uuid
from datetime import datetime
from typing import Annotated

import jwt
from fastapi import (
    APIRouter,
    BackgroundTasks,
    Cookie,
    Depends,
    Form,
    Response,
    status,
)
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.api.errors import error_response
from app.core.clock import Clock, utc_now
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import decode_access_token
from app.models.user import User, UserRole
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
from app.services.email import BackgroundMailer, Mailer, SmtpMailer
from app.services.errors import (
    AccountLockedError,
    ForbiddenError,
    InvalidOrExpiredTokenError,
    MissingTokenError,
    VerificationPendingError,
)
from app.services.session import SessionService, TokenPair

router = APIRouter()
security = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "AccessToken"
REFRESH_TOKEN_COOKIE = "RefreshToken"


def get_clock() -> Clock:
    """Dependency: time source (overridden in tests)."""
    return utc_now


def get_mailer(settings: Annotated[Settings, Depends(get_settings)]) -> Mailer:
    """Dependency: email delivery (overridden in tests)."""
    return SmtpMailer(settings)


def get_session_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
    clock: Annotated[Clock, Depends(get_clock)],
    background_tasks: BackgroundTasks,
) -> SessionService:
    """Dependency: session service whose emails go out after the response."""
    return SessionService(db, settings, BackgroundMailer(background_tasks, mailer), clock)


def _cookie_max_age(expires_at: datetime, now: datetime) -> int:
    return max(int((expires_at - now).total_seconds()), 0)


def set_auth_cookies(response: Response, pair: TokenPair, settings: Settings, now: datetime) -> None:
    """Deliver the pair as httpOnly cookies."""
    for name, value, expires_at in (
        (ACCESS_TOKEN_COOKIE, pair.access_token, pair.access_expires_at),
        (REFRESH_TOKEN_COOKIE, pair.refresh_token, pair.refresh_expires_at),
    ):
        response.set_cookie(
            name,
            value,
            max_age=_cookie_max_age(expires_at, now),
            path="/",
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            name,
            path="/",
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )


def _token_response(pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type="bearer",
        expires_at=pair.access_expires_at,
        user_id=pair.user_id,
        role=pair.role,
    )


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def register(
    body: Annotated[RegisterRequest, Form()],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> UserResponse:
    """
    Register a new account with role User. A six-digit verification code is
    emailed; call /auth/verify with it to activate the account.
    """
    user = service.register(body.name, body.email, body.password)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse, "description": "Email not verified; a new code was sent"},
        423: {"model": ErrorResponse},
    },
)
def login(
    body: LoginRequest,
    response: Response,
    service: Annotated[SessionService, Depends(get_session_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
    background_tasks: BackgroundTasks,
) -> TokenResponse | JSONResponse:
    """
    Authenticate with email and password; returns an access/refresh pair and
    sets them as the AccessToken and RefreshToken cookies.
    """
    try:
        pair = service.login(body.email, body.password)
    except VerificationPendingError as exc:
        # The re-issued code is queued on background_tasks; the error response must run them.
        pending = error_response(exc)
        pending.background = background_tasks
        return pending
    set_auth_cookies(response, pair, settings, clock())
    return _token_response(pair)


@router.post(
    "/verify",
    response_model=TokenResponse,
    responses={400: {"model": ErrorResponse}, 423: {"model": ErrorResponse}},
)
def verify(
    body: VerifyRequest,
    response: Response,
    service: Annotated[SessionService, Depends(get_session_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> TokenResponse:
    """Confirm the emailed code; marks the email verified and signs the user in."""
    pair = service.verify(body.user_id, body.code)
    set_auth_cookies(response, pair, settings, clock())
    return _token_response(pair)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}, 423: {"model": ErrorResponse}},
)
def refresh(
    response: Response,
    service: Annotated[SessionService, Depends(get_session_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
    refresh_cookie: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
    body: RefreshRequest | None = None,
) -> TokenResponse:
    """Exchange the RefreshToken cookie (or body field) for a new pair; the old token stops working."""
    value = refresh_cookie or (body.refresh_token if body else None)
    pair = service.refresh(value)
    set_auth_cookies(response, pair, settings, clock())
    return _token_response(pair)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    service: Annotated[SessionService, Depends(get_session_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    refresh_cookie: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> MessageResponse:
    """Revoke the current refresh token (if any) and clear both cookies. Idempotent."""
    service.logout(refresh_cookie)
    clear_auth_cookies(response, settings)
    return MessageResponse(message="Logged out.")


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    access_cookie: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_COOKIE)] = None,
) -> CurrentUser:
    """
    Dependency: require a valid access token from the Authorization header or
    the AccessToken cookie. 401 if missing or invalid, 423 if the account is blocked.
    """
    token = credentials.credentials if credentials is not None else access_cookie
    if not token:
        raise MissingTokenError("Not authenticated.")
    try:
        payload = decode_access_token(token, settings)
    except jwt.PyJWTError:
        raise InvalidOrExpiredTokenError("Invalid or expired access token.")
    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except (AttributeError, TypeError, ValueError):
        raise InvalidOrExpiredTokenError("Invalid access token payload.")
    user = db.get(User, user_id)
    if user is None:
        raise InvalidOrExpiredTokenError("Access token refers to an unknown user.")
    if user.is_blocked:
        raise AccountLockedError()
    # Role comes from the DB so role changes and blocks apply before the token expires.
    return CurrentUser(id=user.id, email=user.email, role=user.role)


class RoleChecker:
    """
    Dependency: allow only the given roles.

        require_admin = RoleChecker(UserRole.ADMINISTRATOR)

        @router.post("/{user_id}/block")
        def block(_admin: Annotated[CurrentUser, Depends(require_admin)]): ...
    """

    def __init__(self, *allowed_roles: UserRole) -> None:
        self.allowed_roles = frozenset(allowed_roles)

    def __call__(
        self, current_user: Annotated[CurrentUser, Depends(get_current_user)]
    ) -> CurrentUser:
        if current_user.role not in self.allowed_roles:
            raise ForbiddenError("Insufficient role for this operation.")
        return current_user


require_admin = RoleChecker(UserRole.ADMINISTRATOR)
require_moderator = RoleChecker(UserRole.ADMINISTRATOR, UserRole.MODERATOR)
