"""
Session lifecycle: register, verify email, login, refresh-token rotation, logout.

Each public method is one transaction: it commits on success and rolls back on
any error, so a failed call leaves no partial rows behind.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.clock import Clock, as_utc, utc_now
from app.core.logging import redact_email
from app.core.security import (
    create_access_token,
    generate_refresh_token,
    hash_password,
    verify_password,
)
from app.models import RefreshToken, User, UserRole
from app.services.credentials import UserStore
from app.services.email import VERIFICATION_SUBJECT, Mailer, verification_email_body
from app.services.errors import (
    AccountLockedError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidOrExpiredCodeError,
    InvalidOrExpiredTokenError,
    MissingTokenError,
    ValidationFailedError,
    VerificationPendingError,
)
from app.services.refresh_tokens import RefreshTokenStore
from app.services.verification import VerificationCodeIssuer

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    """Access/refresh pair handed to the client (JSON body and cookies)."""

    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime
    user_id: uuid.UUID
    role: UserRole


class SessionService:
    """Orchestrates the credential store, hasher, code issuer, token functions and mailer."""

    def __init__(
        self,
        session: Session,
        settings: "Settings",
        mailer: Mailer,
        clock: Clock = utc_now,
    ) -> None:
        self.session = session
        self.settings = settings
        self.mailer = mailer
        self.clock = clock
        self.users = UserStore(session)
        self.refresh_tokens = RefreshTokenStore(session)
        self.codes = VerificationCodeIssuer(session, settings, clock)

    def register(self, name: str, email: str, password: str) -> User:
        """Create an unverified User and mail a verification code. Returns the new user."""
        name = name.strip()
        if not name:
            raise ValidationFailedError("Name must not be blank.")
        try:
            if self.users.find_by_email(email) is not None:
                raise DuplicateEmailError()
            user = self.users.create(
                User(
                    name=name,
                    email=email,
                    password_hash=hash_password(password, self.settings.BCRYPT_ROUNDS),
                    role=UserRole.USER,
                    is_blocked=False,
                    verification_requested=False,
                    is_email_verified=False,
                )
            )
            self._send_code(user)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(
            "User registered: user_id=%s email=%s", user.id, redact_email(user.email)
        )
        return user

    def login(self, email: str, password: str) -> TokenPair:
        """
        Check credentials and issue a token pair.

        Unverified accounts get a fresh code and VerificationPendingError
        instead of tokens.
        """
        try:
            user = self.users.find_by_email(email)
            if user is None or not verify_password(password, user.password_hash):
                raise InvalidCredentialsError()
            if user.is_blocked:
                raise AccountLockedError()
            if not user.is_email_verified:
                self._send_code(user)
                self.session.commit()
                logger.info("Login deferred until email verification: user_id=%s", user.id)
                raise VerificationPendingError(user.id)
            pair = self._issue_pair(user)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info("User logged in: user_id=%s", user.id)
        return pair

    def verify(self, user_id: uuid.UUID, code: str) -> TokenPair:
        """Consume a verification code, mark the email verified and issue a token pair."""
        try:
            match = self.codes.consume(user_id, code)
            if match is None or as_utc(match.expiry_time) <= self.clock():
                raise InvalidOrExpiredCodeError()
            user = self.users.find_by_id(user_id)
            if user is None:
                raise InvalidOrExpiredCodeError()
            if user.is_blocked:
                raise AccountLockedError()
            self.codes.invalidate_all(user_id)
            user.is_email_verified = True
            self.users.update(user)
            pair = self._issue_pair(user)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info("Email verified: user_id=%s", user_id)
        return pair

    def refresh(self, refresh_token_value: str | None) -> TokenPair:
        """
        Rotate a refresh token: the old row is deleted and a new pair issued.

        Failed calls (unknown, expired, blocked owner) leave the stored token
        untouched.
        """
        if not refresh_token_value:
            raise MissingTokenError()
        try:
            stored = self.refresh_tokens.find_by_value(refresh_token_value)
            if stored is None or as_utc(stored.expiry_time) <= self.clock():
                raise InvalidOrExpiredTokenError()
            user = stored.user
            if user.is_blocked:
                raise AccountLockedError()
            if not self.refresh_tokens.remove_if_present(stored):
                # Another request rotated this token first.
                raise InvalidOrExpiredTokenError()
            pair = self._issue_pair(user)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info("Refresh token rotated: user_id=%s", user.id)
        return pair

    def logout(self, refresh_token_value: str | None) -> bool:
        """Remove the stored refresh token if it resolves. Always succeeds; returns whether one was removed."""
        if not refresh_token_value:
            return False
        try:
            stored = self.refresh_tokens.find_by_value(refresh_token_value)
            if stored is None:
                return False
            user_id = stored.user_id
            self.refresh_tokens.remove(stored)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info("User logged out: user_id=%s", user_id)
        return True

    def _issue_pair(self, user: User) -> TokenPair:
        now = self.clock()
        role = UserRole(user.role)
        access_token = create_access_token(user.id, role.value, self.settings, now=now)
        refresh = self.refresh_tokens.add(
            RefreshToken(
                token=generate_refresh_token(),
                expiry_time=now + timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS),
                user_id=user.id,
            )
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh.token,
            access_expires_at=now + timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_expires_at=as_utc(refresh.expiry_time),
            user_id=user.id,
            role=role,
        )

    def _send_code(self, user: User) -> None:
        issued = self.codes.issue(user.id)
        self.mailer.send(
            user.email,
            VERIFICATION_SUBJECT,
            verification_email_body(
                user.name,
                issued.code,
                self.settings.VERIFICATION_CODE_EXPIRE_MINUTES,
            ),
        )
