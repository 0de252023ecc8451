"""ORM model for site accounts (auth, verification and RBAC)."""

import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, String, Uuid, func
from sqlalchemy.orm import relationship

from app.models.base import Base


class UserRole(str, enum.Enum):
    """Closed set of roles; values are what goes into the JWT role claim."""

    ADMINISTRATOR = "Administrator"
    MODERATOR = "Moderator"
    NEWS_EDITOR = "NewsEditor"
    VERIFIED_USER = "VerifiedUser"
    USER = "User"


class User(Base):
    """
    Account created by registration.

    verification_requested marks a pending moderator verification request
    (the "PendingVerification" state); is_email_verified is set once a
    verification code has been consumed.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(150), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(
            UserRole,
            name="user_role",
            native_enum=False,
            length=20,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=UserRole.USER,
    )
    is_blocked = Column(Boolean, nullable=False, default=False)
    verification_requested = Column(Boolean, nullable=False, default=False)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    phone_number = Column(String(15), nullable=True)
    telegram_username = Column(String(50), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    verification_codes = relationship(
        "VerificationCode",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
