"""ORM model for email verification codes."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.models.base import Base


class VerificationCode(Base):
    """
    Six-digit code mailed to the user.

    Several codes may be outstanding for one user; all of them are deleted
    once any one is consumed.
    """

    __tablename__ = "verification_codes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code = Column(String(6), nullable=False)
    expiry_time = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="verification_codes")
