"""ORM model for issued refresh tokens (one row per login/verify/refresh)."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.models.base import Base


class RefreshToken(Base):
    """Opaque refresh token; rotation deletes the row and inserts a new one."""

    __tablename__ = "refresh_tokens"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    token = Column(String(255), nullable=False, unique=True, index=True)
    expiry_time = Column(DateTime(timezone=True), nullable=False)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user = relationship("User", back_populates="refresh_tokens")
