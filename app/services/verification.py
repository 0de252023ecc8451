"""Verification code issuer: six-digit email codes with a short expiry."""

import logging
import secrets
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.clock import Clock, utc_now
from app.models import VerificationCode

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999


def generate_code() -> str:
    """Uniform code in [100000, 999999] from the OS CSPRNG."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


class VerificationCodeIssuer:
    """
    Issue, look up and invalidate codes. Issuing never invalidates earlier
    codes, so several may be valid at once until one is consumed.
    """

    def __init__(self, session: Session, settings: "Settings", clock: Clock = utc_now) -> None:
        self.session = session
        self.ttl = timedelta(minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES)
        self.clock = clock

    def issue(self, user_id: uuid.UUID) -> VerificationCode:
        code = VerificationCode(
            user_id=user_id,
            code=generate_code(),
            expiry_time=self.clock() + self.ttl,
        )
        self.session.add(code)
        self.session.flush()
        logger.info("Verification code issued", extra={"user_id": str(user_id)})
        return code

    def consume(self, user_id: uuid.UUID, code: str) -> VerificationCode | None:
        """Exact (user_id, code) match or None. The caller checks expiry."""
        return (
            self.session.query(VerificationCode)
            .filter(
                VerificationCode.user_id == user_id,
                VerificationCode.code == code,
            )
            .first()
        )

    def invalidate_all(self, user_id: uuid.UUID) -> int:
        """Delete every outstanding code for the user; returns how many were deleted."""
        deleted = (
            self.session.query(VerificationCode)
            .filter(VerificationCode.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted
