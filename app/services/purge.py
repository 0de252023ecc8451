"""Purge of expired verification codes and refresh tokens."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.clock import utc_now
from app.models import RefreshToken, VerificationCode

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def run_purge(
    session: Session, settings: "Settings", now: datetime | None = None
) -> tuple[int, int]:
    """
    Delete verification codes and refresh tokens whose expiry is not in the future.

    Returns (codes_deleted, tokens_deleted). Idempotent: safe to run repeatedly.
    """
    if not settings.PURGE_ENABLED:
        logger.info("Purge is disabled (PURGE_ENABLED=false); skipping.")
        return (0, 0)

    cutoff = now or utc_now()
    codes_deleted = (
        session.query(VerificationCode)
        .filter(VerificationCode.expiry_time <= cutoff)
        .delete(synchronize_session=False)
    )
    tokens_deleted = (
        session.query(RefreshToken)
        .filter(RefreshToken.expiry_time <= cutoff)
        .delete(synchronize_session=False)
    )
    session.commit()

    if codes_deleted or tokens_deleted:
        logger.info(
            "Purge run: cutoff=%s, codes_deleted=%s, tokens_deleted=%s",
            cutoff.isoformat(),
            codes_deleted,
            tokens_deleted,
        )
    return (codes_deleted, tokens_deleted)
