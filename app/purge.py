"""
CLI entrypoint for the expired-credential purge. Run from cron, e.g.:

  python -m app.purge

Or hourly: 0 * * * * cd /path/to/whiskers && .venv/bin/python -m app.purge
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.purge import run_purge

logger = logging.getLogger(__name__)


def main() -> int:
    """Delete expired verification codes and refresh tokens."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        codes_deleted, tokens_deleted = run_purge(db, settings)
        logger.info(
            "Purge completed: codes_deleted=%s tokens_deleted=%s",
            codes_deleted,
            tokens_deleted,
        )
        return 0
    except Exception as e:
        logger.exception("Purge job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
