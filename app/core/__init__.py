"""Core configuration, database, security and logging."""

from app.core.config import Settings, get_settings, settings
from app.core.database import SessionLocal, get_db

__all__ = ["Settings", "SessionLocal", "get_settings", "settings", "get_db"]
