"""Database engine and per-request session management."""

from collections.abc import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings

IN_MEMORY_SQLITE_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # ON DELETE CASCADE on refresh_tokens/verification_codes relies on this.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for DATABASE_URL.

    SQLite connections are shared across the request threadpool; an in-memory
    database uses a single connection so every session sees the same data.
    """
    if not database_url.startswith("sqlite://"):
        return create_engine(database_url, pool_pre_ping=True, echo=echo)
    kwargs: dict = {"connect_args": {"check_same_thread": False}, "echo": echo}
    if database_url in IN_MEMORY_SQLITE_URLS:
        kwargs["poolclass"] = StaticPool
    sqlite_engine = create_engine(database_url, **kwargs)
    event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
    return sqlite_engine


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
