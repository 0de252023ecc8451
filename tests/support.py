"""Shared helpers for tests: in-memory database, fake mailer, fixed clock, API base case."""

import re
import unittest
from collections.abc import Generator
from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from app.api.v1.auth import get_mailer
from app.core.config import get_settings
from app.core.database import build_engine, get_db
from app.core.security import hash_password
from app.main import app
from app.models import Base, User, UserRole

API = "/api/v1"
CODE_RE = re.compile(r"\b(\d{6})\b")


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with all tables created."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_user(
    db: Session,
    email: str = "a@x.com",
    password: str = "secret1",
    name: str = "Alice",
    role: UserRole = UserRole.USER,
    verified: bool = True,
    blocked: bool = False,
) -> User:
    """Insert and commit a user directly, bypassing registration."""
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password, rounds=4),
        role=role,
        is_email_verified=verified,
        is_blocked=blocked,
        verification_requested=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class RecordingMailer:
    """Mailer that keeps sent messages in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to_address: str, subject: str, body: str) -> None:
        self.sent.append((to_address, subject, body))

    def last_code(self) -> str:
        _, _, body = self.sent[-1]
        match = CODE_RE.search(body)
        assert match is not None, body
        return match.group(1)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime.now(UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class ApiTestCase(unittest.TestCase):
    """Runs the app against a per-test in-memory database with a recording mailer."""

    def setUp(self) -> None:
        self.Session = make_session_factory()
        self.mailer = RecordingMailer()

        def override_get_db() -> Generator[Session, None, None]:
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_mailer] = lambda: self.mailer
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def new_client(self) -> TestClient:
        """Client with its own cookie jar (another browser)."""
        return TestClient(app)

    def add_user(self, **kwargs: object) -> User:
        with self.Session() as db:
            user = create_user(db, **kwargs)
            db.expunge(user)
        return user

    def login(self, client: TestClient, email: str, password: str = "secret1") -> dict:
        resp = client.post(f"{API}/auth/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()


def settings_with(**updates: object):
    """Copy of the test settings with some fields replaced."""
    return get_settings().model_copy(update=updates)
