"""Credential store: lookups and writes of User rows inside the caller's session."""

import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User
from app.services.errors import DuplicateEmailError


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store and compare them lower-cased."""
    return email.strip().lower()


class UserStore:
    """
    Persistence for User rows. Writes are flushed, not committed; the calling
    service owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_email(self, email: str) -> User | None:
        return (
            self.session.query(User)
            .filter(User.email == normalize_email(email))
            .one_or_none()
        )

    def find_by_id(self, user_id: uuid.UUID) -> User | None:
        return self.session.get(User, user_id)

    def list_all(self) -> list[User]:
        return self.session.query(User).order_by(User.name, User.email).all()

    def create(self, user: User) -> User:
        """Insert a user; the unique index on email turns a lost race into DuplicateEmailError."""
        user.email = normalize_email(user.email)
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateEmailError() from e
        return user

    def update(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user

    def delete(self, user: User) -> None:
        """Delete a user; refresh tokens and verification codes go with it."""
        self.session.delete(user)
        self.session.flush()
