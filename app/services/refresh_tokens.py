"""Refresh token store: persisted opaque tokens with their owning user."""

from sqlalchemy import delete
from sqlalchemy.orm import Session, joinedload

from app.models import RefreshToken


class RefreshTokenStore:
    """Add, look up and remove refresh tokens. Writes are flushed, not committed."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, token: RefreshToken) -> RefreshToken:
        self.session.add(token)
        self.session.flush()
        return token

    def find_by_value(self, value: str) -> RefreshToken | None:
        """Return the stored token with its user loaded, or None."""
        return (
            self.session.query(RefreshToken)
            .options(joinedload(RefreshToken.user))
            .filter(RefreshToken.token == value)
            .one_or_none()
        )

    def remove(self, token: RefreshToken) -> None:
        self.session.delete(token)
        self.session.flush()

    def remove_if_present(self, token: RefreshToken) -> bool:
        """
        Conditionally delete the row by id and report whether this call deleted it.

        Of two transactions rotating the same token, only one sees a row count
        of 1; the other must treat the token as already used.
        """
        result = self.session.execute(
            delete(RefreshToken)
            .where(RefreshToken.id == token.id)
            .execution_options(synchronize_session=False)
        )
        self.session.expunge(token)
        return result.rowcount == 1
