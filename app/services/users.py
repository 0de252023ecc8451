"""User administration: block, role changes, moderator verification, profile edits, deletion."""

import logging
import uuid

from sqlalchemy.orm import Session

from app.models import User, UserRole
from app.services.credentials import UserStore
from app.services.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


class UserAdminService:
    """
    Mutations of an existing User. Role checks happen at the API boundary;
    ownership (profile edits) is checked here because it depends on the target.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UserStore(session)

    def get(self, user_id: uuid.UUID) -> User:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError()
        return user

    def list_users(self) -> list[User]:
        return self.users.list_all()

    def block(self, user_id: uuid.UUID) -> User:
        return self._set_blocked(user_id, True)

    def unblock(self, user_id: uuid.UUID) -> User:
        return self._set_blocked(user_id, False)

    def request_verification(self, user_id: uuid.UUID) -> User:
        """Flag the account for moderator review (the PendingVerification state)."""
        user = self.get(user_id)
        user.verification_requested = True
        self._save(user)
        logger.info("Verification requested: user_id=%s", user_id)
        return user

    def decide_verification(self, user_id: uuid.UUID, is_verified: bool) -> User:
        """Close a verification request; approval promotes the user to VerifiedUser."""
        user = self.get(user_id)
        user.verification_requested = False
        if is_verified:
            user.role = UserRole.VERIFIED_USER
        self._save(user)
        logger.info(
            "Verification request decided: user_id=%s approved=%s", user_id, is_verified
        )
        return user

    def change_role(self, user_id: uuid.UUID, role: UserRole) -> User:
        user = self.get(user_id)
        user.role = role
        self._save(user)
        logger.info("Role changed: user_id=%s role=%s", user_id, role.value)
        return user

    def update_profile(
        self,
        actor_id: uuid.UUID,
        target_id: uuid.UUID,
        name: str | None = None,
        phone_number: str | None = None,
        telegram_username: str | None = None,
    ) -> User:
        """Update own profile; blank or missing fields are left unchanged."""
        if actor_id != target_id:
            raise ForbiddenError("Users may only update their own profile.")
        user = self.get(target_id)
        if name and name.strip():
            user.name = name.strip()
        if phone_number and phone_number.strip():
            user.phone_number = phone_number.strip()
        if telegram_username and telegram_username.strip():
            user.telegram_username = telegram_username.strip()
        self._save(user)
        return user

    def delete(self, user_id: uuid.UUID) -> None:
        user = self.get(user_id)
        try:
            self.users.delete(user)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info("User deleted: user_id=%s", user_id)

    def _set_blocked(self, user_id: uuid.UUID, blocked: bool) -> User:
        user = self.get(user_id)
        user.is_blocked = blocked
        self._save(user)
        logger.info("User %s: user_id=%s", "blocked" if blocked else "unblocked", user_id)
        return user

    def _save(self, user: User) -> None:
        try:
            self.users.update(user)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
