from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What the session layer exposes about the logged-in account."""

    user_id: int
    name: str
    email: str
    role: Role

    @classmethod
    def of(cls, user: User) -> "SessionUser":
        return cls(user_id=user.user_id, name=user.name, email=user.email, role=user.role)


def _password_matches(user: User, password: str) -> bool:
    try:
        return check_password_hash(user.password_hash, password or "")
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class AuthService:
    """Use cases: authenticate user (login), change password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        if not _password_matches(user, password):
            logger.info("Failed login for user_id=%s", user.user_id)
            raise AuthenticationError("Invalid email or password")

        logger.info("User %s logged in", user.user_id)
        return SessionUser.of(user)

    def session_user(self, user_id: int) -> SessionUser:
        """Reload the account behind a session; deactivated accounts are logged out."""

        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Not authorized, please log in")
        return SessionUser.of(user)

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Not authorized, please log in")

        if not _password_matches(user, current_password):
            logger.info("Password change refused for user_id=%s", user_id)
            raise ValidationError("Current password is incorrect")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        if new_password == current_password:
            raise ValidationError("New password must differ from the current one")

        if not self._users.update_password_hash(user_id, generate_password_hash(new_password)):
            raise AuthenticationError("Not authorized, please log in")
        logger.info("Password changed for user_id=%s", user_id)
