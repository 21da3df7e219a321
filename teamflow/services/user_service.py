# Rev 0.2.0
"""Accounts and the signed-in session."""
from __future__ import annotations
from typing import Optional

from passlib.context import CryptContext

from teamflow.errors import (
    DuplicateUsernameError,
    InexistentEntityError,
    InvalidCredentialsError,
    NoSignedInUserError,
)
from teamflow.models.entities import User
from teamflow.repositories.sqlite_user_repository import SQLiteUserRepository
from teamflow.utils.logging_setup import get_logger

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return pwd_context.hash(password.encode("utf-8")[:72])


def verify_password(password: str, stored: str) -> bool:
    if not stored or not pwd_context.identify(stored):
        return False
    return pwd_context.verify(password.encode("utf-8")[:72], stored)


class UserService:
    def __init__(self, users_repo: SQLiteUserRepository):
        self._users = users_repo
        self._current: Optional[User] = None
        self._log = get_logger("UserService")

    def sign_up(self, username: str, password: str) -> User:
        username = (username or "").strip()
        if not username:
            raise ValueError("username required")
        if not password:
            raise ValueError("password required")
        if self._users.get_user_by_name(username) is not None:
            raise DuplicateUsernameError(username)
        user_id = self._users.save_user(username, hash_password(password))
        self._log.info("Registered user %s (id=%s)", username, user_id)
        return User(id=user_id, username=username)

    def sign_in(self, username: str, password: str) -> User:
        user = self._users.get_user_by_name((username or "").strip())
        if user is None or not verify_password(password, user.password_hash):
            self._log.warning("Failed sign-in for %r", username)
            raise InvalidCredentialsError()
        self._current = user
        self._log.info("Signed in %s", user.username)
        return user

    def sign_out(self) -> None:
        if self._current is not None:
            self._log.info("Signed out %s", self._current.username)
        self._current = None

    def current_user(self) -> Optional[User]:
        return self._current

    def current_user_id(self) -> int:
        if self._current is None:
            raise NoSignedInUserError()
        return int(self._current.id)

    def require_user(self) -> User:
        if self._current is None:
            raise NoSignedInUserError()
        return self._current

    def get_user(self, user_id: int) -> User:
        user = self._users.get_user(user_id)
        if user is None:
            raise InexistentEntityError("user", user_id)
        return user

    def get_user_by_name(self, username: str) -> User:
        user = self._users.get_user_by_name(username)
        if user is None:
            raise InexistentEntityError("user", username)
        return user
