from __future__ import annotations

import logging

from ..errors import NotFoundError, UnauthorizedError
from ..storage.base import UserStore
from .credentials import CredentialVerifier
from .models import User

logger = logging.getLogger(__name__)

_INVALID_LOGIN = "Invalid email or password"


class UserService:
    def __init__(self, users: UserStore, credentials: CredentialVerifier) -> None:
        self._users = users
        self._credentials = credentials

    def register(self, name: str, email: str, password: str) -> str:
        """Create a user and return a fresh token. Raises ``DuplicateEmailError``."""
        user = User(
            name=name,
            email=email,
            password_hash=self._credentials.hash_password(password),
        )
        self._users.insert(user)
        logger.info("Registered user %s", user.id)
        return self._credentials.issue_token(user)

    def login(self, email: str, password: str) -> str:
        user = self._users.get_by_email(email)
        if user is None or not self._credentials.verify_password(password, user.password_hash):
            logger.warning("Failed login attempt for %s", email)
            raise UnauthorizedError(_INVALID_LOGIN)
        return self._credentials.issue_token(user)

    def get_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
