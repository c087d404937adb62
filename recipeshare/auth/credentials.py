from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from ..errors import UnauthorizedError
from .models import MAX_PASSWORD_BYTES, TokenClaims, User

logger = logging.getLogger(__name__)


class CredentialVerifier:
    """Hashes passwords with bcrypt and signs/verifies JWT bearer tokens."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 3600,
        bcrypt_rounds: int = 10,
        algorithm: str = "HS256",
    ) -> None:
        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)
        self._rounds = bcrypt_rounds
        self._algorithm = algorithm

    def hash_password(self, plain: str) -> str:
        return bcrypt.hashpw(plain.encode(), bcrypt.gensalt(rounds=self._rounds)).decode()

    def verify_password(self, plain: str, hashed: str) -> bool:
        encoded = plain.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        return bcrypt.checkpw(encoded, hashed.encode())

    def issue_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify_token(self, token: str) -> TokenClaims:
        """Return the identity embedded in ``token``. Raises ``UnauthorizedError``."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "id"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise UnauthorizedError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise UnauthorizedError("Invalid token") from exc

        return TokenClaims(
            id=str(payload["id"]),
            name=payload.get("name", ""),
            email=payload.get("email", ""),
        )
