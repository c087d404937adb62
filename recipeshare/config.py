from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> tuple[str, ...]:
    return tuple(v.strip() for v in os.getenv(name, default).split(",") if v.strip())


@dataclass(frozen=True)
class Settings:
    # Empty DB_URL selects the in-memory store
    db_url: str = os.getenv("DB_URL", "")
    db_name: str = os.getenv("DB_NAME", "recipeshare")
    jwt_secret: str = os.getenv("JWT_SECRET", "recipeshare-dev-secret-change-in-production")
    token_ttl_seconds: int = int(os.getenv("TOKEN_TTL_SECONDS", "3600"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))
    port: int = int(os.getenv("PORT", "3000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    strict_rating_votes: bool = _env_flag("STRICT_RATING_VOTES")
    cors_origins: tuple[str, ...] = _env_list("CORS_ORIGINS", "*")


DEFAULT_SETTINGS = Settings()
