from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@dataclass(frozen=True)
class AppConfig:
    mongodb_uri: str = os.getenv("MONGODB_URI", "")
    database_name: str = os.getenv("MONGODB_DATABASE", "restaurant_directory")
    server_selection_timeout_ms: int = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    token_expire_minutes: int = int(os.getenv("TOKEN_EXPIRE_MINUTES", "60"))
    port: int = int(os.getenv("PORT", "5000"))

    def require_secrets(self) -> None:
        """Raise if the values that have no safe default are missing."""
        missing = [
            name
            for name, value in (("MONGODB_URI", self.mongodb_uri), ("JWT_SECRET", self.jwt_secret))
            if not value
        ]
        if missing:
            raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")


DEFAULT_APP_CONFIG = AppConfig()


def get_config() -> AppConfig:
    """FastAPI dependency; tests override it with their own config."""
    return DEFAULT_APP_CONFIG
