from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from ..config import AppConfig
from ..errors import Unauthorized
from .models import Identity

INVALID_TOKEN = "Invalid token."


def create_access_token(claims: dict[str, Any], config: AppConfig) -> str:
    """Sign ``claims`` with an ``exp`` of now + ``token_expire_minutes``."""
    if not config.jwt_secret:
        raise RuntimeError("JWT_SECRET is not configured")
    to_encode = dict(claims)
    expire = datetime.now(timezone.utc) + timedelta(minutes=config.token_expire_minutes)
    to_encode["exp"] = expire
    return jwt.encode(to_encode, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: AppConfig) -> Identity:
    """Verify signature and expiry. Raises ``Unauthorized`` on any failure."""
    if not config.jwt_secret:
        raise RuntimeError("JWT_SECRET is not configured")
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except JWTError as exc:
        raise Unauthorized(INVALID_TOKEN) from exc
    if not payload.get("_id") or not payload.get("email"):
        raise Unauthorized(INVALID_TOKEN)
    return Identity(_id=str(payload["_id"]), email=payload["email"])
