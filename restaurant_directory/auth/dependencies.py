from __future__ import annotations

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import AppConfig, get_config
from ..errors import Unauthorized
from .models import Identity
from .tokens import decode_access_token

logger = logging.getLogger(__name__)

NO_TOKEN = "Access denied. No token provided."

_bearer = HTTPBearer(auto_error=False)


def require_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    config: AppConfig = Depends(get_config),
) -> Identity:
    """Raise 401 unless the request carries a valid bearer token."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized(NO_TOKEN)
    try:
        user = decode_access_token(credentials.credentials, config)
    except Unauthorized:
        logger.warning("Rejected bearer token on %s %s", request.method, request.url.path)
        raise
    request.state.user = user
    return user
