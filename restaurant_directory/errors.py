"""
Error taxonomy shared by the stores, the access gate and the route handlers.

Everything below the HTTP layer raises one of these; ``app.py`` is the only
place that turns them into responses.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class DirectoryError(Exception):
    status_code = 500

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(DirectoryError):
    status_code = 400


class Unauthorized(DirectoryError):
    status_code = 401


class InvalidCredentials(Unauthorized):
    # Login failures are reported as a bad request, not a 401.
    status_code = 400


class NotFound(DirectoryError):
    status_code = 404


class Conflict(DirectoryError):
    status_code = 400


class InternalError(DirectoryError):
    status_code = 500


@contextmanager
def store_errors(message: str) -> Iterator[None]:
    """Re-raise any driver failure inside the block as ``InternalError(message)``."""
    try:
        yield
    except PyMongoError as exc:
        logger.exception("%s", message)
        raise InternalError(message) from exc
