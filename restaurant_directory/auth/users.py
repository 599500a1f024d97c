from __future__ import annotations

import logging

import bcrypt
from email_validator import EmailNotValidError, validate_email

from ..config import AppConfig
from ..errors import Conflict, InvalidCredentials
from ..storage.users import USER_EXISTS, UserStore
from .models import SignupRequest
from .tokens import create_access_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."


def _password_bytes(plain: str) -> bytes:
    # bcrypt only uses the first 72 bytes.
    return plain.encode("utf-8")[:72]


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode())
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def signup(store: UserStore, body: SignupRequest) -> dict:
    """Register a user. Raises ``Conflict`` if the email is taken."""
    if store.find_by_email(body.email) is not None:
        raise Conflict(USER_EXISTS)
    user = store.create(body.username, body.email, _hash_password(body.password))
    logger.info("Registered user %s", user["_id"])
    return user


def login(store: UserStore, email: str, password: str, config: AppConfig) -> str:
    """Verify credentials and return a signed token.

    Unknown email and wrong password fail identically.
    """
    try:
        # Same normalisation EmailStr applied at signup.
        email = validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        raise InvalidCredentials(INVALID_CREDENTIALS) from None
    user = store.find_by_email(email)
    if not user or not _verify_password(password, user.get("password", "")):
        raise InvalidCredentials(INVALID_CREDENTIALS)
    return create_access_token({"_id": user["_id"], "email": user["email"]}, config)
