from __future__ import annotations

from typing import Any

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..errors import Conflict, store_errors
from .client import USERS_COLLECTION

USER_EXISTS = "User already exists with this email."


class UserStore:
    def __init__(self, db: Database) -> None:
        self.collection = db[USERS_COLLECTION]

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        with store_errors("Error retrieving user"):
            doc = self.collection.find_one({"email": email})
        if doc is not None:
            doc["_id"] = str(doc["_id"])
        return doc

    def create(self, username: str, email: str, password_hash: str) -> dict[str, Any]:
        doc = {"username": username, "email": email, "password": password_hash}
        with store_errors("Error registering user"):
            try:
                result = self.collection.insert_one(doc)
            except DuplicateKeyError:
                # Lost a race with a concurrent signup for the same email.
                raise Conflict(USER_EXISTS) from None
        doc["_id"] = str(result.inserted_id)
        return doc
