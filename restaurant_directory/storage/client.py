from __future__ import annotations

import logging

from pymongo import ASCENDING, GEOSPHERE, MongoClient
from pymongo.database import Database

from ..config import AppConfig

logger = logging.getLogger(__name__)

RESTAURANTS_COLLECTION = "restaurants"
USERS_COLLECTION = "users"


def connect(config: AppConfig) -> MongoClient:
    """Create the client. pymongo connects lazily, so this does no I/O."""
    return MongoClient(
        config.mongodb_uri,
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
        tz_aware=True,
    )


def ensure_indexes(db: Database) -> None:
    db[RESTAURANTS_COLLECTION].create_index([("location", GEOSPHERE)])
    db[USERS_COLLECTION].create_index([("email", ASCENDING)], unique=True)
    logger.info("Indexes ensured on %s", db.name)
