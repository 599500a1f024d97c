from __future__ import annotations

import copy
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from ..errors import NotFound, store_errors
from ..geo.proximity import ProximitySearch
from .client import RESTAURANTS_COLLECTION

RESTAURANT_NOT_FOUND = "Restaurant not found"

DEFAULTS: dict[str, Any] = {
    "ratings": [],
    "radius": 500,
    "minimumDistance": 500,
    "maximumDistance": 2000,
}


def _object_id(restaurant_id: str) -> ObjectId:
    # A malformed id cannot match any document.
    if not ObjectId.is_valid(restaurant_id):
        raise NotFound(RESTAURANT_NOT_FOUND)
    return ObjectId(restaurant_id)


def _serialize(doc: dict[str, Any]) -> dict[str, Any]:
    doc["_id"] = str(doc["_id"])
    return doc


class RestaurantStore:
    def __init__(self, db: Database) -> None:
        self.collection = db[RESTAURANTS_COLLECTION]
        self.search = ProximitySearch(self.collection)

    def create(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a restaurant, filling defaults. Returns it with ``_id`` set."""
        doc = {**copy.deepcopy(DEFAULTS), **{k: v for k, v in fields.items() if v is not None}}
        doc["location"] = {"type": "Point", **doc["location"]}
        with store_errors("Error creating restaurant"):
            result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _serialize(doc)

    def get(self, restaurant_id: str) -> dict[str, Any]:
        oid = _object_id(restaurant_id)
        with store_errors("Error retrieving restaurant"):
            doc = self.collection.find_one({"_id": oid})
        if doc is None:
            raise NotFound(RESTAURANT_NOT_FOUND)
        return _serialize(doc)

    def list(
        self,
        longitude: Any = None,
        latitude: Any = None,
        distance: Any = None,
    ) -> list[dict[str, Any]]:
        """All restaurants, or those within ``distance`` miles when a point is given."""
        if all(v not in (None, "") for v in (longitude, latitude, distance)):
            return self.search.find_by_bounding_region(longitude, latitude, distance)
        with store_errors("Error retrieving restaurants"):
            return [_serialize(doc) for doc in self.collection.find()]

    def update(self, restaurant_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        oid = _object_id(restaurant_id)
        if not fields:
            return self.get(restaurant_id)
        with store_errors("Error updating restaurant"):
            doc = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFound(RESTAURANT_NOT_FOUND)
        return _serialize(doc)

    def delete(self, restaurant_id: str) -> None:
        oid = _object_id(restaurant_id)
        with store_errors("Error deleting restaurant"):
            result = self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFound(RESTAURANT_NOT_FOUND)
