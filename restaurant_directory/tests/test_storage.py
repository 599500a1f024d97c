from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId
from pymongo import GEOSPHERE, ReturnDocument
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from restaurant_directory.errors import Conflict, InternalError, NotFound
from restaurant_directory.storage.client import connect, ensure_indexes
from restaurant_directory.storage.restaurants import DEFAULTS, RestaurantStore
from restaurant_directory.storage.users import UserStore

from .fakes import TEST_CONFIG


def _db(collection):
    db = MagicMock()
    db.__getitem__.return_value = collection
    return db


# ── Client lifecycle ─────────────────────────────────────────────────────


@patch("restaurant_directory.storage.client.MongoClient")
def test_connect_uses_configured_uri(mock_client_cls):
    connect(TEST_CONFIG)
    mock_client_cls.assert_called_once_with(
        TEST_CONFIG.mongodb_uri,
        serverSelectionTimeoutMS=TEST_CONFIG.server_selection_timeout_ms,
        tz_aware=True,
    )


def test_ensure_indexes():
    collection = MagicMock()
    ensure_indexes(_db(collection))
    collection.create_index.assert_any_call([("location", GEOSPHERE)])
    collection.create_index.assert_any_call([("email", 1)], unique=True)


# ── Restaurants ──────────────────────────────────────────────────────────


def test_create_fills_defaults_and_returns_string_id():
    collection = MagicMock()
    oid = ObjectId()
    collection.insert_one.return_value.inserted_id = oid
    store = RestaurantStore(_db(collection))

    doc = store.create({
        "name": "A",
        "description": "B",
        "location": {"coordinates": [1.0, 2.0]},
        "ratings": [],
    })

    inserted = collection.insert_one.call_args[0][0]
    assert inserted["location"] == {"type": "Point", "coordinates": [1.0, 2.0]}
    assert inserted["radius"] == 500
    assert inserted["minimumDistance"] == 500
    assert inserted["maximumDistance"] == 2000
    assert doc["_id"] == str(oid)


def test_create_without_ratings_gets_its_own_list():
    collection = MagicMock()
    collection.insert_one.return_value.inserted_id = ObjectId()
    store = RestaurantStore(_db(collection))
    fields = {"name": "A", "description": "B", "location": {"coordinates": [1.0, 2.0]}}

    first = store.create(dict(fields))
    second = store.create(dict(fields))
    first["ratings"].append(5)

    assert second["ratings"] == []
    assert DEFAULTS["ratings"] == []


def test_get_converts_id():
    collection = MagicMock()
    oid = ObjectId()
    collection.find_one.return_value = {"_id": oid, "name": "A"}
    doc = RestaurantStore(_db(collection)).get(str(oid))
    collection.find_one.assert_called_once_with({"_id": oid})
    assert doc == {"_id": str(oid), "name": "A"}


def test_get_missing():
    collection = MagicMock()
    collection.find_one.return_value = None
    with pytest.raises(NotFound):
        RestaurantStore(_db(collection)).get(str(ObjectId()))


def test_malformed_id_is_not_found_without_query():
    collection = MagicMock()
    store = RestaurantStore(_db(collection))
    with pytest.raises(NotFound):
        store.get("not-an-object-id")
    with pytest.raises(NotFound):
        store.delete("not-an-object-id")
    collection.find_one.assert_not_called()
    collection.delete_one.assert_not_called()


def test_list_without_filter():
    collection = MagicMock()
    collection.find.return_value = iter([{"_id": ObjectId(), "name": "A"}])
    docs = RestaurantStore(_db(collection)).list()
    collection.find.assert_called_once_with()
    assert docs[0]["name"] == "A"


def test_list_with_point_uses_center_sphere():
    collection = MagicMock()
    collection.find.return_value = iter([])
    RestaurantStore(_db(collection)).list("-122.42", "37.77", "5")
    query = collection.find.call_args[0][0]
    assert "$centerSphere" in query["location"]["$geoWithin"]


def test_update_returns_document_after():
    collection = MagicMock()
    oid = ObjectId()
    collection.find_one_and_update.return_value = {"_id": oid, "name": "New"}
    doc = RestaurantStore(_db(collection)).update(str(oid), {"name": "New"})
    collection.find_one_and_update.assert_called_once_with(
        {"_id": oid}, {"$set": {"name": "New"}}, return_document=ReturnDocument.AFTER,
    )
    assert doc["name"] == "New"


def test_update_missing():
    collection = MagicMock()
    collection.find_one_and_update.return_value = None
    with pytest.raises(NotFound):
        RestaurantStore(_db(collection)).update(str(ObjectId()), {"name": "New"})


def test_update_with_no_fields_reads_current():
    collection = MagicMock()
    oid = ObjectId()
    collection.find_one.return_value = {"_id": oid, "name": "Same"}
    doc = RestaurantStore(_db(collection)).update(str(oid), {})
    collection.find_one_and_update.assert_not_called()
    assert doc["name"] == "Same"


def test_delete_missing():
    collection = MagicMock()
    collection.delete_one.return_value.deleted_count = 0
    with pytest.raises(NotFound):
        RestaurantStore(_db(collection)).delete(str(ObjectId()))


def test_driver_failure_becomes_internal_error():
    collection = MagicMock()
    collection.find.side_effect = ServerSelectionTimeoutError("down")
    with pytest.raises(InternalError) as excinfo:
        RestaurantStore(_db(collection)).list()
    assert excinfo.value.message == "Error retrieving restaurants"


# ── Users ────────────────────────────────────────────────────────────────


def test_user_create_duplicate_email():
    collection = MagicMock()
    collection.insert_one.side_effect = DuplicateKeyError("dup")
    with pytest.raises(Conflict) as excinfo:
        UserStore(_db(collection)).create("alice", "alice@example.com", "hash")
    assert excinfo.value.message == "User already exists with this email."


def test_user_find_by_email():
    collection = MagicMock()
    oid = ObjectId()
    collection.find_one.return_value = {"_id": oid, "email": "a@b.c", "password": "h"}
    user = UserStore(_db(collection)).find_by_email("a@b.c")
    collection.find_one.assert_called_once_with({"email": "a@b.c"})
    assert user["_id"] == str(oid)


def test_user_find_by_email_missing():
    collection = MagicMock()
    collection.find_one.return_value = None
    assert UserStore(_db(collection)).find_by_email("a@b.c") is None
