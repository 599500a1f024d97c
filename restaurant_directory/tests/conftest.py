from __future__ import annotations

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from restaurant_directory.app import app
from restaurant_directory.auth.tokens import create_access_token
from restaurant_directory.config import get_config
from restaurant_directory.storage.dependencies import (
    get_proximity_search,
    get_restaurant_store,
    get_user_store,
)

from .fakes import TEST_CONFIG, FakeRestaurantStore, FakeUserStore


@pytest.fixture
def restaurant_store() -> FakeRestaurantStore:
    return FakeRestaurantStore()


@pytest.fixture
def user_store() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture
def client(restaurant_store, user_store):
    app.dependency_overrides[get_config] = lambda: TEST_CONFIG
    app.dependency_overrides[get_restaurant_store] = lambda: restaurant_store
    app.dependency_overrides[get_proximity_search] = lambda: restaurant_store.search
    app.dependency_overrides[get_user_store] = lambda: user_store
    # Not entered as a context manager: the lifespan (MongoDB connection) never runs.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    token = create_access_token({"_id": str(ObjectId()), "email": "tester@example.com"}, TEST_CONFIG)
    return {"Authorization": f"Bearer {token}"}
