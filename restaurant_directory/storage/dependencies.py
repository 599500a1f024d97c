from __future__ import annotations

from fastapi import Depends, Request
from pymongo.database import Database

from ..geo.proximity import ProximitySearch
from .restaurants import RestaurantStore
from .users import UserStore


def get_database(request: Request) -> Database:
    """The database handle opened by the application lifespan."""
    return request.app.state.db


def get_restaurant_store(db: Database = Depends(get_database)) -> RestaurantStore:
    return RestaurantStore(db)


def get_user_store(db: Database = Depends(get_database)) -> UserStore:
    return UserStore(db)


def get_proximity_search(
    store: RestaurantStore = Depends(get_restaurant_store),
) -> ProximitySearch:
    return store.search
