from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .auth.dependencies import require_user
from .auth.models import Identity, LoginRequest, MessageResponse, SignupRequest, TokenResponse
from .auth.users import login as login_user
from .auth.users import signup as signup_user
from .config import DEFAULT_APP_CONFIG, AppConfig, get_config
from .errors import DirectoryError
from .geo.proximity import ProximitySearch
from .restaurants.models import (
    NearbyRestaurant,
    RangeRestaurant,
    RestaurantCreate,
    RestaurantEnvelope,
    RestaurantOut,
    RestaurantUpdate,
    check_location,
)
from .storage.client import connect, ensure_indexes
from .storage.dependencies import get_proximity_search, get_restaurant_store, get_user_store
from .storage.restaurants import RestaurantStore
from .storage.users import UserStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = DEFAULT_APP_CONFIG
    config.require_secrets()
    client = connect(config)
    app.state.mongo_client = client
    app.state.db = client[config.database_name]
    await run_in_threadpool(ensure_indexes, app.state.db)
    logger.info("Connected to MongoDB database %s", config.database_name)
    try:
        yield
    finally:
        client.close()
        logger.info("MongoDB connection closed")


app = FastAPI(title="Restaurant Directory API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(DirectoryError)
async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())[1:])
        errors.append(f"{field}: {err['msg']}" if field else err["msg"])
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/api/auth/signup", response_model=MessageResponse, status_code=201)
def signup(body: SignupRequest, users: UserStore = Depends(get_user_store)) -> MessageResponse:
    signup_user(users, body)
    return MessageResponse(message="User registered successfully!")


@app.post("/api/auth/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    users: UserStore = Depends(get_user_store),
    config: AppConfig = Depends(get_config),
) -> TokenResponse:
    return TokenResponse(token=login_user(users, body.email, body.password, config))


@app.get("/api/protected")
def protected(user: Identity = Depends(require_user)) -> dict:
    return {"message": "This is a protected route.", "user": user.model_dump(by_alias=True)}


# ── Restaurant endpoints ─────────────────────────────────────────────────


@app.post("/api/restaurants", response_model=RestaurantEnvelope, status_code=201)
def create_restaurant(
    body: RestaurantCreate,
    user: Identity = Depends(require_user),
    store: RestaurantStore = Depends(get_restaurant_store),
) -> RestaurantEnvelope:
    check_location(body.location)
    restaurant = store.create(body.model_dump())
    return RestaurantEnvelope(
        message="Restaurant created successfully!",
        restaurant=RestaurantOut(**restaurant),
    )


@app.get("/api/restaurants", response_model=list[RestaurantOut])
def list_restaurants(
    longitude: str | None = None,
    latitude: str | None = None,
    distance: str | None = Query(default=None, description="Radius in miles"),
    user: Identity = Depends(require_user),
    store: RestaurantStore = Depends(get_restaurant_store),
) -> list[RestaurantOut]:
    restaurants = store.list(longitude, latitude, distance)
    return [RestaurantOut(**r) for r in restaurants]


# Static paths are registered before /{restaurant_id} so they are reachable.
@app.get("/api/restaurants/nearby", response_model=list[NearbyRestaurant])
def nearby_restaurants(
    latitude: str | None = None,
    longitude: str | None = None,
    radius: str | None = Query(default=None, description="Radius in meters"),
    user: Identity = Depends(require_user),
    search: ProximitySearch = Depends(get_proximity_search),
) -> list[NearbyRestaurant]:
    results = search.find_within_radius(longitude, latitude, radius)
    return [NearbyRestaurant(**r) for r in results]


@app.get("/api/restaurants/range", response_model=list[RangeRestaurant])
def restaurants_in_range(
    latitude: str | None = None,
    longitude: str | None = None,
    minimum_distance: str | None = Query(default=None, alias="minimumDistance"),
    maximum_distance: str | None = Query(default=None, alias="maximumDistance"),
    user: Identity = Depends(require_user),
    search: ProximitySearch = Depends(get_proximity_search),
) -> list[RangeRestaurant]:
    results = search.find_within_range(longitude, latitude, minimum_distance, maximum_distance)
    return [RangeRestaurant(**r) for r in results]


@app.get("/api/restaurants/{restaurant_id}", response_model=RestaurantOut)
def get_restaurant(
    restaurant_id: str,
    user: Identity = Depends(require_user),
    store: RestaurantStore = Depends(get_restaurant_store),
) -> RestaurantOut:
    return RestaurantOut(**store.get(restaurant_id))


@app.put("/api/restaurants/{restaurant_id}", response_model=RestaurantEnvelope)
def update_restaurant(
    restaurant_id: str,
    body: RestaurantUpdate,
    user: Identity = Depends(require_user),
    store: RestaurantStore = Depends(get_restaurant_store),
) -> RestaurantEnvelope:
    fields = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    if body.location is not None:
        check_location(body.location)
        fields["location"] = {"type": "Point", "coordinates": body.location.coordinates}
    restaurant = store.update(restaurant_id, fields)
    return RestaurantEnvelope(
        message="Restaurant updated successfully!",
        restaurant=RestaurantOut(**restaurant),
    )


@app.delete("/api/restaurants/{restaurant_id}", response_model=MessageResponse)
def delete_restaurant(
    restaurant_id: str,
    user: Identity = Depends(require_user),
    store: RestaurantStore = Depends(get_restaurant_store),
) -> MessageResponse:
    store.delete(restaurant_id)
    return MessageResponse(message="Restaurant deleted successfully!")
