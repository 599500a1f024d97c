from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ValidationError


class LocationIn(BaseModel):
    type: str = "Point"
    coordinates: list[float] = Field(default_factory=list, description="[longitude, latitude]")


def check_location(location: LocationIn) -> None:
    """Reject anything that is not a GeoJSON Point with one coordinate pair."""
    if location.type != "Point":
        raise ValidationError("Location must be of type Point")
    if len(location.coordinates) != 2:
        raise ValidationError("Location coordinates must be an array with two elements")
    longitude, latitude = location.coordinates
    if not (-180.0 <= longitude <= 180.0 and -90.0 <= latitude <= 90.0):
        raise ValidationError("Location coordinates must be a valid [longitude, latitude] pair")


class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    location: LocationIn
    ratings: list[float] = Field(default_factory=list)


class RestaurantUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    location: LocationIn | None = None
    ratings: list[float] | None = None


class GeoPoint(BaseModel):
    type: str = "Point"
    coordinates: list[float]


class RestaurantOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    description: str
    location: GeoPoint
    ratings: list[float] = Field(default_factory=list)
    radius: float = 500
    minimumDistance: float = 500
    maximumDistance: float = 2000


class RestaurantEnvelope(BaseModel):
    message: str
    restaurant: RestaurantOut


class NearbyRestaurant(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    description: str
    location: GeoPoint
    averageRating: float | None = None
    numberOfRatings: int = 0
    distance: float


class FlatLocation(BaseModel):
    latitude: float
    longitude: float


class RangeRestaurant(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    description: str
    location: FlatLocation
    averageRating: float | None = None
    numberOfRatings: int = 0
    distance: float
