"""
Proximity query composition.

MongoDB does the actual nearest-neighbour work through the 2dsphere index on
``location``. This module only validates the query parameters and assembles
the pipeline stages:

* ``$geoNear`` with ``near`` given as a legacy ``[longitude, latitude]`` pair,
  so that ``minDistance``/``maxDistance`` and the computed ``distance`` are all
  in radians on a sphere.
* ``$addFields`` for the rating aggregates. ``$avg`` of an empty array is
  ``null``, which is what callers get for restaurants without ratings.
* ``$project`` converting ``distance`` back to meters.
* ``$sort`` on distance, nearest first.
"""
from __future__ import annotations

import logging
import math
from typing import Any

from pymongo.collection import Collection

from ..errors import ValidationError, store_errors
from .units import EARTH_RADIUS_METERS, meters_to_radians, miles_to_meters

logger = logging.getLogger(__name__)

RADIUS_PARAMS_REQUIRED = "Latitude, longitude, and radius are required"
RANGE_PARAMS_REQUIRED = (
    "Latitude, longitude, minimumDistance, and maximumDistance are required"
)

_RATING_FIELDS = {
    "averageRating": {"$avg": "$ratings"},
    "numberOfRatings": {"$size": {"$ifNull": ["$ratings", []]}},
}


def _to_float(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number") from None
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be a finite number")
    return number


def _point(longitude: Any, latitude: Any) -> list[float]:
    lon = _to_float("longitude", longitude)
    lat = _to_float("latitude", latitude)
    if not -180.0 <= lon <= 180.0:
        raise ValidationError("longitude must be between -180 and 180")
    if not -90.0 <= lat <= 90.0:
        raise ValidationError("latitude must be between -90 and 90")
    return [lon, lat]


def _distance(name: str, value: Any, positive: bool = False) -> float:
    number = _to_float(name, value)
    if positive and number <= 0:
        raise ValidationError(f"{name} must be positive")
    if number < 0:
        raise ValidationError(f"{name} must not be negative")
    return number


def _missing(*values: Any) -> bool:
    return any(v is None or v == "" for v in values)


def _geo_near(point: list[float], **bounds: float) -> dict[str, Any]:
    stage: dict[str, Any] = {
        "near": point,
        "distanceField": "distance",
        "spherical": True,
    }
    stage.update(bounds)
    return {"$geoNear": stage}


def _distance_in_meters() -> dict[str, Any]:
    return {"$multiply": ["$distance", EARTH_RADIUS_METERS]}


def radius_pipeline(longitude: Any, latitude: Any, radius: Any) -> list[dict[str, Any]]:
    """Pipeline for every restaurant within ``radius`` meters, nearest first."""
    if _missing(longitude, latitude, radius):
        raise ValidationError(RADIUS_PARAMS_REQUIRED)
    point = _point(longitude, latitude)
    max_distance = meters_to_radians(_distance("radius", radius, positive=True))

    return [
        _geo_near(point, maxDistance=max_distance),
        {"$addFields": dict(_RATING_FIELDS)},
        {
            "$project": {
                "name": 1,
                "description": 1,
                "location": 1,
                "averageRating": 1,
                "numberOfRatings": 1,
                "distance": _distance_in_meters(),
            }
        },
        {"$sort": {"distance": 1}},
    ]


def range_pipeline(
    longitude: Any,
    latitude: Any,
    minimum_distance: Any,
    maximum_distance: Any,
) -> list[dict[str, Any]]:
    """Pipeline for restaurants between the two bounds (meters), nearest first.

    The location is flattened into ``latitude``/``longitude`` scalars.
    """
    if _missing(longitude, latitude, minimum_distance, maximum_distance):
        raise ValidationError(RANGE_PARAMS_REQUIRED)
    point = _point(longitude, latitude)
    min_meters = _distance("minimumDistance", minimum_distance)
    max_meters = _distance("maximumDistance", maximum_distance, positive=True)
    if min_meters > max_meters:
        raise ValidationError("minimumDistance must not exceed maximumDistance")

    return [
        _geo_near(
            point,
            minDistance=meters_to_radians(min_meters),
            maxDistance=meters_to_radians(max_meters),
        ),
        {"$addFields": dict(_RATING_FIELDS)},
        {
            "$project": {
                "name": 1,
                "description": 1,
                "location": {
                    "latitude": {"$arrayElemAt": ["$location.coordinates", 1]},
                    "longitude": {"$arrayElemAt": ["$location.coordinates", 0]},
                },
                "averageRating": 1,
                "numberOfRatings": 1,
                "distance": _distance_in_meters(),
            }
        },
        {"$sort": {"distance": 1}},
    ]


def bounding_region_filter(longitude: Any, latitude: Any, distance_miles: Any) -> dict[str, Any]:
    """Containment filter for the spherical cap of ``distance_miles`` around a point."""
    point = _point(longitude, latitude)
    meters = miles_to_meters(_distance("distance", distance_miles, positive=True))
    return {
        "location": {
            "$geoWithin": {"$centerSphere": [point, meters_to_radians(meters)]}
        }
    }


def _with_string_id(doc: dict[str, Any]) -> dict[str, Any]:
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


class ProximitySearch:
    """Runs the composed geo queries against a restaurants collection."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def find_within_radius(
        self, longitude: Any, latitude: Any, radius: Any
    ) -> list[dict[str, Any]]:
        pipeline = radius_pipeline(longitude, latitude, radius)
        logger.debug("Radius search pipeline: %s", pipeline)
        with store_errors("Error retrieving restaurants"):
            return [_with_string_id(doc) for doc in self.collection.aggregate(pipeline)]

    def find_within_range(
        self,
        longitude: Any,
        latitude: Any,
        minimum_distance: Any,
        maximum_distance: Any,
    ) -> list[dict[str, Any]]:
        pipeline = range_pipeline(longitude, latitude, minimum_distance, maximum_distance)
        logger.debug("Range search pipeline: %s", pipeline)
        with store_errors("Error retrieving restaurants"):
            return [_with_string_id(doc) for doc in self.collection.aggregate(pipeline)]

    def find_by_bounding_region(
        self, longitude: Any, latitude: Any, distance_miles: Any
    ) -> list[dict[str, Any]]:
        query = bounding_region_filter(longitude, latitude, distance_miles)
        with store_errors("Error retrieving restaurants"):
            return [_with_string_id(doc) for doc in self.collection.find(query)]
