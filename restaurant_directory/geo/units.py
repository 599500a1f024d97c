from __future__ import annotations

# Equatorial radius (WGS84). Every meter <-> radian conversion goes through it.
EARTH_RADIUS_METERS = 6378137.0
METERS_PER_MILE = 1609.344


def meters_to_radians(meters: float) -> float:
    return meters / EARTH_RADIUS_METERS


def radians_to_meters(radians: float) -> float:
    return radians * EARTH_RADIUS_METERS


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE
