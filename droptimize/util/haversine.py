"""Great-circle distance, bearing and heading helpers."""

from math import radians, degrees, sin, cos, atan2, sqrt
from typing import Any

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = 6371000.0


def to_radians(deg: float) -> float:
    return radians(deg)


def to_degrees(rad: float) -> float:
    return degrees(rad)


def _lat_lng(point: Any):
    # Accept GeoPoint, {latitude, longitude}, {lat, lng} or (lat, lng)
    if isinstance(point, (tuple, list)):
        return float(point[0]), float(point[1])
    if isinstance(point, dict):
        if "latitude" in point:
            return point["latitude"], point["longitude"]
        return point["lat"], point["lng"]
    if hasattr(point, "latitude"):
        return point.latitude, point.longitude
    return point.lat, point.lng


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    dlat = radians(lat2 - lat1)  # delta lat
    dlon = radians(lon2 - lon1)  # delta lon
    h = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    return 2 * atan2(sqrt(h), sqrt(1 - h))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in km between two (lat, lon) pairs on a sphere of mean Earth radius."""
    return EARTH_RADIUS_KM * _central_angle(lat1, lon1, lat2, lon2)


def haversine_meters(point_a: Any, point_b: Any) -> float:
    """Distance in meters between two points."""
    lat1, lon1 = _lat_lng(point_a)
    lat2, lon2 = _lat_lng(point_b)
    return EARTH_RADIUS_M * _central_angle(lat1, lon1, lat2, lon2)


def bearing_degrees(point_a: Any, point_b: Any) -> float:
    """Initial compass bearing from A to B in [0, 360).

    Identical points yield 0.0.
    """
    lat1, lon1 = _lat_lng(point_a)
    lat2, lon2 = _lat_lng(point_b)
    phi1, phi2 = radians(lat1), radians(lat2)
    dlon = radians(lon2 - lon1)
    y = sin(dlon) * cos(phi2)
    x = cos(phi1) * sin(phi2) - sin(phi1) * cos(phi2) * cos(dlon)
    return normalize_degrees(degrees(atan2(y, x)))


def normalize_degrees(deg: float) -> float:
    """Map any angle into [0, 360)."""
    out = deg % 360.0  # python modulo is already non-negative
    if out >= 360.0:  # -1e-14 % 360 rounds up to 360.0
        return 0.0
    return out


def smooth_heading(prev_heading: float, next_heading: float, alpha: float) -> float:
    """Exponentially smooth a heading along the shortest arc."""
    diff = (next_heading - prev_heading) % 360.0  # [0, 360)
    if diff > 180.0:
        diff -= 360.0  # shortest arc in (-180, 180]
    return normalize_degrees(prev_heading + alpha * diff)
