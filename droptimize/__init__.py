"""
Droptimize courier core.
Geospatial helpers, driver record normalization, speed-limit zones and
straight-line ETA estimation for the dispatch dashboard.
"""

__version__ = "0.1.0"

from .errors import DirectionsError, InvalidArgument
from .estimator import RouteEstimator, estimate
from .models import GeoPoint, NormalizedDriver, RouteEstimate, Zone, ZoneCategory
from .normalizer import get_display_speed, get_driver_location, normalize_driver
from .util.haversine import (
    bearing_degrees, haversine_km, haversine_meters, normalize_degrees, smooth_heading
)
from .zones import applicable_limit, is_inside, is_overspeeding

__all__ = [
    "DirectionsError",
    "InvalidArgument",
    "GeoPoint",
    "NormalizedDriver",
    "RouteEstimate",
    "RouteEstimator",
    "Zone",
    "ZoneCategory",
    "applicable_limit",
    "bearing_degrees",
    "estimate",
    "get_display_speed",
    "get_driver_location",
    "haversine_km",
    "haversine_meters",
    "is_inside",
    "is_overspeeding",
    "normalize_degrees",
    "normalize_driver",
    "smooth_heading",
]
