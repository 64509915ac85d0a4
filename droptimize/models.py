"""
Core value types for the geometric core.
Plain dataclasses so the core stays free of any persistence client.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional

from .errors import InvalidArgument


class ZoneCategory(str, Enum):
    """Zone categories used by the dashboard map."""
    CHURCH = "Church"
    CROSSWALK = "Crosswalk"
    SCHOOL = "School"
    SLOWDOWN = "Slowdown"


def _finite_number(value: Any) -> Optional[float]:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return number


@dataclass(frozen=True)
class GeoPoint:
    """WGS84 coordinates in degrees."""
    latitude: float
    longitude: float

    @classmethod
    def validated(cls, latitude: Any, longitude: Any) -> "GeoPoint":
        """Build a point, raising InvalidArgument on non-finite or out-of-range input."""
        lat = _finite_number(latitude)
        lon = _finite_number(longitude)
        if lat is None or lon is None:
            raise InvalidArgument(f"non-finite coordinates: ({latitude!r}, {longitude!r})")
        if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
            raise InvalidArgument(f"coordinates out of range: ({lat}, {lon})")
        return cls(latitude=lat, longitude=lon)

    def as_tuple(self):
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class Zone:
    """Circular geofence carrying a speed limit.

    Fields are optional because persisted zones may be incomplete; membership
    checks skip zones whose location or radius is missing.
    """
    category: str
    location: Optional[GeoPoint]
    radius_meters: Optional[float]
    speed_limit_kmh: Optional[float]

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Zone":
        """Read a zone from either the canonical or the persisted document shape.

        Persisted documents look like
        ``{"category": ..., "location": {"lat": ..., "lng": ...}, "radius": ..., "speedLimit": ...}``.
        """
        loc = record.get("location")
        location = None
        if isinstance(loc, GeoPoint):
            location = loc
        elif isinstance(loc, Mapping):
            lat = _finite_number(loc.get("latitude", loc.get("lat")))
            lng = _finite_number(loc.get("longitude", loc.get("lng")))
            if lat is not None and lng is not None:
                location = GeoPoint(lat, lng)

        category = record.get("category")
        radius = record.get("radius_meters", record.get("radiusMeters", record.get("radius")))
        limit = record.get("speed_limit_kmh", record.get("speedLimitKmh", record.get("speedLimit")))
        return cls(
            category=str(getattr(category, "value", category) or ""),
            location=location,
            radius_meters=_finite_number(radius),
            speed_limit_kmh=_finite_number(limit),
        )


@dataclass
class RouteEstimate:
    """Straight-line route approximation for a set of stops."""
    order: List[GeoPoint] = field(default_factory=list)
    total_distance_km: float = 0.0
    eta_minutes: int = 0


@dataclass(frozen=True)
class NormalizedDriver:
    """Read-only view over a heterogeneous driver document."""
    id: Optional[str]
    full_name: Optional[str]
    status: str
    location: Optional[GeoPoint]
    speed_kmh: Optional[int]
    heading: Optional[float]
    parcels_count: Optional[int]
