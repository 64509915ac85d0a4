"""
Driver record normalization.

Driver documents accumulated several shapes over time (``loc``, ``location``,
``geo``). Position and speed are read through ordered extractor strategies;
the first strategy producing a complete, finite reading wins.

Position priority:
    1. loc.lat / loc.lng
    2. location.latitude / location.longitude
    3. location.lat / location.lng
    4. geo.lat / geo.lng

Speed priority (independent of the position match):
    1. loc.speed
    2. location.speedKmh
    3. speed
    4. avgSpeed
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .models import GeoPoint, NormalizedDriver, _finite_number
from .util.units import round_half_up


def _field(record: Any, name: str) -> Any:
    """Read a key from a mapping or an attribute from an object; None if absent."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class PositionShape:
    """One way a position can be stored on a driver record."""
    container: str
    lat_key: str
    lng_key: str

    def extract(self, record: Any) -> Optional[GeoPoint]:
        holder = _field(record, self.container)
        lat = _finite_number(_field(holder, self.lat_key))
        lng = _finite_number(_field(holder, self.lng_key))
        if lat is None or lng is None:
            return None
        return GeoPoint(latitude=lat, longitude=lng)


@dataclass(frozen=True)
class SpeedShape:
    """One way a speed (km/h) can be stored; container None means top level."""
    container: Optional[str]
    key: str

    def extract(self, record: Any) -> Optional[float]:
        holder = record if self.container is None else _field(record, self.container)
        return _finite_number(_field(holder, self.key))


POSITION_SHAPES: Tuple[PositionShape, ...] = (
    PositionShape("loc", "lat", "lng"),
    PositionShape("location", "latitude", "longitude"),
    PositionShape("location", "lat", "lng"),
    PositionShape("geo", "lat", "lng"),
)

SPEED_SHAPES: Tuple[SpeedShape, ...] = (
    SpeedShape("loc", "speed"),
    SpeedShape("location", "speedKmh"),
    SpeedShape(None, "speed"),
    SpeedShape(None, "avgSpeed"),
)


def get_driver_location(record: Any) -> Optional[GeoPoint]:
    """Canonical position of a driver record, or None."""
    if record is None:
        return None
    for shape in POSITION_SHAPES:
        point = shape.extract(record)
        if point is not None:
            return point
    return None


def get_display_speed(record: Any) -> Optional[int]:
    """Speed in whole km/h for display, or None."""
    if record is None:
        return None
    for shape in SPEED_SHAPES:
        value = shape.extract(record)
        if value is not None:
            return round_half_up(value)
    return None


def _first_present(record: Any, *names: str) -> Any:
    for name in names:
        value = _field(record, name)
        if value not in (None, ""):
            return value
    return None


def normalize_driver(record: Any) -> NormalizedDriver:
    """Build a read-only view of a driver document. The record is not modified."""
    record = record or {}

    driver_id = _first_present(record, "id", "uid", "_id")

    parts = " ".join(
        str(p) for p in (_field(record, "firstName"), _field(record, "lastName")) if p
    ).strip()
    full_name = _first_present(record, "fullName", "displayName") or parts or _field(record, "name")

    status_raw = _field(record, "status")
    if status_raw is None:
        status_raw = _field(record, "state")
    status = "" if status_raw is None else str(status_raw).lower()

    heading = _finite_number(_field(_field(record, "loc"), "heading"))
    if heading is None:
        heading = _finite_number(_field(record, "heading"))

    parcels = _field(record, "parcels")
    if isinstance(parcels, (list, tuple)):
        parcels_count = len(parcels)
    else:
        count = _first_present(record, "parcelsLeft", "parcelsCount")
        parcels_count = int(count) if _finite_number(count) is not None else None

    return NormalizedDriver(
        id=str(driver_id) if driver_id is not None else None,
        full_name=full_name,
        status=status,
        location=get_driver_location(record),
        speed_kmh=get_display_speed(record),
        heading=heading,
        parcels_count=parcels_count,
    )
