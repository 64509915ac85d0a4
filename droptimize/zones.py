"""
Speed-limit zone membership.
Circular geofences plus aggregation of the most restrictive applicable limit.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Union

from .errors import InvalidArgument
from .models import GeoPoint, Zone
from .util.haversine import haversine_meters


logger = logging.getLogger(__name__)

CROSSWALK_RADIUS_KM = 0.015
CROSSWALK_LIMIT_KMH = 10

ZoneLike = Union[Zone, Mapping]


def _as_zone(zone: ZoneLike) -> Zone:
    if isinstance(zone, Zone):
        return zone
    if not isinstance(zone, Mapping):
        return Zone(category="", location=None, radius_meters=None, speed_limit_kmh=None)
    return Zone.from_record(zone)


def _is_usable(zone: Zone) -> bool:
    return (
        zone.location is not None
        and zone.radius_meters is not None
        and math.isfinite(zone.radius_meters)
    )


def is_inside(point: Any, zone: ZoneLike) -> bool:
    """True when the point lies within the zone radius (boundary inclusive).

    Zones without a location or finite radius are never entered, and neither
    are zones with a zero or negative radius.
    """
    zone = _as_zone(zone)
    if not _is_usable(zone) or zone.radius_meters <= 0:
        return False
    return haversine_meters(point, zone.location) <= zone.radius_meters


def validate_zone(zone: ZoneLike) -> Zone:
    """Strict check for callers that must reject malformed zones."""
    parsed = _as_zone(zone)
    if parsed.location is None:
        raise InvalidArgument(f"zone {parsed.category!r} has no valid location")
    if not _is_usable(parsed):
        raise InvalidArgument(f"zone {parsed.category!r} has no finite radius")
    if parsed.speed_limit_kmh is None or not math.isfinite(parsed.speed_limit_kmh):
        raise InvalidArgument(f"zone {parsed.category!r} has no finite speed limit")
    return parsed


def applicable_limit(
    point: Any,
    zones: Iterable[ZoneLike],
    extra_fixed_limits: Iterable[float] = (),
    categories: Optional[Iterable[str]] = None,
) -> Optional[float]:
    """Most restrictive speed limit governing the point, or None when unrestricted.

    Args:
        point: position to test
        zones: candidate zones; malformed ones are skipped
        extra_fixed_limits: limits determined elsewhere (e.g. crosswalk proximity)
        categories: when given, only zones of these categories take part

    Returns:
        The minimum of every inside zone's limit and the fixed limits.
    """
    wanted = None if categories is None else {getattr(c, "value", c) for c in categories}
    candidates: List[float] = []

    for raw in zones or ():
        zone = _as_zone(raw)
        category = getattr(zone.category, "value", zone.category)
        if wanted is not None and category not in wanted:
            continue
        limit = zone.speed_limit_kmh
        if not _is_usable(zone) or limit is None or not math.isfinite(limit):
            logger.debug(f"Skipping malformed zone {zone.category!r}")
            continue
        if is_inside(point, zone):
            candidates.append(float(limit))

    for limit in extra_fixed_limits or ():
        if limit is not None and math.isfinite(limit):
            candidates.append(float(limit))

    if not candidates:
        return None
    return min(candidates)


def is_overspeeding(current_speed: Optional[float], speed_limit: Optional[float]) -> bool:
    """Speed strictly above a positive limit."""
    if isinstance(current_speed, bool) or not isinstance(current_speed, (int, float)):
        return False
    return speed_limit is not None and speed_limit > 0 and current_speed > speed_limit
