"""
Straight-line route estimator.
Greedy nearest-neighbour ordering over haversine distances, used when no
road-aware routing is available.
"""

import logging
import math
from typing import List, Optional, Sequence

from .errors import InvalidArgument
from .models import GeoPoint, RouteEstimate
from .util.haversine import haversine_km
from .util.units import minutes_from_km, round_half_up


logger = logging.getLogger(__name__)

DEFAULT_SPEED_KMH = 45.0
DEFAULT_MINUTES_PER_STOP = 5.0
TIE_TOLERANCE_KM = 1e-9


def _leg_km(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def _check_point(point: GeoPoint, label: str) -> None:
    if not (math.isfinite(point.latitude) and math.isfinite(point.longitude)):
        raise InvalidArgument(f"{label} has non-finite coordinates: {point}")


def check_minutes_per_stop(minutes_per_stop: float) -> None:
    """Raise InvalidArgument unless the per-stop allowance is a finite, non-negative number."""
    if (
        minutes_per_stop is None
        or isinstance(minutes_per_stop, bool)
        or not math.isfinite(minutes_per_stop)
        or minutes_per_stop < 0
    ):
        raise InvalidArgument(f"minutes_per_stop must be a non-negative number, got {minutes_per_stop!r}")


def nearest_neighbor_order(origin: GeoPoint, destinations: Sequence[GeoPoint]) -> List[GeoPoint]:
    """Visit order built by always moving to the closest unvisited stop.

    Stops closer than TIE_TOLERANCE_KM to the current best count as ties; the
    one listed first wins.
    """
    remaining = list(range(len(destinations)))  # indices still to visit, in input order
    order: List[GeoPoint] = []
    current = origin
    while remaining:
        best_pos = 0
        best_dist = _leg_km(current, destinations[remaining[0]])
        for pos in range(1, len(remaining)):
            dist = _leg_km(current, destinations[remaining[pos]])
            if dist < best_dist - TIE_TOLERANCE_KM:
                best_pos, best_dist = pos, dist
        current = destinations[remaining.pop(best_pos)]
        order.append(current)
    return order


def path_length_km(origin: GeoPoint, order: Sequence[GeoPoint]) -> float:
    """Sum of leg distances starting at the origin."""
    total = 0.0
    last = origin
    for point in order:
        total += _leg_km(last, point)
        last = point
    return total


class RouteEstimator:
    """Nearest-neighbour ETA estimator with a fixed per-stop handling allowance."""

    def __init__(self, speed_kmh: float = DEFAULT_SPEED_KMH, minutes_per_stop: float = DEFAULT_MINUTES_PER_STOP):
        self.speed_kmh = speed_kmh
        self.minutes_per_stop = minutes_per_stop

    def estimate(
        self,
        origin: GeoPoint,
        destinations: Sequence[GeoPoint],
        speed_kmh: Optional[float] = None,
        minutes_per_stop: Optional[float] = None,
    ) -> RouteEstimate:
        speed = self.speed_kmh if speed_kmh is None else speed_kmh
        per_stop = self.minutes_per_stop if minutes_per_stop is None else minutes_per_stop
        return estimate(origin, destinations, speed, per_stop)


def estimate(
    origin: GeoPoint,
    destinations: Sequence[GeoPoint],
    speed_kmh: float,
    minutes_per_stop: float,
) -> RouteEstimate:
    """
    Approximate a multi-stop route.

    Args:
        origin: starting position (not counted as a stop)
        destinations: unordered stops
        speed_kmh: assumed average speed, must be positive
        minutes_per_stop: handling allowance added once per destination

    Returns:
        RouteEstimate with visit order, straight-line length and ETA in minutes.

    Raises:
        InvalidArgument: non-positive or non-finite speed, negative or non-finite
            allowance, non-finite coordinates, or an ETA too large to represent.
    """
    if speed_kmh is None or not math.isfinite(speed_kmh) or speed_kmh <= 0:
        raise InvalidArgument(f"speed_kmh must be a positive number, got {speed_kmh!r}")
    check_minutes_per_stop(minutes_per_stop)
    if not destinations:
        return RouteEstimate(order=[], total_distance_km=0.0, eta_minutes=0)

    _check_point(origin, "origin")
    for idx, dest in enumerate(destinations):
        _check_point(dest, f"destination {idx}")

    order = nearest_neighbor_order(origin, destinations)
    total_km = path_length_km(origin, order)
    travel_minutes = round_half_up(minutes_from_km(total_km, speed_kmh))
    allowance = minutes_per_stop * len(destinations)
    if not math.isfinite(travel_minutes + allowance):
        raise InvalidArgument(f"ETA for {len(destinations)} stops is not finite")
    eta = round_half_up(travel_minutes + allowance)

    logger.debug(f"Estimated {len(order)} stops: {total_km:.2f} km, {eta} min")
    return RouteEstimate(order=order, total_distance_km=total_km, eta_minutes=eta)
