"""
ETA strategy chain.

Step 1 asks the road-aware Directions provider (when one is configured).
Step 2 runs the straight-line RouteEstimator whenever step 1 raises or times out.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from .errors import InvalidArgument
from .estimator import RouteEstimator, check_minutes_per_stop
from .integrations.google_directions import DirectionsRoute
from .models import GeoPoint
from .schemas import EtaConfig
from .util.units import format_eta, round_half_up


logger = logging.getLogger(__name__)

SOURCE_DIRECTIONS = "directions"
SOURCE_ESTIMATOR = "estimator"


class RouteProvider(Protocol):
    """Anything that can produce a road route for a set of stops."""

    async def route(self, origin: GeoPoint, destinations: Sequence[GeoPoint]) -> DirectionsRoute:
        ...


@dataclass
class EtaResult:
    """ETA for a driver's stops and where it came from."""
    minutes: int
    source: str
    distance_km: Optional[float] = None
    order: List[GeoPoint] = field(default_factory=list)

    @property
    def text(self) -> str:
        return format_eta(self.minutes)


class EtaService:
    """Directions first, straight-line estimator on any failure."""

    def __init__(
        self,
        config: Optional[EtaConfig] = None,
        directions: Optional[RouteProvider] = None,
        estimator: Optional[RouteEstimator] = None,
    ):
        self.config = config or EtaConfig()
        self.directions = directions
        self.estimator = estimator or RouteEstimator(
            speed_kmh=self.config.default_speed_kmh,
            minutes_per_stop=self.config.minutes_per_stop,
        )

    async def _from_directions(
        self, origin: GeoPoint, destinations: Sequence[GeoPoint], per_stop: float
    ) -> EtaResult:
        route = await asyncio.wait_for(
            self.directions.route(origin, destinations),
            timeout=self.config.directions_timeout_seconds,
        )
        minutes = round_half_up(round_half_up(route.duration_minutes) + per_stop * len(destinations))
        return EtaResult(
            minutes=minutes,
            source=SOURCE_DIRECTIONS,
            distance_km=route.distance_km,
            order=list(route.order),
        )

    def _from_estimator(
        self, origin: GeoPoint, destinations: Sequence[GeoPoint], speed: float, per_stop: float
    ) -> EtaResult:
        result = self.estimator.estimate(origin, destinations, speed, per_stop)
        return EtaResult(
            minutes=result.eta_minutes,
            source=SOURCE_ESTIMATOR,
            distance_km=result.total_distance_km,
            order=result.order,
        )

    async def estimate(
        self,
        origin: GeoPoint,
        destinations: Sequence[GeoPoint],
        speed_kmh: Optional[float] = None,
        minutes_per_stop: Optional[float] = None,
    ) -> EtaResult:
        """
        Estimate time to complete every stop.

        Args:
            origin: driver position
            destinations: parcel destinations
            speed_kmh: fallback average speed, config default when None
            minutes_per_stop: handling allowance, config default when None

        Returns:
            EtaResult tagged with the strategy that produced it.

        Raises:
            InvalidArgument: bad speed, allowance or coordinates (never swallowed by the fallback).
        """
        speed = self.config.default_speed_kmh if speed_kmh is None else speed_kmh
        per_stop = self.config.minutes_per_stop if minutes_per_stop is None else minutes_per_stop
        if not math.isfinite(speed) or speed <= 0:
            raise InvalidArgument(f"speed_kmh must be a positive number, got {speed!r}")
        check_minutes_per_stop(per_stop)

        if not destinations:
            return EtaResult(minutes=0, source=SOURCE_ESTIMATOR, distance_km=0.0, order=[])

        if self.directions is not None:
            try:
                return await self._from_directions(origin, destinations, per_stop)
            except Exception as e:
                logger.warning(f"Directions ETA failed, falling back to straight-line estimate: {e!r}")

        return self._from_estimator(origin, destinations, speed, per_stop)
