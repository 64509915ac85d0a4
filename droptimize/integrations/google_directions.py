"""Google Directions wrapper for road-aware multi-stop ETAs."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..errors import DirectionsError
from ..models import GeoPoint
from ..schemas import GoogleConfig

logger = logging.getLogger(__name__)


@dataclass
class DirectionsRoute:
    """Totals over every leg of a Directions route."""
    duration_minutes: float
    distance_km: float
    order: List[GeoPoint] = field(default_factory=list)


def _fmt(point: GeoPoint) -> str:
    return f"{point.latitude},{point.longitude}"


class GoogleDirectionsClient:
    """Directions API client; every failure surfaces as DirectionsError."""

    def __init__(
        self,
        api_key: Optional[str],
        config: Optional[GoogleConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.config = config or GoogleConfig()
        self._client = client

        if not self.api_key:
            logger.warning("Google Maps API key not configured - Directions lookups will fail over")

    def build_params(self, origin: GeoPoint, destinations: Sequence[GeoPoint]) -> Dict[str, Any]:
        # Last stop is the destination, everything before it a stopover waypoint
        params = {
            "origin": _fmt(origin),
            "destination": _fmt(destinations[-1]),
            "mode": "driving",
            "key": self.api_key,
        }
        stops = [_fmt(p) for p in destinations[:-1]]
        if stops:
            if self.config.optimize_waypoints:
                stops.insert(0, "optimize:true")
            params["waypoints"] = "|".join(stops)
        return params

    async def route(self, origin: GeoPoint, destinations: Sequence[GeoPoint]) -> DirectionsRoute:
        """Fetch a driving route visiting every destination."""
        if not self.api_key:
            raise DirectionsError("no Google Maps API key configured")
        if not destinations:
            return DirectionsRoute(duration_minutes=0.0, distance_km=0.0, order=[])

        params = self.build_params(origin, destinations)
        try:
            if self._client is not None:
                r = await self._client.get(self.config.directions_url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                    r = await client.get(self.config.directions_url, params=params)
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPError as e:
            raise DirectionsError(f"Directions request failed: {e}") from e
        except ValueError as e:
            raise DirectionsError(f"Directions returned invalid JSON: {e}") from e

        if data.get("status") != "OK" or not data.get("routes"):
            raise DirectionsError(
                f"Directions status={data.get('status')} msg={data.get('error_message', '')}"
            )
        return self._parse_route(data["routes"][0], destinations)

    def _parse_route(self, route: Dict[str, Any], destinations: Sequence[GeoPoint]) -> DirectionsRoute:
        try:
            legs = route["legs"]
            total_secs = sum(leg["duration"]["value"] for leg in legs)
            total_meters = sum(leg["distance"]["value"] for leg in legs)
        except (KeyError, TypeError) as e:
            raise DirectionsError(f"Malformed Directions route: {e}") from e

        waypoints = list(destinations[:-1])
        waypoint_order = route.get("waypoint_order") or list(range(len(waypoints)))
        try:
            order = [waypoints[i] for i in waypoint_order] + [destinations[-1]]
        except (IndexError, TypeError):
            order = list(destinations)

        return DirectionsRoute(
            duration_minutes=total_secs / 60.0,
            distance_km=total_meters / 1000.0,
            order=order,
        )
