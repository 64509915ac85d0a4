"""Crosswalk proximity lookup against the OpenStreetMap Overpass API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..models import GeoPoint, _finite_number
from ..schemas import CrosswalkConfig
from ..util.haversine import haversine_km

logger = logging.getLogger(__name__)


def build_crossing_query(point: GeoPoint, delta_deg: float) -> str:
    """Overpass QL for highway=crossing nodes in a small box around the point."""
    min_lat, max_lat = point.latitude - delta_deg, point.latitude + delta_deg
    min_lng, max_lng = point.longitude - delta_deg, point.longitude + delta_deg
    return (
        "[out:json][timeout:20];"
        f'(node["highway"="crossing"]({min_lat},{min_lng},{max_lat},{max_lng}););'
        "out body;"
    )


def nearest_crossing_km(point: GeoPoint, elements: List[Any]) -> Optional[float]:
    """Distance to the closest crossing node; elements without numeric coordinates are ignored."""
    distances = []
    for el in elements:
        if not isinstance(el, dict) or el.get("type") != "node":
            continue
        lat, lon = _finite_number(el.get("lat")), _finite_number(el.get("lon"))
        if lat is None or lon is None:
            continue
        distances.append(haversine_km(point.latitude, point.longitude, lat, lon))
    return min(distances) if distances else None


class OverpassCrosswalkClient:
    """Reports whether a position is within crosswalk range."""

    def __init__(self, config: Optional[CrosswalkConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or CrosswalkConfig()
        self._client = client

    async def _fetch(self, query: str) -> Dict[str, Any]:
        if self._client is not None:
            r = await self._client.get(self.config.overpass_url, params={"data": query})
        else:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                r = await client.get(self.config.overpass_url, params={"data": query})
        r.raise_for_status()
        return r.json()

    async def is_near_crosswalk(self, point: GeoPoint) -> bool:
        """True if a crossing node lies within the configured radius.

        Lookup failures are logged and reported as False.
        """
        query = build_crossing_query(point, self.config.search_delta_deg)
        try:
            data = await self._fetch(query)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Crosswalk check failed at {point}: {e}")
            return False

        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            return False
        nearest = nearest_crossing_km(point, elements)
        return nearest is not None and nearest <= self.config.radius_km
