"""
Main service layer.
Wires configuration, persistence and the geometric core for the API and CLI.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from .errors import InvalidArgument
from .eta import EtaResult, EtaService, RouteProvider
from .integrations.google_directions import GoogleDirectionsClient
from .integrations.overpass import OverpassCrosswalkClient
from .models import GeoPoint
from .normalizer import get_display_speed, get_driver_location
from .repo import DatabaseRepository, ZoneDriverRepository
from .schemas import AppConfig, Settings
from .zones import applicable_limit, is_overspeeding


logger = logging.getLogger(__name__)


class DriverNotFound(LookupError):
    """No driver document for the requested id."""


@dataclass
class SpeedStatus:
    """Driver speed against the limit governing its position."""
    driver_id: str
    location: Optional[GeoPoint]
    speed_kmh: Optional[int]
    speed_limit_kmh: Optional[float]
    overspeeding: bool
    in_crosswalk: bool = False


def setup_logging(config: AppConfig, verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level)
    logging.basicConfig(level=level, format=config.logging.format)


class DroptimizeService:
    """Speed status and ETA lookups for the dashboard."""

    def __init__(
        self,
        config: AppConfig,
        repo: Optional[ZoneDriverRepository] = None,
        directions: Optional[RouteProvider] = None,
        crosswalks: Optional[OverpassCrosswalkClient] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize service; collaborators are built from config when not given."""
        self.config = config
        self.settings = settings or Settings()

        if repo is None:
            db = DatabaseRepository(config)
            db.create_tables()
            repo = db
        self.repo = repo

        if directions is None and config.dev.use_directions and self.settings.google_maps_api_key:
            directions = GoogleDirectionsClient(self.settings.google_maps_api_key, config.google)
        self.eta_service = EtaService(config.eta, directions=directions)

        if crosswalks is None and config.crosswalk.enabled:
            crosswalks = OverpassCrosswalkClient(config.crosswalk)
        self.crosswalks = crosswalks

    async def driver_speed_status(self, driver_id: str, branch_id: str) -> SpeedStatus:
        """Resolve a driver's position, speed and governing limit."""
        record = self.repo.get_driver_by_id(driver_id)
        if record is None:
            raise DriverNotFound(driver_id)

        location = get_driver_location(record)
        speed = get_display_speed(record)
        if location is None:
            return SpeedStatus(driver_id, None, speed, None, False)

        in_crosswalk = False
        fixed_limits = []
        if self.crosswalks is not None:
            in_crosswalk = await self.crosswalks.is_near_crosswalk(location)
            if in_crosswalk:
                fixed_limits.append(self.config.crosswalk.limit_kmh)

        limit = applicable_limit(
            location,
            self.repo.get_zones_for_branch(branch_id),
            fixed_limits,
            categories=self.config.zones.limit_categories,
        )
        return SpeedStatus(
            driver_id=driver_id,
            location=location,
            speed_kmh=speed,
            speed_limit_kmh=limit,
            overspeeding=is_overspeeding(speed, limit),
            in_crosswalk=in_crosswalk,
        )

    async def estimate_eta(
        self,
        origin: GeoPoint,
        destinations: Sequence[GeoPoint],
        speed_kmh: Optional[float] = None,
        minutes_per_stop: Optional[float] = None,
    ) -> EtaResult:
        """ETA for delivering every destination starting from origin."""
        return await self.eta_service.estimate(origin, destinations, speed_kmh, minutes_per_stop)

    async def driver_eta(self, driver_id: str, destinations: Sequence[GeoPoint]) -> EtaResult:
        """ETA from a stored driver's current position at its reported speed."""
        record = self.repo.get_driver_by_id(driver_id)
        if record is None:
            raise DriverNotFound(driver_id)
        origin = get_driver_location(record)
        if origin is None:
            raise InvalidArgument(f"driver {driver_id} has no known position")
        speed = get_display_speed(record)
        # A parked driver reports 0 km/h; estimate at the default speed instead
        return await self.estimate_eta(origin, destinations, speed_kmh=speed if speed and speed > 0 else None)

    def health_check(self) -> Dict[str, Any]:
        """Report collaborator availability."""
        database_connected = True
        try:
            self.repo.get_zones_for_branch("__health__")
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            database_connected = False
        return {
            "status": "healthy" if database_connected else "degraded",
            "database_connected": database_connected,
            "google_api_configured": self.eta_service.directions is not None,
            "timestamp": datetime.now().isoformat(),
        }
