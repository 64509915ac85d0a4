"""
Pydantic schemas for configuration, settings, and API validation.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings

from .estimator import DEFAULT_MINUTES_PER_STOP, DEFAULT_SPEED_KMH
from .zones import CROSSWALK_LIMIT_KMH, CROSSWALK_RADIUS_KM


logger = logging.getLogger(__name__)


class EtaConfig(BaseModel):
    """Fallback estimator parameters."""
    default_speed_kmh: float = Field(default=DEFAULT_SPEED_KMH, gt=0)
    minutes_per_stop: float = Field(default=DEFAULT_MINUTES_PER_STOP, ge=0)
    directions_timeout_seconds: float = Field(default=10.0, gt=0)


class CrosswalkConfig(BaseModel):
    """Crosswalk proximity lookup via the Overpass API."""
    enabled: bool = Field(default=False)
    overpass_url: str = Field(default="https://overpass-api.de/api/interpreter")
    radius_km: float = Field(default=CROSSWALK_RADIUS_KM, gt=0)
    limit_kmh: float = Field(default=float(CROSSWALK_LIMIT_KMH), gt=0)
    search_delta_deg: float = Field(default=0.00045, gt=0)
    timeout_seconds: float = Field(default=20.0, gt=0)


class ZonesConfig(BaseModel):
    """Which zone categories contribute speed limits."""
    limit_categories: Optional[List[str]] = Field(default_factory=lambda: ["Slowdown"])


class GoogleConfig(BaseModel):
    """Google Directions API configuration."""
    directions_url: str = Field(default="https://maps.googleapis.com/maps/api/directions/json")
    optimize_waypoints: bool = Field(default=True)
    timeout_seconds: float = Field(default=30.0, gt=0)


class DatabaseConfig(BaseModel):
    """Database configuration."""
    url: str = Field(default="sqlite:///./droptimize.db")
    echo: bool = Field(default=False)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


class DevConfig(BaseModel):
    """Development and testing configuration."""
    use_directions: bool = Field(default=True)


class AppConfig(BaseModel):
    """Complete application configuration loaded from params.yaml."""
    eta: EtaConfig = Field(default_factory=EtaConfig)
    crosswalk: CrosswalkConfig = Field(default_factory=CrosswalkConfig)
    zones: ZonesConfig = Field(default_factory=ZonesConfig)
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    dev: DevConfig = Field(default_factory=DevConfig)


class Settings(BaseSettings):
    """Environment-based settings (primarily for secrets)."""
    google_maps_api_key: Optional[str] = Field(default=None)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def load_config(config_path: Union[str, Path, None] = "config/params.yaml") -> AppConfig:
    """Load configuration from YAML; a missing file yields defaults."""
    if config_path is None:
        return AppConfig()
    path = Path(config_path)
    if not path.exists():
        logger.info(f"Config file {path} not found, using defaults")
        return AppConfig()
    try:
        with open(path, 'r') as f:
            config_data = yaml.safe_load(f) or {}
        return AppConfig(**config_data)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise


# API Request/Response Schemas
class PointIn(BaseModel):
    """Coordinate pair in API payloads."""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class EtaRequest(BaseModel):
    """Request body for the ETA endpoint."""
    origin: PointIn
    destinations: List[PointIn] = Field(default_factory=list)
    speed_kmh: Optional[float] = Field(default=None)
    minutes_per_stop: Optional[float] = Field(default=None, ge=0)

    @validator('speed_kmh')
    def speed_positive(cls, v):
        """Reject non-positive speeds up front."""
        if v is not None and v <= 0:
            raise ValueError('speed_kmh must be positive')
        return v


class EtaResponse(BaseModel):
    """ETA for a set of stops."""
    minutes: int
    text: str
    source: str
    distance_km: Optional[float]
    order: List[PointIn]


class SpeedStatusResponse(BaseModel):
    """Current speed reading against the governing limit."""
    driver_id: str
    location: Optional[PointIn]
    speed_kmh: Optional[int]
    speed_limit_kmh: Optional[float]
    overspeeding: bool
    in_crosswalk: bool


class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    database_connected: bool
    google_api_configured: bool
    timestamp: str
