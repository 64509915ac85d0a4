"""
Tests for the service layer wiring.
"""

import asyncio
import math
from unittest.mock import AsyncMock

import pytest

from droptimize.errors import InvalidArgument
from droptimize.models import GeoPoint
from droptimize.schemas import AppConfig, Settings, ZonesConfig
from droptimize.service import DriverNotFound, DroptimizeService
from droptimize.util.haversine import EARTH_RADIUS_KM


def test_slowdown_zone_governs_by_default(service):
    status = asyncio.run(service.driver_speed_status("fast", "branch-1"))
    assert status.speed_kmh == 35
    assert status.speed_limit_kmh == 20.0
    assert status.overspeeding is True
    assert status.in_crosswalk is False


def test_under_the_limit(service):
    status = asyncio.run(service.driver_speed_status("slow", "branch-1"))
    assert status.speed_kmh == 12
    assert status.overspeeding is False


def test_every_category_when_unfiltered(repo):
    config = AppConfig(zones=ZonesConfig(limit_categories=None))
    svc = DroptimizeService(config, repo=repo, settings=Settings(google_maps_api_key=None))
    status = asyncio.run(svc.driver_speed_status("slow", "branch-1"))
    assert status.speed_limit_kmh == 15.0


def test_crosswalk_limit_applies(repo):
    crosswalks = AsyncMock()
    crosswalks.is_near_crosswalk.return_value = True
    svc = DroptimizeService(AppConfig(), repo=repo, crosswalks=crosswalks,
                            settings=Settings(google_maps_api_key=None))
    status = asyncio.run(svc.driver_speed_status("slow", "branch-1"))
    assert status.in_crosswalk is True
    assert status.speed_limit_kmh == 10.0
    assert status.overspeeding is True


def test_unknown_branch_means_no_limit(service):
    status = asyncio.run(service.driver_speed_status("fast", "branch-2"))
    assert status.speed_limit_kmh is None
    assert status.overspeeding is False


def test_driver_without_position(service):
    status = asyncio.run(service.driver_speed_status("lost", "branch-1"))
    assert status.location is None
    assert status.speed_kmh == 40
    assert status.speed_limit_kmh is None


def test_unknown_driver(service):
    with pytest.raises(DriverNotFound):
        asyncio.run(service.driver_speed_status("ghost", "branch-1"))


def test_driver_eta_uses_default_speed_when_parked(service):
    stop = GeoPoint(0.0, 45.0 / (EARTH_RADIUS_KM * math.pi / 180.0))
    result = asyncio.run(service.driver_eta("parked", [stop]))
    assert result.minutes == 65
    assert result.source == "estimator"


def test_driver_eta_without_position(service):
    with pytest.raises(InvalidArgument):
        asyncio.run(service.driver_eta("lost", [GeoPoint(0.0, 1.0)]))


def test_no_directions_without_api_key(service):
    assert service.eta_service.directions is None
    health = service.health_check()
    assert health["status"] == "healthy"
    assert health["google_api_configured"] is False


def test_directions_built_from_api_key(repo):
    svc = DroptimizeService(AppConfig(), repo=repo, settings=Settings(google_maps_api_key="abc"))
    assert svc.eta_service.directions is not None
