"""Shared fixtures: an in-memory repository and a service wired to it."""

from typing import Any, Dict, List, Optional

import pytest

from droptimize.models import GeoPoint, Zone
from droptimize.schemas import AppConfig, Settings
from droptimize.service import DroptimizeService


CENTER = GeoPoint(14.5995, 120.9842)


class InMemoryRepository:
    """Dict-backed repository implementing get_zones_for_branch / get_driver_by_id."""

    def __init__(self):
        self.zones: Dict[str, List[Zone]] = {}
        self.drivers: Dict[str, Dict[str, Any]] = {}

    def get_zones_for_branch(self, branch_id: str) -> List[Zone]:
        return list(self.zones.get(branch_id, []))

    def get_driver_by_id(self, driver_id: str) -> Optional[Dict[str, Any]]:
        return self.drivers.get(driver_id)


@pytest.fixture
def repo():
    repo = InMemoryRepository()
    repo.zones["branch-1"] = [
        Zone("Slowdown", CENTER, 50.0, 20.0),
        Zone("School", CENTER, 50.0, 15.0),
    ]
    repo.drivers["fast"] = {"id": "fast", "loc": {"lat": CENTER.latitude, "lng": CENTER.longitude, "speed": 34.6}}
    repo.drivers["slow"] = {"id": "slow", "location": {"latitude": CENTER.latitude,
                                                       "longitude": CENTER.longitude, "speedKmh": 12}}
    repo.drivers["lost"] = {"id": "lost", "speed": 40}
    repo.drivers["parked"] = {"id": "parked", "geo": {"lat": 0.0, "lng": 0.0}, "speed": 0}
    return repo


@pytest.fixture
def service(repo):
    return DroptimizeService(AppConfig(), repo=repo, settings=Settings(google_maps_api_key=None))
