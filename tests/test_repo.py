"""
Tests for the SQLModel repository against in-memory SQLite.
"""

import pytest

from droptimize.models import GeoPoint, Zone
from droptimize.repo import DatabaseRepository
from droptimize.schemas import AppConfig, DatabaseConfig


@pytest.fixture
def db():
    repo = DatabaseRepository(AppConfig(database=DatabaseConfig(url="sqlite://")))
    repo.create_tables()
    return repo


def test_zones_round_trip_per_branch(db):
    zone = Zone("Slowdown", GeoPoint(14.5995, 120.9842), 30.0, 20.0)
    db.upsert_zone("branch-1", zone)
    db.upsert_zone("branch-2", Zone("School", GeoPoint(14.6, 121.0), 40.0, 15.0))

    zones = db.get_zones_for_branch("branch-1")
    assert zones == [zone]
    assert db.get_zones_for_branch("missing") == []


def test_upsert_zone_replaces_existing(db):
    zone_id = db.upsert_zone("branch-1", Zone("Slowdown", GeoPoint(1.0, 1.0), 30.0, 20.0))
    db.upsert_zone("branch-1", Zone("Slowdown", GeoPoint(1.0, 1.0), 30.0, 25.0), zone_id=zone_id)
    zones = db.get_zones_for_branch("branch-1")
    assert len(zones) == 1
    assert zones[0].speed_limit_kmh == 25.0


def test_incomplete_zone_survives_storage(db):
    db.upsert_zone("branch-1", Zone("Slowdown", None, None, 20.0))
    [zone] = db.get_zones_for_branch("branch-1")
    assert zone.location is None
    assert zone.radius_meters is None


def test_driver_documents_keep_their_shape(db):
    doc = {"location": {"latitude": 14.6, "longitude": 121.0, "speedKmh": 30}, "status": "Delivering"}
    db.upsert_driver("drv-1", doc, branch_id="branch-1")
    stored = db.get_driver_by_id("drv-1")
    assert stored["location"] == doc["location"]
    assert stored["id"] == "drv-1"
    assert db.get_driver_by_id("nobody") is None

    db.upsert_driver("drv-1", {"loc": {"lat": 1.0, "lng": 2.0}})
    assert "location" not in db.get_driver_by_id("drv-1")
