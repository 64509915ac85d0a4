"""
Tests for driver record normalization.
"""

import copy
from types import SimpleNamespace

from droptimize.models import GeoPoint
from droptimize.normalizer import (
    POSITION_SHAPES, SPEED_SHAPES, get_display_speed, get_driver_location, normalize_driver
)


def test_documented_priority_order():
    assert [(s.container, s.lat_key, s.lng_key) for s in POSITION_SHAPES] == [
        ("loc", "lat", "lng"),
        ("location", "latitude", "longitude"),
        ("location", "lat", "lng"),
        ("geo", "lat", "lng"),
    ]
    assert [(s.container, s.key) for s in SPEED_SHAPES] == [
        ("loc", "speed"),
        ("location", "speedKmh"),
        (None, "speed"),
        (None, "avgSpeed"),
    ]


def test_loc_shape_wins_over_location():
    record = {
        "loc": {"lat": 14.60, "lng": 120.98},
        "location": {"latitude": 10.0, "longitude": 123.0},
    }
    assert get_driver_location(record) == GeoPoint(14.60, 120.98)


def test_location_latitude_wins_over_location_lat():
    record = {"location": {"latitude": 1.0, "longitude": 2.0, "lat": 3.0, "lng": 4.0}}
    assert get_driver_location(record) == GeoPoint(1.0, 2.0)


def test_location_lat_lng_shape():
    assert get_driver_location({"location": {"lat": 3.0, "lng": 4.0}}) == GeoPoint(3.0, 4.0)


def test_geo_shape_is_last_resort():
    record = {"loc": {"lat": 1.0}, "geo": {"lat": 5.0, "lng": 6.0}}
    assert get_driver_location(record) == GeoPoint(5.0, 6.0)


def test_incomplete_or_non_numeric_shapes_fall_through():
    record = {
        "loc": {"lat": "14.6", "lng": "120.9"},
        "location": {"latitude": float("nan"), "longitude": 1.0},
        "geo": {"lat": True, "lng": False},
    }
    assert get_driver_location(record) is None


def test_oversized_integers_fall_through():
    record = {
        "loc": {"lat": 10 ** 400, "lng": 1.0, "speed": 10 ** 400},
        "location": {"latitude": 14.6, "longitude": 120.9, "speedKmh": 18},
    }
    assert get_driver_location(record) == GeoPoint(14.6, 120.9)
    assert get_display_speed(record) == 18
    assert get_display_speed({"speed": -(10 ** 400)}) is None


def test_no_position_returns_none():
    assert get_driver_location({"name": "Juan"}) is None
    assert get_driver_location({}) is None
    assert get_driver_location(None) is None
    assert get_driver_location({"loc": None, "location": "Manila"}) is None


def test_attribute_records_are_supported():
    driver = SimpleNamespace(loc=SimpleNamespace(lat=1.5, lng=2.5, speed=30.2))
    assert get_driver_location(driver) == GeoPoint(1.5, 2.5)
    assert get_display_speed(driver) == 30


def test_speed_priority():
    record = {
        "loc": {"lat": 0, "lng": 0, "speed": 41.6},
        "location": {"speedKmh": 10},
        "speed": 20,
        "avgSpeed": 30,
    }
    assert get_display_speed(record) == 42
    del record["loc"]["speed"]
    assert get_display_speed(record) == 10
    del record["location"]
    assert get_display_speed(record) == 20
    del record["speed"]
    assert get_display_speed(record) == 30


def test_speed_is_independent_of_position_shape():
    # position comes from geo, speed from location.speedKmh
    record = {"geo": {"lat": 1.0, "lng": 2.0, "speed": 99}, "location": {"speedKmh": 25}}
    assert get_driver_location(record) == GeoPoint(1.0, 2.0)
    assert get_display_speed(record) == 25


def test_speed_skips_non_finite_values():
    record = {"loc": {"speed": float("inf")}, "speed": "fast", "avgSpeed": 12.5}
    assert get_display_speed(record) == 13


def test_speed_absent():
    assert get_display_speed({}) is None
    assert get_display_speed(None) is None


def test_normalization_is_pure():
    record = {"loc": {"lat": 1.0, "lng": 2.0, "speed": 5}, "status": "Delivering"}
    before = copy.deepcopy(record)
    first = normalize_driver(record)
    second = normalize_driver(record)
    assert first == second
    assert record == before


def test_normalize_driver_fields():
    record = {
        "uid": "drv-1",
        "firstName": "Maria",
        "lastName": "Santos",
        "status": "Delivering",
        "location": {"latitude": 14.6, "longitude": 121.0, "speedKmh": 33.4},
        "heading": 270,
        "parcels": [{"id": "a"}, {"id": "b"}],
    }
    view = normalize_driver(record)
    assert view.id == "drv-1"
    assert view.full_name == "Maria Santos"
    assert view.status == "delivering"
    assert view.location == GeoPoint(14.6, 121.0)
    assert view.speed_kmh == 33
    assert view.heading == 270.0
    assert view.parcels_count == 2


def test_normalize_driver_fallbacks():
    view = normalize_driver({"id": "x", "fullName": "Ana Cruz", "state": "OFFLINE", "parcelsLeft": 4,
                             "loc": {"lat": 1.0, "lng": 1.0, "heading": 15}})
    assert view.full_name == "Ana Cruz"
    assert view.status == "offline"
    assert view.parcels_count == 4
    assert view.heading == 15.0

    empty = normalize_driver(None)
    assert empty.id is None
    assert empty.location is None
    assert empty.status == ""
    assert empty.parcels_count is None
