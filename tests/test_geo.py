"""Tests for spherical geometry helpers."""
import math

import pytest

from running_courses.core.geo import EARTH_RADIUS_M, bearing, destination, distance
from running_courses.models import Coordinate

SEOUL = Coordinate(lat=37.5665, lon=126.9780)


def _angle_diff(a: float, b: float) -> float:
    return abs((a - b + 180) % 360 - 180)


def test_distance_to_self_is_zero():
    assert distance(SEOUL, SEOUL) == 0.0


def test_distance_one_degree_of_latitude():
    a = Coordinate(lat=0.0, lon=0.0)
    b = Coordinate(lat=1.0, lon=0.0)
    expected = EARTH_RADIUS_M * math.radians(1.0)
    assert distance(a, b) == pytest.approx(expected, rel=1e-9)


def test_distance_is_symmetric():
    other = Coordinate(lat=35.1796, lon=129.0756)
    assert distance(SEOUL, other) == pytest.approx(distance(other, SEOUL))


@pytest.mark.parametrize("heading", [0, 30, 90, 135, 180, 270, 330])
def test_destination_round_trips_distance_and_bearing(heading):
    end = destination(SEOUL, 5000, heading)
    assert distance(SEOUL, end) == pytest.approx(5000, rel=1e-6)
    assert _angle_diff(bearing(SEOUL, end), heading) < 1e-6


def test_bearing_is_in_range():
    for lat, lon in [(10, -170), (-45, 179.5), (89, 0), (-10, -10)]:
        b = bearing(SEOUL, Coordinate(lat=lat, lon=lon))
        assert 0 <= b < 360


def test_bearing_due_east_on_equator():
    a = Coordinate(lat=0.0, lon=0.0)
    b = Coordinate(lat=0.0, lon=1.0)
    assert bearing(a, b) == pytest.approx(90.0)


def test_bearing_of_identical_points_is_zero():
    assert bearing(SEOUL, SEOUL) == 0.0


def test_destination_wraps_longitude_across_antimeridian():
    origin = Coordinate(lat=0.0, lon=179.99)
    end = destination(origin, 10_000, 90)
    assert -180 <= end.lon <= 180
    assert end.lon < 0


def test_destination_zero_distance_is_origin():
    end = destination(SEOUL, 0, 45)
    assert end.lat == pytest.approx(SEOUL.lat)
    assert end.lon == pytest.approx(SEOUL.lon)
