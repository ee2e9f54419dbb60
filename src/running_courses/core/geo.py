"""Spherical geometry on a sphere of Earth's mean radius.

Inputs and outputs are in decimal degrees; all trigonometry happens in
radians. Distances are in meters, bearings clockwise from true north.
Behavior at the poles is degenerate and not specially handled.
"""

import math

from ..models import Coordinate

EARTH_RADIUS_M = 6_371_000.0


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters (haversine formula)."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bearing(a: Coordinate, b: Coordinate) -> float:
    """Initial bearing from a to b in [0, 360).

    Undefined when a == b; atan2(0, 0) makes that case return 0.0.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlon = math.radians(b.lon - a.lon)
    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def _normalize_lon(lon: float) -> float:
    lon = ((lon + 540) % 360) - 180
    return 180.0 if lon == -180.0 else lon


def destination(origin: Coordinate, distance_m: float, bearing_deg: float) -> Coordinate:
    """Point reached from origin after distance_m along initial bearing_deg."""
    lat1 = math.radians(origin.lat)
    lon1 = math.radians(origin.lon)
    theta = math.radians(bearing_deg)
    delta = distance_m / EARTH_RADIUS_M

    sin_lat2 = math.sin(lat1) * math.cos(delta) + math.cos(lat1) * math.sin(delta) * math.cos(theta)
    lat2 = math.asin(max(-1.0, min(1.0, sin_lat2)))
    lon2 = lon1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    return Coordinate(lat=math.degrees(lat2), lon=_normalize_lon(math.degrees(lon2)))
