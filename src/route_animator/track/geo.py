"""Great-circle geometry helpers."""

from __future__ import annotations

import math

EARTH_RADIUS_M = 6_371_000.0

METERS_PER_MILE = 1609.344
METERS_PER_KM = 1000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two lat/lon pairs (degrees)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    la1 = math.radians(lat1)
    la2 = math.radians(lat2)
    s = math.sin(d_lat / 2) ** 2 + math.cos(la1) * math.cos(la2) * math.sin(d_lon / 2) ** 2
    # float error can push s a hair above 1 for antipodal points
    return 2.0 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, s)))


def point_distance_m(a, b) -> float:
    """Haversine distance between two objects exposing ``lat`` and ``lon``."""
    return haversine_m(a.lat, a.lon, b.lat, b.lon)


def path_length_m(points) -> float:
    """Total haversine length of an ordered sequence of lat/lon points."""
    return sum(point_distance_m(points[i - 1], points[i]) for i in range(1, len(points)))
