from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt

from ..core.constants import EARTH_RADIUS_METERS
from .model import Coordinate, Territory


def haversine_dist(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two lat/lng pairs, in meters."""
    phi1, phi2 = radians(lat1), radians(lat2)
    d_phi = radians(lat2 - lat1)
    d_lambda = radians(lng2 - lng1)

    a = sin(d_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(d_lambda / 2) ** 2
    # Rounding can push `a` just past 1 near antipodes; sqrt(1 - a) must stay real.
    a = min(max(a, 0.0), 1.0)
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def distance(a: Coordinate, b: Coordinate) -> float:
    return haversine_dist(a.lat, a.lng, b.lat, b.lng)


def is_within_territory(point: Coordinate, territory: Territory) -> bool:
    return distance(point, territory.center) <= territory.radius_meters
