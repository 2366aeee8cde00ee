from __future__ import annotations

import math

from ..core.constants import EARTH_RADIUS_METERS, GPS_TOLERANCE_METERS
from .model import Coordinate


def calculate_distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters (haversine)."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


def is_outside_geofence(distance: float, radius: float, *, tolerance: float = GPS_TOLERANCE_METERS) -> bool:
    return distance > radius + tolerance
