"""
Great-circle distance and emergency travel-time estimates.

Inputs are assumed valid; coordinates are range-checked when records are
ingested (see `schemas.common.GeoPoint`).
"""

import math

from schemas.common import GeoPoint

EARTH_RADIUS_KM = 6371.0
DEFAULT_EMERGENCY_SPEED_KMH = 30.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in km."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def travel_time_hours(distance: float, speed_kmh: float = DEFAULT_EMERGENCY_SPEED_KMH) -> float:
    if speed_kmh <= 0:
        raise ValueError(f"Speed must be positive, got {speed_kmh}")
    return distance / speed_kmh


def travel_time_minutes(
    a: GeoPoint,
    b: GeoPoint,
    speed_kmh: float = DEFAULT_EMERGENCY_SPEED_KMH,
) -> int:
    """Whole minutes to cover the distance between two points at `speed_kmh`."""
    return round(travel_time_hours(distance_km(a, b), speed_kmh) * 60)
