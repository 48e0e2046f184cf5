"""
Distance and speed calculations on the WGS84 sphere.
"""
import math
from typing import Iterable, Optional

from gps_simulator.models.route import Coordinate

EARTH_RADIUS_KM = 6371


def great_circle_distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Calculate distance between two points in kilometers using Haversine formula.
    """
    if a == b:
        return 0.0

    lat1_r, lon1_r = math.radians(a.lat), math.radians(a.lon)
    lat2_r, lon2_r = math.radians(b.lat), math.radians(b.lon)

    dlat = lat2_r - lat1_r
    dlon = lon2_r - lon1_r

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    # Rounding can push h just outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))

    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(h))


def speed_kph(a: Coordinate, b: Coordinate, elapsed_seconds: float) -> float:
    """
    Average speed needed to get from a to b in elapsed_seconds.

    Duplicate or reordered timestamps (elapsed <= 0) give a speed of 0.
    """
    if elapsed_seconds <= 0:
        return 0.0

    return great_circle_distance_km(a, b) / elapsed_seconds * 3600


def route_distance_km(coordinates: Iterable[Coordinate]) -> float:
    """Calculate total distance of a sequence of coordinates in kilometers."""
    total = 0.0
    previous = None
    for coordinate in coordinates:
        if previous is not None:
            total += great_circle_distance_km(previous, coordinate)
        previous = coordinate

    return total


def eta_hours(distance_km: float, speed: Optional[float]) -> Optional[float]:
    """Hours needed to cover distance_km at speed, None without a usable speed."""
    if not speed or speed <= 0:
        return None

    return distance_km / speed
