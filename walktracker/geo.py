from __future__ import annotations

import math
from typing import Sequence, Tuple

from walktracker.errors import InvalidCoordinate

LatLon = Tuple[float, float]  # (lat, lng)

EARTH_RADIUS_M = 6371000.0
METERS_PER_DEGREE_LAT = 111320.0


def haversine_m(a: LatLon, b: LatLon) -> float:
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    x = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, x)))


def interpolate(a: LatLon, b: LatLon, fraction: float) -> LatLon:
    """Plane interpolation on the pair, fine for the few metres covered per tick."""
    return a[0] + fraction * (b[0] - a[0]), a[1] + fraction * (b[1] - a[1])


def interpolate_at_distance(a: LatLon, b: LatLon, distance_m: float) -> LatLon:
    total = haversine_m(a, b)
    if total == 0.0 or distance_m <= 0.0:
        return a
    if distance_m >= total:
        return b
    return interpolate(a, b, distance_m / total)


def is_valid(coord: Sequence[float]) -> bool:
    try:
        lat, lng = float(coord[0]), float(coord[1])
    except (TypeError, ValueError, IndexError):
        return False
    if math.isnan(lat) or math.isnan(lng):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def validate(coord: Sequence[float]) -> LatLon:
    if not is_valid(coord):
        raise InvalidCoordinate(f"coordinate out of range: {coord!r}")
    return float(coord[0]), float(coord[1])


def same_point(a: LatLon, b: LatLon, tol: float = 1e-9) -> bool:
    return abs(a[0] - b[0]) <= tol and abs(a[1] - b[1]) <= tol


def path_length_m(points: Sequence[LatLon]) -> float:
    total = 0.0
    for i in range(len(points) - 1):
        total += haversine_m(points[i], points[i + 1])
    return total
