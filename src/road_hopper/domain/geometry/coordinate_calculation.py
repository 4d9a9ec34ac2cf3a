# domain/geometry/coordinate_calculation.py
import math
from collections.abc import Callable, Sequence

import numpy as np

from road_hopper.domain.entities.geography import Coordinate

EARTH_RADIUS_M = 6372797.560856

DistanceFn = Callable[[Coordinate, Coordinate], float]


def haversine_distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = phi2 - phi1
    dlambda = math.radians(b.lon - a.lon)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def _haversine_lengths(coordinates: Sequence[Coordinate]) -> np.ndarray:
    lon = np.radians([c.lon for c in coordinates])
    lat = np.radians([c.lat for c in coordinates])
    dphi = np.diff(lat)
    dlambda = np.diff(lon)
    h = np.sin(dphi / 2) ** 2 + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * np.arcsin(np.minimum(1.0, np.sqrt(h)))


def segment_lengths(
    coordinates: Sequence[Coordinate], distance_fn: DistanceFn = haversine_distance
) -> list[float]:
    if len(coordinates) < 2:
        return []
    if distance_fn is haversine_distance:
        return _haversine_lengths(coordinates).tolist()
    return [distance_fn(a, b) for a, b in zip(coordinates, coordinates[1:], strict=False)]


def get_length(
    coordinates: Sequence[Coordinate], distance_fn: DistanceFn = haversine_distance
) -> float:
    """Cumulative length of a polyline."""
    return float(sum(segment_lengths(coordinates, distance_fn)))


def interpolate_linear(a: Coordinate, b: Coordinate, factor: float) -> Coordinate:
    f = min(1.0, max(0.0, factor))
    return Coordinate(a.lon + f * (b.lon - a.lon), a.lat + f * (b.lat - a.lat))


def bearing(a: Coordinate, b: Coordinate) -> float:
    """Initial compass bearing from a to b, degrees clockwise from north in [0, 360)."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dlambda = math.radians(b.lon - a.lon)
    y = math.sin(dlambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)
    return math.degrees(math.atan2(y, x)) % 360.0


def compute_angle(first: Coordinate, second: Coordinate, third: Coordinate) -> float:
    """
    Turn angle at `second` when travelling first -> second -> third.
    180 is straight on, 90 a right turn, 270 a left turn, 0 a u-turn.
    """
    incoming = bearing(first, second)
    outgoing = bearing(second, third)
    return (180.0 + incoming - outgoing) % 360.0


def angular_deviation(a: float, b: float) -> float:
    delta = abs(a - b) % 360.0
    return min(delta, 360.0 - delta)
