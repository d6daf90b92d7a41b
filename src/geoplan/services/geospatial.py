"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Mapping, Sequence

from shapely.geometry import Point, Polygon

from ..config import settings
from ..models.domain import Coordinate, DistanceMethod, EdgeCost

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometers between two coordinates."""

    if a == b:
        return 0.0
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def estimate_duration_min(distance_km: float, speed_kmh: float | None = None) -> int:
    """Estimate driving time in minutes at an average island speed."""

    speed = speed_kmh or settings.average_speed_kmh
    return round(distance_km / speed * 60)


def geometric_cost(a: Coordinate, b: Coordinate) -> EdgeCost:
    """Cost function for the route optimizer based on straight-line distance."""

    km = distance(a, b)
    return EdgeCost(distance_km=km, duration_min=estimate_duration_min(km), method=DistanceMethod.PROVIDER)


def point_in_polygon(lat: float, lon: float, polygon_coords: Sequence[tuple[float, float]]) -> bool:
    """Return True if the point is inside the polygon denoted by (lat, lon) pairs."""

    polygon = Polygon([(lng, lat) for lat, lng in polygon_coords])
    return polygon.contains(Point(lon, lat))


def bounds_polygon(bounds: Mapping[str, float]) -> list[tuple[float, float]]:
    """Corner ring of a north/south/east/west bounding box as (lat, lon) pairs."""

    return [
        (bounds["north"], bounds["west"]),
        (bounds["north"], bounds["east"]),
        (bounds["south"], bounds["east"]),
        (bounds["south"], bounds["west"]),
    ]


def within_bounds(coordinate: Coordinate, bounds: Mapping[str, float]) -> bool:
    return point_in_polygon(coordinate.lat, coordinate.lng, bounds_polygon(bounds))
