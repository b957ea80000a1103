"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Protocol, Sequence

EARTH_RADIUS_KM = 6371.0


class HasLocation(Protocol):
    latitude: float
    longitude: float


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(origin: HasLocation, destination: HasLocation) -> float:
    return haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def route_distance_km(depot: HasLocation, stops: Sequence[HasLocation]) -> float:
    """Sum the legs depot -> stop 1 -> ... -> stop N -> depot.

    An empty stop list has no legs at all, including the return to depot.
    """
    if not stops:
        return 0.0

    total = distance_km(depot, stops[0])
    for current, following in zip(stops, stops[1:]):
        total += distance_km(current, following)
    total += distance_km(stops[-1], depot)
    return total


def straight_line_path(depot: HasLocation, stops: Sequence[HasLocation]) -> list[tuple[float, float]]:
    """Return the (lat, lon) polyline joining the depot and stops in visit order."""
    if not stops:
        return []
    depot_point = (depot.latitude, depot.longitude)
    return [depot_point, *((stop.latitude, stop.longitude) for stop in stops), depot_point]
