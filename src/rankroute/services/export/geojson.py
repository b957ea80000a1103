"""GeoJSON export utilities for generated routes."""

from __future__ import annotations

from typing import Any, Dict, List

from ..outputs.routing_formatter import iter_stop_legs, route_geometry
from ..routing.models import PlannedRoute

PRIORITY_COLORS = {
    "high": "#ef4444",
    "medium": "#f59e0b",
    "low": "#22c55e",
}
ROUTE_COLOR = "#3b82f6"


def linestring_coordinates(coordinates: List[tuple[float, float]]) -> List[List[float]]:
    """Convert (lat, lon) pairs to GeoJSON [lon, lat] positions.

    Args:
        coordinates: List of (lat, lon) pairs

    Returns:
        GeoJSON position list
    """
    if len(coordinates) < 2:
        raise ValueError("LineString must have at least 2 coordinates")
    return [[lon, lat] for lat, lon in coordinates]


def _point_feature(lat: float, lon: float, properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "properties": properties,
    }


def route_to_geojson(planned: PlannedRoute) -> Dict[str, Any]:
    """Convert a planned route to a GeoJSON FeatureCollection.

    The path is drawn solid when it follows roads and dashed when it is only a
    straight-line approximation, so a map can warn that figures are estimates.

    Args:
        planned: Route plus its enrichment outcome

    Returns:
        FeatureCollection with the path, the depot and numbered stops
    """
    route = planned.route
    features: List[Dict[str, Any]] = []

    geometry = route_geometry(planned)
    if len(geometry) >= 2:
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "LineString", "coordinates": linestring_coordinates(geometry)},
                "properties": {
                    "kind": "path",
                    "route_id": route.route_id,
                    "strategy": route.strategy,
                    "road_following": route.road_following,
                    "line_style": "solid" if route.road_following else "dashed",
                    "stroke": ROUTE_COLOR,
                    "total_distance_km": round(route.total_distance_km, 3),
                    "estimated_time_min": round(route.estimated_time_min, 1),
                },
            }
        )

    features.append(
        _point_feature(
            route.depot.latitude,
            route.depot.longitude,
            {"kind": "depot", "depot_id": route.depot.depot_id, "name": route.depot.name},
        )
    )

    for sequence, rank, _ in iter_stop_legs(route):
        priority = str(getattr(rank.priority, "value", rank.priority))
        features.append(
            _point_feature(
                rank.latitude,
                rank.longitude,
                {
                    "kind": "stop",
                    "sequence": sequence,
                    "rank_id": rank.rank_id,
                    "name": rank.name,
                    "priority": priority,
                    "fill_level": rank.fill_level,
                    "marker-color": PRIORITY_COLORS.get(priority, "#6b7280"),
                },
            )
        )

    return {"type": "FeatureCollection", "features": features}
