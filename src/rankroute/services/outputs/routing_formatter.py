"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io
from typing import Iterator

from ...models.domain import Rank, Route
from ..geospatial import distance_km, straight_line_path
from ..routing.models import PlannedRoute


def iter_stop_legs(route: Route) -> Iterator[tuple[int, Rank, float]]:
    """Yield (sequence, rank, straight-line km from previous point) in visit order."""
    previous = route.depot
    for sequence, rank in enumerate(route.stops, start=1):
        yield sequence, rank, distance_km(previous, rank)
        previous = rank


def route_geometry(planned: PlannedRoute) -> list[tuple[float, float]]:
    path = planned.road_path
    if path is not None and path.geometry:
        return list(path.geometry)
    return straight_line_path(planned.route.depot, planned.route.stops)


def routing_result_to_json(planned: PlannedRoute) -> dict:
    route = planned.route
    unavailable = planned.unavailable
    return {
        "route_id": route.route_id,
        "strategy": route.strategy,
        "generated_at": route.generated_at.isoformat(),
        "depot": {
            "depot_id": route.depot.depot_id,
            "name": route.depot.name,
            "latitude": route.depot.latitude,
            "longitude": route.depot.longitude,
        },
        "total_distance_km": route.total_distance_km,
        "estimated_time_min": route.estimated_time_min,
        "road_following": route.road_following,
        "unavailable_reason": unavailable.reason.value if unavailable else None,
        "stops": [
            {
                "sequence": sequence,
                "rank_id": rank.rank_id,
                "name": rank.name,
                "latitude": rank.latitude,
                "longitude": rank.longitude,
                "priority": str(getattr(rank.priority, "value", rank.priority)),
                "fill_level": rank.fill_level,
                "distance_from_prev_km": leg_km,
            }
            for sequence, rank, leg_km in iter_stop_legs(route)
        ],
    }


def routing_result_to_csv(planned: PlannedRoute) -> str:
    route = planned.route
    buffer = io.StringIO()
    fieldnames = [
        "route_id",
        "strategy",
        "sequence",
        "rank_id",
        "name",
        "priority",
        "fill_level",
        "distance_from_prev_km",
        "total_distance_km",
        "estimated_time_min",
        "road_following",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for sequence, rank, leg_km in iter_stop_legs(route):
        writer.writerow(
            {
                "route_id": route.route_id,
                "strategy": route.strategy,
                "sequence": sequence,
                "rank_id": rank.rank_id,
                "name": rank.name,
                "priority": str(getattr(rank.priority, "value", rank.priority)),
                "fill_level": rank.fill_level,
                "distance_from_prev_km": round(leg_km, 4),
                "total_distance_km": round(route.total_distance_km, 4),
                "estimated_time_min": round(route.estimated_time_min, 2),
                "road_following": route.road_following,
            }
        )
    return buffer.getvalue()
