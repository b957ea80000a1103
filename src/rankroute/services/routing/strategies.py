"""Greedy route construction strategies.

Both strategies start at the depot, repeatedly pick the best unvisited rank
from the current position and finish with the leg back to the depot. They
differ only in how the next rank is scored. Neither guarantees the shortest
tour; they are quick heuristics that keep the input order as tie-breaker so a
given input always yields the same route.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Sequence

from ...config import settings
from ...models.domain import Depot, Priority, Rank, Route
from ..geospatial import distance_km
from .models import RouteComparison

logger = logging.getLogger(__name__)

# Keeps the score finite when a rank sits on top of the current position.
DISTANCE_OFFSET_KM = 0.1


class RoutingStrategy(str, Enum):
    NEAREST_NEIGHBOR = "nearest"
    PRIORITY_WEIGHTED = "priority"

    @property
    def label(self) -> str:
        return _STRATEGY_LABELS[self]


_STRATEGY_LABELS = {
    RoutingStrategy.NEAREST_NEIGHBOR: "Nearest Neighbor",
    RoutingStrategy.PRIORITY_WEIGHTED: "Priority-Weighted",
}

# (candidate, distance from current position) -> score, higher is better
ScoreFunction = Callable[[Rank, float], float]


def estimate_minutes(total_distance_km: float, speed_kmh: float | None = None) -> float:
    """Travel time in minutes at a constant average speed."""
    speed = speed_kmh if speed_kmh is not None else settings.average_speed_kmh
    return (total_distance_km / speed) * 60


def priority_score(rank: Rank, distance: float) -> float:
    weight = Priority(rank.priority).weight
    fill_factor = rank.fill_level / 100
    return (weight * 10 + fill_factor * 20) / (distance + DISTANCE_OFFSET_KM)


def _nearest_score(rank: Rank, distance: float) -> float:
    return -distance


def _greedy_route(
    depot: Depot,
    ranks: Sequence[Rank],
    strategy: RoutingStrategy,
    score: ScoreFunction,
) -> Route:
    # Pool of input positions still to visit, kept in input order for tie-breaks.
    pool = list(range(len(ranks)))
    ordered: list[Rank] = []
    current = depot
    total_distance = 0.0

    while pool:
        best_slot = 0
        best_score = float("-inf")
        best_distance = 0.0
        for slot, index in enumerate(pool):
            leg = distance_km(current, ranks[index])
            candidate_score = score(ranks[index], leg)
            if candidate_score > best_score:
                best_slot, best_score, best_distance = slot, candidate_score, leg

        chosen = ranks[pool.pop(best_slot)]
        ordered.append(chosen)
        total_distance += best_distance
        current = chosen

    if ordered:
        total_distance += distance_km(current, depot)

    route = Route(
        strategy=strategy.value,
        depot=depot,
        stops=tuple(ordered),
        total_distance_km=total_distance,
        estimated_time_min=estimate_minutes(total_distance),
    )
    logger.info(
        f"{strategy.label} route built: {route.stop_count} stops, "
        f"{route.total_distance_km:.2f} km, {route.estimated_time_min:.1f} min"
    )
    return route


def nearest_neighbor_route(depot: Depot, ranks: Sequence[Rank]) -> Route:
    """Always drive to the closest unvisited rank."""
    return _greedy_route(depot, ranks, RoutingStrategy.NEAREST_NEIGHBOR, _nearest_score)


def priority_weighted_route(depot: Depot, ranks: Sequence[Rank]) -> Route:
    """Favour urgent, full ranks, discounted by how far away they are.

    Score is ``(priority_weight * 10 + fill_level / 100 * 20) / (distance + 0.1)``
    with weights high=3, medium=2, low=1.
    """
    return _greedy_route(depot, ranks, RoutingStrategy.PRIORITY_WEIGHTED, priority_score)


_BUILDERS: dict[RoutingStrategy, Callable[[Depot, Sequence[Rank]], Route]] = {
    RoutingStrategy.NEAREST_NEIGHBOR: nearest_neighbor_route,
    RoutingStrategy.PRIORITY_WEIGHTED: priority_weighted_route,
}


def construct_route(depot: Depot, ranks: Sequence[Rank], strategy: RoutingStrategy | str) -> Route:
    try:
        resolved = RoutingStrategy(strategy)
    except ValueError as exc:
        raise ValueError(f"Unknown routing strategy '{strategy}'.") from exc
    return _BUILDERS[resolved](depot, ranks)


def compare_strategies(depot: Depot, ranks: Sequence[Rank]) -> RouteComparison:
    return RouteComparison(
        nearest_neighbor=nearest_neighbor_route(depot, ranks),
        priority_weighted=priority_weighted_route(depot, ranks),
    )
