"""Routing orchestration service."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from ...config import settings
from ...data.ranks_repository import get_registry
from ...models.domain import Depot, Rank, Route
from ...persistence.filesystem import FileStorage
from ...schemas.ranks import DepotModel, RankModel
from ...schemas.routing import (
    CompareRequest,
    ComparisonResponse,
    RouteRequest,
    RouteResponse,
    RouteStopModel,
)
from ..export.geojson import route_to_geojson
from ..outputs.routing_formatter import (
    iter_stop_legs,
    route_geometry,
    routing_result_to_csv,
    routing_result_to_json,
)
from .enrichment import apply_enrichment, enrich_with_road_network
from .models import (
    EnrichmentOutcome,
    PlannedRoute,
    RoadNetworkUnavailable,
    RouteComparison,
    UnavailableReason,
)
from .osrm_client import OSRMClient
from .strategies import RoutingStrategy, compare_strategies, construct_route
from .validation import validate_depot, validate_ranks

logger = logging.getLogger(__name__)


def _resolve_inputs(
    depot_model: DepotModel | None,
    rank_models: Sequence[RankModel] | None,
    rank_ids: Sequence[str] | None,
) -> tuple[Depot, list[Rank]]:
    registry = get_registry()

    depot = depot_model.to_domain() if depot_model else registry.get_depot()
    if depot is None:
        raise ValueError("No depot is set. Set a depot location before generating a route.")

    if rank_models is not None:
        ranks = [model.to_domain() for model in rank_models]
    else:
        ranks = registry.list_ranks()
    if rank_ids:
        wanted = {rank_id.strip() for rank_id in rank_ids}
        ranks = [rank for rank in ranks if rank.rank_id in wanted]

    validate_depot(depot)
    validate_ranks(ranks)
    return depot, ranks


def _enrich(depot: Depot, stops: Sequence[Rank]) -> EnrichmentOutcome:
    """Run enrichment, retrying unavailable outcomes as configured."""
    try:
        client = OSRMClient()
    except ValueError as exc:
        logger.warning(f"Road enrichment skipped: {exc}")
        return RoadNetworkUnavailable(UnavailableReason.NOT_CONFIGURED, str(exc))

    attempt = 0
    while True:
        outcome = enrich_with_road_network(depot, stops, client=client)
        if not isinstance(outcome, RoadNetworkUnavailable):
            return outcome
        # Nothing to retry when the route is empty or OSRM says the route does not exist.
        if outcome.reason == UnavailableReason.NO_ROUTE:
            return outcome
        attempt += 1
        if attempt > settings.osrm_max_retries:
            return outcome
        wait_time = settings.osrm_backoff_seconds * attempt
        logger.debug(f"Retrying road enrichment in {wait_time:.1f}s (attempt {attempt}/{settings.osrm_max_retries})")
        time.sleep(wait_time)


def _plan(route: Route, use_road_network: bool) -> PlannedRoute:
    if not use_road_network:
        outcome = RoadNetworkUnavailable(UnavailableReason.DISABLED, "Road network enrichment not requested.")
    else:
        outcome = _enrich(route.depot, route.stops)
    planned = apply_enrichment(route, outcome)
    if planned.unavailable and route.stops:
        logger.info(
            f"Route {route.route_id} ({route.strategy}) kept straight-line estimate: "
            f"{route.total_distance_km:.2f} km, {route.estimated_time_min:.1f} min"
        )
    return planned


def _persist(planned: PlannedRoute) -> str:
    storage = FileStorage()
    run_dir = storage.make_run_directory(prefix=f"route_{planned.route.strategy}")
    storage.write_json(run_dir / "summary.json", routing_result_to_json(planned))
    storage.write_csv(run_dir / "stops.csv", routing_result_to_csv(planned))
    storage.write_json(run_dir / "route.geojson", route_to_geojson(planned))
    return str(run_dir)


def _to_response(planned: PlannedRoute, metadata: dict | None = None) -> RouteResponse:
    route = planned.route
    unavailable = planned.unavailable
    strategy = RoutingStrategy(route.strategy)
    return RouteResponse(
        route_id=route.route_id,
        strategy=strategy,
        algorithm_used=strategy.label,
        depot=DepotModel.from_domain(route.depot),
        stops=[
            RouteStopModel(
                sequence=sequence,
                rank_id=rank.rank_id,
                name=rank.name,
                latitude=rank.latitude,
                longitude=rank.longitude,
                priority=str(getattr(rank.priority, "value", rank.priority)),
                fill_level=rank.fill_level,
                distance_from_prev_km=leg_km,
            )
            for sequence, rank, leg_km in iter_stop_legs(route)
        ],
        total_distance_km=route.total_distance_km,
        estimated_time_min=route.estimated_time_min,
        generated_at=route.generated_at,
        road_following=route.road_following,
        unavailable_reason=unavailable.reason.value if unavailable else None,
        geometry=[[lat, lon] for lat, lon in route_geometry(planned)],
        metadata=metadata or {},
    )


def generate_route(payload: RouteRequest) -> RouteResponse:
    depot, ranks = _resolve_inputs(payload.depot, payload.ranks, payload.rank_ids)
    route = construct_route(depot, ranks, payload.strategy)
    planned = _plan(route, payload.use_road_network)

    metadata: dict = {"stop_count": route.stop_count}
    if planned.unavailable:
        metadata["unavailable_detail"] = planned.unavailable.detail

    persist = payload.persist if payload.persist is not None else settings.persist_outputs
    if persist:
        metadata["output_dir"] = _persist(planned)

    return _to_response(planned, metadata)


def _comparison_summary(comparison: RouteComparison) -> str:
    nearest = comparison.nearest_neighbor
    weighted = comparison.priority_weighted
    if comparison.shorter_strategy() == RoutingStrategy.NEAREST_NEIGHBOR.value:
        verdict = "Nearest Neighbor is shorter"
    else:
        verdict = "Priority-Weighted prioritizes urgent bins"
    return (
        f"Nearest Neighbor: {nearest.total_distance_km:.2f} km, {round(nearest.estimated_time_min)} min; "
        f"Priority-Weighted: {weighted.total_distance_km:.2f} km, {round(weighted.estimated_time_min)} min. "
        f"{verdict}."
    )


def compare_routes(payload: CompareRequest) -> ComparisonResponse:
    depot, ranks = _resolve_inputs(payload.depot, payload.ranks, payload.rank_ids)
    comparison = compare_strategies(depot, ranks)

    routes = {
        RoutingStrategy.NEAREST_NEIGHBOR: comparison.nearest_neighbor,
        RoutingStrategy.PRIORITY_WEIGHTED: comparison.priority_weighted,
    }
    # The two enrichment requests are independent; each result stays keyed by its strategy.
    with ThreadPoolExecutor(max_workers=len(routes)) as executor:
        futures = {
            strategy: executor.submit(_plan, route, payload.use_road_network)
            for strategy, route in routes.items()
        }
        planned = {strategy: future.result() for strategy, future in futures.items()}

    shorter = RoutingStrategy(comparison.shorter_strategy())
    logger.info(
        f"Compared strategies over {len(ranks)} ranks: "
        f"nearest={comparison.nearest_neighbor.total_distance_km:.2f} km, "
        f"priority={comparison.priority_weighted.total_distance_km:.2f} km, shorter={shorter.value}"
    )
    return ComparisonResponse(
        nearest_neighbor=_to_response(planned[RoutingStrategy.NEAREST_NEIGHBOR]),
        priority_weighted=_to_response(planned[RoutingStrategy.PRIORITY_WEIGHTED]),
        shorter_strategy=shorter,
        summary=_comparison_summary(comparison),
    )
