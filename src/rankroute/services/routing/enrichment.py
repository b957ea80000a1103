"""Road-network enrichment for greedy routes.

The greedy strategies only know straight-line distances. This module asks OSRM
for the road path through the chosen order and turns every failure into a
``RoadNetworkUnavailable`` value, so the caller can always fall back to the
straight-line figures.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from ...models.domain import Depot, Rank, Route
from .models import (
    EnrichmentOutcome,
    PlannedRoute,
    RoadNetworkUnavailable,
    RoadPath,
    UnavailableReason,
)
from .osrm_client import (
    OSRMClient,
    OSRMConnectionError,
    OSRMNoRouteError,
    OSRMResponseError,
    build_waypoints,
)

logger = logging.getLogger(__name__)


def _parse_geometry(geometry: Any) -> list[tuple[float, float]]:
    if not isinstance(geometry, dict) or not isinstance(geometry.get("coordinates"), list):
        raise ValueError("route geometry is missing its coordinate list")
    # GeoJSON positions are [lon, lat]
    return [(float(lat), float(lon)) for lon, lat in geometry["coordinates"]]


def _road_path_from_osrm(route: dict) -> RoadPath:
    try:
        distance_m = float(route["distance"])
        duration_s = float(route["duration"])
        geometry = _parse_geometry(route.get("geometry"))
    except (KeyError, TypeError, ValueError) as exc:
        raise OSRMResponseError(f"Malformed OSRM route payload: {exc}") from exc
    return RoadPath(
        distance_km=distance_m / 1000.0,
        duration_min=duration_s / 60.0,
        geometry=geometry,
    )


def enrich_with_road_network(
    depot: Depot,
    ordered_ranks: Sequence[Rank],
    client: OSRMClient | None = None,
) -> EnrichmentOutcome:
    """Fetch road distance, duration and path for an ordered visit sequence.

    One OSRM request covers the whole closed tour depot -> ranks -> depot.
    Never raises for provider problems; returns ``RoadNetworkUnavailable``
    instead.
    """
    if not ordered_ranks:
        return RoadNetworkUnavailable(UnavailableReason.NO_ROUTE, "Route has no stops to connect.")

    if client is None:
        try:
            client = OSRMClient()
        except ValueError as exc:
            logger.warning(f"Road enrichment skipped: {exc}")
            return RoadNetworkUnavailable(UnavailableReason.NOT_CONFIGURED, str(exc))

    waypoints = build_waypoints(depot, ordered_ranks)
    try:
        return _road_path_from_osrm(client.route(waypoints))
    except OSRMConnectionError as exc:
        reason = UnavailableReason.NETWORK_ERROR
        detail = str(exc)
    except OSRMNoRouteError as exc:
        reason = UnavailableReason.NO_ROUTE
        detail = str(exc)
    except OSRMResponseError as exc:
        reason = UnavailableReason.HTTP_ERROR if exc.status_code is not None else UnavailableReason.MALFORMED_RESPONSE
        detail = str(exc)

    logger.warning(f"Road enrichment unavailable ({reason.value}) for {len(ordered_ranks)} stops: {detail}")
    return RoadNetworkUnavailable(reason, detail)


def apply_enrichment(route: Route, outcome: EnrichmentOutcome) -> PlannedRoute:
    """Overwrite route metrics with road figures, or keep the straight-line ones."""
    if isinstance(outcome, RoadPath):
        route.apply_road_metrics(outcome)
    return PlannedRoute(route=route, outcome=outcome)
