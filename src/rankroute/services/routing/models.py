"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

from ...models.domain import Route


@dataclass(slots=True)
class RoadPath:
    """Road-following path returned by OSRM for one ordered route."""

    distance_km: float
    duration_min: float
    geometry: List[tuple[float, float]] = field(default_factory=list)


class UnavailableReason(str, Enum):
    DISABLED = "disabled"
    NOT_CONFIGURED = "not_configured"
    NETWORK_ERROR = "network_error"
    HTTP_ERROR = "http_error"
    NO_ROUTE = "no_route"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(slots=True)
class RoadNetworkUnavailable:
    reason: UnavailableReason
    detail: str = ""


EnrichmentOutcome = Union[RoadPath, RoadNetworkUnavailable]


@dataclass(slots=True)
class PlannedRoute:
    """A route together with the enrichment outcome that was applied to it."""

    route: Route
    outcome: EnrichmentOutcome

    @property
    def road_path(self) -> RoadPath | None:
        return self.outcome if isinstance(self.outcome, RoadPath) else None

    @property
    def unavailable(self) -> RoadNetworkUnavailable | None:
        return self.outcome if isinstance(self.outcome, RoadNetworkUnavailable) else None


@dataclass(slots=True)
class RouteComparison:
    nearest_neighbor: Route
    priority_weighted: Route

    def shorter_strategy(self) -> str:
        """Strategy key with the lower total distance; ties favour priority-weighted."""
        if self.nearest_neighbor.total_distance_km < self.priority_weighted.total_distance_km:
            return self.nearest_neighbor.strategy
        return self.priority_weighted.strategy
