"""Domain models for collection ranks, depots and generated routes."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..services.routing.models import RoadPath


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return PRIORITY_WEIGHTS[self]


PRIORITY_WEIGHTS: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A point in decimal degrees, e.g. a location picked on the map."""

    latitude: float
    longitude: float


@dataclass(slots=True)
class Rank:
    """Represents a waste-collection point with its fill state."""

    rank_id: str
    name: str
    latitude: float
    longitude: float
    priority: Priority
    fill_level: float
    fill_rate: float = 0.0
    capacity: float = 0.0


@dataclass(slots=True)
class Depot:
    """Start and end point of every route."""

    depot_id: str
    name: str
    latitude: float
    longitude: float


def _new_route_id() -> str:
    return uuid.uuid4().hex


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Route:
    """Ordered visit sequence produced by one routing strategy.

    ``stops`` holds copies of the input ranks so later edits to the registry do
    not alter a route that was already generated. Distance and time start as
    straight-line estimates; ``apply_road_metrics`` replaces them with road
    figures at most once.
    """

    strategy: str
    depot: Depot
    stops: tuple[Rank, ...]
    total_distance_km: float
    estimated_time_min: float
    route_id: str = field(default_factory=_new_route_id)
    generated_at: datetime = field(default_factory=_utc_now)
    road_following: bool = False

    def __post_init__(self) -> None:
        self.stops = tuple(replace(rank) for rank in self.stops)
        self.depot = replace(self.depot)

    @property
    def stop_count(self) -> int:
        return len(self.stops)

    @property
    def rank_ids(self) -> list[str]:
        return [rank.rank_id for rank in self.stops]

    def apply_road_metrics(self, path: RoadPath) -> None:
        if self.road_following:
            raise RuntimeError(f"Route {self.route_id} already carries road-network metrics.")
        self.total_distance_km = path.distance_km
        self.estimated_time_min = path.duration_min
        self.road_following = True
