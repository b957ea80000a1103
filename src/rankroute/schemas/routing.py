"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..services.routing.strategies import RoutingStrategy
from .ranks import DepotModel, RankModel


class RouteRequest(BaseModel):
    strategy: RoutingStrategy = RoutingStrategy.PRIORITY_WEIGHTED
    depot: Optional[DepotModel] = Field(
        default=None,
        description="Depot to start and end at. Defaults to the registry depot.",
    )
    ranks: Optional[List[RankModel]] = Field(
        default=None,
        description="Ranks to visit. Defaults to every rank in the registry.",
    )
    rank_ids: Optional[List[str]] = Field(
        default=None,
        description="Restrict registry ranks to these identifiers.",
    )
    use_road_network: bool = Field(
        default=True,
        description="Ask OSRM for road distance and time; falls back to straight-line figures.",
    )
    persist: Optional[bool] = Field(default=None, description="Override the persist_outputs setting.")


class CompareRequest(BaseModel):
    depot: Optional[DepotModel] = None
    ranks: Optional[List[RankModel]] = None
    rank_ids: Optional[List[str]] = None
    use_road_network: bool = True


class RouteStopModel(BaseModel):
    sequence: int
    rank_id: str
    name: str
    latitude: float
    longitude: float
    priority: str
    fill_level: float
    distance_from_prev_km: float


class RouteResponse(BaseModel):
    route_id: str
    strategy: RoutingStrategy
    algorithm_used: str
    depot: DepotModel
    stops: List[RouteStopModel]
    total_distance_km: float
    estimated_time_min: float
    generated_at: datetime
    road_following: bool
    unavailable_reason: Optional[str] = None
    geometry: List[List[float]] = Field(
        default_factory=list,
        description="(lat, lon) polyline; road path when road_following, straight legs otherwise.",
    )
    metadata: dict = Field(default_factory=dict)


class ComparisonResponse(BaseModel):
    nearest_neighbor: RouteResponse
    priority_weighted: RouteResponse
    shorter_strategy: RoutingStrategy
    summary: str
