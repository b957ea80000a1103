"""Rank and depot API schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import Depot, Priority, Rank


class LocationModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class RankModel(BaseModel):
    rank_id: str
    name: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    priority: Priority
    fill_level: float = Field(..., ge=0, le=100, description="Current fill level as a percentage of capacity.")
    fill_rate: float = Field(default=0.0, ge=0, description="Fill accrual in percent per hour.")
    capacity: float = Field(default=0.0, ge=0)

    @classmethod
    def from_domain(cls, rank: Rank) -> "RankModel":
        return cls(
            rank_id=rank.rank_id,
            name=rank.name,
            latitude=rank.latitude,
            longitude=rank.longitude,
            priority=rank.priority,
            fill_level=rank.fill_level,
            fill_rate=rank.fill_rate,
            capacity=rank.capacity,
        )

    def to_domain(self) -> Rank:
        return Rank(
            rank_id=self.rank_id,
            name=self.name,
            latitude=self.latitude,
            longitude=self.longitude,
            priority=self.priority,
            fill_level=self.fill_level,
            fill_rate=self.fill_rate,
            capacity=self.capacity,
        )


class RankCreateRequest(BaseModel):
    """New rank at a location picked on the map."""

    location: LocationModel
    name: str = Field(..., min_length=1)
    priority: Priority = Priority.MEDIUM
    fill_level: float = Field(default=50.0, ge=0, le=100)
    fill_rate: float = Field(default=3.0, ge=0)
    capacity: float = Field(default=1000.0, ge=0)


class RankUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    location: Optional[LocationModel] = None
    priority: Optional[Priority] = None
    fill_level: Optional[float] = Field(default=None, ge=0, le=100)
    fill_rate: Optional[float] = Field(default=None, ge=0)
    capacity: Optional[float] = Field(default=None, ge=0)


class RankListResponse(BaseModel):
    items: List[RankModel]
    total: int


class DepotModel(BaseModel):
    depot_id: str = "depot-1"
    name: str = "Main Depot"
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @classmethod
    def from_domain(cls, depot: Depot) -> "DepotModel":
        return cls(depot_id=depot.depot_id, name=depot.name, latitude=depot.latitude, longitude=depot.longitude)

    def to_domain(self) -> Depot:
        return Depot(depot_id=self.depot_id, name=self.name, latitude=self.latitude, longitude=self.longitude)


class DepotUpdateRequest(BaseModel):
    location: LocationModel
    name: str = Field(default="Main Depot", min_length=1)
