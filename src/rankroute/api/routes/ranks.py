"""Rank and depot endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...data.ranks_repository import get_registry
from ...models.domain import Coordinate
from ...schemas.ranks import (
    DepotModel,
    DepotUpdateRequest,
    RankCreateRequest,
    RankListResponse,
    RankModel,
    RankUpdateRequest,
)

router = APIRouter(tags=["ranks"])


def _not_found(rank_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Rank '{rank_id}' not found")


@router.get("/ranks", response_model=RankListResponse)
def list_ranks() -> RankListResponse:
    ranks = get_registry().list_ranks()
    return RankListResponse(items=[RankModel.from_domain(rank) for rank in ranks], total=len(ranks))


@router.post("/ranks", response_model=RankModel, status_code=status.HTTP_201_CREATED)
def create_rank(payload: RankCreateRequest) -> RankModel:
    rank = get_registry().create_rank(
        Coordinate(payload.location.latitude, payload.location.longitude),
        name=payload.name,
        priority=payload.priority,
        fill_level=payload.fill_level,
        fill_rate=payload.fill_rate,
        capacity=payload.capacity,
    )
    return RankModel.from_domain(rank)


@router.get("/ranks/{rank_id}", response_model=RankModel)
def get_rank(rank_id: str) -> RankModel:
    try:
        return RankModel.from_domain(get_registry().get_rank(rank_id))
    except KeyError as exc:
        raise _not_found(rank_id) from exc


@router.put("/ranks/{rank_id}", response_model=RankModel)
def update_rank(rank_id: str, payload: RankUpdateRequest) -> RankModel:
    changes = payload.model_dump(exclude={"location"}, exclude_none=True)
    if payload.location is not None:
        changes["latitude"] = payload.location.latitude
        changes["longitude"] = payload.location.longitude
    try:
        return RankModel.from_domain(get_registry().update_rank(rank_id, **changes))
    except KeyError as exc:
        raise _not_found(rank_id) from exc


@router.delete("/ranks/{rank_id}", status_code=status.HTTP_200_OK)
def delete_rank(rank_id: str) -> dict:
    try:
        get_registry().delete_rank(rank_id)
    except KeyError as exc:
        raise _not_found(rank_id) from exc
    return {"success": True, "message": f"Rank {rank_id} deleted"}


@router.get("/depot", response_model=DepotModel)
def get_depot() -> DepotModel:
    depot = get_registry().get_depot()
    if depot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No depot has been set")
    return DepotModel.from_domain(depot)


@router.put("/depot", response_model=DepotModel)
def set_depot(payload: DepotUpdateRequest) -> DepotModel:
    depot = get_registry().set_depot(
        Coordinate(payload.location.latitude, payload.location.longitude),
        name=payload.name,
    )
    return DepotModel.from_domain(depot)
