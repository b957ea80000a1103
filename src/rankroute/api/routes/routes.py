"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import CompareRequest, ComparisonResponse, RouteRequest, RouteResponse
from ...services.routing.service import compare_routes, generate_route
from ...services.routing.validation import InvalidRankDataError

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/generate", response_model=RouteResponse, status_code=status.HTTP_200_OK)
def generate(payload: RouteRequest) -> RouteResponse:
    try:
        return generate_route(payload)
    except InvalidRankDataError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error generating route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate route: {str(exc)}"
        ) from exc


@router.post("/compare", response_model=ComparisonResponse, status_code=status.HTTP_200_OK)
def compare(payload: CompareRequest) -> ComparisonResponse:
    """Build the route with both strategies for a side-by-side choice."""
    try:
        return compare_routes(payload)
    except InvalidRankDataError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error comparing routing strategies: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to compare strategies: {str(exc)}"
        ) from exc
