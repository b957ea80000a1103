"""Input checks applied before routes are built from caller data."""

from __future__ import annotations

import math
from typing import Sequence

from ...models.domain import Depot, Priority, Rank


class InvalidRankDataError(ValueError):
    """Raised when a rank or depot cannot be routed as given."""


def _check_coordinate(label: str, latitude: float, longitude: float) -> None:
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidRankDataError(f"{label} has non-finite coordinates ({latitude}, {longitude}).")
    if not -90.0 <= latitude <= 90.0:
        raise InvalidRankDataError(f"{label} latitude {latitude} is outside [-90, 90].")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidRankDataError(f"{label} longitude {longitude} is outside [-180, 180].")


def validate_depot(depot: Depot) -> None:
    _check_coordinate(f"Depot '{depot.name}'", depot.latitude, depot.longitude)


def validate_ranks(ranks: Sequence[Rank]) -> None:
    """Fail fast on ranks the routing strategies would score incorrectly."""
    seen: set[str] = set()
    for rank in ranks:
        label = f"Rank '{rank.rank_id}'"
        if rank.rank_id in seen:
            raise InvalidRankDataError(f"{label} appears more than once.")
        seen.add(rank.rank_id)
        _check_coordinate(label, rank.latitude, rank.longitude)
        try:
            Priority(rank.priority)
        except ValueError as exc:
            raise InvalidRankDataError(f"{label} has unknown priority '{rank.priority}'.") from exc
        if not (math.isfinite(rank.fill_level) and 0.0 <= rank.fill_level <= 100.0):
            raise InvalidRankDataError(f"{label} fill level {rank.fill_level} is outside 0-100.")
