"""In-memory registry of collection ranks and the active depot."""

from __future__ import annotations

import csv
import functools
import logging
import threading
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..config import settings
from ..models.domain import Coordinate, Depot, Priority, Rank

logger = logging.getLogger(__name__)

# Collection points in Harare CBD used when no ranks file is configured.
DEFAULT_RANKS: tuple[Rank, ...] = (
    Rank("1", "Fourth Street Rank", -17.8252, 31.0522, Priority.HIGH, 75, 5, 1000),
    Rank("2", "Copa Cabana", -17.8292, 31.0518, Priority.HIGH, 60, 4, 1000),
    Rank("3", "Roadport", -17.8312, 31.0475, Priority.MEDIUM, 45, 3, 800),
    Rank("4", "Market Square", -17.8275, 31.0495, Priority.HIGH, 80, 6, 1200),
)


def _coerce_float(value: Optional[str], default: Optional[float] = None) -> Optional[float]:
    if value is None or value.strip() == "":
        return default
    try:
        return float(value.replace(",", ""))
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def load_ranks_from_csv(source: Path) -> tuple[Rank, ...]:
    """Load ranks from a CSV with id, name, lat, lng, priority, fillLevel, fillRate, capacity columns."""
    if not source.exists():
        raise FileNotFoundError(f"Ranks file not found: {source}")

    ranks: list[Rank] = []
    with source.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError(f"Ranks file '{source}' is missing a header row.")
        for row in reader:
            lat = _coerce_float(row.get("lat") or row.get("latitude"))
            lon = _coerce_float(row.get("lng") or row.get("longitude"))
            if lat is None or lon is None:
                logger.warning(f"Skipping rank row without coordinates: {row}")
                continue
            rank_id = (row.get("id") or row.get("rank_id") or "").strip() or uuid.uuid4().hex
            ranks.append(
                Rank(
                    rank_id=rank_id,
                    name=(row.get("name") or "").strip() or f"Rank {rank_id}",
                    latitude=lat,
                    longitude=lon,
                    priority=Priority((row.get("priority") or "medium").strip().lower()),
                    fill_level=_coerce_float(row.get("fillLevel") or row.get("fill_level"), 0.0),
                    fill_rate=_coerce_float(row.get("fillRate") or row.get("fill_rate"), 0.0),
                    capacity=_coerce_float(row.get("capacity"), 0.0),
                )
            )
    return tuple(ranks)


class RankRegistry:
    """Thread-safe store of ranks in insertion order plus a single depot."""

    def __init__(self, ranks: Optional[tuple[Rank, ...]] = None, depot: Optional[Depot] = None) -> None:
        self._lock = threading.Lock()
        self._ranks: dict[str, Rank] = {}
        for rank in ranks if ranks is not None else DEFAULT_RANKS:
            self._ranks[rank.rank_id] = replace(rank)
        self._depot = replace(depot) if depot else None

    def list_ranks(self) -> list[Rank]:
        with self._lock:
            return [replace(rank) for rank in self._ranks.values()]

    def get_rank(self, rank_id: str) -> Rank:
        with self._lock:
            if rank_id not in self._ranks:
                raise KeyError(rank_id)
            return replace(self._ranks[rank_id])

    def create_rank(
        self,
        location: Coordinate,
        *,
        name: str,
        priority: Priority | str = Priority.MEDIUM,
        fill_level: float = 50.0,
        fill_rate: float = 3.0,
        capacity: float = 1000.0,
    ) -> Rank:
        """Add a rank at ``location``, typically the point picked on the map."""
        rank = Rank(
            rank_id=uuid.uuid4().hex,
            name=name,
            latitude=location.latitude,
            longitude=location.longitude,
            priority=Priority(priority),
            fill_level=fill_level,
            fill_rate=fill_rate,
            capacity=capacity,
        )
        with self._lock:
            self._ranks[rank.rank_id] = rank
        return replace(rank)

    def update_rank(self, rank_id: str, **changes) -> Rank:
        if "priority" in changes and changes["priority"] is not None:
            changes["priority"] = Priority(changes["priority"])
        changes = {key: value for key, value in changes.items() if value is not None}
        with self._lock:
            if rank_id not in self._ranks:
                raise KeyError(rank_id)
            updated = replace(self._ranks[rank_id], **changes)
            self._ranks[rank_id] = updated
            return replace(updated)

    def delete_rank(self, rank_id: str) -> None:
        with self._lock:
            if rank_id not in self._ranks:
                raise KeyError(rank_id)
            del self._ranks[rank_id]

    def set_depot(self, location: Coordinate, name: str = "Main Depot") -> Depot:
        depot = Depot(depot_id="depot-1", name=name, latitude=location.latitude, longitude=location.longitude)
        with self._lock:
            self._depot = depot
        return replace(depot)

    def get_depot(self) -> Optional[Depot]:
        with self._lock:
            return replace(self._depot) if self._depot else None


@functools.lru_cache(maxsize=1)
def get_registry() -> RankRegistry:
    """Process-wide registry, seeded from the configured ranks file when present."""
    if settings.ranks_file is not None:
        ranks = load_ranks_from_csv(settings.ranks_file)
        logger.info(f"Loaded {len(ranks)} ranks from {settings.ranks_file}")
        return RankRegistry(ranks)
    return RankRegistry()
