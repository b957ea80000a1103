import json
from pathlib import Path

import pytest

from rankroute.config import settings
from rankroute.data.ranks_repository import RankRegistry, get_registry
from rankroute.models.domain import Coordinate
from rankroute.schemas.ranks import DepotModel, RankModel
from rankroute.schemas.routing import CompareRequest, RouteRequest
from rankroute.services.geospatial import route_distance_km
from rankroute.services.routing import service as routing_service
from rankroute.services.routing.osrm_client import OSRMConnectionError, OSRMNoRouteError
from rankroute.services.routing.validation import InvalidRankDataError


class DummyOSRM:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = 0

    def route(self, coordinates):
        self.calls += 1
        if self.error is not None:
            raise self.error
        lonlat = [[lon, lat] for lat, lon in coordinates]
        return {
            "distance": 1000.0 * (len(coordinates) - 1),
            "duration": 120.0 * (len(coordinates) - 1),
            "geometry": {"type": "LineString", "coordinates": lonlat},
        }


@pytest.fixture(autouse=True)
def clear_registry_cache():
    get_registry.cache_clear()
    yield
    get_registry.cache_clear()


@pytest.fixture
def registry(monkeypatch: pytest.MonkeyPatch) -> RankRegistry:
    registry = RankRegistry()
    registry.set_depot(Coordinate(-17.8292, 31.0522), name="Harare Depot")
    monkeypatch.setattr(routing_service, "get_registry", lambda: registry)
    return registry


def _use_osrm(monkeypatch: pytest.MonkeyPatch, osrm: DummyOSRM) -> DummyOSRM:
    monkeypatch.setattr(routing_service, "OSRMClient", lambda *args, **kwargs: osrm)
    return osrm


def test_generate_route_applies_road_metrics(monkeypatch, registry):
    osrm = _use_osrm(monkeypatch, DummyOSRM())

    response = routing_service.generate_route(RouteRequest(strategy="nearest"))

    assert osrm.calls == 1
    assert response.road_following is True
    assert response.unavailable_reason is None
    # four stops -> six waypoints -> five legs
    assert response.total_distance_km == pytest.approx(5.0)
    assert response.estimated_time_min == pytest.approx(10.0)
    assert response.algorithm_used == "Nearest Neighbor"
    assert [stop.sequence for stop in response.stops] == [1, 2, 3, 4]
    assert len(response.geometry) == 6


def test_generate_route_falls_back_to_straight_line(monkeypatch, registry):
    _use_osrm(monkeypatch, DummyOSRM(error=OSRMNoRouteError("NoRoute")))

    response = routing_service.generate_route(RouteRequest(strategy="priority"))

    depot = registry.get_depot()
    ranks = {rank.rank_id: rank for rank in registry.list_ranks()}
    ordered = [ranks[stop.rank_id] for stop in response.stops]
    expected = route_distance_km(depot, ordered)

    assert response.road_following is False
    assert response.unavailable_reason == "no_route"
    assert response.total_distance_km == pytest.approx(expected)
    assert response.estimated_time_min == pytest.approx(expected / 30 * 60)
    assert response.geometry[0] == response.geometry[-1] == [-17.8292, 31.0522]


def test_generate_route_retries_transient_failures(monkeypatch, registry):
    osrm = _use_osrm(monkeypatch, DummyOSRM(error=OSRMConnectionError("refused")))
    monkeypatch.setattr(settings, "osrm_max_retries", 2)
    monkeypatch.setattr(settings, "osrm_backoff_seconds", 0.0)

    response = routing_service.generate_route(RouteRequest())

    assert osrm.calls == 3
    assert response.unavailable_reason == "network_error"
    assert response.road_following is False


def test_generate_route_without_road_network(monkeypatch, registry):
    osrm = _use_osrm(monkeypatch, DummyOSRM())

    response = routing_service.generate_route(RouteRequest(use_road_network=False))

    assert osrm.calls == 0
    assert response.road_following is False
    assert response.unavailable_reason == "disabled"


def test_generate_route_requires_depot(monkeypatch):
    monkeypatch.setattr(routing_service, "get_registry", lambda: RankRegistry())

    with pytest.raises(ValueError, match="depot"):
        routing_service.generate_route(RouteRequest(use_road_network=False))


def test_generate_route_with_inline_payload(monkeypatch):
    monkeypatch.setattr(routing_service, "get_registry", lambda: RankRegistry(ranks=()))
    _use_osrm(monkeypatch, DummyOSRM())

    request = RouteRequest(
        strategy="nearest",
        depot=DepotModel(latitude=-17.8292, longitude=31.0522),
        ranks=[
            RankModel(rank_id="A", name="A", latitude=-17.8252, longitude=31.0522, priority="low", fill_level=10),
        ],
    )
    response = routing_service.generate_route(request)

    assert [stop.rank_id for stop in response.stops] == ["A"]


def test_generate_route_with_empty_rank_selection(monkeypatch, registry):
    osrm = _use_osrm(monkeypatch, DummyOSRM())

    response = routing_service.generate_route(RouteRequest(rank_ids=["missing"]))

    assert response.stops == []
    assert response.total_distance_km == 0
    assert response.estimated_time_min == 0
    assert osrm.calls == 0


def test_generate_route_rejects_invalid_rank_data(monkeypatch):
    from rankroute.models.domain import Priority, Rank

    bad = Rank("X", "Overfull", -17.8, 31.05, Priority.HIGH, 140)
    registry = RankRegistry(ranks=(bad,))
    registry.set_depot(Coordinate(-17.8292, 31.0522))
    monkeypatch.setattr(routing_service, "get_registry", lambda: registry)

    with pytest.raises(InvalidRankDataError, match="fill level"):
        routing_service.generate_route(RouteRequest(use_road_network=False))


def test_generate_route_persists_outputs(monkeypatch, registry, tmp_path: Path):
    _use_osrm(monkeypatch, DummyOSRM(error=OSRMNoRouteError("NoRoute")))
    original_storage = routing_service.FileStorage
    monkeypatch.setattr(routing_service, "FileStorage", lambda: original_storage(root=tmp_path))

    response = routing_service.generate_route(RouteRequest(persist=True))

    run_dirs = list((tmp_path / "outputs").iterdir())
    assert len(run_dirs) == 1
    run_dir = run_dirs[0]
    assert Path(response.metadata["output_dir"]).name == run_dir.name
    summary = json.loads((run_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["road_following"] is False
    assert len(summary["stops"]) == 4
    assert (run_dir / "stops.csv").exists()
    geojson = json.loads((run_dir / "route.geojson").read_text(encoding="utf-8"))
    path = geojson["features"][0]
    assert path["properties"]["line_style"] == "dashed"


def test_compare_routes_enriches_each_strategy(monkeypatch, registry):
    osrm = _use_osrm(monkeypatch, DummyOSRM())

    response = routing_service.compare_routes(CompareRequest())

    assert osrm.calls == 2
    expected = {rank.rank_id for rank in registry.list_ranks()}
    assert {stop.rank_id for stop in response.nearest_neighbor.stops} == expected
    assert {stop.rank_id for stop in response.priority_weighted.stops} == expected
    assert response.nearest_neighbor.strategy.value == "nearest"
    assert response.priority_weighted.strategy.value == "priority"
    assert response.nearest_neighbor.road_following is True
    assert response.priority_weighted.road_following is True
    assert response.shorter_strategy.value in {"nearest", "priority"}
    assert "Nearest Neighbor" in response.summary


def test_compare_routes_falls_back_per_strategy(monkeypatch, registry):
    _use_osrm(monkeypatch, DummyOSRM(error=OSRMConnectionError("refused")))

    response = routing_service.compare_routes(CompareRequest())

    for result in (response.nearest_neighbor, response.priority_weighted):
        assert result.road_following is False
        assert result.unavailable_reason == "network_error"
        assert result.estimated_time_min == pytest.approx(result.total_distance_km / 30 * 60)
