import csv
import io
from pathlib import Path

from rankroute.models.domain import Depot, Priority, Rank
from rankroute.persistence.filesystem import FileStorage
from rankroute.services.export.geojson import route_to_geojson
from rankroute.services.outputs.routing_formatter import routing_result_to_csv, routing_result_to_json
from rankroute.services.routing.enrichment import apply_enrichment
from rankroute.services.routing.models import RoadNetworkUnavailable, RoadPath, UnavailableReason
from rankroute.services.routing.strategies import nearest_neighbor_route

DEPOT = Depot(depot_id="D1", name="Depot", latitude=-17.8292, longitude=31.0522)
RANKS = [
    Rank("1", "Fourth Street Rank", -17.8252, 31.0522, Priority.HIGH, 75, 5, 1000),
    Rank("3", "Roadport", -17.8312, 31.0475, Priority.MEDIUM, 45, 3, 800),
]


def test_file_storage_creates_run_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="route_test")

    assert run_dir.exists()
    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path.resolve() / "outputs"


def test_file_storage_writes_json_and_csv(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="route_test")

    summary_path = run_dir / "summary.json"
    stops_path = run_dir / "stops.csv"

    storage.write_json(summary_path, {"hello": "world"})
    storage.write_csv(stops_path, "a,b\n1,2\n")

    assert summary_path.read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert stops_path.read_text(encoding="utf-8") == "a,b\n1,2\n"


def test_route_json_and_csv_list_stops_in_order() -> None:
    route = nearest_neighbor_route(DEPOT, RANKS)
    planned = apply_enrichment(route, RoadNetworkUnavailable(UnavailableReason.NETWORK_ERROR, "down"))

    summary = routing_result_to_json(planned)
    rows = list(csv.DictReader(io.StringIO(routing_result_to_csv(planned))))

    assert summary["unavailable_reason"] == "network_error"
    assert [stop["rank_id"] for stop in summary["stops"]] == route.rank_ids
    assert [row["rank_id"] for row in rows] == route.rank_ids
    assert rows[0]["sequence"] == "1"
    assert rows[0]["road_following"] == "False"


def test_geojson_marks_road_following_paths_solid() -> None:
    route = nearest_neighbor_route(DEPOT, RANKS)
    road = RoadPath(
        distance_km=2.0,
        duration_min=6.0,
        geometry=[(-17.8292, 31.0522), (-17.8252, 31.0522), (-17.8312, 31.0475), (-17.8292, 31.0522)],
    )
    planned = apply_enrichment(route, road)

    collection = route_to_geojson(planned)

    path, depot, *stops = collection["features"]
    assert path["geometry"]["type"] == "LineString"
    assert path["geometry"]["coordinates"][0] == [31.0522, -17.8292]
    assert path["properties"]["line_style"] == "solid"
    assert depot["properties"]["kind"] == "depot"
    assert [stop["properties"]["sequence"] for stop in stops] == [1, 2]
    assert stops[0]["properties"]["marker-color"] == "#ef4444"
