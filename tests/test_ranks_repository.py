import logging
from pathlib import Path

import pytest

from rankroute.data.ranks_repository import DEFAULT_RANKS, RankRegistry, load_ranks_from_csv
from rankroute.models.domain import Coordinate, Priority


def test_registry_seeds_harare_ranks_in_order():
    registry = RankRegistry()

    assert [rank.name for rank in registry.list_ranks()] == [rank.name for rank in DEFAULT_RANKS]
    assert registry.get_depot() is None


def test_create_rank_uses_explicit_location():
    registry = RankRegistry(ranks=())

    rank = registry.create_rank(Coordinate(-17.83, 31.05), name="Mbare Musika", priority="high", fill_level=90)

    assert rank.latitude == -17.83
    assert rank.longitude == 31.05
    assert rank.priority is Priority.HIGH
    assert registry.get_rank(rank.rank_id).name == "Mbare Musika"


def test_update_and_delete_rank():
    registry = RankRegistry()

    updated = registry.update_rank("3", fill_level=95, priority="high", name=None)
    assert updated.fill_level == 95
    assert updated.priority is Priority.HIGH
    assert updated.name == "Roadport"

    registry.delete_rank("3")
    assert "3" not in [rank.rank_id for rank in registry.list_ranks()]
    with pytest.raises(KeyError):
        registry.get_rank("3")
    with pytest.raises(KeyError):
        registry.delete_rank("3")


def test_registry_hands_out_copies():
    registry = RankRegistry()

    rank = registry.get_rank("1")
    rank.fill_level = 0

    assert registry.get_rank("1").fill_level == 75


def test_set_depot():
    registry = RankRegistry()

    depot = registry.set_depot(Coordinate(-17.8292, 31.0522), name="City Depot")

    assert registry.get_depot() == depot
    assert depot.name == "City Depot"


def test_load_ranks_from_csv(tmp_path: Path):
    source = tmp_path / "ranks.csv"
    source.write_text(
        "id,name,lat,lng,priority,fillLevel,fillRate,capacity\n"
        "A,Rank A,-17.82,31.05,HIGH,70,4,900\n"
        "B,Rank B,,31.06,low,10,1,500\n"
        "C,Rank C,-17.84,31.04,,,,\n",
        encoding="utf-8",
    )

    ranks = load_ranks_from_csv(source)

    assert [rank.rank_id for rank in ranks] == ["A", "C"]
    assert ranks[0].priority is Priority.HIGH
    assert ranks[0].capacity == 900
    assert ranks[1].priority is Priority.MEDIUM
    assert ranks[1].fill_level == 0.0


def test_load_ranks_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_ranks_from_csv(tmp_path / "missing.csv")


def test_set_depot_defaults():
    registry = RankRegistry()

    depot = registry.set_depot(Coordinate(-17.8292, 31.0522))

    assert depot.depot_id == "depot-1"
    assert depot.name == "Main Depot"


def test_load_ranks_logs_skipped_rows(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    source = tmp_path / "ranks.csv"
    source.write_text("id,name,lat,lng\nA,Rank A,,31.06\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="rankroute.data.ranks_repository"):
        assert load_ranks_from_csv(source) == ()

    assert [record.name for record in caplog.records] == ["rankroute.data.ranks_repository"]
    assert "Skipping rank row" in caplog.records[0].getMessage()
