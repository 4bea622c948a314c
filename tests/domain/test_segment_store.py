import math

import pytest

from roadsnap.domain.store import LengthStats, SegmentStore
from roadsnap.errors import DatasetError


def test_load_keeps_fields_and_extras(three_segments):
    three_segments[0]["lanes"] = 2
    store = SegmentStore.load(three_segments)

    a = store["A"]
    assert a.coords == ((-69.80, 18.50), (-69.79, 18.50))
    assert a.street_code == "001001"
    assert a.municipality == "DNX"
    assert a.extra == {"lanes": 2}
    assert a.vertices.shape == (2, 2)
    assert not a.vertices.flags.writeable

    assert len(store) == 3
    assert "C" in store and "Z" not in store
    assert store.get("Z") is None
    assert [s.id for s in store.spatial()] == ["A", "B", "C"]


def test_extent_and_emptiness(three_segments):
    store = SegmentStore.load(three_segments)
    assert not store.is_empty
    e = store.extent
    assert (e.north, e.south, e.east, e.west) == (18.51, 18.50, -69.79, -69.80)

    empty = SegmentStore.load([])
    assert empty.is_empty
    assert empty.extent is None
    assert len(empty) == 0


def test_degenerate_geometry_is_kept_but_not_spatial():
    store = SegmentStore.load(
        [
            {"id": "one", "coords": [[-69.8, 18.5]]},
            {"id": "nan", "coords": [[math.nan, 18.5], [-69.8, None]]},
            {"id": "none", "coords": None},
            {"id": "mixed", "coords": [[-69.8, 18.5], [math.nan, 1.0], ["x", 2], [-69.79, 18.5]]},
        ]
    )
    assert len(store) == 4
    assert [s.id for s in store.spatial()] == ["mixed"]
    assert store.excluded == 3
    assert store["mixed"].coords == ((-69.8, 18.5), (-69.79, 18.5))
    assert store.dropped_vertices == 4
    assert store["none"].bbox is None
    assert store["none"].center is None


def test_only_degenerate_segments_means_empty():
    store = SegmentStore.load([{"id": "x", "coords": [[-69.8, 18.5]]}])
    assert store.is_empty
    assert len(store) == 1


def test_numeric_ids_and_codes_are_coerced():
    store = SegmentStore.load(
        [{"id": 7, "coords": [[0, 0], [0, 1]], "street_code": 1001, "length": "NaN"}]
    )
    seg = store["7"]
    assert seg.street_code == "1001"
    assert seg.length is None


@pytest.mark.parametrize(
    "raw",
    [
        {"id": "A"},  # a mapping, not a list
        "[]",
        42,
        [["A", [[0, 0], [1, 1]]]],  # record is not a mapping
        [{"coords": [[0, 0], [1, 1]]}],  # missing id
        [{"id": "  "}],
        [{"id": "A", "coords": "0,0 1,1"}],
    ],
)
def test_malformed_dataset_is_rejected(raw):
    with pytest.raises(DatasetError):
        SegmentStore.load(raw)


def test_duplicate_ids_are_rejected(three_segments):
    three_segments[2]["id"] = "A"
    with pytest.raises(DatasetError, match="duplicate"):
        SegmentStore.load(three_segments)


def test_display_name_and_center(three_segments):
    store = SegmentStore.load(three_segments)
    assert store["A"].display_name == "Calle A"
    assert store["C"].display_name == "Conector"
    lon, lat = store["A"].center
    assert lon == pytest.approx(-69.795)
    assert lat == pytest.approx(18.50)


def test_search_by_name_or_code(three_segments):
    store = SegmentStore.load(three_segments)
    assert [s.id for s in store.search("calle")] == ["A", "B"]
    assert [s.id for s in store.search("0020")] == ["C"]
    assert store.search("   ") == []


def test_length_statistics_ignore_short_and_unknown(three_segments):
    three_segments.append({"id": "stub", "coords": [[0, 0], [0, 0.00001]], "length": 1.1})
    three_segments.append({"id": "nolen", "coords": [[0, 0], [0, 0.001]]})
    stats = SegmentStore.load(three_segments).length_statistics()
    assert stats == LengthStats(max_length=1055.8, min_length=111.2)
    assert SegmentStore.load([]).length_statistics() == LengthStats(0.0, 0.0)


def test_non_positional_vertices_are_dropped():
    store = SegmentStore.load(
        [{"id": "A", "coords": [[-69.8, 18.5], {"lon": 1, "lat": 2}, {1, 2}, [-69.79, 18.5]]}]
    )
    assert store["A"].coords == ((-69.8, 18.5), (-69.79, 18.5))
    assert store.dropped_vertices == 2


def test_geometry_is_built_with_the_store(three_segments):
    store = SegmentStore.load(three_segments)
    for seg in store.spatial():
        assert "vertices" in seg.__dict__
        assert "bbox" in seg.__dict__
