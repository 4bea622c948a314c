# tests/io/test_cli.py
import json

import pytest

from roadsnap.cli import main


@pytest.fixture
def dataset(tmp_path, three_segments):
    f = tmp_path / "segments.json"
    f.write_text(json.dumps(three_segments))
    return str(f)


def test_resolve_prints_report_rows(tmp_path, dataset, capsys):
    points = tmp_path / "points.json"
    points.write_text(
        json.dumps(
            [
                {"latitude": 18.5001, "longitude": -69.795, "referenceLabel": "Escuela"},
                {"latitude": "x", "longitude": -69.795},
                7,
                {"latitude": 0.0, "longitude": 0.0, "id": "far"},
            ]
        )
    )
    rc = main(["resolve", "--dataset", dataset, "--points", str(points), "--workers", "2"])
    assert rc == 0

    rows = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [r["sequence"] for r in rows] == [1, 2, 3, 4]
    assert rows[0]["reference"] == "Escuela"
    assert rows[0]["segment_code"] == "DNX-001001"
    assert rows[0]["distance"] == "11.13m"
    assert rows[0]["street_name"] == "Calle A"
    assert rows[1]["reference"] == "2" and rows[1]["distance"] == "N/A"
    assert rows[2]["reference"] == "3" and rows[2]["segment_code"] == "N/A"
    assert rows[3]["reference"] == "far" and rows[3]["street_name"] == "N/A"


def test_viewport_lists_ids(dataset, capsys):
    box = ["--north", "18.52", "--south", "18.49", "--east", "-69.78", "--west", "-69.81"]
    assert main(["viewport", "-d", dataset, *box, "--zoom", "17"]) == 0
    assert capsys.readouterr().out.split() == ["A", "B", "C"]

    assert main(["viewport", "-d", dataset, *box, "--zoom", "15"]) == 0
    assert capsys.readouterr().out == ""


def test_bad_dataset_exits_2(tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text('[{"id": "A"}, {"id": "A"}]')
    box = ["--north", "1", "--south", "0", "--east", "1", "--west", "0", "--zoom", "17"]
    assert main(["viewport", "-d", str(bad), *box]) == 2
    assert "duplicate" in capsys.readouterr().err

    assert main(["viewport", "-d", str(tmp_path / "missing.json"), *box]) == 2


def test_points_must_be_a_list(tmp_path, dataset):
    points = tmp_path / "points.json"
    points.write_text('{"latitude": 1}')
    assert main(["resolve", "-d", dataset, "-p", str(points)]) == 1


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_undecodable_dataset_exits_2(tmp_path, capsys):
    bad = tmp_path / "garbled.json"
    bad.write_bytes(b"\xff\xfe[]")
    box = ["--north", "1", "--south", "0", "--east", "1", "--west", "0", "--zoom", "17"]
    assert main(["viewport", "-d", str(bad), *box]) == 2
    assert "error" in capsys.readouterr().err


def test_inverted_box_is_a_usage_error(dataset, capsys):
    box = ["--north", "1", "--south", "2", "--east", "1", "--west", "0", "--zoom", "17"]
    assert main(["viewport", "-d", dataset, *box]) == 2
    assert "usage error" in capsys.readouterr().err


def test_config_file_without_kind_tag(tmp_path, dataset, capsys):
    cfg = tmp_path / "engine.json"
    cfg.write_text(json.dumps({"index": {"cell_size_deg": 0.02}, "viewport": {"min_zoom": 12}}))
    box = ["--north", "18.52", "--south", "18.49", "--east", "-69.78", "--west", "-69.81"]
    assert main(["viewport", "-d", dataset, "-c", str(cfg), *box, "--zoom", "12"]) == 0
    assert capsys.readouterr().out.split() == ["A", "B", "C"]
