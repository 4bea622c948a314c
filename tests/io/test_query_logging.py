import io
import json
import logging

import pytest

from roadsnap.app.build import build
from roadsnap.domain.entities.geography import QueryPoint
from roadsnap.errors import DatasetError
from roadsnap.io.query_events import BatchCompleted, DatasetPublished, PointRejected, PointResolved
from roadsnap.io.query_logging import QueryLogging, json_logger
from roadsnap.io.recorder import JsonlSink, MemorySink, Recorder


@pytest.fixture
def logger():
    return logging.getLogger("roadsnap.test.query_logging")


def _messages(caplog):
    return [r.getMessage() for r in caplog.records]


def test_batch_logs_and_events(caplog, logger, three_segments):
    sink = MemorySink()
    app = build({"run_id": "r-7"}, segments=three_segments, recorder=Recorder(sink), logger=logger)

    points = [
        QueryPoint(lat=18.5001, lon=-69.795, ref="ok"),
        QueryPoint(lat=None, lon=1.0, ref="x"),
    ]
    caplog.clear()
    with caplog.at_level(logging.INFO, logger=logger.name):
        app.engine.resolve_batch(points)

    assert _messages(caplog) == ["batch_start", "point_rejected", "batch_end"]
    end = caplog.records[-1]
    assert end.extra["run_id"] == "r-7"
    assert (end.extra["size"], end.extra["failed"], end.extra["cancelled"]) == (2, 1, 0)

    names = [e.name for e in sink.events]
    assert names == ["DatasetPublished", "PointResolved", "PointRejected", "BatchCompleted"]
    assert [e.seq for e in sink.events] == [1, 2, 3, 4]
    assert isinstance(sink.events[0], DatasetPublished) and sink.events[0].spatial == 3
    resolved = sink.events[1]
    assert isinstance(resolved, PointResolved)
    assert (resolved.query_id, resolved.segment_id, resolved.status) == ("ok", "A", "matched")
    assert isinstance(sink.events[2], PointRejected) and sink.events[2].query_id == "x"
    assert isinstance(sink.events[3], BatchCompleted) and sink.events[3].failed == 1


def test_no_match_distance_is_recorded_as_none(logger, three_segments):
    sink = MemorySink()
    app = build(segments=three_segments, recorder=Recorder(sink), logger=logger)
    app.engine.nearest(QueryPoint(lat=0.0, lon=0.0, ref="far"))
    ev = sink.events[-1]
    assert (ev.status, ev.distance_m, ev.segment_id) == ("no_match", None, None)


def test_dataset_lifecycle_logs(caplog, logger):
    app = build(logger=logger)
    caplog.clear()
    with caplog.at_level(logging.INFO, logger=logger.name):
        app.engine.load([{"id": "x", "coords": [[0, 0]]}])
        with pytest.raises(DatasetError):
            app.engine.load("nope")

    assert _messages(caplog) == ["dataset_loaded", "dataset_empty", "dataset_rejected"]
    loaded = caplog.records[0]
    extra = loaded.extra
    assert (extra["segments"], extra["spatial"], extra["excluded"]) == (1, 0, 1)
    assert caplog.records[2].levelno == logging.ERROR


def test_resolved_debug_logs_are_sampled(caplog, logger, three_segments):
    hooks = QueryLogging(debug=True, sample_every=3, logger=logger)
    app = build(segments=three_segments, use_logging=False)
    nearest = app.engine.snapshot.nearest
    nearest.hooks = hooks

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        for _ in range(7):
            nearest.resolve(QueryPoint(lat=18.5001, lon=-69.795))

    resolved = [r for r in caplog.records if r.getMessage() == "resolved"]
    assert len(resolved) == 2
    assert resolved[0].extra["segment_id"] == "A"


def test_viewport_logs_only_in_debug(caplog, logger):
    quiet = QueryLogging(logger=logger)
    loud = QueryLogging(debug=True, logger=logger)
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        quiet.viewport(zoom=15, gated=True, count=0)
        loud.viewport(zoom=15, gated=True, count=0)
    assert _messages(caplog) == ["viewport"]


def test_json_logger_formats_payload():
    buf = io.StringIO()
    log = json_logger("roadsnap.test.json_format", level="INFO", stream=buf)
    log.info("batch_end", extra={"extra": {"run_id": "r", "size": 3}})
    line = json.loads(buf.getvalue())
    assert line == {
        "level": "INFO",
        "msg": "batch_end",
        "logger": "roadsnap.test.json_format",
        "run_id": "r",
        "size": 3,
    }


def test_recorder_survives_a_broken_sink(caplog):
    class Broken:
        def write(self, ev):
            raise OSError("disk full")

    good = MemorySink()
    buf = io.StringIO()
    rec = Recorder(Broken(), good, JsonlSink(buf))
    ev = BatchCompleted(
        run_id="r", seq=1, name="BatchCompleted", size=1, failed=0, cancelled=0, wall_ms=1.0
    )
    with caplog.at_level(logging.ERROR, logger="roadsnap.recorder"):
        rec.emit(ev)

    assert good.events == [ev]
    assert json.loads(buf.getvalue())["name"] == "BatchCompleted"
    assert "Broken" in caplog.records[0].getMessage()
