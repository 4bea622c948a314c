# io/query_logging.py
import json
import logging
import math
import sys
import threading

from roadsnap.io.hooks import NoopHooks
from roadsnap.io.query_events import (
    BatchCompleted,
    DatasetPublished,
    PointRejected,
    PointResolved,
)
from roadsnap.io.recorder import Recorder


def json_logger(name="roadsnap", level="INFO", stream=None):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(stream or sys.stdout)

        class _JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                payload = {
                    "level": record.levelname,
                    "msg": record.getMessage(),
                    "logger": record.name,
                }
                extra = getattr(record, "extra", None)
                if isinstance(extra, dict):
                    payload.update(extra)
                return json.dumps(payload, default=str)

        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
        logger.setLevel(level)
    return logger


def _qid(point) -> str | None:
    ref = getattr(point, "ref", None)
    return None if ref is None else str(ref)


class QueryLogging(NoopHooks):
    """
    One place to shape and emit structured logs for dataset, query and batch events.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1000,
        logger: logging.Logger | None = None,
        recorder: Recorder | None = None,
    ):
        self.run_id, self.debug, self.sample_every = run_id, debug, max(1, sample_every)
        self.recorder = recorder
        self.log = logger or json_logger(level=level)
        self._lock = threading.Lock()
        self._seq = 0
        self._resolved = 0

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id, **extra}
        self.log.log(getattr(logging, level), msg, extra={"extra": payload})

    def _record(self, cls, name: str, **fields):
        if not self.recorder:
            return
        with self._lock:
            self._seq += 1
            seq = self._seq
        self.recorder.emit(cls(run_id=self.run_id, seq=seq, name=name, **fields))

    # --------------- Dataset lifecycle --------------------

    def dataset_loaded(self, *, version, segments, spatial, excluded, cells):
        self._emit(
            "INFO",
            "dataset_loaded",
            version=version,
            segments=segments,
            spatial=spatial,
            excluded=excluded,
            cells=cells,
        )
        if spatial == 0:
            self._emit("WARNING", "dataset_empty", version=version)
        self._record(
            DatasetPublished,
            "DatasetPublished",
            version=version,
            segments=segments,
            spatial=spatial,
            excluded=excluded,
        )

    def dataset_rejected(self, *, error: BaseException):
        self._emit("ERROR", "dataset_rejected", error=str(error))

    # --------------- Queries -----------------------------

    def resolved(self, point, result, *, tiers, candidates):
        with self._lock:
            self._resolved += 1
            n = self._resolved
        if self.debug and (n % self.sample_every) == 0:
            self._emit(
                "DEBUG",
                "resolved",
                query_id=_qid(point),
                segment_id=result.segment_id,
                distance_m=result.distance_m if math.isfinite(result.distance_m) else None,
                status=result.status.value,
                tiers=tiers,
                candidates=candidates,
            )
        self._record(
            PointResolved,
            "PointResolved",
            query_id=_qid(point),
            lat=point.lat,
            lon=point.lon,
            segment_id=result.segment_id,
            distance_m=result.distance_m if math.isfinite(result.distance_m) else None,
            status=result.status.value,
        )

    def rejected(self, point, *, error: BaseException):
        self._emit("WARNING", "point_rejected", query_id=_qid(point), error=str(error))
        self._record(PointRejected, "PointRejected", query_id=_qid(point), reason=str(error))

    def viewport(self, *, zoom, gated, count):
        if self.debug:
            self._emit("DEBUG", "viewport", zoom=zoom, gated=gated, count=count)

    # --------------- Batches -----------------------------

    def batch_start(self, *, size, workers):
        self._emit("INFO", "batch_start", size=size, workers=workers)

    def batch_end(self, *, size, failed, cancelled, wall_ms):
        self._emit(
            "INFO", "batch_end", size=size, failed=failed, cancelled=cancelled, wall_ms=wall_ms
        )
        self._record(
            BatchCompleted,
            "BatchCompleted",
            size=size,
            failed=failed,
            cancelled=cancelled,
            wall_ms=wall_ms,
        )
