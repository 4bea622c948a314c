# roadsnap/app/resolvers/batch.py
import threading
import time
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from roadsnap.app.protocols import NearestResolver
from roadsnap.domain.entities.geography import QueryPoint
from roadsnap.domain.entities.results import BatchRow
from roadsnap.errors import InvalidInput
from roadsnap.io.hooks import NoopHooks, QueryHooks

CANCELLED = "cancelled"


def _as_point(raw) -> QueryPoint:
    if isinstance(raw, QueryPoint):
        return raw
    if isinstance(raw, Mapping):
        return QueryPoint.from_mapping(raw)
    raise InvalidInput(f"unsupported query point {type(raw).__name__}")


class BatchResolver:
    """
    Nearest segment for an ordered list of points.
    Rows come back in input order; a bad point becomes a row-level error.
    """

    def __init__(
        self, nearest: NearestResolver, *, workers: int = 1, hooks: QueryHooks | None = None
    ):
        self.nearest = nearest
        self.workers = max(1, workers)
        self.hooks = hooks or NoopHooks()

    def resolve(self, points: Sequence, *, cancel: threading.Event | None = None) -> list[BatchRow]:
        if isinstance(points, (str, bytes, Mapping)) or not isinstance(points, Sequence):
            raise TypeError(f"points must be a sequence, got {type(points).__name__}")

        t0 = time.perf_counter()
        n = len(points)
        self.hooks.batch_start(size=n, workers=self.workers)
        rows: list[BatchRow | None] = [None] * n

        if self.workers == 1:
            for i, raw in enumerate(points):
                rows[i] = self._one(raw, cancel)
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                pending = {}
                for i, raw in enumerate(points):
                    if cancel is not None and cancel.is_set():
                        rows[i] = self._cancelled(raw)
                        continue
                    pending[i] = pool.submit(self._one, raw, cancel)
                for i, fut in pending.items():
                    rows[i] = fut.result()

        failed = sum(1 for r in rows if r.error and r.error != CANCELLED)
        cancelled = sum(1 for r in rows if r.error == CANCELLED)
        self.hooks.batch_end(
            size=n,
            failed=failed,
            cancelled=cancelled,
            wall_ms=(time.perf_counter() - t0) * 1000,
        )
        return rows

    def _one(self, raw, cancel: threading.Event | None) -> BatchRow:
        if cancel is not None and cancel.is_set():
            return self._cancelled(raw)
        try:
            point = _as_point(raw)
        except InvalidInput as e:
            self.hooks.rejected(raw, error=e)
            return BatchRow(None, None, error=str(e))
        try:
            return BatchRow(point.ref, self.nearest.resolve(point))
        except InvalidInput as e:
            return BatchRow(point.ref, None, error=str(e))

    @staticmethod
    def _cancelled(raw) -> BatchRow:
        try:
            qid = _as_point(raw).ref
        except InvalidInput:
            qid = None
        return BatchRow(qid, None, error=CANCELLED)
