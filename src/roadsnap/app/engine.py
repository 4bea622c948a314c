# roadsnap/app/engine.py
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from roadsnap.app.protocols import SpatialIndex
from roadsnap.app.resolvers.batch import BatchResolver
from roadsnap.app.resolvers.nearest import NearestSegmentResolver
from roadsnap.app.resolvers.viewport import ViewportGate
from roadsnap.config.models import DatasetRef, EngineModel
from roadsnap.domain.entities.geography import BoundingBox, QueryPoint
from roadsnap.domain.entities.results import BatchRow, DistanceResult
from roadsnap.domain.entities.segment import Segment
from roadsnap.domain.store import SegmentStore
from roadsnap.errors import DatasetError
from roadsnap.io.hooks import NoopHooks, QueryHooks
from roadsnap.runtime.index_factory import make_index
from roadsnap.runtime.resources import resolve_dataset


@dataclass(frozen=True)
class Snapshot:
    """A store and everything built over it; published and retired as one unit."""

    version: int
    store: SegmentStore
    index: SpatialIndex
    nearest: NearestSegmentResolver
    viewport: ViewportGate


class SegmentEngine:
    """
    Owns the current Snapshot. Queries read the reference once and run against
    that immutable snapshot without locking; `load` builds a complete new
    snapshot first and only then swaps it in. A failed load leaves the
    previous snapshot published.
    """

    def __init__(self, cfg: EngineModel | None = None, *, hooks: QueryHooks | None = None):
        self.cfg = cfg or EngineModel()
        self.hooks = hooks or NoopHooks()
        self._lock = threading.Lock()
        store = SegmentStore([])
        self._snap = Snapshot(0, store, *self._build(store))

    def _build(
        self, store: SegmentStore
    ) -> tuple[SpatialIndex, NearestSegmentResolver, ViewportGate]:
        index = make_index(self.cfg.index, store=store)
        nearest = NearestSegmentResolver(index, refine=self.cfg.resolver.refine, hooks=self.hooks)
        viewport = ViewportGate(index, min_zoom=self.cfg.viewport.min_zoom, hooks=self.hooks)
        return index, nearest, viewport

    @property
    def snapshot(self) -> Snapshot:
        return self._snap

    # ---------------- dataset lifecycle ----------------

    def load(self, raw: Iterable[Mapping[str, Any]]) -> Snapshot:
        try:
            store = SegmentStore.load(raw)
            parts = self._build(store)
        except DatasetError as e:
            self.hooks.dataset_rejected(error=e)
            raise
        with self._lock:
            snap = Snapshot(self._snap.version + 1, store, *parts)
            self._snap = snap
        self.hooks.dataset_loaded(
            version=snap.version,
            segments=len(store),
            spatial=len(store.spatial()),
            excluded=store.excluded,
            cells=getattr(snap.index, "cell_count", None),
        )
        return snap

    def load_from(self, ref: DatasetRef) -> Snapshot:
        try:
            raw = resolve_dataset(ref)
        except (DatasetError, FileNotFoundError) as e:
            self.hooks.dataset_rejected(error=e)
            raise
        return self.load(raw)

    # ---------------- queries ----------------

    def nearest(self, point: QueryPoint) -> DistanceResult:
        return self._snap.nearest.resolve(point)

    def visible_segments(self, bbox: BoundingBox | Mapping[str, float], zoom: int) -> list[Segment]:
        return self._snap.viewport.visible_segments(bbox, zoom)

    def resolve_batch(
        self, points: Sequence, *, cancel: threading.Event | None = None
    ) -> list[BatchRow]:
        # the whole batch runs against one snapshot, even across a reload
        batch = BatchResolver(self._snap.nearest, workers=self.cfg.batch.workers, hooks=self.hooks)
        return batch.resolve(points, cancel=cancel)
