# roadsnap/domain/store.py
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from roadsnap.domain.entities.geography import BoundingBox
from roadsnap.domain.entities.segment import Segment
from roadsnap.errors import DatasetError
from roadsnap.io.dataset import parse_records


@dataclass(frozen=True)
class LengthStats:
    max_length: float
    min_length: float


class SegmentStore:
    """
    Immutable set of segments for one dataset version.
    Every segment is kept for lookup; only those with >= 2 valid vertices
    take part in spatial queries.
    """

    def __init__(self, segments: Iterable[Segment], *, dropped_vertices: int = 0):
        by_id: dict[str, Segment] = {}
        for s in segments:
            if s.id in by_id:
                raise DatasetError(f"duplicate segment id {s.id!r}")
            by_id[s.id] = s
        self._by_id = MappingProxyType(by_id)
        self._spatial = tuple(sorted((s for s in by_id.values() if s.spatial), key=lambda s: s.id))
        for s in self._spatial:
            # built up front so queries only ever read segment state
            s.bbox, s.vertices
        self.dropped_vertices = dropped_vertices

        if self._spatial:
            boxes = [s.bbox for s in self._spatial]
            self.extent: BoundingBox | None = BoundingBox(
                north=max(b.north for b in boxes),
                south=min(b.south for b in boxes),
                east=max(b.east for b in boxes),
                west=min(b.west for b in boxes),
            )
        else:
            self.extent = None

    @classmethod
    def load(cls, raw: Iterable[Mapping[str, Any]]) -> "SegmentStore":
        segments, dropped = [], 0
        for rec in parse_records(raw):
            seg, n = rec.to_segment()
            segments.append(seg)
            dropped += n
        return cls(segments, dropped_vertices=dropped)

    # ---------------- lookup ----------------

    def get(self, segment_id: str) -> Segment | None:
        return self._by_id.get(segment_id)

    def __getitem__(self, segment_id: str) -> Segment:
        return self._by_id[segment_id]

    def __contains__(self, segment_id: object) -> bool:
        return segment_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._by_id.values())

    def spatial(self) -> tuple[Segment, ...]:
        """Spatially valid segments, ordered by id."""
        return self._spatial

    @property
    def is_empty(self) -> bool:
        return not self._spatial

    @property
    def excluded(self) -> int:
        return len(self._by_id) - len(self._spatial)

    # ---------------- non-spatial helpers ----------------

    def search(self, text: str) -> list[Segment]:
        q = text.strip().lower()
        if not q:
            return []
        hits = [
            s
            for s in self._by_id.values()
            if q in (s.display_name or "").lower() or q in (s.street_code or "").lower()
        ]
        return sorted(hits, key=lambda s: s.id)

    def length_statistics(self) -> LengthStats:
        # lengths <= 10 m are splitting artefacts in the source shapefile
        lengths = [s.length for s in self._by_id.values() if s.length and s.length > 10]
        if not lengths:
            return LengthStats(0.0, 0.0)
        return LengthStats(max(lengths), min(lengths))
