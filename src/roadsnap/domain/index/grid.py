# roadsnap/domain/index/grid.py
import math
from collections.abc import Iterator
from dataclasses import dataclass

from roadsnap.domain.entities.geography import BoundingBox, Coord
from roadsnap.domain.store import SegmentStore

CellKey = tuple[int, int]  # (floor(lat / cell), floor(lon / cell))


@dataclass(frozen=True)
class SearchTier:
    radius_deg: float
    candidates: frozenset[str]


class GridSpatialIndex:
    """
    Fixed-size grid buckets over segment bounding boxes.

    Each spatially valid segment is registered in every cell its bbox overlaps
    (inclusive), so a lookup over cells never misses a segment whose bbox
    touches the searched area. Candidates are a superset; exact distances are
    the resolver's job. Built once; rebuild when the store changes.
    """

    def __init__(
        self,
        store: SegmentStore,
        *,
        cell_size_deg: float = 0.01,
        default_radius_deg: float = 0.01,
        max_radius_deg: float | None = None,
    ):
        if cell_size_deg <= 0 or default_radius_deg <= 0:
            raise ValueError("cell_size_deg and default_radius_deg must be > 0")
        self.store = store
        self.cell_size_deg = float(cell_size_deg)
        self.default_radius_deg = float(default_radius_deg)

        cells: dict[CellKey, list[str]] = {}
        for seg in store.spatial():
            for key in self._cells_for(seg.bbox):
                cells.setdefault(key, []).append(seg.id)
        # store.spatial() is id-ordered, so buckets come out sorted
        self._cells: dict[CellKey, tuple[str, ...]] = {k: tuple(v) for k, v in cells.items()}

        if max_radius_deg is not None:
            self.max_radius_deg = max(float(max_radius_deg), self.default_radius_deg)
        elif store.extent is not None:
            self.max_radius_deg = max(self.default_radius_deg, store.extent.span_deg)
        else:
            self.max_radius_deg = self.default_radius_deg

    # ---------------- grid math ----------------

    def cell_of(self, lon: float, lat: float) -> CellKey:
        c = self.cell_size_deg
        return (math.floor(lat / c), math.floor(lon / c))

    def _key_range(self, bbox: BoundingBox) -> tuple[CellKey, CellKey]:
        return self.cell_of(bbox.west, bbox.south), self.cell_of(bbox.east, bbox.north)

    def _cells_for(self, bbox: BoundingBox) -> Iterator[CellKey]:
        (r0, c0), (r1, c1) = self._key_range(bbox)
        for r in range(r0, r1 + 1):
            for c in range(c0, c1 + 1):
                yield (r, c)

    # ---------------- queries ----------------

    def candidates_in_bounds(self, bbox: BoundingBox) -> frozenset[str]:
        (r0, c0), (r1, c1) = self._key_range(bbox)
        out: set[str] = set()
        if (r1 - r0 + 1) * (c1 - c0 + 1) > len(self._cells):
            # huge box: cheaper to walk the occupied cells
            for (r, c), ids in self._cells.items():
                if r0 <= r <= r1 and c0 <= c <= c1:
                    out.update(ids)
        else:
            for r in range(r0, r1 + 1):
                for c in range(c0, c1 + 1):
                    ids = self._cells.get((r, c))
                    if ids:
                        out.update(ids)
        return frozenset(out)

    def candidates_near(self, point: Coord, radius_deg: float) -> frozenset[str]:
        lon, lat = point
        return self.candidates_in_bounds(BoundingBox.around(lon, lat, radius_deg))

    def expanding_search(self, point: Coord) -> Iterator[SearchTier]:
        """
        Yield candidate tiers for radii r0, 2*r0, 4*r0, ... and finally the cap.
        Callers stop at the first non-empty tier; the cap bounds the work for
        points far from any road.
        """
        r = self.default_radius_deg
        while True:
            r = min(r, self.max_radius_deg)
            yield SearchTier(r, self.candidates_near(point, r))
            if r >= self.max_radius_deg:
                return
            r *= 2

    # ---------------- introspection ----------------

    def cell(self, key: CellKey) -> tuple[str, ...]:
        return self._cells.get(key, ())

    @property
    def cell_count(self) -> int:
        return len(self._cells)
