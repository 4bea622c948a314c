# roadsnap/app/resolvers/viewport.py
from collections.abc import Mapping

from roadsnap.app.protocols import SpatialIndex
from roadsnap.domain.entities.geography import BoundingBox
from roadsnap.domain.entities.segment import Segment
from roadsnap.io.hooks import NoopHooks, QueryHooks

MIN_ZOOM = 16  # below this, full-detail segment rendering is disallowed


class ViewportGate:
    def __init__(
        self, index: SpatialIndex, *, min_zoom: int = MIN_ZOOM, hooks: QueryHooks | None = None
    ):
        self.index = index
        self.min_zoom = min_zoom
        self.hooks = hooks or NoopHooks()

    def visible_segments(self, bbox: BoundingBox | Mapping[str, float], zoom: int) -> list[Segment]:
        """Segments with at least one vertex strictly inside bbox, ordered by id."""
        if zoom < self.min_zoom:
            self.hooks.viewport(zoom=zoom, gated=True, count=0)
            return []
        if isinstance(bbox, BoundingBox):
            box = bbox
        else:
            box = BoundingBox(
                north=bbox["north"], south=bbox["south"], east=bbox["east"], west=bbox["west"]
            )

        store = self.index.store
        out = []
        for sid in sorted(self.index.candidates_in_bounds(box)):
            seg = store[sid]
            v = seg.vertices
            lon, lat = v[:, 0], v[:, 1]
            inside = (lon > box.west) & (lon < box.east) & (lat > box.south) & (lat < box.north)
            if inside.any():
                out.append(seg)
        self.hooks.viewport(zoom=zoom, gated=False, count=len(out))
        return out
