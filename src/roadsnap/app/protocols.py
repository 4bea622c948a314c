from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from roadsnap.domain.entities.geography import BoundingBox, Coord, QueryPoint
from roadsnap.domain.entities.results import DistanceResult
from roadsnap.domain.index.grid import SearchTier
from roadsnap.domain.store import SegmentStore


# ------------- Index --------------------
@runtime_checkable
class SpatialIndex(Protocol):
    """
    Responsibilities:
    • Return candidate segment ids for a box or a square around a point (superset).
    • Enumerate growing candidate tiers for nearest search, bounded by max_radius_deg.
    Units: degrees for radii and boxes.
    """

    store: SegmentStore
    max_radius_deg: float

    def candidates_in_bounds(self, bbox: BoundingBox) -> frozenset[str]: ...
    def candidates_near(self, point: Coord, radius_deg: float) -> frozenset[str]: ...
    def expanding_search(self, point: Coord) -> Iterator[SearchTier]: ...


# ------------- Resolvers --------------------
@runtime_checkable
class NearestResolver(Protocol):
    def resolve(self, point: QueryPoint) -> DistanceResult: ...
