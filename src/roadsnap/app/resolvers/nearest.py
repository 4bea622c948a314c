# roadsnap/app/resolvers/nearest.py

from roadsnap.app.protocols import SpatialIndex
from roadsnap.domain.distance import meters_to_deg, point_to_polyline_m
from roadsnap.domain.entities.geography import Coord, QueryPoint
from roadsnap.domain.entities.results import DistanceResult, MatchStatus
from roadsnap.errors import InvalidInput
from roadsnap.io.hooks import NoopHooks, QueryHooks


class NearestSegmentResolver:
    """
    Closest segment to one point.

    Walks the index tiers until one has candidates, scores every candidate's
    full polyline and keeps the minimum; exact ties go to the lowest segment
    id. With `refine`, one extra lookup widens the search when the best
    distance reaches past the square that produced it.
    """

    def __init__(
        self, index: SpatialIndex, *, refine: bool = True, hooks: QueryHooks | None = None
    ):
        self.index = index
        self.refine = refine
        self.hooks = hooks or NoopHooks()

    def resolve(self, point: QueryPoint) -> DistanceResult:
        try:
            p = point.checked()
        except InvalidInput as e:
            self.hooks.rejected(point, error=e)
            raise

        if self.index.store.is_empty:
            result = DistanceResult.no_match(MatchStatus.EMPTY_DATASET)
            self.hooks.resolved(point, result, tiers=0, candidates=0)
            return result

        tiers = 0
        tier = None
        for tier in self.index.expanding_search(p):
            tiers += 1
            if tier.candidates:
                break
        if tier is None or not tier.candidates:
            result = DistanceResult.no_match()
            self.hooks.resolved(point, result, tiers=tiers, candidates=0)
            return result

        best = self._closest(p, tier.candidates)
        seen = tier.candidates
        if self.refine:
            reach = meters_to_deg(best[0], p[1])
            if reach > tier.radius_deg and tier.radius_deg < self.index.max_radius_deg:
                wider = self.index.candidates_near(p, min(reach, self.index.max_radius_deg))
                extra = wider - seen
                if extra:
                    best = min(best, self._closest(p, extra))
                    seen = wider

        d, sid = best
        result = DistanceResult.matched(self.index.store[sid], d)
        self.hooks.resolved(point, result, tiers=tiers, candidates=len(seen))
        return result

    def _closest(self, p: Coord, ids) -> tuple[float, str]:
        store = self.index.store
        return min((point_to_polyline_m(p, store[sid].vertices), sid) for sid in ids)
