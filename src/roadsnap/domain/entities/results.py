from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum

from roadsnap.domain.entities.segment import Segment


class MatchStatus(Enum):
    MATCHED = "matched"
    NO_MATCH = "no_match"  # nothing within the radius cap
    EMPTY_DATASET = "empty_dataset"  # store has no spatially valid segment


@dataclass(frozen=True)
class DistanceResult:
    segment_id: str | None
    distance_m: float
    street_code: str | None = None
    street_name: str | None = None
    municipality: str | None = None
    status: MatchStatus = MatchStatus.MATCHED

    @classmethod
    def no_match(cls, status: MatchStatus = MatchStatus.NO_MATCH) -> "DistanceResult":
        return cls(segment_id=None, distance_m=float("inf"), status=status)

    @classmethod
    def matched(cls, seg: Segment, distance_m: float) -> "DistanceResult":
        return cls(
            segment_id=seg.id,
            distance_m=distance_m,
            street_code=seg.street_code,
            street_name=seg.display_name,
            municipality=seg.municipality,
        )

    @property
    def found(self) -> bool:
        return self.segment_id is not None


@dataclass(frozen=True)
class BatchRow:
    query_id: Hashable | None
    result: DistanceResult | None
    error: str | None = None  # row-level failure; result is None when set

    @property
    def ok(self) -> bool:
        return self.error is None
