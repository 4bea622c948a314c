# roadsnap/io/report.py
import math
from collections.abc import Sequence
from dataclasses import dataclass

from roadsnap.domain.entities.geography import QueryPoint
from roadsnap.domain.entities.results import BatchRow, DistanceResult

NA = "N/A"
UNKNOWN_MUNICIPALITY = "UNK"
UNKNOWN_STREET_CODE = "000000"


def format_segment_code(result: DistanceResult | None) -> str:
    if result is None or not result.found:
        return NA
    muni = result.municipality or UNKNOWN_MUNICIPALITY
    return f"{muni}-{result.street_code or UNKNOWN_STREET_CODE}"


def format_distance(distance_m: float | None) -> str:
    if distance_m is None or not math.isfinite(distance_m):
        return NA
    return f"{distance_m:.2f}m"


@dataclass(frozen=True)
class ReportRow:
    sequence: int  # 1-based, input order
    reference: str
    street_name: str
    segment_code: str
    distance: str
    latitude: float | None
    longitude: float | None


def build_report(points: Sequence[QueryPoint], rows: Sequence[BatchRow]) -> list[ReportRow]:
    """Pair each point with its batch row; both must be in the same (input) order."""
    if len(points) != len(rows):
        raise ValueError(f"{len(points)} points but {len(rows)} rows")
    out = []
    for i, (p, row) in enumerate(zip(points, rows), start=1):
        res = row.result
        out.append(
            ReportRow(
                sequence=i,
                reference=p.label or (str(p.ref) if p.ref is not None else NA),
                street_name=(res.street_name if res is not None else None) or NA,
                segment_code=format_segment_code(res),
                distance=format_distance(res.distance_m if res is not None else None),
                latitude=p.lat,
                longitude=p.lon,
            )
        )
    return out
