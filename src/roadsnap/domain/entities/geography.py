from __future__ import annotations

import math
from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from roadsnap.errors import InvalidInput

# Vertices follow the dataset convention: (longitude, latitude) in degrees.
Coord = tuple[float, float]


def _as_float(v: Any) -> float | None:
    if isinstance(v, bool) or v is None:
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def valid_coord(c: Any) -> Coord | None:
    """Return (lon, lat) as floats, or None when the pair is unusable."""
    # positional pairs only; dicts, sets and strings are not vertices
    if isinstance(c, (str, bytes)) or not isinstance(c, Sequence) or len(c) < 2:
        return None
    lon, lat = _as_float(c[0]), _as_float(c[1])
    if lon is None or lat is None:
        return None
    return (lon, lat)


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float  # no anti-meridian wrap: west <= east

    def __post_init__(self):
        if self.south > self.north:
            raise ValueError(f"south {self.south} > north {self.north}")
        if self.west > self.east:
            raise ValueError(f"west {self.west} > east {self.east}")

    @classmethod
    def around(cls, lon: float, lat: float, radius_deg: float) -> BoundingBox:
        return cls(
            north=lat + radius_deg,
            south=lat - radius_deg,
            east=lon + radius_deg,
            west=lon - radius_deg,
        )

    @classmethod
    def of(cls, coords) -> BoundingBox:
        lons = [c[0] for c in coords]
        lats = [c[1] for c in coords]
        return cls(north=max(lats), south=min(lats), east=max(lons), west=min(lons))

    def contains_strictly(self, lon: float, lat: float) -> bool:
        return self.south < lat < self.north and self.west < lon < self.east

    @property
    def span_deg(self) -> float:
        return max(self.north - self.south, self.east - self.west)


@dataclass(frozen=True)
class QueryPoint:
    lat: float
    lon: float
    ref: Hashable | None = None  # opaque caller id, carried through batches
    label: str | None = None

    @classmethod
    def from_mapping(cls, m: Mapping[str, Any], *, ref: Hashable | None = None) -> QueryPoint:
        """Accept the point-upload shape: {latitude, longitude, referenceLabel}."""
        lat = m.get("latitude", m.get("lat"))
        lon = m.get("longitude", m.get("lng", m.get("lon")))
        label = m.get("referenceLabel", m.get("reference", m.get("referencia")))
        if ref is None:
            ref = m.get("id", label)
        return cls(lat=lat, lon=lon, ref=ref, label=None if label is None else str(label))

    @property
    def coord(self) -> Coord:
        return (self.lon, self.lat)

    def checked(self) -> Coord:
        """Validated (lon, lat); raises InvalidInput on missing/NaN coordinates."""
        lon, lat = _as_float(self.lon), _as_float(self.lat)
        if lon is None or lat is None:
            raise InvalidInput(f"invalid query coordinates lat={self.lat!r} lon={self.lon!r}")
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            raise InvalidInput(f"query coordinates out of range lat={lat} lon={lon}")
        return (lon, lat)
