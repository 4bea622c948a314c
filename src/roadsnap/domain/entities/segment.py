from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

import numpy as np

from roadsnap.domain.entities.geography import BoundingBox, Coord


@dataclass(frozen=True)
class Segment:
    id: str
    coords: tuple[Coord, ...]  # valid vertices only, (lon, lat)
    street_code: str | None = None
    street_name: str | None = None
    name: str | None = None
    municipality: str | None = None
    fclass: str | None = None
    length: float | None = None  # meters, as shipped with the dataset
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def spatial(self) -> bool:
        return len(self.coords) >= 2

    @property
    def display_name(self) -> str | None:
        return self.street_name or self.name or None

    @cached_property
    def bbox(self) -> BoundingBox | None:
        return BoundingBox.of(self.coords) if self.coords else None

    @property
    def center(self) -> Coord | None:
        b = self.bbox
        if b is None:
            return None
        return ((b.west + b.east) / 2, (b.south + b.north) / 2)

    @cached_property
    def vertices(self) -> np.ndarray:
        """Read-only (n, 2) float array of (lon, lat), built once per segment."""
        arr = np.asarray(self.coords, dtype=float).reshape(-1, 2)
        arr.flags.writeable = False
        return arr
