# roadsnap/io/dataset.py
from collections.abc import Iterable, Mapping
from math import isfinite
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from roadsnap.domain.entities.geography import valid_coord
from roadsnap.domain.entities.segment import Segment
from roadsnap.errors import DatasetError


class SegmentRecord(BaseModel):
    """One road feature as shipped by the dataset collaborator."""

    model_config = ConfigDict(extra="allow")
    id: str
    coords: list[Any] = Field(default_factory=list)
    street_code: str | None = None
    street_name: str | None = None
    name: str | None = None
    municipality: str | None = None
    fclass: str | None = None
    length: float | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v):
        if isinstance(v, bool) or v is None:
            raise ValueError("id is required")
        if isinstance(v, int):
            v = str(v)
        if isinstance(v, str) and not v.strip():
            raise ValueError("id must not be blank")
        return v

    @field_validator("coords", mode="before")
    @classmethod
    def _coords_sequence(cls, v):
        # missing geometry is allowed (record is kept for display only)
        if v is None:
            return []
        if isinstance(v, (str, bytes)) or not isinstance(v, (list, tuple)):
            raise ValueError("coords must be a sequence of [lon, lat] pairs")
        return list(v)

    @field_validator("street_code", "street_name", "name", "municipality", "fclass", mode="before")
    @classmethod
    def _text(cls, v):
        if v is None or isinstance(v, str):
            return v or None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("length", mode="before")
    @classmethod
    def _length(cls, v):
        # shapefile exports carry NaN/blank lengths; treat them as unknown
        if v is None or v == "":
            return None
        try:
            f = float(v)
        except (TypeError, ValueError):
            return None
        return f if isfinite(f) else None

    def to_segment(self) -> tuple[Segment, int]:
        """Build the immutable Segment; also return how many vertices were dropped."""
        kept = [c for c in (valid_coord(raw) for raw in self.coords) if c is not None]
        seg = Segment(
            id=self.id,
            coords=tuple(kept),
            street_code=self.street_code,
            street_name=self.street_name,
            name=self.name,
            municipality=self.municipality,
            fclass=self.fclass,
            length=self.length,
            extra=dict(self.model_extra or {}),
        )
        return seg, len(self.coords) - len(kept)


def parse_records(raw: Iterable[Mapping[str, Any]]) -> list[SegmentRecord]:
    if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        raise DatasetError(f"dataset must be a sequence of records, got {type(raw).__name__}")
    out: list[SegmentRecord] = []
    for i, rec in enumerate(raw):
        if not isinstance(rec, Mapping):
            raise DatasetError(f"record {i} is {type(rec).__name__}, expected a mapping")
        try:
            out.append(SegmentRecord.model_validate(dict(rec)))
        except ValidationError as e:
            raise DatasetError(f"record {i} is malformed: {e}") from e
    return out
