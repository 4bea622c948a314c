import os
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = 1

    @field_validator("sample_every")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("sample_every must be >= 1")
        return v


# ----------------- INDEX ---------------------


class GridIndexModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["grid"] = "grid"
    cell_size_deg: float = 0.01  # ~1 km at the equator
    default_radius_deg: float = 0.01
    max_radius_deg: float | None = None  # None => derived from dataset extent

    @field_validator("cell_size_deg", "default_radius_deg", "max_radius_deg")
    def _gt_zero(cls, v: float | None, info: ValidationInfo) -> float | None:
        if v is not None and not v > 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @model_validator(mode="after")
    def _cap_above_default(self):
        if self.max_radius_deg is not None and self.max_radius_deg < self.default_radius_deg:
            raise ValueError("max_radius_deg must be >= default_radius_deg")
        return self


IndexUnion = Annotated[GridIndexModel, Field(discriminator="kind")]


# ----------------- RESOLVERS ---------------------


class ResolverModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    refine: bool = True  # widen once when the best hit reaches past the searched square


class ViewportModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    min_zoom: int = 16


class BatchModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    workers: int = 1

    @field_validator("workers")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("workers must be >= 1")
        return v


# ----------------- DATASET ---------------------


class DatasetByPath(BaseModel):
    model_config = ConfigDict(extra="forbid")
    by: Literal["path"] = "path"
    file: str
    fmt: Literal["json", "jsonl"] = "json"
    must_exist: bool = True

    @field_validator("file")
    @classmethod
    def _expand(cls, v: str) -> str:
        return os.path.expandvars(os.path.expanduser(v))


DatasetRef = Annotated[DatasetByPath, Field(discriminator="by")]


# ------------------------------------------------------------------


class EngineModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "roadsnap"
    run_id: str = "local"
    log: LogModel = LogModel()
    index: IndexUnion = Field(default_factory=GridIndexModel)
    resolver: ResolverModel = ResolverModel()
    viewport: ViewportModel = ViewportModel()
    batch: BatchModel = BatchModel()
    dataset: DatasetRef | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_tags(cls, data):
        # one kind per union today: an untagged mapping means that kind
        if isinstance(data, dict):
            data = dict(data)
            for key, tag, value in (("index", "kind", "grid"), ("dataset", "by", "path")):
                sub = data.get(key)
                if isinstance(sub, dict) and tag not in sub:
                    data[key] = {tag: value, **sub}
        return data
