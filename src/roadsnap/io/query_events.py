# roadsnap/io/query_events.py

from dataclasses import dataclass


# Base type for audit events (emitted alongside logs, never fed back to the engine)
@dataclass
class QueryEvent:
    run_id: str
    seq: int  # emission order within the run
    name: str  # stable event name


@dataclass
class DatasetPublished(QueryEvent):
    version: int
    segments: int
    spatial: int
    excluded: int


@dataclass
class PointResolved(QueryEvent):
    query_id: str | None
    lat: float
    lon: float
    segment_id: str | None
    distance_m: float | None  # None when nothing matched
    status: str


@dataclass
class PointRejected(QueryEvent):
    query_id: str | None
    reason: str


@dataclass
class BatchCompleted(QueryEvent):
    size: int
    failed: int
    cancelled: int
    wall_ms: float
