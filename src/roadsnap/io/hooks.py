# io/hooks.py
from typing import Protocol


class QueryHooks(Protocol):
    def dataset_loaded(self, *, version, segments, spatial, excluded, cells): ...
    def dataset_rejected(self, *, error: BaseException): ...
    def resolved(self, point, result, *, tiers, candidates): ...
    def rejected(self, point, *, error: BaseException): ...
    def viewport(self, *, zoom, gated, count): ...
    def batch_start(self, *, size, workers): ...
    def batch_end(self, *, size, failed, cancelled, wall_ms): ...


class NoopHooks:
    def dataset_loaded(self, **_):
        pass

    def dataset_rejected(self, **_):
        pass

    def resolved(self, *_, **__):
        pass

    def rejected(self, *_, **__):
        pass

    def viewport(self, **_):
        pass

    def batch_start(self, **_):
        pass

    def batch_end(self, **_):
        pass
