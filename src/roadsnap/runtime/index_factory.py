# roadsnap/runtime/index_factory.py
from roadsnap.app.protocols import SpatialIndex
from roadsnap.config.models import GridIndexModel, IndexUnion
from roadsnap.domain.index.grid import GridSpatialIndex
from roadsnap.domain.store import SegmentStore


def make_index(cfg: IndexUnion, *, store: SegmentStore) -> SpatialIndex:
    if isinstance(cfg, GridIndexModel):
        return GridSpatialIndex(
            store,
            cell_size_deg=cfg.cell_size_deg,
            default_radius_deg=cfg.default_radius_deg,
            max_radius_deg=cfg.max_radius_deg,
        )
    else:
        raise TypeError(cfg)
