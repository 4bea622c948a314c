# roadsnap/app/build.py
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from roadsnap.app.engine import SegmentEngine
from roadsnap.config.models import EngineModel
from roadsnap.io.hooks import NoopHooks, QueryHooks
from roadsnap.io.query_logging import QueryLogging  # JSON logs
from roadsnap.io.recorder import Recorder


@dataclass
class App:
    engine: SegmentEngine
    hooks: QueryHooks
    recorder: Recorder | None
    config: EngineModel


def build(
    cfg: EngineModel | Mapping | None = None,
    *,
    segments: Iterable[Mapping[str, Any]] | None = None,
    use_logging: bool = True,
    recorder: Recorder | None = None,
    logger: logging.Logger | None = None,
) -> App:
    # 0) Validate config
    if cfg is None:
        model = EngineModel()
    else:
        model = cfg if isinstance(cfg, EngineModel) else EngineModel.model_validate(cfg)

    # 1) Hooks (logs + optional audit events)
    hooks = (
        QueryLogging(
            run_id=model.run_id,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
            recorder=recorder,
            logger=logger,
        )
        if use_logging
        else NoopHooks()
    )

    # 2) Engine starts on an empty snapshot; publish the first dataset if one is given
    engine = SegmentEngine(model, hooks=hooks)
    if segments is not None:
        engine.load(segments)
    elif model.dataset is not None:
        engine.load_from(model.dataset)

    return App(engine, hooks, recorder, model)
