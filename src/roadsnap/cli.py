"""
Command-line runner for the segment engine.

Usage:
    roadsnap resolve --dataset segments.json --points points.json
    roadsnap viewport --dataset segments.json --north 18.52 --south 18.49 \
        --east -69.78 --west -69.81 --zoom 17
"""

import argparse
import json
import sys
from dataclasses import asdict

from roadsnap.app.build import build
from roadsnap.config.models import DatasetByPath, EngineModel
from roadsnap.domain.entities.geography import BoundingBox, QueryPoint
from roadsnap.errors import DatasetError
from roadsnap.io.query_logging import json_logger
from roadsnap.io.report import build_report


def _load_config(args) -> EngineModel:
    data = {}
    if args.config:
        with open(args.config, encoding="utf-8") as f:
            data = json.load(f)
    data["dataset"] = DatasetByPath(file=args.dataset, fmt=args.fmt).model_dump()
    if getattr(args, "workers", None):
        data.setdefault("batch", {})["workers"] = args.workers
    return EngineModel.model_validate(data)


def _build(args):
    cfg = _load_config(args)
    # stdout carries results; logs go to stderr
    level = "DEBUG" if args.verbose else cfg.log.level
    logger = json_logger("roadsnap_cli", level=level, stream=sys.stderr)
    return build(cfg, logger=logger)


def cmd_resolve(args) -> int:
    """Nearest segment for every point in a JSON file, one report row per line."""
    with open(args.points, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        print(f"{args.points}: expected a JSON array of points", file=sys.stderr)
        return 1
    points = [
        QueryPoint.from_mapping(m, ref=m.get("id", i + 1))
        if isinstance(m, dict)
        else QueryPoint(lat=None, lon=None, ref=i + 1)
        for i, m in enumerate(raw)
    ]

    app = _build(args)
    rows = app.engine.resolve_batch(points)
    for row in build_report(points, rows):
        print(json.dumps(asdict(row)))
    return 0


def cmd_viewport(args) -> int:
    """Ids of the segments visible in a viewport at a zoom level."""
    app = _build(args)
    box = BoundingBox(north=args.north, south=args.south, east=args.east, west=args.west)
    for seg in app.engine.visible_segments(box, args.zoom):
        print(seg.id)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="roadsnap",
        description="Nearest road segment lookup over a polyline dataset",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    sub = parser.add_subparsers(dest="command", help="Commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--dataset", "-d", required=True, help="Segment dataset file")
    common.add_argument("--fmt", choices=["json", "jsonl"], default="json", help="Dataset format")
    common.add_argument("--config", "-c", help="Engine config (JSON)")

    res = sub.add_parser("resolve", parents=[common], help="Resolve nearest segments for points")
    res.add_argument(
        "--points", "-p", required=True, help="JSON array of {latitude, longitude, referenceLabel}"
    )
    res.add_argument("--workers", type=int, help="Worker threads for the batch")
    res.set_defaults(func=cmd_resolve)

    vp = sub.add_parser("viewport", parents=[common], help="List segments visible in a viewport")
    vp.add_argument("--north", type=float, required=True)
    vp.add_argument("--south", type=float, required=True)
    vp.add_argument("--east", type=float, required=True)
    vp.add_argument("--west", type=float, required=True)
    vp.add_argument("--zoom", type=int, required=True)
    vp.set_defaults(func=cmd_viewport)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1
    try:
        return args.func(args)
    except (DatasetError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        # bad config values or an inverted viewport box
        print(f"usage error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
