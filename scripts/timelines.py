#!/usr/bin/env python
"""
Group a lager log and print anchored milestone timelines.

Usage:
  python scripts/timelines.py rep.log --group-by data.container_guid \
      --point created=container-created --point running=run-container.succeeded
  python scripts/timelines.py rep.log --group-by session --filter rep.auction --dump
  LAGER_LOG_PATH=./rep.log python scripts/timelines.py --group-by source --point start=.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Hashable, Optional

from log_brain.core.env import configure_logging, default_log_path, load_dotenv_if_present
from log_brain.core.models import Entry, TimelinePoint
from log_brain.dsl import AnchorNotFoundError, match_message
from log_brain.ingest import read_lager_file

logger = logging.getLogger(__name__)


def _hashable(value: Any) -> Hashable:
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, default=str)
    return value


def key_getter(field: str) -> Callable[[Entry], Hashable]:
    """Resolve source, session, message, log_level or data.<path> into a key getter."""
    if field.startswith("data."):
        path = field.split(".")[1:]

        def _from_data(entry: Entry) -> Hashable:
            current: Any = entry.data
            for part in path:
                if not isinstance(current, dict):
                    return None
                current = current.get(part)
            return _hashable(current)

        return _from_data
    if field in {"source", "session", "message", "log_level"}:
        return lambda entry: _hashable(getattr(entry, field))
    raise ValueError(f"Unsupported group key: {field}")


def parse_point(spec: str) -> TimelinePoint:
    name, sep, pattern = spec.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Expected NAME=REGEX, got {spec!r}")
    return TimelinePoint(name=name, matcher=match_message(pattern))


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Build milestone timelines from a lager log.")
    parser.add_argument("path", nargs="?", type=Path, help="Lager log file (default LAGER_LOG_PATH)")
    parser.add_argument(
        "--group-by",
        default="session",
        help="source, session, message, log_level or data.<key>",
    )
    parser.add_argument("--filter", dest="filter_pattern", help="Keep only messages matching this regex")
    parser.add_argument(
        "--point",
        action="append",
        type=parse_point,
        default=[],
        help="Milestone as NAME=REGEX; the first one anchors every timeline",
    )
    parser.add_argument("--dump", action="store_true", help="Print grouped entries instead of timelines")
    parser.add_argument("--stats", action="store_true", help="Print per-milestone offset statistics")
    parser.add_argument("--strict", action="store_true", help="Fail on malformed lines")
    args = parser.parse_args(argv)

    load_dotenv_if_present()
    configure_logging()

    target = args.path or default_log_path()
    if target is None:
        parser.error("no log path given and LAGER_LOG_PATH is unset")
    if not target.is_file():
        raise FileNotFoundError(f"Lager log not found: {target}")

    entries = read_lager_file(target, strict=args.strict)
    logger.info("Read %d entries from %s", len(entries), target)
    grouped = entries.group_by(key_getter(args.group_by))
    if args.filter_pattern:
        grouped = grouped.filter(match_message(args.filter_pattern))

    if args.dump:
        grouped.write_lager_format_to(sys.stdout)
        return 0
    if not args.point:
        parser.error("at least one --point is required unless --dump is given")

    try:
        timelines = grouped.construct_timelines(args.point)
    except AnchorNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.stats:
        for stats in timelines.point_stats():
            print(stats.model_dump_json())
    else:
        timelines.write_json_to(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
