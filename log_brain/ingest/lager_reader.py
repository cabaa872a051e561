from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from log_brain.core.models import Entry
from log_brain.dsl.entries import Entries

logger = logging.getLogger(__name__)


class LagerParseError(ValueError):
    pass


def parse_lager_line(line: str) -> Entry:
    """Parse one lager JSON line; session, error and trace are lifted out of data."""
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        raise LagerParseError(f"not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise LagerParseError("lager line must be a JSON object")

    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise LagerParseError("lager data must be a JSON object")
    data = dict(data)
    session = data.pop("session", "")
    error = data.pop("error", None)
    trace = data.pop("trace", None)
    try:
        return Entry(
            timestamp=payload.get("timestamp"),
            source=payload.get("source", ""),
            message=payload.get("message", ""),
            log_level=payload.get("log_level", 1),
            session=str(session),
            error=None if error is None else str(error),
            trace=None if trace is None else str(trace),
            data=data,
        )
    except ValidationError as exc:
        raise LagerParseError(f"invalid lager entry: {exc}") from exc


def read_lager_entries(lines: Iterable[str], *, strict: bool = False) -> Entries:
    """Parse lager lines, skipping blanks; malformed lines are logged and dropped unless strict."""
    entries = Entries()
    skipped = 0
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(parse_lager_line(line))
        except LagerParseError as exc:
            if strict:
                raise LagerParseError(f"line {line_no}: {exc}") from exc
            skipped += 1
            logger.warning("Ingest: skipping line %d: %s", line_no, exc)
    if skipped:
        logger.info("Ingest: parsed %d entries, skipped %d lines", len(entries), skipped)
    return entries


def read_lager_file(path: str | Path, *, strict: bool = False) -> Entries:
    log_path = Path(path)
    with log_path.open("r", encoding="utf-8") as infile:
        return read_lager_entries(infile, strict=strict)
