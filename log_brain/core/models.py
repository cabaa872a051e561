from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from enum import IntEnum
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, model_validator

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
NANOS_PER_SECOND = 1_000_000_000


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    ERROR = 2
    FATAL = 3


def epoch_nanos(value: Any) -> int:
    """Nanoseconds since the epoch for a datetime or a lager epoch-seconds value."""
    if isinstance(value, datetime):
        stamp = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        delta = stamp - EPOCH
        return (delta.days * 86_400 + delta.seconds) * NANOS_PER_SECOND + delta.microseconds * 1_000
    try:
        seconds = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"not an epoch timestamp: {value!r}") from exc
    if not seconds.is_finite():
        raise ValueError(f"not an epoch timestamp: {value!r}")
    return int((seconds * NANOS_PER_SECOND).to_integral_value(rounding=ROUND_FLOOR))


def datetime_from_nanos(nanos: int) -> datetime:
    """UTC datetime for an epoch-nanosecond count; sub-microsecond digits are floored."""
    seconds, remainder = divmod(nanos, NANOS_PER_SECOND)
    try:
        return EPOCH + timedelta(seconds=seconds, microseconds=remainder // 1_000)
    except OverflowError as exc:
        raise ValueError(f"epoch timestamp out of range: {nanos} ns") from exc


def format_epoch(nanos: int) -> str:
    """Render epoch nanoseconds as lager's epoch-seconds string."""
    sign = "-" if nanos < 0 else ""
    seconds, remainder = divmod(abs(nanos), NANOS_PER_SECOND)
    return f"{sign}{seconds}.{remainder:09d}"


class Entry(BaseModel):
    """A single lager log record.

    ``timestamp_ns`` is the exact lager timestamp and decides ordering; ``timestamp``
    is the same instant as a datetime, floored to the microsecond.
    """

    timestamp: datetime
    timestamp_ns: int = 0
    source: str = ""
    message: str = ""
    log_level: LogLevel = LogLevel.INFO
    session: str = ""
    error: Optional[str] = None
    trace: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_timestamp(cls, values: Any) -> Any:
        if isinstance(values, dict) and "timestamp" in values:
            values = dict(values)
            nanos = epoch_nanos(values["timestamp"])
            values["timestamp_ns"] = nanos
            values["timestamp"] = datetime_from_nanos(nanos)
        return values

    def to_lager_line(self) -> str:
        data = dict(self.data)
        if self.session:
            data["session"] = self.session
        if self.error is not None:
            data["error"] = self.error
        if self.trace is not None:
            data["trace"] = self.trace
        payload = {
            "timestamp": format_epoch(self.timestamp_ns),
            "source": self.source,
            "message": self.message,
            "log_level": int(self.log_level),
            "data": data,
        }
        return json.dumps(payload, default=str)


class TimelinePoint(BaseModel):
    """A named milestone; its matcher picks the entry that marks the milestone."""

    name: str
    matcher: Callable[[Entry], bool] = Field(exclude=True)


TimelineDescription = list[TimelinePoint]


class Timeline(BaseModel):
    description: list[TimelinePoint]
    zero_entry: Entry
    entries: list[Optional[Entry]]
    annotation: Any = None

    def begins_at(self) -> datetime:
        return self.zero_entry.timestamp

    def last_entry(self) -> Entry:
        """The latest matched milestone (the anchor if none matched)."""
        found = [entry for entry in self.entries if entry is not None]
        return max(found, key=lambda entry: entry.timestamp_ns, default=self.zero_entry)

    def ends_at(self) -> datetime:
        return self.last_entry().timestamp

    def dt_for_point(self, index: int) -> Optional[float]:
        entry = self.entries[index]
        if entry is None:
            return None
        return (entry.timestamp_ns - self.zero_entry.timestamp_ns) / NANOS_PER_SECOND

    def duration(self) -> float:
        return (self.last_entry().timestamp_ns - self.zero_entry.timestamp_ns) / NANOS_PER_SECOND

    def is_complete(self) -> bool:
        return all(entry is not None for entry in self.entries)


class PointStats(BaseModel):
    """Summary of a milestone's offset from the anchor across many timelines."""

    name: str
    count: int
    mean: Optional[float] = None
    stddev: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
