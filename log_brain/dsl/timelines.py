from __future__ import annotations

import json
from typing import Iterable, TextIO

import numpy as np

from log_brain.core.models import PointStats, Timeline


class Timelines(list):
    """A flat, ordered list of timelines; annotations may repeat."""

    def __init__(self, timelines: Iterable[Timeline] = ()) -> None:
        super().__init__(timelines)

    def sort_by_end_time(self) -> Timelines:
        return Timelines(sorted(self, key=lambda timeline: timeline.last_entry().timestamp_ns))

    def sort_by_point(self, index: int) -> Timelines:
        """Order by the offset of milestone index; timelines missing it go last."""

        def _key(timeline: Timeline) -> tuple[bool, float]:
            dt = timeline.dt_for_point(index)
            return dt is None, dt if dt is not None else 0.0

        return Timelines(sorted(self, key=_key))

    def complete_timelines(self) -> Timelines:
        return Timelines(timeline for timeline in self if timeline.is_complete())

    def point_stats(self) -> list[PointStats]:
        if not self:
            return []
        description = self[0].description
        stats: list[PointStats] = []
        for index, point in enumerate(description):
            offsets = [
                dt for dt in (timeline.dt_for_point(index) for timeline in self) if dt is not None
            ]
            if not offsets:
                stats.append(PointStats(name=point.name, count=0))
                continue
            arr = np.array(offsets, dtype=float)
            stats.append(
                PointStats(
                    name=point.name,
                    count=len(offsets),
                    mean=float(arr.mean()),
                    stddev=float(arr.std()),
                    min=float(arr.min()),
                    max=float(arr.max()),
                )
            )
        return stats

    def write_json_to(self, writer: TextIO) -> None:
        """Emit one JSON object per timeline: annotation plus per-milestone offsets."""
        for timeline in self:
            payload = {
                "annotation": timeline.annotation,
                "begins_at": timeline.begins_at().isoformat(),
                "points": {
                    point.name: timeline.dt_for_point(index)
                    for index, point in enumerate(timeline.description)
                },
            }
            writer.write(json.dumps(payload, default=str))
            writer.write("\n")
