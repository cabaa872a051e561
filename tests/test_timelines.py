import io
import json
import logging

import pytest

from log_brain.core.models import Entry, TimelinePoint
from log_brain.dsl import (
    AnchorNotFoundError,
    Entries,
    GroupedEntries,
    Timelines,
    match_anything,
    match_message,
)

from conftest import make_entry


def _description(*names: str) -> list[TimelinePoint]:
    return [TimelinePoint(name=name, matcher=match_message(name)) for name in names]


def test_end_to_end_anchor_is_earliest_across_groups() -> None:
    e1, e2, e3 = make_entry(1, "a1"), make_entry(5, "a2"), make_entry(2, "b1")
    grouped = GroupedEntries()
    grouped.append_entries("A", [e1, e2])
    grouped.append("B", e3)

    timelines = grouped.construct_timelines([TimelinePoint(name="any", matcher=match_anything())])

    assert isinstance(timelines, Timelines)
    assert [t.annotation for t in timelines] == ["A", "B"]
    assert all(t.zero_entry == e1 for t in timelines)
    assert timelines[0].entries == [e1]
    assert timelines[1].entries == [e3]
    assert timelines[1].dt_for_point(0) == 1.0


def test_anchor_ignores_group_iteration_order() -> None:
    late, early = make_entry(20, "start"), make_entry(10, "start")
    grouped = GroupedEntries()
    grouped.append("late", late)
    grouped.append("early", early)
    timelines = grouped.construct_timelines(_description("start"))
    assert timelines[0].zero_entry == early
    assert [t.annotation for t in timelines] == ["late", "early"]


def test_anchor_uses_each_groups_first_match_not_its_minimum() -> None:
    # group "g" is out of time order: its first match (t=8) is the candidate, not t=1
    grouped = GroupedEntries()
    grouped.append_entries("g", [make_entry(8, "start"), make_entry(1, "start")])
    grouped.append("h", make_entry(4, "start"))
    timelines = grouped.construct_timelines(_description("start"))
    assert timelines[0].zero_entry.timestamp == make_entry(4).timestamp


def test_anchor_ties_resolve_to_earlier_group() -> None:
    first = make_entry(3, "start", source="first")
    second = make_entry(3, "start", source="second")
    grouped = GroupedEntries()
    grouped.append("one", first)
    grouped.append("two", second)
    timelines = grouped.construct_timelines(_description("start"))
    assert timelines[1].zero_entry.source == "first"


def test_groups_without_anchor_still_get_timelines() -> None:
    grouped = GroupedEntries()
    grouped.append_entries("full", [make_entry(0, "start"), make_entry(3, "finish")])
    grouped.append("partial", make_entry(2, "finish"))
    timelines = grouped.construct_timelines(_description("start", "finish"))
    assert len(timelines) == 2
    assert timelines[1].entries[0] is None
    assert timelines[1].dt_for_point(1) == 2.0


def test_missing_anchor_raises_with_point() -> None:
    grouped = GroupedEntries()
    grouped.append("a", make_entry(0, "tick"))
    description = _description("start")
    with pytest.raises(AnchorNotFoundError) as excinfo:
        grouped.construct_timelines(description)
    assert excinfo.value.point is description[0]
    assert "start" in str(excinfo.value)


def test_empty_map_raises_anchor_not_found() -> None:
    with pytest.raises(AnchorNotFoundError):
        GroupedEntries().construct_timelines(_description("start"))


def test_empty_description_is_rejected() -> None:
    grouped = GroupedEntries()
    grouped.append("a", make_entry(0))
    with pytest.raises(ValueError):
        grouped.construct_timelines([])


def test_per_group_failure_aborts_whole_batch() -> None:
    def explode(entry):
        if entry.source == "bad":
            raise RuntimeError("matcher failed")
        return False

    grouped = GroupedEntries()
    grouped.append("good", make_entry(0, "start"))
    grouped.append("bad", make_entry(1, "other", source="bad"))
    description = [
        TimelinePoint(name="start", matcher=match_message("start")),
        TimelinePoint(name="probe", matcher=explode),
    ]
    with pytest.raises(RuntimeError, match="matcher failed"):
        grouped.construct_timelines(description)


def test_equal_keys_share_one_timeline() -> None:
    grouped = GroupedEntries()
    grouped.append(1, make_entry(0, "start"))
    grouped.append(1.0 + 1, make_entry(1, "start"))
    grouped.append(True + 1, make_entry(2, "start"))
    timelines = grouped.construct_timelines(_description("start"))
    assert [t.annotation for t in timelines] == [1, 2.0]


def test_construct_timelines_logs_entry_count(caplog) -> None:
    grouped = GroupedEntries()
    grouped.append_entries("a", [make_entry(0, "start"), make_entry(1)])
    with caplog.at_level(logging.INFO, logger="log_brain.dsl.grouped_entries"):
        grouped.construct_timelines(_description("start"))
    assert "2 entries" in caplog.text


def _timelines() -> Timelines:
    grouped = GroupedEntries()
    grouped.append_entries("slow", [make_entry(0, "start"), make_entry(10, "done")])
    grouped.append_entries("fast", [make_entry(1, "start"), make_entry(4, "done")])
    grouped.append("stuck", make_entry(2, "start"))
    return grouped.construct_timelines(_description("start", "done"))


def test_sorting_and_completion() -> None:
    timelines = _timelines()
    assert [t.annotation for t in timelines.sort_by_point(1)] == ["fast", "slow", "stuck"]
    assert [t.annotation for t in timelines.sort_by_end_time()] == ["stuck", "fast", "slow"]
    assert [t.annotation for t in timelines.complete_timelines()] == ["slow", "fast"]


def test_point_stats() -> None:
    stats = _timelines().point_stats()
    assert [s.name for s in stats] == ["start", "done"]
    assert stats[0].count == 3
    assert stats[0].mean == pytest.approx(1.0)
    assert stats[1].count == 2
    assert stats[1].min == 4.0
    assert stats[1].max == 10.0
    assert stats[1].stddev == pytest.approx(3.0)
    assert Timelines().point_stats() == []


def test_write_json_emits_offsets_per_timeline() -> None:
    out = io.StringIO()
    _timelines().write_json_to(out)
    rows = [json.loads(line) for line in out.getvalue().splitlines()]
    assert rows[0]["annotation"] == "slow"
    assert rows[2]["points"] == {"start": 2.0, "done": None}


def test_entries_group_by_then_construct() -> None:
    entries = Entries(
        [
            make_entry(0, "start", data={"guid": "x"}),
            make_entry(1, "start", data={"guid": "y"}),
            make_entry(5, "done", data={"guid": "x"}),
        ]
    )
    timelines = entries.group_by(lambda e: e.data["guid"]).construct_timelines(
        _description("start", "done")
    )
    assert [t.annotation for t in timelines] == ["x", "y"]
    assert timelines[0].dt_for_point(1) == 5.0


def test_anchor_resolves_sub_microsecond_order() -> None:
    grouped = GroupedEntries()
    grouped.append("A", Entry(timestamp="1410177600.000000900", message="later"))
    grouped.append("B", Entry(timestamp="1410177600.000000100", message="earlier"))
    timelines = grouped.construct_timelines([TimelinePoint(name="any", matcher=match_anything())])
    assert timelines[0].zero_entry.message == "earlier"
    assert timelines[0].dt_for_point(0) == pytest.approx(8e-7)
    assert timelines[1].dt_for_point(0) == 0.0
