from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Callable, Hashable, Iterable, Optional, TextIO

from log_brain.core.models import Entry, Timeline, TimelineDescription

from .matchers import Matcher

if TYPE_CHECKING:
    from .grouped_entries import GroupedEntries


class Entries(list):
    """An ordered sequence of log entries."""

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        super().__init__(entries)

    def filter(self, matcher: Matcher) -> Entries:
        return Entries(entry for entry in self if matcher(entry))

    def first(self, matcher: Matcher) -> tuple[Optional[Entry], bool]:
        """Return the earliest entry (in sequence order) that satisfies matcher."""
        for entry in self:
            if matcher(entry):
                return entry, True
        return None, False

    def sorted_by_time(self) -> Entries:
        return Entries(sorted(self, key=lambda entry: entry.timestamp_ns))

    def span(self) -> tuple[Optional[datetime], Optional[datetime]]:
        if not self:
            return None, None
        first = min(self, key=lambda entry: entry.timestamp_ns)
        last = max(self, key=lambda entry: entry.timestamp_ns)
        return first.timestamp, last.timestamp

    def group_by(self, getter: Callable[[Entry], Hashable]) -> GroupedEntries:
        """Group entries under getter(entry), keeping keys in first-seen order."""
        from .grouped_entries import GroupedEntries

        grouped = GroupedEntries()
        for entry in self:
            grouped.append(getter(entry), entry)
        return grouped

    def construct_timeline(self, description: TimelineDescription, zero_entry: Entry) -> Timeline:
        """Match every milestone in description against these entries.

        Each milestone takes the first matching entry; milestones with no match stay None.
        Offsets are measured from zero_entry, which need not belong to this sequence.
        """
        milestones = [self.first(point.matcher)[0] for point in description]
        return Timeline(description=list(description), zero_entry=zero_entry, entries=milestones)

    def write_lager_format_to(self, writer: TextIO) -> None:
        for entry in self:
            writer.write(entry.to_lager_line())
            writer.write("\n")
