from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Iterable, Iterator, Optional, TextIO

from log_brain.core.models import Entry, TimelineDescription, TimelinePoint

from .entries import Entries
from .matchers import Matcher
from .timelines import Timelines

logger = logging.getLogger(__name__)


class AnchorNotFoundError(LookupError):
    """No group holds an entry matching the anchor milestone."""

    def __init__(self, point: TimelinePoint) -> None:
        super().__init__(f"unable to find first entry to anchor timelines: {point.name!r}")
        self.point = point


class GroupedEntries:
    """An insertion-ordered multi-map from group key to Entries.

    Keys and groups are kept in parallel lists so keys stay in the order they were
    first appended; a key -> position index gives constant-time lookup and append.

        grouped = entries.group_by(lambda entry: entry.data.get("guid"))
        grouped.filter(match_level(LogLevel.ERROR)).construct_timelines(description)

    Filtering commutes with grouping: ``entries.filter(m).group_by(g)`` and
    ``entries.group_by(g).filter(m)`` hold the same keys with the same entries, in the
    same order.
    """

    def __init__(self) -> None:
        self._keys: list[Hashable] = []
        self._groups: list[Entries] = []
        self._index: dict[Hashable, int] = {}

    @property
    def keys(self) -> tuple[Hashable, ...]:
        return tuple(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[tuple[Hashable, Entries]]:
        for key, group in zip(self._keys, self._groups):
            yield key, Entries(group)

    def __repr__(self) -> str:
        sizes = ", ".join(f"{key!r}: {len(group)}" for key, group in zip(self._keys, self._groups))
        return f"GroupedEntries({{{sizes}}})"

    def append(self, key: Hashable, entry: Entry) -> None:
        self.append_entries(key, [entry])

    def append_entries(self, key: Hashable, entries: Iterable[Entry]) -> None:
        position = self._index.get(key)
        if position is None:
            position = len(self._keys)
            self._index[key] = position
            self._keys.append(key)
            self._groups.append(Entries())
        self._groups[position].extend(entries)

    def lookup(self, key: Hashable) -> tuple[Entries, bool]:
        """Return a copy of the group stored under key, and whether it exists."""
        position = self._index.get(key)
        if position is None:
            return Entries(), False
        return Entries(self._groups[position]), True

    def each_group(self, visit: Callable[[Hashable, Entries], Any]) -> Any:
        """Call visit(key, entries) for every group in key order.

        A visitor that returns anything other than None stops the walk, and that value
        is handed back; exceptions raised by the visitor propagate.
        """
        for key, group in zip(self._keys, self._groups):
            result = visit(key, Entries(group))
            if result is not None:
                return result
        return None

    def filter(self, matcher: Matcher) -> GroupedEntries:
        """Keep matching entries in every group; groups left empty are dropped."""
        filtered = GroupedEntries()
        for key, group in zip(self._keys, self._groups):
            kept = group.filter(matcher)
            if kept:
                filtered.append_entries(key, kept)
        return filtered

    def _first(self, matcher: Matcher) -> Optional[Entry]:
        candidates: list[Entry] = []
        for group in self._groups:
            entry, found = group.first(matcher)
            if found:
                candidates.append(entry)
        if not candidates:
            return None
        # stable: exact ties keep the earliest group's candidate
        candidates.sort(key=lambda entry: entry.timestamp_ns)
        return candidates[0]

    def construct_timelines(self, description: TimelineDescription) -> Timelines:
        """Build one timeline per group, all anchored to the same first entry.

        The anchor is the earliest, across groups, of each group's first entry matching
        description[0]. Every timeline's annotation is its group key, and timelines come
        back in key order as a flat list (not a mapping).
        """
        if not description:
            raise ValueError("timeline description needs at least one point")
        anchor_point = description[0]
        zero_entry = self._first(anchor_point.matcher)
        logger.info(
            "Timelines: %d groups, %d entries considered for %r",
            len(self._keys),
            sum(len(group) for group in self._groups),
            anchor_point.name,
        )
        if zero_entry is None:
            raise AnchorNotFoundError(anchor_point)

        timelines = Timelines()
        for key, group in zip(self._keys, self._groups):
            timeline = group.construct_timeline(description, zero_entry)
            timeline.annotation = key
            timelines.append(timeline)
        return timelines

    def write_lager_format_to(self, writer: TextIO) -> None:
        """Write each key on its own line followed by its group's lager lines."""
        for key, group in zip(self._keys, self._groups):
            writer.write(f"{key}\n")
            group.write_lager_format_to(writer)
