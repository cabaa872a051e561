"""Entry collections, grouping and timeline construction."""

from .entries import Entries
from .grouped_entries import AnchorNotFoundError, GroupedEntries
from .matchers import (
    Matcher,
    all_of,
    any_of,
    match_anything,
    match_data,
    match_level,
    match_message,
    match_session,
    match_source,
    negate,
)
from .timelines import Timelines

__all__ = [
    "AnchorNotFoundError",
    "Entries",
    "GroupedEntries",
    "Matcher",
    "Timelines",
    "all_of",
    "any_of",
    "match_anything",
    "match_data",
    "match_level",
    "match_message",
    "match_session",
    "match_source",
    "negate",
]
