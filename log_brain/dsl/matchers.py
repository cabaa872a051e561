from __future__ import annotations

import re
from typing import Any, Callable

from log_brain.core.models import Entry, LogLevel

Matcher = Callable[[Entry], bool]


def match_anything() -> Matcher:
    return lambda entry: True


def match_message(pattern: str) -> Matcher:
    """Match entries whose message contains the regular expression."""
    regex = re.compile(pattern)
    return lambda entry: regex.search(entry.message) is not None


def match_source(pattern: str) -> Matcher:
    regex = re.compile(pattern)
    return lambda entry: regex.search(entry.source) is not None


def match_level(*levels: LogLevel) -> Matcher:
    wanted = {LogLevel(level) for level in levels}
    return lambda entry: entry.log_level in wanted


def match_session(prefix: str) -> Matcher:
    """Match an entry in the given lager session or any of its child sessions."""

    def _match(entry: Entry) -> bool:
        return entry.session == prefix or entry.session.startswith(prefix + ".")

    return _match


def match_data(key: str, value: Any) -> Matcher:
    """Match entries whose data payload holds value at key (dots descend into objects)."""
    path = key.split(".")

    def _match(entry: Entry) -> bool:
        current: Any = entry.data
        for part in path:
            if not isinstance(current, dict) or part not in current:
                return False
            current = current[part]
        return current == value

    return _match


def all_of(*matchers: Matcher) -> Matcher:
    return lambda entry: all(matcher(entry) for matcher in matchers)


def any_of(*matchers: Matcher) -> Matcher:
    return lambda entry: any(matcher(entry) for matcher in matchers)


def negate(matcher: Matcher) -> Matcher:
    return lambda entry: not matcher(entry)
