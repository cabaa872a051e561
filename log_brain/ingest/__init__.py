"""Read lager-formatted JSON lines into Entries."""

from .lager_reader import LagerParseError, parse_lager_line, read_lager_entries, read_lager_file

__all__ = ["LagerParseError", "parse_lager_line", "read_lager_entries", "read_lager_file"]
