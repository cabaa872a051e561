"""Shared models and process setup."""

from .env import configure_logging, default_log_path, load_dotenv_if_present
from .models import Entry, LogLevel, PointStats, Timeline, TimelineDescription, TimelinePoint

__all__ = [
    "Entry",
    "LogLevel",
    "PointStats",
    "Timeline",
    "TimelineDescription",
    "TimelinePoint",
    "configure_logging",
    "default_log_path",
    "load_dotenv_if_present",
]
