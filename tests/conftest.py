from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from log_brain.core.models import Entry

BASE_TIME = datetime(2014, 9, 8, 12, 0, tzinfo=timezone.utc)


def make_entry(seconds: float, message: str = "rep.tick", **kwargs) -> Entry:
    return Entry(timestamp=BASE_TIME + timedelta(seconds=seconds), message=message, **kwargs)


@pytest.fixture(autouse=True)
def clear_log_env(monkeypatch):
    """Keep a developer's LOG_LEVEL / LAGER_LOG_PATH from leaking into tests."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LAGER_LOG_PATH", raising=False)
    yield
