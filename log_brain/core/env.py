from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv


def load_dotenv_if_present(path: str | Path = ".env") -> bool:
    """Load environment variables from a .env file if it exists."""
    dotenv_path = Path(path)
    if not dotenv_path.exists():
        return False
    load_dotenv(dotenv_path=dotenv_path, override=False)
    return True


def configure_logging(default_level: str = "INFO") -> int:
    """Configure root logging level from LOG_LEVEL env (default INFO)."""
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return level


def default_log_path() -> Path | None:
    """Lager file to read when the caller names none (LAGER_LOG_PATH)."""
    value = os.getenv("LAGER_LOG_PATH")
    return Path(value) if value else None
