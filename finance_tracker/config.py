"""Configuration management for the finance tracker.

This module centralizes all configuration values including paths,
server settings, defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

# Base project root - assumes this file is in finance_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("FINTRACK_DB_PATH", DATA_DIR / "finance_tracker.db")
).resolve()

# HTTP API
API_HOST = os.getenv("FINTRACK_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("FINTRACK_API_PORT", "3000"))

LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Display currency (fixed locale, no conversion)
CURRENCY = os.getenv("FINTRACK_CURRENCY", "KES")

MIN_PASSWORD_LENGTH = 4
RECENT_TRANSACTION_LIMIT = 5
TREND_MONTHS = 6


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, DB_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> None:
    """Apply the process-wide logging setup used by every entry point."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
