"""Configuration management for the finance tracker.

This module centralizes all configuration values including paths, the
record store backend, the demo user and the constants used by the
dashboard calculations.  Every path and switch can be overridden through
environment variables.
"""

from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path

# Base project root - assumes this file is in finance_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("FINTRACK_DB_PATH", DATA_DIR / "finance_tracker.db")
).resolve()

# Record store backend: "memory" or "sqlite"
STORE_BACKEND = os.getenv("FINTRACK_STORE", "memory").strip().lower()

# Single hard-coded user; there is no authentication layer
DEMO_USER_ID = os.getenv("FINTRACK_USER_ID", "demo-user-1")

# Dashboard constants
RECENT_TRANSACTIONS_LIMIT = 10
TREND_MONTHS = 6
UPCOMING_BILLS_LIMIT = 4

# Average number of weeks in a month, used to normalize weekly amounts
WEEKS_PER_MONTH = Decimal("4.33")
MONTHS_PER_YEAR = Decimal("12")


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)


def get_store():
    """Build the record store selected by ``FINTRACK_STORE``.

    The in-memory store is seeded with the demo user, salary allocation and
    savings goals so the dashboard has something to show on first launch.
    """
    if STORE_BACKEND == "sqlite":
        from .db import SQLiteRecordStore

        return SQLiteRecordStore(DB_PATH)
    if STORE_BACKEND != "memory":
        raise ValueError(f"Unsupported record store backend '{STORE_BACKEND}'.")

    from .seed import seeded_memory_store

    return seeded_memory_store()
