"""Configuration management for the household budget engine.

This module centralizes all configuration values including paths,
database timeouts, logging defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in household_budget/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORTS_DIR = DATA_DIR / "exports"

# Database
DB_PATH = Path(
    os.getenv("BUDGET_DB_PATH", DATA_DIR / "budget.db")
).resolve()

# Seconds a connection waits on a locked database before giving up
DB_TIMEOUT = float(os.getenv("BUDGET_DB_TIMEOUT", "5.0"))

# Logging
LOG_LEVEL = os.getenv("BUDGET_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_logging_configured = False


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, EXPORTS_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def configure_logging(level: Optional[str] = None) -> None:
    """Install a root handler for command-line use.

    Library modules only create loggers; entry points call this once.
    """
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
    _logging_configured = True
