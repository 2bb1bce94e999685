from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Union

from .config import DB_PATH, DB_TIMEOUT

logger = logging.getLogger(__name__)

# Ledger tables (categories, savings goals, events, postings) are written by the
# surrounding application. They are declared here so a fresh database works.
TABLES_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT 'expense',
    archived INTEGER NOT NULL DEFAULT 0,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS savings_goals (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    archived INTEGER NOT NULL DEFAULT 0,
    deleted_at TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS transaction_events (
    id TEXT PRIMARY KEY NOT NULL,
    occurred_at TEXT NOT NULL,
    type TEXT NOT NULL,
    note TEXT,
    payee TEXT,
    category_id TEXT,
    deleted_at TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS postings (
    id TEXT PRIMARY KEY NOT NULL,
    event_id TEXT NOT NULL,
    wallet_id TEXT,
    savings_goal_id TEXT,
    amount INTEGER NOT NULL,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS budgets (
    id TEXT PRIMARY KEY NOT NULL,
    month TEXT NOT NULL,
    category_id TEXT,
    savings_goal_id TEXT,
    amount INTEGER NOT NULL CHECK (amount > 0),
    note TEXT,
    created_at TEXT,
    updated_at TEXT,
    CHECK (
        (category_id IS NOT NULL AND savings_goal_id IS NULL) OR
        (category_id IS NULL AND savings_goal_id IS NOT NULL)
    )
);
"""

INDEXES_SQL = """
CREATE UNIQUE INDEX IF NOT EXISTS ux_budget_month_category
ON budgets (month, category_id) WHERE category_id IS NOT NULL;

CREATE UNIQUE INDEX IF NOT EXISTS ux_budget_month_savings_goal
ON budgets (month, savings_goal_id) WHERE savings_goal_id IS NOT NULL;

CREATE INDEX IF NOT EXISTS ix_budget_month ON budgets (month);
CREATE INDEX IF NOT EXISTS ix_event_type_occurred ON transaction_events (type, occurred_at);
CREATE INDEX IF NOT EXISTS ix_event_category_occurred ON transaction_events (category_id, occurred_at);
CREATE INDEX IF NOT EXISTS ix_posting_event ON postings (event_id);
CREATE INDEX IF NOT EXISTS ix_posting_savings_goal ON postings (savings_goal_id);
"""

PathLike = Union[str, Path]


def _resolve_path(db_path: Optional[PathLike]) -> str:
    # Read the module attribute at call time so tests can monkeypatch DB_PATH
    return str(db_path if db_path is not None else DB_PATH)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="seconds")


@contextmanager
def connect(db_path: Optional[PathLike] = None) -> Iterator[sqlite3.Connection]:
    """Open a connection for one unit of work and always close it."""
    target = _resolve_path(db_path)
    Path(target).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(target, timeout=DB_TIMEOUT)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[PathLike] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(TABLES_SQL)
        conn.commit()
        # Run migrations to add new columns if they don't exist
        _migrate_database(conn)
        conn.executescript(INDEXES_SQL)
        conn.commit()


def _migrate_database(conn: sqlite3.Connection) -> None:
    """Add columns that older budget tables were created without."""
    cursor = conn.cursor()

    cursor.execute("PRAGMA table_info(budgets)")
    existing_columns = [row[1] for row in cursor.fetchall()]

    new_columns = [
        ('savings_goal_id', 'TEXT'),
        ('note', 'TEXT'),
        ('created_at', 'TEXT'),
        ('updated_at', 'TEXT'),
    ]

    for column_name, column_type in new_columns:
        if column_name not in existing_columns:
            try:
                cursor.execute(f"ALTER TABLE budgets ADD COLUMN {column_name} {column_type}")
                logger.info("Added column %s to budgets table", column_name)
            except sqlite3.OperationalError as e:
                if "duplicate column name" not in str(e):
                    raise

    conn.commit()


def is_unique_violation(error: BaseException) -> bool:
    """True when ``error`` comes from one of the (month, target) unique indexes."""
    if not isinstance(error, sqlite3.IntegrityError):
        return False
    message = str(error)
    return "UNIQUE constraint failed" in message and "budgets." in message
