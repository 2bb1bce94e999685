"""Shared fixtures: a throwaway SQLite database and ledger seeding helpers.

Ledger rows (categories, savings goals, events, postings) are written by
the surrounding application in production, so tests insert them with
plain SQL.
"""

from __future__ import annotations

import sys
from itertools import count
from pathlib import Path
from typing import Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from household_budget import db as db_mod


class Ledger:
    """Insert reference and posting rows into the test database."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._ids = count(1)

    def _next(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _execute(self, sql: str, params) -> None:
        with db_mod.connect(self.db_path) as conn:
            conn.execute(sql, params)
            conn.commit()

    def add_category(self, name: str, type: str = 'expense', archived: bool = False) -> str:
        category_id = self._next('cat')
        self._execute(
            "INSERT INTO categories (id, name, type, archived) VALUES (?, ?, ?, ?)",
            (category_id, name, type, int(archived)),
        )
        return category_id

    def add_savings_goal(self, name: str, archived: bool = False, deleted: bool = False) -> str:
        goal_id = self._next('goal')
        self._execute(
            "INSERT INTO savings_goals (id, name, archived, deleted_at) VALUES (?, ?, ?, ?)",
            (goal_id, name, int(archived), '2024-01-01T00:00:00' if deleted else None),
        )
        return goal_id

    def rename_category(self, category_id: str, name: str) -> None:
        self._execute("UPDATE categories SET name = ? WHERE id = ?", (name, category_id))

    def remove_category(self, category_id: str) -> None:
        self._execute("DELETE FROM categories WHERE id = ?", (category_id,))

    def add_event(
        self,
        type: str,
        occurred_at: str,
        postings,
        category_id: Optional[str] = None,
        deleted: bool = False,
    ) -> str:
        """``postings`` is a list of (amount, savings_goal_id) pairs."""
        event_id = self._next('evt')
        with db_mod.connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO transaction_events (id, occurred_at, type, category_id, deleted_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (event_id, occurred_at, type, category_id, '2099-12-31T00:00:00' if deleted else None),
            )
            for amount, goal_id in postings:
                conn.execute(
                    "INSERT INTO postings (id, event_id, wallet_id, savings_goal_id, amount) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (self._next('post'), event_id, None if goal_id else 'wallet-1', goal_id, amount),
                )
            conn.commit()
        return event_id

    def add_expense(self, category_id: str, amount: int, occurred_at: str, deleted: bool = False) -> str:
        return self.add_event('expense', occurred_at, [(-amount, None)], category_id=category_id, deleted=deleted)

    def add_income(self, category_id: str, amount: int, occurred_at: str) -> str:
        return self.add_event('income', occurred_at, [(amount, None)], category_id=category_id)

    def add_contribution(self, goal_id: str, amount: int, occurred_at: str) -> str:
        return self.add_event('savings_contribution', occurred_at, [(-amount, None), (amount, goal_id)])

    def add_withdrawal(self, goal_id: str, amount: int, occurred_at: str) -> str:
        return self.add_event('savings_withdrawal', occurred_at, [(-amount, goal_id), (amount, None)])


@pytest.fixture
def db_path(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "budget.db"
    monkeypatch.setattr(db_mod, "DB_PATH", path)
    db_mod.init_db()
    return path


@pytest.fixture
def ledger(db_path: Path) -> Ledger:
    return Ledger(db_path)
