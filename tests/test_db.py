from __future__ import annotations

import sqlite3

import pytest

from household_budget import db as db_mod


def _insert_budget(conn, budget_id, month, category_id=None, savings_goal_id=None, amount=100):
    conn.execute(
        "INSERT INTO budgets (id, month, category_id, savings_goal_id, amount) VALUES (?, ?, ?, ?, ?)",
        (budget_id, month, category_id, savings_goal_id, amount),
    )


def test_init_db_is_idempotent(db_path) -> None:
    db_mod.init_db()
    db_mod.init_db()
    with db_mod.connect() as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {'budgets', 'categories', 'savings_goals', 'transaction_events', 'postings'} <= tables


def test_unique_index_per_month_and_category(db_path) -> None:
    with db_mod.connect() as conn:
        _insert_budget(conn, 'a', '2024-01-01', category_id='c1')
        _insert_budget(conn, 'b', '2024-02-01', category_id='c1')
        with pytest.raises(sqlite3.IntegrityError) as excinfo:
            _insert_budget(conn, 'c', '2024-01-01', category_id='c1')
    assert db_mod.is_unique_violation(excinfo.value)


def test_unique_index_per_month_and_savings_goal(db_path) -> None:
    with db_mod.connect() as conn:
        _insert_budget(conn, 'a', '2024-01-01', savings_goal_id='g1')
        with pytest.raises(sqlite3.IntegrityError) as excinfo:
            _insert_budget(conn, 'b', '2024-01-01', savings_goal_id='g1')
    assert db_mod.is_unique_violation(excinfo.value)


def test_target_check_rejects_both_or_neither(db_path) -> None:
    with db_mod.connect() as conn:
        with pytest.raises(sqlite3.IntegrityError) as both:
            _insert_budget(conn, 'a', '2024-01-01', category_id='c1', savings_goal_id='g1')
        with pytest.raises(sqlite3.IntegrityError):
            _insert_budget(conn, 'b', '2024-01-01')
    assert not db_mod.is_unique_violation(both.value)


def test_migration_adds_missing_columns(tmp_path) -> None:
    path = tmp_path / "legacy.db"
    conn = sqlite3.connect(str(path))
    conn.execute(
        "CREATE TABLE budgets (id TEXT PRIMARY KEY NOT NULL, month TEXT NOT NULL, "
        "category_id TEXT NOT NULL, amount INTEGER NOT NULL)"
    )
    conn.execute("INSERT INTO budgets VALUES ('old', '2023-05-01', 'c1', 250)")
    conn.commit()
    conn.close()

    db_mod.init_db(path)

    with db_mod.connect(path) as conn:
        columns = {row[1] for row in conn.execute("PRAGMA table_info(budgets)")}
        row = conn.execute("SELECT amount, note, savings_goal_id FROM budgets WHERE id = 'old'").fetchone()
    assert {'note', 'savings_goal_id', 'created_at', 'updated_at'} <= columns
    assert tuple(row) == (250, None, None)
