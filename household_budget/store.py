"""Budget storage operations.

This module owns every read and write of the ``budgets`` table. It keeps
each budget bound to exactly one target and enforces one budget per
(month, target), relying on the database's unique indexes as the final
word when two writers race.
"""

from __future__ import annotations

import logging
import numbers
import sqlite3
from typing import Any, Iterable, List, Optional, Sequence, Union
from uuid import uuid4

from . import db
from .errors import (
    BudgetNotFoundError,
    BudgetValidationError,
    DuplicateBudgetError,
    InvalidAmountError,
    InvalidBatchError,
    InvalidNoteError,
)
from .models import (
    KEEP_NOTE,
    NOTE_MAX_LENGTH,
    Budget,
    BudgetTarget,
    BulkDeleteResult,
    MonthOption,
    NoteUpdate,
    UpsertItem,
)
from .months import validate_month
from .targets import TargetResolver

logger = logging.getLogger(__name__)

SELECT_BUDGETS_SQL = """
SELECT b.id,
       b.month,
       b.category_id,
       b.savings_goal_id,
       b.amount,
       b.note,
       b.created_at,
       b.updated_at,
       COALESCE(c.name, g.name) AS target_name
FROM budgets b
LEFT JOIN categories c ON b.category_id = c.id
LEFT JOIN savings_goals g ON b.savings_goal_id = g.id
"""

INSERT_BUDGET_SQL = (
    "INSERT INTO budgets (id, month, category_id, savings_goal_id, amount, note, created_at, updated_at) "
    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
)

NoteArg = Union[NoteUpdate, str, None]

# Largest value an SQLite INTEGER column can hold
MAX_AMOUNT = 2**63 - 1


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def validate_amount(amount: Any) -> int:
    """Return ``amount`` as an ``int`` if it is a positive whole number that fits SQLite."""
    if isinstance(amount, bool):
        raise InvalidAmountError(amount)
    if isinstance(amount, numbers.Integral):
        value = int(amount)
    elif isinstance(amount, float) and amount.is_integer():
        value = int(amount)
    else:
        raise InvalidAmountError(amount)
    if value <= 0 or value > MAX_AMOUNT:
        raise InvalidAmountError(amount)
    return value


def normalize_note(note: Any) -> Optional[str]:
    """Empty notes are stored as null; long notes are rejected."""
    if note is None:
        return None
    if not isinstance(note, str):
        raise BudgetValidationError("Note must be a string or None", {"field": "note", "value": note})
    if note == "":
        return None
    if len(note) > NOTE_MAX_LENGTH:
        raise InvalidNoteError(len(note), NOTE_MAX_LENGTH)
    return note


def _as_note_update(note: NoteArg) -> NoteUpdate:
    if isinstance(note, NoteUpdate):
        return note
    return NoteUpdate.set(note)


def new_budget_id() -> str:
    return uuid4().hex


def insert_budget_row(
    conn: sqlite3.Connection,
    month: str,
    target: BudgetTarget,
    amount: int,
    note: Optional[str],
    target_name: Optional[str],
    timestamp: Optional[str] = None,
) -> Budget:
    """Insert one budget row on ``conn`` without committing.

    Raises:
        DuplicateBudgetError: the (month, target) unique index rejected the row
    """
    now = timestamp or db.utcnow_iso()
    budget_id = new_budget_id()
    try:
        conn.execute(
            INSERT_BUDGET_SQL,
            (budget_id, month, target.category_id, target.savings_goal_id, amount, note, now, now),
        )
    except sqlite3.IntegrityError as e:
        if db.is_unique_violation(e):
            logger.warning("Unique constraint rejected budget for %s %s=%s", month, target.column, target.id)
            raise DuplicateBudgetError(month, target.kind, target.id) from e
        raise
    return Budget(
        id=budget_id,
        month=month,
        target=target,
        amount=amount,
        note=note,
        created_at=now,
        updated_at=now,
        target_name=target_name,
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class BudgetStore:
    """Create, read, update and delete budget records."""

    def __init__(
        self,
        db_path: Optional[db.PathLike] = None,
        resolver: Optional[TargetResolver] = None,
    ):
        """Initialize budget storage.

        Args:
            db_path: Optional database file. Defaults to ``db.DB_PATH``
                     resolved at connection time.
            resolver: Optional target resolver sharing the same database.
        """
        self.db_path = db_path
        self.resolver = resolver or TargetResolver(db_path)

    # ---- reads -------------------------------------------------------------

    def get(self, budget_id: str) -> Optional[Budget]:
        """Return the budget with its target name, or None when absent."""
        if not budget_id:
            return None
        with db.connect(self.db_path) as conn:
            return self._fetch_one(conn, budget_id)

    def list(self, month: Optional[str] = None) -> List[Budget]:
        """List budgets, optionally for one month.

        Results are ordered by target name; without a month filter, rows
        sharing a name are ordered newest month first.
        """
        params: List[Any] = []
        sql = SELECT_BUDGETS_SQL
        if month is not None:
            validate_month(month)
            sql += " WHERE b.month = ?"
            params.append(month)
            sql += " ORDER BY target_name ASC, b.id ASC"
        else:
            sql += " ORDER BY target_name ASC, b.month DESC, b.id ASC"

        with db.connect(self.db_path) as conn:
            rows = conn.execute(sql, params).fetchall()
        return [Budget.from_row(row) for row in rows]

    def list_by_month(self, month: str) -> List[Budget]:
        validate_month(month)
        return self.list(month)

    def months(self) -> List[MonthOption]:
        """Months that have at least one budget, newest first."""
        with db.connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT month, COUNT(*) AS budget_count FROM budgets GROUP BY month ORDER BY month DESC"
            ).fetchall()
        return [MonthOption(row["month"], int(row["budget_count"])) for row in rows]

    # ---- writes ------------------------------------------------------------

    def create(
        self,
        month: str,
        target: BudgetTarget,
        amount: Any,
        note: Optional[str] = None,
    ) -> Budget:
        """Create a budget for ``target`` in ``month``.

        Raises:
            InvalidMonthError, InvalidAmountError, InvalidNoteError: bad input
            TargetNotFoundError, TargetNotBudgetableError: target rejected
            DuplicateBudgetError: (month, target) already budgeted
        """
        validate_month(month)
        value = validate_amount(amount)
        note_value = normalize_note(note)

        with db.connect(self.db_path) as conn:
            resolved = self.resolver.resolve(target, conn)
            if self._fetch_for_target(conn, month, target) is not None:
                raise DuplicateBudgetError(month, target.kind, target.id)
            with conn:
                budget = insert_budget_row(conn, month, target, value, note_value, resolved.name)

        logger.info("Created budget %s for %s %s=%s", budget.id, month, target.column, target.id)
        return budget

    def update(self, budget_id: str, amount: Any, note: NoteArg = KEEP_NOTE) -> Budget:
        """Change a budget's amount and, optionally, its note.

        ``note`` left at its default keeps the stored note; ``None`` or
        ``NoteUpdate.clear()`` clears it; a string replaces it.
        """
        value = validate_amount(amount)
        instruction = _as_note_update(note)
        new_note = normalize_note(instruction.note) if instruction.has_note else None

        with db.connect(self.db_path) as conn:
            existing = self._fetch_one(conn, budget_id) if budget_id else None
            if existing is None:
                raise BudgetNotFoundError(budget_id)
            note_value = new_note if instruction.has_note else existing.note
            now = db.utcnow_iso()
            with conn:
                cursor = conn.execute(
                    "UPDATE budgets SET amount = ?, note = ?, updated_at = ? WHERE id = ?",
                    (value, note_value, now, budget_id),
                )
            if cursor.rowcount == 0:
                raise BudgetNotFoundError(budget_id)

        existing.amount = value
        existing.note = note_value
        existing.updated_at = now
        logger.info("Updated budget %s", budget_id)
        return existing

    def delete(self, budget_id: str) -> None:
        """Permanently remove a budget."""
        if not budget_id:
            raise BudgetNotFoundError(budget_id)
        with db.connect(self.db_path) as conn:
            with conn:
                cursor = conn.execute("DELETE FROM budgets WHERE id = ?", (budget_id,))
        if cursor.rowcount == 0:
            raise BudgetNotFoundError(budget_id)
        logger.info("Deleted budget %s", budget_id)

    def delete_month(self, month: str) -> int:
        """Delete every budget in ``month`` and return how many were removed."""
        validate_month(month)
        with db.connect(self.db_path) as conn:
            with conn:
                cursor = conn.execute("DELETE FROM budgets WHERE month = ?", (month,))
        logger.info("Deleted %d budgets for %s", cursor.rowcount, month)
        return cursor.rowcount

    def bulk_delete(self, budget_ids: Sequence[str]) -> BulkDeleteResult:
        """Delete many budgets in one transaction.

        Ids that do not exist are reported in ``failed_ids`` rather than raised.
        """
        if isinstance(budget_ids, str) or not budget_ids:
            raise InvalidBatchError("At least one budget id is required", {"field": "ids"})
        if not all(isinstance(i, str) and i for i in budget_ids):
            raise InvalidBatchError("Budget ids must be non-empty strings", {"field": "ids"})
        ids = list(dict.fromkeys(budget_ids))
        placeholders = ",".join("?" for _ in ids)

        with db.connect(self.db_path) as conn:
            with conn:
                found = {
                    row["id"]
                    for row in conn.execute(f"SELECT id FROM budgets WHERE id IN ({placeholders})", ids)
                }
                deleted = 0
                if found:
                    found_ids = [i for i in ids if i in found]
                    cursor = conn.execute(
                        f"DELETE FROM budgets WHERE id IN ({','.join('?' for _ in found_ids)})",
                        found_ids,
                    )
                    deleted = cursor.rowcount

        failed = [i for i in ids if i not in found]
        logger.info("Bulk deleted %d budgets (%d not found)", deleted, len(failed))
        return BulkDeleteResult(deleted_count=deleted, failed_ids=failed)

    def upsert(self, month: str, items: Iterable[UpsertItem]) -> List[Budget]:
        """Set budgets for many targets in ``month`` at once.

        Existing (month, target) rows get the new amount (and note when the
        item carries one); missing ones are inserted. Every item is validated
        and resolved before the single write transaction starts.
        """
        validate_month(month)
        batch = list(items)
        if not batch:
            raise InvalidBatchError("At least one budget item is required", {"field": "items"})

        prepared = []
        seen = set()
        for index, item in enumerate(batch):
            if item.target in seen:
                raise InvalidBatchError(
                    f"Target {item.target.id!r} appears more than once",
                    {"field": "items", "index": index, "id": item.target.id},
                )
            seen.add(item.target)
            amount = validate_amount(item.amount)
            note = item.note
            note_value = normalize_note(note.note) if note.has_note else None
            prepared.append((item.target, amount, note, note_value))

        results: List[Budget] = []
        with db.connect(self.db_path) as conn:
            names = {target: self.resolver.resolve(target, conn).name for target, _, _, _ in prepared}
            now = db.utcnow_iso()
            with conn:
                for target, amount, note, note_value in prepared:
                    existing = self._fetch_for_target(conn, month, target)
                    if existing is None:
                        budget = insert_budget_row(
                            conn, month, target, amount, note_value, names[target], timestamp=now
                        )
                    else:
                        existing.amount = amount
                        existing.note = note_value if note.has_note else existing.note
                        existing.updated_at = now
                        conn.execute(
                            "UPDATE budgets SET amount = ?, note = ?, updated_at = ? WHERE id = ?",
                            (existing.amount, existing.note, now, existing.id),
                        )
                        budget = existing
                    results.append(budget)

        logger.info("Upserted %d budgets for %s", len(results), month)
        return results

    # ---- internals ---------------------------------------------------------

    def _fetch_one(self, conn: sqlite3.Connection, budget_id: str) -> Optional[Budget]:
        row = conn.execute(SELECT_BUDGETS_SQL + " WHERE b.id = ?", (budget_id,)).fetchone()
        return Budget.from_row(row) if row is not None else None

    def _fetch_for_target(
        self,
        conn: sqlite3.Connection,
        month: str,
        target: BudgetTarget,
    ) -> Optional[Budget]:
        row = conn.execute(
            SELECT_BUDGETS_SQL + f" WHERE b.month = ? AND b.{target.column} = ?",
            (month, target.id),
        ).fetchone()
        return Budget.from_row(row) if row is not None else None


# Convenience functions using default storage
_default_store = BudgetStore()


def create_budget(
    month: str,
    amount: Any,
    category_id: Optional[str] = None,
    savings_goal_id: Optional[str] = None,
    note: Optional[str] = None,
) -> Budget:
    """Create a budget for exactly one of ``category_id`` / ``savings_goal_id``.

    Raises:
        InvalidTargetError: both or neither id supplied (checked before any query)
    """
    target = BudgetTarget.from_ids(category_id, savings_goal_id)
    return _default_store.create(month, target, amount, note)


def get_budget(budget_id: str) -> Optional[Budget]:
    return _default_store.get(budget_id)


def list_budgets(month: Optional[str] = None) -> List[Budget]:
    return _default_store.list(month)


def list_budgets_by_month(month: str) -> List[Budget]:
    return _default_store.list_by_month(month)


def update_budget(budget_id: str, amount: Any, note: NoteArg = KEEP_NOTE) -> Budget:
    return _default_store.update(budget_id, amount, note)


def delete_budget(budget_id: str) -> None:
    _default_store.delete(budget_id)


def delete_budgets_by_month(month: str) -> int:
    return _default_store.delete_month(month)


def bulk_delete_budgets(budget_ids: Sequence[str]) -> BulkDeleteResult:
    return _default_store.bulk_delete(budget_ids)


def upsert_budgets(month: str, items: Iterable[UpsertItem]) -> List[Budget]:
    return _default_store.upsert(month, items)


def list_budget_months() -> List[MonthOption]:
    return _default_store.months()
