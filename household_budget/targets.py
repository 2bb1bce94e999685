"""Target resolution: can this category or savings goal carry a budget?

Only active expense categories and active savings goals are budgetable.
Resolution is a pure lookup; nothing is written.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from . import db
from .errors import TargetNotBudgetableError, TargetNotFoundError
from .models import CATEGORY, BudgetTarget, ResolvedTarget

EXPENSE_CATEGORY_TYPE = "expense"


class TargetResolver:
    """Validates budget targets against the ledger's reference tables."""

    def __init__(self, db_path: Optional[db.PathLike] = None):
        self.db_path = db_path

    def resolve(
        self,
        target: BudgetTarget,
        conn: Optional[sqlite3.Connection] = None,
    ) -> ResolvedTarget:
        """Return the target with its display name.

        Args:
            target: Category or savings goal reference
            conn: Optional open connection to reuse

        Raises:
            TargetNotFoundError: id does not exist or is archived
            TargetNotBudgetableError: category is not an expense category
        """
        if conn is None:
            with db.connect(self.db_path) as own_conn:
                return self._resolve(own_conn, target)
        return self._resolve(conn, target)

    def resolve_ids(
        self,
        category_id: Optional[str] = None,
        savings_goal_id: Optional[str] = None,
    ) -> ResolvedTarget:
        return self.resolve(BudgetTarget.from_ids(category_id, savings_goal_id))

    def _resolve(self, conn: sqlite3.Connection, target: BudgetTarget) -> ResolvedTarget:
        if target.kind == CATEGORY:
            row = conn.execute(
                "SELECT id, name, type FROM categories WHERE id = ? AND archived = 0",
                (target.id,),
            ).fetchone()
            if row is None:
                raise TargetNotFoundError(target.kind, target.id)
            if row["type"] != EXPENSE_CATEGORY_TYPE:
                raise TargetNotBudgetableError(target.id, row["type"])
            return ResolvedTarget(target, row["name"])

        row = conn.execute(
            "SELECT id, name FROM savings_goals WHERE id = ? AND archived = 0 AND deleted_at IS NULL",
            (target.id,),
        ).fetchone()
        if row is None:
            raise TargetNotFoundError(target.kind, target.id)
        return ResolvedTarget(target, row["name"])


def resolve_target(target: BudgetTarget, db_path: Optional[db.PathLike] = None) -> ResolvedTarget:
    return TargetResolver(db_path).resolve(target)
