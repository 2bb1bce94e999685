"""Read-only access to ledger postings.

Postings are produced elsewhere; this module only selects them for a
month window. Soft-deleted events are always excluded.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

import pandas as pd

from . import db
from .months import month_window

EXPENSE = "expense"
INCOME = "income"
TRANSFER = "transfer"
SAVINGS_CONTRIBUTION = "savings_contribution"
SAVINGS_WITHDRAWAL = "savings_withdrawal"

EVENT_TYPES = (EXPENSE, INCOME, TRANSFER, SAVINGS_CONTRIBUTION, SAVINGS_WITHDRAWAL)

POSTING_COLUMNS = [
    'Posting ID', 'Event ID', 'Occurred At', 'Type', 'Category ID',
    'Savings Goal ID', 'Wallet ID', 'Amount',
]

# Ledger timestamps may carry a UTC offset; month windows are UTC.
OCCURRED_AT_UTC = "datetime(te.occurred_at)"


class LedgerReader:
    """Select postings and per-target totals for one month.

    ``occurred_at`` values with a UTC offset are converted to UTC before
    being compared with the month window; naive values are taken as UTC.
    """

    def __init__(self, db_path: Optional[db.PathLike] = None):
        self.db_path = db_path

    def fetch_postings(
        self,
        month: str,
        event_types: Optional[Sequence[str]] = None,
        category_id: Optional[str] = None,
        savings_goal_id: Optional[str] = None,
        polarity: Optional[str] = None,
    ) -> pd.DataFrame:
        """Postings whose event occurred in ``month``.

        Args:
            month: Canonical month (``YYYY-MM-01``)
            event_types: Restrict to these event types
            category_id: Restrict to events linked to this category
            savings_goal_id: Restrict to postings linked to this savings goal
            polarity: ``'debit'`` for negative amounts, ``'credit'`` for positive

        Returns:
            DataFrame with POSTING_COLUMNS, ordered by occurrence
        """
        start, end = month_window(month)
        where: List[str] = [
            "te.deleted_at IS NULL",
            f"{OCCURRED_AT_UTC} >= ?",
            f"{OCCURRED_AT_UTC} < ?",
        ]
        params: List[Any] = [start, end]

        if event_types:
            where.append("te.type IN ({})".format(",".join(["?" for _ in event_types])))
            params.extend(list(event_types))
        if category_id:
            where.append("te.category_id = ?")
            params.append(category_id)
        if savings_goal_id:
            where.append("p.savings_goal_id = ?")
            params.append(savings_goal_id)
        if polarity == 'debit':
            where.append("p.amount < 0")
        elif polarity == 'credit':
            where.append("p.amount > 0")
        elif polarity is not None:
            raise ValueError(f"polarity must be 'debit' or 'credit', got {polarity!r}")

        sql = (
            "SELECT p.id AS 'Posting ID', te.id AS 'Event ID', " + OCCURRED_AT_UTC + " AS 'Occurred At', "
            "te.type AS 'Type', te.category_id AS 'Category ID', p.savings_goal_id AS 'Savings Goal ID', "
            "p.wallet_id AS 'Wallet ID', p.amount AS 'Amount' "
            "FROM transaction_events te JOIN postings p ON p.event_id = te.id "
            "WHERE " + " AND ".join(where) +
            " ORDER BY " + OCCURRED_AT_UTC + " ASC, p.id ASC"
        )

        df = self._read(sql, params)
        if df.empty:
            return pd.DataFrame(columns=POSTING_COLUMNS)
        df['Occurred At'] = pd.to_datetime(df['Occurred At'], format='ISO8601')
        return df

    def spend_by_category(self, month: str) -> pd.Series:
        """Absolute expense spend per category id for ``month``."""
        start, end = month_window(month)
        sql = f"""
        SELECT te.category_id AS category_id,
               COALESCE(SUM(ABS(p.amount)), 0) AS spent
        FROM transaction_events te
        JOIN postings p ON p.event_id = te.id
        WHERE te.type = ?
          AND te.deleted_at IS NULL
          AND {OCCURRED_AT_UTC} >= ?
          AND {OCCURRED_AT_UTC} < ?
          AND te.category_id IS NOT NULL
        GROUP BY te.category_id
        """
        return self._totals(sql, [EXPENSE, start, end], 'category_id')

    def contributions_by_savings_goal(self, month: str) -> pd.Series:
        """Savings contributions per goal id for ``month``; withdrawals are not counted."""
        start, end = month_window(month)
        sql = f"""
        SELECT p.savings_goal_id AS savings_goal_id,
               COALESCE(SUM(p.amount), 0) AS spent
        FROM transaction_events te
        JOIN postings p ON p.event_id = te.id
        WHERE te.type = ?
          AND te.deleted_at IS NULL
          AND {OCCURRED_AT_UTC} >= ?
          AND {OCCURRED_AT_UTC} < ?
          AND p.savings_goal_id IS NOT NULL
        GROUP BY p.savings_goal_id
        """
        return self._totals(sql, [SAVINGS_CONTRIBUTION, start, end], 'savings_goal_id')

    def _read(self, sql: str, params: List[Any]) -> pd.DataFrame:
        with db.connect(self.db_path) as conn:
            conn.row_factory = None
            return pd.read_sql_query(sql, conn, params=params)

    def _totals(self, sql: str, params: List[Any], key: str) -> pd.Series:
        df = self._read(sql, params)
        if df.empty:
            return pd.Series(dtype='int64', name='spent')
        return df.set_index(key)['spent'].astype('int64')
