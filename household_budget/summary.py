"""Budget-versus-actual summaries.

A summary is derived on every call from the month's budgets and the
ledger; it is never stored. Empty months and unnamed targets produce
zeros and fallback labels, not errors.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd

from . import db
from .ledger import LedgerReader
from .models import CATEGORY, BudgetSummary, SummaryItem
from .months import validate_month
from .store import BudgetStore

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ['Target', 'Kind', 'Budget', 'Spent', 'Remaining', 'Percent Used', 'Status']


def round2(value: float) -> float:
    """Round half up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


def percent_used(spent: int, budget_amount: int) -> float:
    return round2(spent / budget_amount * 100) if budget_amount > 0 else 0.0


def summarize(
    month: str,
    db_path: Optional[db.PathLike] = None,
    store: Optional[BudgetStore] = None,
    ledger: Optional[LedgerReader] = None,
) -> BudgetSummary:
    """Compute spent, remaining and percent used for every budget in ``month``.

    Expense-category budgets count the absolute value of expense postings
    against the category. Savings-goal budgets count contribution postings
    only.
    """
    validate_month(month)
    store = store or BudgetStore(db_path)
    ledger = ledger or LedgerReader(db_path)

    budgets = store.list_by_month(month)
    if not budgets:
        return BudgetSummary(month=month)

    spend_by_category = ledger.spend_by_category(month)
    saved_by_goal = ledger.contributions_by_savings_goal(month)

    items = []
    for budget in budgets:
        totals = spend_by_category if budget.target_kind == CATEGORY else saved_by_goal
        spent = int(totals.get(budget.target.id, 0))
        items.append(SummaryItem(
            target=budget.target,
            target_name=budget.display_name,
            budget_amount=budget.amount,
            spent=spent,
            remaining=budget.amount - spent,
            percent_used=percent_used(spent, budget.amount),
        ))

    total_budget = sum(item.budget_amount for item in items)
    total_spent = sum(item.spent for item in items)
    logger.debug("Summary for %s: budget=%d spent=%d items=%d", month, total_budget, total_spent, len(items))
    return BudgetSummary(
        month=month,
        total_budget=total_budget,
        total_spent=total_spent,
        remaining=total_budget - total_spent,
        items=items,
    )


def summary_dataframe(summary: BudgetSummary) -> pd.DataFrame:
    """Tabular view of a summary, one row per budget.

    Status is 'Over' once spend exceeds the budget, otherwise 'Under'.
    """
    if not summary.items:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = pd.DataFrame([
        {
            'Target': item.target_name,
            'Kind': item.target_kind,
            'Budget': item.budget_amount,
            'Spent': item.spent,
            'Remaining': item.remaining,
            'Percent Used': item.percent_used,
        }
        for item in summary.items
    ])
    df['Status'] = np.where(df['Remaining'] < 0, 'Over', 'Under')
    return df[SUMMARY_COLUMNS]
