"""CSV export of budgets and month summaries."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pandas as pd

from . import db
from .config import EXPORTS_DIR, ensure_data_directories
from .models import Budget
from .store import BudgetStore
from .summary import summarize, summary_dataframe

BUDGET_EXPORT_COLUMNS = [
    'id', 'month', 'target_type', 'target_name', 'category_id',
    'savings_goal_id', 'amount', 'note', 'created_at', 'updated_at',
]


def budgets_dataframe(budgets: List[Budget]) -> pd.DataFrame:
    if not budgets:
        return pd.DataFrame(columns=BUDGET_EXPORT_COLUMNS)
    return pd.DataFrame([budget.to_dict() for budget in budgets])[BUDGET_EXPORT_COLUMNS]


def _default_export_path(stem: str) -> Path:
    ensure_data_directories()
    return EXPORTS_DIR / f"{stem}.csv"


def export_budgets_csv(
    path: Optional[Path] = None,
    month: Optional[str] = None,
    db_path: Optional[db.PathLike] = None,
) -> Path:
    """Write budgets (all, or one month's) to CSV and return the path."""
    budgets = BudgetStore(db_path).list(month)
    target = Path(path) if path else _default_export_path(f"budgets_{month or 'all'}")
    target.parent.mkdir(parents=True, exist_ok=True)
    budgets_dataframe(budgets).to_csv(target, index=False)
    return target


def export_summary_csv(
    month: str,
    path: Optional[Path] = None,
    db_path: Optional[db.PathLike] = None,
) -> Path:
    """Write the budget-versus-actual table for ``month`` to CSV."""
    summary = summarize(month, db_path=db_path)
    target = Path(path) if path else _default_export_path(f"summary_{month}")
    target.parent.mkdir(parents=True, exist_ok=True)
    summary_dataframe(summary).to_csv(target, index=False)
    return target
