"""Top-level package for the household budget engine.

Budgets are monthly spending limits, each bound to exactly one expense
category or savings goal. The primary modules are:

* ``store`` - create, read, update and delete budgets
* ``summary`` - budget-versus-actual totals computed from the ledger
* ``month_copy`` - seed a month's budgets from another month
* ``ledger`` - read-only access to ledger postings

Call :func:`household_budget.db.init_db` once before first use.
"""

from .errors import (  # noqa: F401  # re-exported for convenience
    BudgetError,
    BudgetNotFoundError,
    DuplicateBudgetError,
    EmptySourceMonthError,
    InvalidAmountError,
    InvalidMonthError,
    InvalidNoteError,
    InvalidTargetError,
    SameMonthError,
    TargetNotBudgetableError,
    TargetNotFoundError,
)
from .models import (  # noqa: F401
    Budget,
    BudgetSummary,
    BudgetTarget,
    CopyResult,
    NoteUpdate,
    SkippedTarget,
    SummaryItem,
    UpsertItem,
)
from .month_copy import copy_budgets  # noqa: F401
from .store import (  # noqa: F401
    BudgetStore,
    bulk_delete_budgets,
    create_budget,
    delete_budget,
    delete_budgets_by_month,
    get_budget,
    list_budget_months,
    list_budgets,
    list_budgets_by_month,
    update_budget,
    upsert_budgets,
)
from .summary import summarize, summary_dataframe  # noqa: F401

summarize_budgets = summarize

__all__ = [
    # Operations
    'create_budget',
    'get_budget',
    'list_budgets',
    'list_budgets_by_month',
    'update_budget',
    'delete_budget',
    'delete_budgets_by_month',
    'bulk_delete_budgets',
    'upsert_budgets',
    'list_budget_months',
    'summarize',
    'summarize_budgets',
    'summary_dataframe',
    'copy_budgets',
    # Types
    'Budget',
    'BudgetStore',
    'BudgetSummary',
    'BudgetTarget',
    'CopyResult',
    'NoteUpdate',
    'SkippedTarget',
    'SummaryItem',
    'UpsertItem',
    # Errors
    'BudgetError',
    'BudgetNotFoundError',
    'DuplicateBudgetError',
    'EmptySourceMonthError',
    'InvalidAmountError',
    'InvalidMonthError',
    'InvalidNoteError',
    'InvalidTargetError',
    'SameMonthError',
    'TargetNotBudgetableError',
    'TargetNotFoundError',
]
