"""Seed one month's budgets from another.

Targets already budgeted in the destination are skipped, never
overwritten, so running the same copy twice is a no-op the second time.
Everything that is copied goes in under one transaction.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from . import db
from .errors import EmptySourceMonthError, SameMonthError
from .models import Budget, CopyResult, SkippedTarget
from .months import validate_month
from .store import BudgetStore, insert_budget_row

logger = logging.getLogger(__name__)


def copy_budgets(
    from_month: str,
    to_month: str,
    db_path: Optional[db.PathLike] = None,
    store: Optional[BudgetStore] = None,
) -> CopyResult:
    """Copy budgets from ``from_month`` into ``to_month``.

    Raises:
        InvalidMonthError: either month is malformed
        SameMonthError: the months are equal
        EmptySourceMonthError: the source month has no budgets
        DuplicateBudgetError: a destination row appeared after the
            conflict check; the whole batch is rolled back
    """
    validate_month(from_month, field="from_month")
    validate_month(to_month, field="to_month")
    if from_month == to_month:
        raise SameMonthError(from_month)

    store = store or BudgetStore(db_path)
    source = store.list_by_month(from_month)
    if not source:
        raise EmptySourceMonthError(from_month)

    existing_targets = {budget.target for budget in store.list_by_month(to_month)}
    to_copy = [budget for budget in source if budget.target not in existing_targets]
    skipped = [
        SkippedTarget(budget.target, budget.display_name)
        for budget in source
        if budget.target in existing_targets
    ]

    if not to_copy:
        logger.info("Copy %s -> %s: nothing to copy, %d skipped", from_month, to_month, len(skipped))
        return CopyResult(created=[], skipped=skipped)

    created: List[Budget] = []
    now = db.utcnow_iso()
    with db.connect(store.db_path) as conn:
        try:
            with conn:
                for budget in to_copy:
                    created.append(insert_budget_row(
                        conn,
                        to_month,
                        budget.target,
                        budget.amount,
                        budget.note,
                        budget.target_name,
                        timestamp=now,
                    ))
        except Exception:
            logger.warning(
                "Copy %s -> %s rolled back after %d of %d inserts",
                from_month, to_month, len(created), len(to_copy),
            )
            raise

    logger.info("Copy %s -> %s: %d created, %d skipped", from_month, to_month, len(created), len(skipped))
    return CopyResult(created=created, skipped=skipped)
