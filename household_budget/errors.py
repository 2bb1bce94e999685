"""Exception hierarchy for the budget engine.

Every error carries a stable ``code`` plus a ``details`` dict naming the
field, id, or constraint involved so callers can render an actionable
message without parsing text.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class BudgetError(Exception):
    """Base class for all budget engine errors."""

    code = "BUDGET_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class BudgetValidationError(BudgetError, ValueError):
    """Structurally invalid input, detected before any write."""

    code = "VALIDATION_ERROR"


class InvalidMonthError(BudgetValidationError):
    code = "INVALID_MONTH"

    def __init__(self, value: Any, field: str = "month") -> None:
        super().__init__(
            f"{field} must be in YYYY-MM-01 format with a month between 01 and 12, got {value!r}",
            {"field": field, "value": value, "constraint": "YYYY-MM-01"},
        )
        self.value = value
        self.field = field


class InvalidTargetError(BudgetValidationError):
    """Both or neither of category id and savings goal id were supplied."""

    code = "INVALID_TARGET"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        merged = {"field": "target", "constraint": "exactly one of category_id, savings_goal_id"}
        merged.update(details or {})
        super().__init__(message, merged)


class InvalidAmountError(BudgetValidationError):
    code = "INVALID_AMOUNT"

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Budget amount must be a positive integer, got {value!r}",
            {"field": "amount", "value": value, "constraint": "positive integer"},
        )
        self.value = value


class InvalidNoteError(BudgetValidationError):
    code = "INVALID_NOTE"

    def __init__(self, length: int, max_length: int) -> None:
        super().__init__(
            f"Note must be {max_length} characters or less, got {length}",
            {"field": "note", "length": length, "constraint": f"max {max_length} characters"},
        )


class InvalidBatchError(BudgetValidationError):
    """Bulk input that is empty or conflicts with itself."""

    code = "INVALID_BATCH"


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class BudgetNotFoundBase(BudgetError, LookupError):
    code = "NOT_FOUND"


class TargetNotFoundError(BudgetNotFoundBase):
    """Referenced category or savings goal does not exist or is archived."""

    code = "TARGET_NOT_FOUND"

    def __init__(self, kind: str, target_id: str) -> None:
        label = "Category" if kind == "category" else "Savings goal"
        super().__init__(
            f"{label} {target_id!r} not found or archived",
            {"field": f"{kind}_id", "id": target_id},
        )
        self.kind = kind
        self.target_id = target_id


class BudgetNotFoundError(BudgetNotFoundBase):
    code = "BUDGET_NOT_FOUND"

    def __init__(self, budget_id: str) -> None:
        super().__init__(f"Budget {budget_id!r} not found", {"field": "id", "id": budget_id})
        self.budget_id = budget_id


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


class BudgetConflictError(BudgetError):
    code = "CONFLICT"


class DuplicateBudgetError(BudgetConflictError):
    """A budget already exists for this (month, target)."""

    code = "DUPLICATE_BUDGET"

    def __init__(self, month: str, kind: str, target_id: str) -> None:
        label = "category" if kind == "category" else "savings goal"
        super().__init__(
            f"Budget already exists for {month} and {label} {target_id!r}",
            {"month": month, "field": f"{kind}_id", "id": target_id, "constraint": "unique (month, target)"},
        )
        self.month = month
        self.kind = kind
        self.target_id = target_id


class TargetNotBudgetableError(BudgetConflictError):
    """Category exists but is not an expense category."""

    code = "TARGET_NOT_BUDGETABLE"

    def __init__(self, category_id: str, category_type: str) -> None:
        super().__init__(
            f"Category {category_id!r} is an {category_type!r} category; only expense categories can be budgeted",
            {"field": "category_id", "id": category_id, "type": category_type, "constraint": "type == 'expense'"},
        )
        self.category_id = category_id
        self.category_type = category_type


# ---------------------------------------------------------------------------
# Copy preconditions
# ---------------------------------------------------------------------------


class CopyPreconditionError(BudgetError):
    code = "COPY_PRECONDITION"


class SameMonthError(CopyPreconditionError):
    code = "SAME_MONTH"

    def __init__(self, month: str) -> None:
        super().__init__(
            "Source and destination months must be different",
            {"from_month": month, "to_month": month},
        )


class EmptySourceMonthError(CopyPreconditionError):
    code = "EMPTY_SOURCE_MONTH"

    def __init__(self, month: str) -> None:
        super().__init__(f"No budgets found for source month {month}", {"from_month": month})
        self.month = month
