"""Data types shared across the budget engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import InvalidTargetError

CATEGORY = "category"
SAVINGS_GOAL = "savings_goal"
TARGET_KINDS = (CATEGORY, SAVINGS_GOAL)

UNKNOWN_NAMES = {
    CATEGORY: "Unknown Category",
    SAVINGS_GOAL: "Unknown Savings Bucket",
}

NOTE_MAX_LENGTH = 500


def _present(value: Optional[str]) -> bool:
    return value is not None and value != ""


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetTarget:
    """What a budget limits: an expense category or a savings goal."""

    kind: str
    id: str

    def __post_init__(self) -> None:
        if self.kind not in TARGET_KINDS:
            raise InvalidTargetError(f"Unknown target kind {self.kind!r}", {"kind": self.kind})
        if not _present(self.id):
            raise InvalidTargetError("Target id must be a non-empty string", {"kind": self.kind})

    @classmethod
    def category(cls, category_id: str) -> "BudgetTarget":
        return cls(CATEGORY, category_id)

    @classmethod
    def savings_goal(cls, savings_goal_id: str) -> "BudgetTarget":
        return cls(SAVINGS_GOAL, savings_goal_id)

    @classmethod
    def from_ids(
        cls,
        category_id: Optional[str] = None,
        savings_goal_id: Optional[str] = None,
    ) -> "BudgetTarget":
        """Build a target from the two nullable columns.

        This is the single place the "exactly one populated" rule is checked.
        Empty strings count as absent.
        """
        has_category = _present(category_id)
        has_goal = _present(savings_goal_id)
        if has_category and has_goal:
            raise InvalidTargetError(
                "Cannot specify both category_id and savings_goal_id",
                {"category_id": category_id, "savings_goal_id": savings_goal_id},
            )
        if not has_category and not has_goal:
            raise InvalidTargetError("Must specify either category_id or savings_goal_id")
        if has_category:
            return cls.category(category_id)  # type: ignore[arg-type]
        return cls.savings_goal(savings_goal_id)  # type: ignore[arg-type]

    @property
    def category_id(self) -> Optional[str]:
        return self.id if self.kind == CATEGORY else None

    @property
    def savings_goal_id(self) -> Optional[str]:
        return self.id if self.kind == SAVINGS_GOAL else None

    @property
    def column(self) -> str:
        return "category_id" if self.kind == CATEGORY else "savings_goal_id"

    @property
    def unknown_name(self) -> str:
        return UNKNOWN_NAMES[self.kind]


@dataclass(frozen=True)
class ResolvedTarget:
    target: BudgetTarget
    name: str


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------


@dataclass
class Budget:
    """One monthly spending limit, joined with its target's display name."""

    id: str
    month: str
    target: BudgetTarget
    amount: int
    note: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    target_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Budget":
        target = BudgetTarget.from_ids(row["category_id"], row["savings_goal_id"])
        return cls(
            id=row["id"],
            month=row["month"],
            target=target,
            amount=int(row["amount"]),
            note=row["note"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            target_name=row["target_name"],
        )

    @property
    def category_id(self) -> Optional[str]:
        return self.target.category_id

    @property
    def savings_goal_id(self) -> Optional[str]:
        return self.target.savings_goal_id

    @property
    def target_kind(self) -> str:
        return self.target.kind

    @property
    def display_name(self) -> str:
        return self.target_name or self.target.unknown_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "month": self.month,
            "category_id": self.category_id,
            "savings_goal_id": self.savings_goal_id,
            "amount": self.amount,
            "note": self.note,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "target_type": self.target_kind,
            "target_name": self.target_name,
        }


@dataclass(frozen=True)
class NoteUpdate:
    """Three-state note instruction for updates.

    ``NoteUpdate.keep()`` leaves the stored note alone, ``NoteUpdate.clear()``
    sets it to null, ``NoteUpdate.set(text)`` replaces it.
    """

    has_note: bool = False
    note: Optional[str] = None

    @classmethod
    def keep(cls) -> "NoteUpdate":
        return cls(False, None)

    @classmethod
    def clear(cls) -> "NoteUpdate":
        return cls(True, None)

    @classmethod
    def set(cls, note: Optional[str]) -> "NoteUpdate":
        return cls(True, note)

    def apply(self, current: Optional[str]) -> Optional[str]:
        return self.note if self.has_note else current


KEEP_NOTE = NoteUpdate.keep()


@dataclass
class UpsertItem:
    target: BudgetTarget
    amount: int
    note: NoteUpdate = KEEP_NOTE


@dataclass
class BulkDeleteResult:
    deleted_count: int
    failed_ids: List[str] = field(default_factory=list)


@dataclass
class MonthOption:
    month: str
    budget_count: int


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


@dataclass
class SummaryItem:
    target: BudgetTarget
    target_name: str
    budget_amount: int
    spent: int
    remaining: int
    percent_used: float

    @property
    def category_id(self) -> Optional[str]:
        return self.target.category_id

    @property
    def savings_goal_id(self) -> Optional[str]:
        return self.target.savings_goal_id

    @property
    def target_kind(self) -> str:
        return self.target.kind


@dataclass
class BudgetSummary:
    month: str
    total_budget: int = 0
    total_spent: int = 0
    remaining: int = 0
    items: List[SummaryItem] = field(default_factory=list)

    @property
    def category_items(self) -> List[SummaryItem]:
        return [item for item in self.items if item.target_kind == CATEGORY]

    @property
    def savings_goal_items(self) -> List[SummaryItem]:
        return [item for item in self.items if item.target_kind == SAVINGS_GOAL]


# ---------------------------------------------------------------------------
# Copy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SkippedTarget:
    target: BudgetTarget
    name: str


@dataclass
class CopyResult:
    created: List[Budget] = field(default_factory=list)
    skipped: List[SkippedTarget] = field(default_factory=list)
