"""Month helpers.

Budgets are keyed by the first day of a calendar month, ``YYYY-MM-01``.
That string is both the storage format and the wire format.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Tuple, Union

import pandas as pd

from .errors import InvalidMonthError

MONTH_PATTERN = re.compile(r"^[0-9]{4}-(0[1-9]|1[0-2])-01$")


def validate_month(value: Any, field: str = "month") -> str:
    """Return ``value`` unchanged if it is a canonical month string.

    Raises:
        InvalidMonthError: for anything other than ``YYYY-MM-01`` with MM in 01-12.
    """
    if not isinstance(value, str) or not MONTH_PATTERN.fullmatch(value):
        raise InvalidMonthError(value, field=field)
    return value


def is_valid_month(value: Any) -> bool:
    return isinstance(value, str) and MONTH_PATTERN.fullmatch(value) is not None


def month_start(value: Union[str, date, datetime, pd.Timestamp]) -> str:
    """Canonical month string for the month containing ``value``."""
    ts = pd.Timestamp(value)
    return f"{ts.year:04d}-{ts.month:02d}-01"


def shift_month(month: str, months: int) -> str:
    """Move a canonical month forward (or backward) by ``months``."""
    validate_month(month)
    period = pd.Period(month[:7], freq="M") + months
    return f"{period.year:04d}-{period.month:02d}-01"


def month_window(month: str) -> Tuple[str, str]:
    """Half-open ISO date window ``[start, next month start)`` for ``month``.

    Example:
        >>> month_window("2024-12-01")
        ('2024-12-01', '2025-01-01')
    """
    validate_month(month)
    return month, shift_month(month, 1)
