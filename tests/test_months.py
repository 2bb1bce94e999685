from __future__ import annotations

from datetime import date

import pytest

from household_budget.errors import InvalidMonthError
from household_budget.months import is_valid_month, month_start, month_window, shift_month, validate_month


@pytest.mark.parametrize("value", ["2024-01-01", "1999-12-01", "2099-10-01"])
def test_validate_month_accepts_first_of_month(value: str) -> None:
    assert validate_month(value) == value


@pytest.mark.parametrize(
    "value",
    ["2024-13-01", "2024-00-01", "2024-01-15", "2024-1-01", "24-01-01", "2024-01", "2024-01-01\n",
     "\u0662\u0660\u0669\u0669-01-01", "", None, 202401],
)
def test_validate_month_rejects_other_formats(value) -> None:
    with pytest.raises(InvalidMonthError) as excinfo:
        validate_month(value)
    assert excinfo.value.details["field"] == "month"
    assert not is_valid_month(value)


def test_invalid_month_error_names_field() -> None:
    with pytest.raises(InvalidMonthError) as excinfo:
        validate_month("2024-02-02", field="to_month")
    assert excinfo.value.code == "INVALID_MONTH"
    assert excinfo.value.details["field"] == "to_month"


def test_month_window_is_half_open_and_rolls_year() -> None:
    assert month_window("2024-03-01") == ("2024-03-01", "2024-04-01")
    assert month_window("2024-12-01") == ("2024-12-01", "2025-01-01")


def test_shift_month_backwards() -> None:
    assert shift_month("2024-01-01", -1) == "2023-12-01"
    assert shift_month("2024-01-01", 14) == "2025-03-01"


def test_month_start_from_date() -> None:
    assert month_start(date(2024, 2, 29)) == "2024-02-01"
    assert month_start("2024-07-19T10:00:00") == "2024-07-01"
