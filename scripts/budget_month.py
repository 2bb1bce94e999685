#!/usr/bin/env python3
"""Inspect, copy and export monthly budgets from the command line."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pandas as pd

from household_budget import db
from household_budget.config import configure_logging
from household_budget.errors import BudgetError
from household_budget.export import export_budgets_csv
from household_budget.month_copy import copy_budgets
from household_budget.months import month_start
from household_budget.store import list_budget_months
from household_budget.summary import summarize, summary_dataframe


def show_months() -> None:
    months = list_budget_months()
    if not months:
        print("No budgets yet.")
        return
    df = pd.DataFrame([{'Month': m.month, 'Budgets': m.budget_count} for m in months])
    print(df.to_string(index=False))


def show_summary(month: str) -> None:
    summary = summarize(month)
    if not summary.items:
        print(f"No budgets for {month}.")
        return
    print(summary_dataframe(summary).to_string(index=False))
    print(f"\nTotal budget: {summary.total_budget:,}")
    print(f"Total spent:  {summary.total_spent:,}")
    print(f"Remaining:    {summary.remaining:,}")


def run_copy(from_month: str, to_month: str) -> None:
    result = copy_budgets(from_month, to_month)
    print(f"Created {len(result.created)} budgets in {to_month}.")
    if result.skipped:
        print("Skipped (already budgeted):")
        for item in result.skipped:
            print(f"  - {item.name}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Monthly budget helper.')
    parser.add_argument('--log-level', default=None, help='Logging level (default from BUDGET_LOG_LEVEL)')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('months', help='List months that have budgets')

    summary = sub.add_parser('summary', help='Budget vs actual for a month')
    summary.add_argument('--month', default=None, help='Month as YYYY-MM-01 (default: current month)')

    copy = sub.add_parser('copy', help='Copy budgets between months')
    copy.add_argument('--from', dest='from_month', required=True, help='Source month as YYYY-MM-01')
    copy.add_argument('--to', dest='to_month', required=True, help='Destination month as YYYY-MM-01')

    export = sub.add_parser('export', help='Export budgets to CSV')
    export.add_argument('--month', default=None, help='Only this month (YYYY-MM-01)')
    export.add_argument('--out', default=None, help='Output CSV path')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    db.init_db()

    try:
        if args.command == 'months':
            show_months()
        elif args.command == 'summary':
            show_summary(args.month or month_start(pd.Timestamp.today()))
        elif args.command == 'copy':
            run_copy(args.from_month, args.to_month)
        elif args.command == 'export':
            path = export_budgets_csv(Path(args.out) if args.out else None, month=args.month)
            print(f"Wrote {path}")
    except BudgetError as e:
        print(f"[{e.code}] {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
