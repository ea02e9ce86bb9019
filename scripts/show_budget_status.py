#!/usr/bin/env python3
"""Print a user's current budget progress and dashboard budget status."""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finance_tracker.budget_health import aggregate_status, evaluate_budgets
from finance_tracker.db import get_store
from finance_tracker.formatting import format_currency, format_percentage, format_remaining


def main(username: str, period: str | None = None) -> int:
    store = get_store()
    user = store.get_user_by_username(username)
    if user is None:
        print(f"No such user: {username}")
        return 1

    now = datetime.now()
    budgets = store.list_budgets(user.id)
    expenses = store.list_expenses(user.id)
    rows = evaluate_budgets(budgets, expenses, now, period)
    if not rows:
        print("No budgets set.")
    for row in rows:
        print(
            f"{row.budget.category:<16} {row.budget.period.value:<8} "
            f"{format_currency(row.spent):>16} / {format_currency(row.budget.amount):<16} "
            f"{format_percentage(row.percentage):>8}  {row.progress_class:<8} {format_remaining(row.remaining)}"
        )

    status = aggregate_status(budgets, expenses, now)
    print(f"\nMonthly status: {status.status} ({format_percentage(status.percentage)})")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show budget progress for a user.')
    parser.add_argument('--username', required=True, help='Account to report on')
    parser.add_argument('--period', choices=['weekly', 'monthly'], help='Only show budgets for this period')
    args = parser.parse_args()
    sys.exit(main(args.username, args.period))
