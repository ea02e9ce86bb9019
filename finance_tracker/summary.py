"""Dashboard and list-page summaries assembled from the record store.

``load_dashboard`` fetches a user's expenses, incomes and budgets
concurrently.  When one of the fetches fails the view is still built, with
an empty collection in place of the failed source and a message in
``warnings`` for the caller to show.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from . import aggregation as agg
from .budget_health import AggregateStatus, aggregate_status
from .config import RECENT_TRANSACTION_LIMIT, TREND_MONTHS
from .db import RecordStore
from .models import Budget, Expense, Income, Transaction

logger = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    month: agg.MonthTotals
    budget_status: AggregateStatus
    category_totals: Dict[str, Decimal]
    trend: List[agg.MonthlyTotals]
    recent: List[Transaction]
    warnings: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)


@dataclass
class ExpensePageSummary:
    monthly_total: Decimal
    total: Decimal
    top_category: str


@dataclass
class IncomePageSummary:
    monthly_total: Decimal
    total: Decimal
    top_source: str
    average_monthly: Decimal


def _fetch_all(
    fetchers: Dict[str, Callable[[], Sequence[Any]]],
) -> Tuple[Dict[str, List[Any]], List[str]]:
    results: Dict[str, List[Any]] = {}
    warnings: List[str] = []
    with ThreadPoolExecutor(max_workers=len(fetchers)) as pool:
        futures = {name: pool.submit(fetch) for name, fetch in fetchers.items()}
        for name, future in futures.items():
            try:
                results[name] = list(future.result())
            except Exception as exc:
                logger.warning("Failed to load %s: %s", name, exc)
                results[name] = []
                warnings.append(f"Failed to load {name}")
    return results, warnings


def fetch_collections(
    store: RecordStore,
    user_id: int,
) -> Tuple[List[Expense], List[Income], List[Budget], List[str]]:
    """Fetch the three collections concurrently, tolerating partial failure.

    Returns:
        Tuple of (expenses, incomes, budgets, warnings)
    """
    results, warnings = _fetch_all({
        'expenses': lambda: store.list_expenses(user_id),
        'incomes': lambda: store.list_incomes(user_id),
        'budgets': lambda: store.list_budgets(user_id),
    })
    return results['expenses'], results['incomes'], results['budgets'], warnings


def build_dashboard(
    expenses: Sequence[Expense],
    incomes: Sequence[Income],
    budgets: Sequence[Budget],
    now: Union[datetime, date],
    warnings: Sequence[str] = (),
) -> DashboardSnapshot:
    """Compute every dashboard figure from already-fetched collections."""
    return DashboardSnapshot(
        month=agg.month_totals(expenses, incomes, now),
        budget_status=aggregate_status(budgets, expenses, now),
        category_totals=agg.category_totals(expenses),
        trend=agg.monthly_series(expenses, incomes, now, TREND_MONTHS),
        recent=agg.recent_transactions(expenses, incomes, RECENT_TRANSACTION_LIMIT),
        warnings=list(warnings),
    )


def load_dashboard(
    store: RecordStore,
    user_id: int,
    now: Optional[Union[datetime, date]] = None,
) -> DashboardSnapshot:
    expenses, incomes, budgets, warnings = fetch_collections(store, user_id)
    return build_dashboard(expenses, incomes, budgets, now or datetime.now(), warnings)


def expense_page_summary(expenses: Sequence[Expense], now: Union[datetime, date]) -> ExpensePageSummary:
    return ExpensePageSummary(
        monthly_total=agg.month_totals(expenses, [], now).expenses,
        total=agg.total_amount(expenses),
        top_category=agg.top_category(expenses),
    )


def income_page_summary(
    incomes: Sequence[Income],
    now: Union[datetime, date],
    months: int = TREND_MONTHS,
) -> IncomePageSummary:
    return IncomePageSummary(
        monthly_total=agg.month_totals([], incomes, now).income,
        total=agg.total_amount(incomes),
        top_source=agg.top_source(incomes),
        average_monthly=agg.average_monthly_income(incomes, now, months),
    )
