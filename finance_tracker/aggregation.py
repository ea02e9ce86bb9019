"""Aggregation engine for expense and income records.

This module turns a user's already-fetched expense and income collections
into the derived figures shown on the dashboard and the list pages:
category totals, current-period spend, monthly trend series, recent
transactions and income averages.

Every function is pure.  Callers pass the collections and a reference
``now`` explicitly, so repeated calls with identical inputs always give
identical results.  Sums use :class:`decimal.Decimal` throughout and are
only rounded for display by :mod:`finance_tracker.formatting`.

Records with a date that cannot be parsed are treated as non-matching for
any date-window computation rather than aborting the aggregation.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .models import Period, Transaction, TransactionKind

ZERO = Decimal('0')
NO_TOP = 'None'

NowLike = Union[datetime, date]


@dataclass(frozen=True)
class MonthlyTotals:
    month: str
    label: str
    expense_total: Decimal
    income_total: Decimal

    @property
    def net(self) -> Decimal:
        return self.income_total - self.expense_total


@dataclass(frozen=True)
class MonthTotals:
    income: Decimal
    expenses: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expenses


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() keeps the shortest repr so 0.1 stays 0.1
        return Decimal(str(value))
    return Decimal(value)


def parse_date(value: Any) -> Optional[date]:
    """Return a calendar date for ``value`` or ``None`` when unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def month_key(value: Any) -> Optional[str]:
    """Year-month prefix (``YYYY-MM``) of a date or date string."""
    if isinstance(value, date):
        return f"{value.year:04d}-{value.month:02d}"
    if isinstance(value, str):
        return value[:7]
    return None


def add_months(day: date, months: int) -> date:
    """Shift ``day`` by whole calendar months, clamping to the month end."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _today(now: NowLike) -> date:
    return now.date() if isinstance(now, datetime) else now


def _sum(records: Iterable[Any]) -> Decimal:
    total = ZERO
    for record in records:
        total += to_decimal(record.amount)
    return total


def _totals_by(records: Iterable[Any], attribute: str) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = {}
    for record in records:
        key = getattr(record, attribute)
        totals[key] = totals.get(key, ZERO) + to_decimal(record.amount)
    return totals


def _top_key(totals: Dict[str, Decimal]) -> str:
    best = NO_TOP
    best_total: Optional[Decimal] = None
    for key, total in totals.items():
        # strict comparison keeps the first key that reached the maximum
        if best_total is None or total > best_total:
            best, best_total = key, total
    return best


def _in_window(value: Any, start: date, end: date) -> bool:
    parsed = parse_date(value)
    return parsed is not None and start <= parsed < end


def _date_sort_key(record: Any) -> date:
    return parse_date(record.date) or date.min


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


def category_totals(expenses: Iterable[Any]) -> Dict[str, Decimal]:
    """Sum expense amounts per category.

    Args:
        expenses: Expense records

    Returns:
        Dictionary mapping category to its exact decimal total, keyed in
        first-encounter order

    Example:
        >>> category_totals([Expense(1, 1, Decimal('5'), 'Food', '2024-01-02')])
        {'Food': Decimal('5')}
    """
    return _totals_by(expenses, 'category')


def source_totals(incomes: Iterable[Any]) -> Dict[str, Decimal]:
    """Sum income amounts per source."""
    return _totals_by(incomes, 'source')


def total_amount(records: Iterable[Any]) -> Decimal:
    """All-time sum of ``records``."""
    return _sum(records)


def top_category(expenses: Iterable[Any]) -> str:
    """Category with the highest total, or ``"None"`` when there are no expenses.

    Ties go to the category that reached the maximum first in iteration order.
    """
    return _top_key(category_totals(expenses))


def top_source(incomes: Iterable[Any]) -> str:
    """Income source with the highest total, or ``"None"``."""
    return _top_key(source_totals(incomes))


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------


def period_window(period: Union[Period, str], now: NowLike) -> Tuple[datetime, datetime]:
    """Half-open ``[start, end)`` window of the period containing ``now``.

    Weekly windows start on the most recent Sunday (today when ``now`` is a
    Sunday); monthly windows start on the first of ``now``'s month.  Both
    start at midnight.

    Args:
        period: ``weekly`` or ``monthly``
        now: Reference instant

    Returns:
        Tuple of (start, end) naive datetimes

    Raises:
        ValueError: If ``period`` is not a known period
    """
    period = Period(period)
    today = _today(now)
    if period is Period.WEEKLY:
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        end = start + timedelta(days=7)
    else:
        start = today.replace(day=1)
        end = add_months(start, 1)
    return datetime.combine(start, time.min), datetime.combine(end, time.min)


def category_spent(
    expenses: Iterable[Any],
    category: str,
    period: Union[Period, str],
    now: NowLike,
    *,
    ignore_case: bool = False,
) -> Decimal:
    """Sum of ``category`` expenses dated inside the current ``period`` window.

    Args:
        expenses: Expense records
        category: Category to match
        period: ``weekly`` or ``monthly``
        now: Reference instant
        ignore_case: Match categories case-insensitively.  Single budget rows
            use exact matching; the dashboard-wide status ignores case.

    Returns:
        Decimal total, ``0`` when nothing matches
    """
    start, end = period_window(period, now)
    start_day, end_day = start.date(), end.date()
    wanted = category.casefold() if ignore_case else category
    total = ZERO
    for expense in expenses:
        name = expense.category.casefold() if ignore_case else expense.category
        if name == wanted and _in_window(expense.date, start_day, end_day):
            total += to_decimal(expense.amount)
    return total


def month_totals(expenses: Iterable[Any], incomes: Iterable[Any], now: NowLike) -> MonthTotals:
    """Income and expense totals for ``now``'s calendar month."""
    start, end = period_window(Period.MONTHLY, now)
    start_day, end_day = start.date(), end.date()
    return MonthTotals(
        income=_sum(i for i in incomes if _in_window(i.date, start_day, end_day)),
        expenses=_sum(e for e in expenses if _in_window(e.date, start_day, end_day)),
    )


# ---------------------------------------------------------------------------
# Series and listings
# ---------------------------------------------------------------------------


def _month_total(records: Sequence[Any], month: str) -> Decimal:
    return _sum(r for r in records if month_key(r.date) == month)


def monthly_series(
    expenses: Iterable[Any],
    incomes: Iterable[Any],
    now: NowLike,
    month_count: int = 6,
) -> List[MonthlyTotals]:
    """Expense and income totals for the last ``month_count`` calendar months.

    A record belongs to a month when its date has the same ``YYYY-MM``
    prefix.  Months without records are present with zero totals.

    Args:
        expenses: Expense records
        incomes: Income records
        now: Reference instant; its month is the last entry
        month_count: Number of months to return

    Returns:
        List ordered oldest to newest

    Example:
        >>> [m.month for m in monthly_series([], [], date(2024, 3, 9), 3)]
        ['2024-01', '2024-02', '2024-03']
    """
    expenses = list(expenses)
    incomes = list(incomes)
    first_of_month = _today(now).replace(day=1)
    series: List[MonthlyTotals] = []
    for offset in range(max(month_count, 0) - 1, -1, -1):
        month_start = add_months(first_of_month, -offset)
        key = month_key(month_start)
        series.append(MonthlyTotals(
            month=key,
            label=month_start.strftime('%b %y'),
            expense_total=_month_total(expenses, key),
            income_total=_month_total(incomes, key),
        ))
    return series


def recent_transactions(
    expenses: Iterable[Any],
    incomes: Iterable[Any],
    limit: int = 5,
) -> List[Transaction]:
    """Newest expenses and incomes combined into one list.

    Sorting is stable, so records sharing a date keep their input order
    (expenses before incomes).  Records whose date cannot be parsed sort last.
    """
    combined: List[Transaction] = [
        Transaction(
            kind=TransactionKind.EXPENSE,
            id=expense.id,
            amount=to_decimal(expense.amount),
            date=expense.date,
            title=expense.category,
            description=getattr(expense, 'note', '') or 'No description',
        )
        for expense in expenses
    ]
    combined.extend(
        Transaction(
            kind=TransactionKind.INCOME,
            id=income.id,
            amount=to_decimal(income.amount),
            date=income.date,
            title=income.source,
            description='Income',
        )
        for income in incomes
    )
    combined.sort(key=_date_sort_key, reverse=True)
    return combined[:max(limit, 0)]


def sort_by_date(records: Iterable[Any]) -> List[Any]:
    """Records newest first; ties keep their input order."""
    return sorted(records, key=_date_sort_key, reverse=True)


def filter_records(
    records: Iterable[Any],
    *,
    category: Optional[str] = None,
    source: Optional[str] = None,
    month: Optional[str] = None,
) -> List[Any]:
    """Apply the list-page filters.

    Args:
        records: Expense or income records
        category: Exact category to keep
        source: Exact income source to keep
        month: ``YYYY-MM`` prefix to keep

    Returns:
        Matching records in input order
    """
    kept = []
    for record in records:
        if category and getattr(record, 'category', None) != category:
            continue
        if source and getattr(record, 'source', None) != source:
            continue
        if month and month_key(record.date) != month:
            continue
        kept.append(record)
    return kept


def average_monthly_income(incomes: Iterable[Any], now: NowLike, months: int = 6) -> Decimal:
    """Average income per month that actually had income in the trailing window.

    The window runs from ``now`` shifted back ``months`` calendar months up to
    and including today.  The divisor is the number of distinct ``YYYY-MM``
    months with at least one income inside the window.

    Returns:
        Decimal average, ``0`` when no income falls in the window
    """
    today = _today(now)
    window_start = add_months(today, -months)
    total = ZERO
    seen_months = set()
    for income in incomes:
        parsed = parse_date(income.date)
        if parsed is None or not (window_start <= parsed <= today):
            continue
        total += to_decimal(income.amount)
        seen_months.add(month_key(parsed))
    if not seen_months:
        return ZERO
    return total / len(seen_months)
