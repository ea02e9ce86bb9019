"""Budget health classification.

Two independent scales are used:

* single budget rows are ``normal`` up to 80 % spent, ``warning`` up to
  100 % and ``danger`` beyond;
* the dashboard-wide indicator over all monthly budgets is ``Good`` up to
  70 %, ``Warning`` up to 90 % and ``Over Budget`` beyond.

Budget rows match expense categories exactly; the dashboard indicator
matches them case-insensitively.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Union

from .aggregation import ZERO, category_spent, to_decimal
from .models import Budget, Period

HUNDRED = Decimal('100')
INFINITY = Decimal('Infinity')

NORMAL = 'normal'
WARNING = 'warning'
DANGER = 'danger'

WARNING_THRESHOLD = Decimal('80')
DANGER_THRESHOLD = Decimal('100')

STATUS_NO_BUDGET = 'No Budget'
STATUS_GOOD = 'Good'
STATUS_WARNING = 'Warning'
STATUS_OVER = 'Over Budget'

AGGREGATE_GOOD_LIMIT = Decimal('70')
AGGREGATE_WARNING_LIMIT = Decimal('90')


@dataclass(frozen=True)
class BudgetProgress:
    budget: Budget
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    progress_class: str

    @property
    def is_over(self) -> bool:
        return self.remaining < 0

    @property
    def display_percentage(self) -> Decimal:
        """Percentage capped at 100 for progress bars."""
        return min(self.percentage, HUNDRED)


@dataclass(frozen=True)
class PeriodOverview:
    period: Period
    total_budget: Decimal
    total_spent: Decimal
    progress_class: Optional[str]

    @property
    def total_remaining(self) -> Decimal:
        return self.total_budget - self.total_spent


@dataclass(frozen=True)
class AggregateStatus:
    status: str
    percentage: Decimal
    total_budget: Decimal
    total_spent: Decimal


def budget_percentage(spent: Any, amount: Any) -> Decimal:
    """Share of ``amount`` already spent, in percent.

    A zero budget amount yields ``Decimal('Infinity')`` so it always reads
    as overspent.
    """
    amount = to_decimal(amount)
    if amount == 0:
        return INFINITY
    return to_decimal(spent) / amount * HUNDRED


def progress_class(percentage: Decimal) -> str:
    """Classify a single budget's percentage on the 80/100 scale."""
    if percentage > DANGER_THRESHOLD:
        return DANGER
    if percentage > WARNING_THRESHOLD:
        return WARNING
    return NORMAL


def evaluate_budget(budget: Budget, expenses: Iterable[Any], now: Union[datetime, date]) -> BudgetProgress:
    """Current-period progress of one budget.

    Args:
        budget: Budget to evaluate
        expenses: The owner's expense records
        now: Reference instant selecting the current period

    Returns:
        BudgetProgress with spent, remaining (negative when overspent),
        percentage and progress class

    Example:
        >>> progress = evaluate_budget(food_budget_10000, food_expenses_8500, now)
        >>> progress.percentage, progress.progress_class, progress.remaining
        (Decimal('85.00'), 'warning', Decimal('1500'))
    """
    amount = to_decimal(budget.amount)
    spent = category_spent(expenses, budget.category, budget.period, now)
    percentage = budget_percentage(spent, amount)
    return BudgetProgress(
        budget=budget,
        spent=spent,
        remaining=amount - spent,
        percentage=percentage,
        progress_class=progress_class(percentage),
    )


def evaluate_budgets(
    budgets: Iterable[Budget],
    expenses: Iterable[Any],
    now: Union[datetime, date],
    period: Optional[Union[Period, str]] = None,
) -> List[BudgetProgress]:
    """Progress rows for every budget, optionally limited to one period."""
    expenses = list(expenses)
    wanted = Period(period) if period is not None else None
    return [
        evaluate_budget(budget, expenses, now)
        for budget in budgets
        if wanted is None or Period(budget.period) is wanted
    ]


def period_overview(
    budgets: Iterable[Budget],
    expenses: Iterable[Any],
    period: Union[Period, str],
    now: Union[datetime, date],
) -> PeriodOverview:
    """Totals for the budget page header of one period.

    The progress class uses the single-budget scale applied to the totals and
    is ``None`` when there are no budgets for the period.
    """
    period = Period(period)
    rows = evaluate_budgets(budgets, expenses, now, period)
    total_budget = sum((to_decimal(row.budget.amount) for row in rows), ZERO)
    total_spent = sum((row.spent for row in rows), ZERO)
    status = None
    if total_budget > 0:
        status = progress_class(budget_percentage(total_spent, total_budget))
    return PeriodOverview(
        period=period,
        total_budget=total_budget,
        total_spent=total_spent,
        progress_class=status,
    )


def aggregate_status(
    budgets: Iterable[Budget],
    expenses: Iterable[Any],
    now: Union[datetime, date],
) -> AggregateStatus:
    """Dashboard-wide budget health over all monthly budgets.

    Args:
        budgets: The owner's budgets (weekly ones are ignored)
        expenses: The owner's expense records
        now: Reference instant selecting the current month

    Returns:
        AggregateStatus; ``No Budget`` when there are no monthly budgets
    """
    monthly = [b for b in budgets if Period(b.period) is Period.MONTHLY]
    if not monthly:
        return AggregateStatus(STATUS_NO_BUDGET, ZERO, ZERO, ZERO)

    expenses = list(expenses)
    total_budget = ZERO
    total_spent = ZERO
    for budget in monthly:
        total_budget += to_decimal(budget.amount)
        total_spent += category_spent(
            expenses, budget.category, Period.MONTHLY, now, ignore_case=True
        )

    percentage = total_spent / total_budget * HUNDRED if total_budget > 0 else ZERO
    if percentage <= AGGREGATE_GOOD_LIMIT:
        status = STATUS_GOOD
    elif percentage <= AGGREGATE_WARNING_LIMIT:
        status = STATUS_WARNING
    else:
        status = STATUS_OVER
    return AggregateStatus(status, percentage, total_budget, total_spent)
