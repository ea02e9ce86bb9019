from datetime import date, datetime
from decimal import Decimal

import pytest

from finance_tracker import aggregation as agg
from finance_tracker.models import Expense, Income, Period, TransactionKind

NOW = datetime(2024, 3, 15, 10, 30)  # a Friday


def expense(amount, category, when, note='', id=None):
    return Expense(id=id, user_id=1, amount=Decimal(amount), category=category, date=when, note=note)


def income(amount, source, when, id=None):
    return Income(id=id, user_id=1, amount=Decimal(amount), source=source, date=when)


def test_category_totals_are_exact_decimals():
    totals = agg.category_totals([
        expense('0.1', 'Food', '2024-03-01'),
        expense('0.2', 'Food', '2024-03-02'),
        expense('5', 'Rent', '2024-03-03'),
    ])
    assert totals == {'Food': Decimal('0.3'), 'Rent': Decimal('5')}
    assert list(totals) == ['Food', 'Rent']


def test_top_category_tie_goes_to_first_seen():
    expenses = [
        expense('10', 'Food', '2024-03-01'),
        expense('10', 'Rent', '2024-03-02'),
    ]
    assert agg.top_category(expenses) == 'Food'


def test_top_category_and_source_empty():
    assert agg.top_category([]) == 'None'
    assert agg.top_source([]) == 'None'


def test_top_source_picks_largest():
    incomes = [income('100', 'Gift', '2024-01-01'), income('900', 'Salary', '2024-01-02')]
    assert agg.top_source(incomes) == 'Salary'


def test_weekly_window_starts_on_sunday():
    start, end = agg.period_window(Period.WEEKLY, NOW)
    assert start == datetime(2024, 3, 10)
    assert end == datetime(2024, 3, 17)


def test_weekly_window_on_a_sunday_starts_today():
    start, _ = agg.period_window('weekly', date(2024, 3, 10))
    assert start == datetime(2024, 3, 10)


def test_monthly_window_is_calendar_month():
    start, end = agg.period_window(Period.MONTHLY, NOW)
    assert start == datetime(2024, 3, 1)
    assert end == datetime(2024, 4, 1)


def test_december_window_rolls_into_next_year():
    start, end = agg.period_window('monthly', date(2023, 12, 31))
    assert (start, end) == (datetime(2023, 12, 1), datetime(2024, 1, 1))


def test_unknown_period_is_rejected():
    with pytest.raises(ValueError):
        agg.period_window('yearly', NOW)


def test_category_spent_respects_half_open_window():
    expenses = [
        expense('100', 'Food', '2024-03-01'),
        expense('50', 'Food', date(2024, 3, 31)),
        expense('999', 'Food', '2024-04-01'),
        expense('999', 'Food', '2024-02-29'),
        expense('999', 'Rent', '2024-03-05'),
    ]
    assert agg.category_spent(expenses, 'Food', 'monthly', NOW) == Decimal('150')


def test_category_spent_case_handling():
    expenses = [expense('100', 'Food', '2024-03-01'), expense('40', 'food', '2024-03-02')]
    assert agg.category_spent(expenses, 'Food', Period.MONTHLY, NOW) == Decimal('100')
    assert agg.category_spent(expenses, 'FOOD', Period.MONTHLY, NOW, ignore_case=True) == Decimal('140')


def test_category_spent_skips_unparseable_dates():
    expenses = [expense('100', 'Food', 'not-a-date'), expense('10', 'Food', '2024-03-12')]
    assert agg.category_spent(expenses, 'Food', Period.WEEKLY, NOW) == Decimal('10')


def test_category_spent_nothing_matches_is_zero():
    assert agg.category_spent([], 'Food', Period.MONTHLY, NOW) == Decimal('0')


def test_month_totals():
    totals = agg.month_totals(
        [expense('300', 'Food', '2024-03-02'), expense('1', 'Food', '2024-02-02')],
        [income('1000', 'Salary', '2024-03-01')],
        NOW,
    )
    assert totals.income == Decimal('1000')
    assert totals.expenses == Decimal('300')
    assert totals.balance == Decimal('700')


def test_monthly_series_covers_months_oldest_first():
    series = agg.monthly_series(
        [expense('100', 'Food', '2024-03-02'), expense('25', 'Food', '2023-10-31')],
        [income('500', 'Salary', '2024-01-05')],
        date(2024, 3, 9),
        6,
    )
    assert [m.month for m in series] == [
        '2023-10', '2023-11', '2023-12', '2024-01', '2024-02', '2024-03',
    ]
    assert series[0].label == 'Oct 23'
    assert series[0].expense_total == Decimal('25')
    assert series[3].income_total == Decimal('500')
    assert series[4].expense_total == Decimal('0')
    assert series[5].net == Decimal('-100')


def test_monthly_series_zero_months():
    assert agg.monthly_series([], [], NOW, 0) == []


def test_recent_transactions_newest_first_and_limited():
    recent = agg.recent_transactions(
        [
            expense('10', 'Food', '2024-03-01', note='Lunch', id=1),
            expense('20', 'Rent', '2024-03-05', id=2),
        ],
        [income('500', 'Salary', '2024-03-03', id=3)],
        limit=2,
    )
    assert [(t.kind, t.id) for t in recent] == [
        (TransactionKind.EXPENSE, 2),
        (TransactionKind.INCOME, 3),
    ]
    assert recent[0].description == 'No description'
    assert recent[1].description == 'Income'
    assert recent[1].title == 'Salary'


def test_recent_transactions_ties_keep_input_order_and_bad_dates_last():
    recent = agg.recent_transactions(
        [expense('1', 'Food', 'garbage', id=1), expense('2', 'Food', '2024-03-05', id=2)],
        [income('3', 'Gift', '2024-03-05', id=3)],
        limit=5,
    )
    assert [t.id for t in recent] == [2, 3, 1]


def test_recent_transactions_empty():
    assert agg.recent_transactions([], []) == []


def test_filter_records_by_month_and_category():
    records = [
        expense('1', 'Food', '2024-03-02'),
        expense('2', 'Rent', '2024-03-03'),
        expense('3', 'Food', '2024-02-03'),
    ]
    assert agg.filter_records(records, month='2024-03') == records[:2]
    assert agg.filter_records(records, category='Food', month='2024-02') == [records[2]]
    assert agg.filter_records(records) == records


def test_filter_records_by_source():
    records = [income('1', 'Salary', '2024-03-02'), income('2', 'Gift', '2024-03-03')]
    assert agg.filter_records(records, source='Gift') == [records[1]]


def test_sort_by_date():
    records = [expense('1', 'A', '2024-01-02'), expense('2', 'B', '2024-03-01'), expense('3', 'C', '2024-02-01')]
    assert [r.category for r in agg.sort_by_date(records)] == ['B', 'C', 'A']


def test_average_monthly_income_counts_months_with_income():
    incomes = [
        income('1000', 'Salary', '2024-03-01'),
        income('500', 'Gift', '2024-03-10'),
        income('300', 'Freelance', '2024-01-20'),
        income('999', 'Salary', '2023-09-14'),
        income('999', 'Salary', '2024-03-16'),
    ]
    assert agg.average_monthly_income(incomes, date(2024, 3, 15), 6) == Decimal('900')


def test_average_monthly_income_without_income_is_zero():
    assert agg.average_monthly_income([], NOW) == Decimal('0')


def test_add_months_clamps_to_month_end():
    assert agg.add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert agg.add_months(date(2024, 1, 15), -2) == date(2023, 11, 15)


def test_parse_date_is_fail_soft():
    assert agg.parse_date('2024-03-05') == date(2024, 3, 5)
    assert agg.parse_date('2024-03-05T12:00:00') == date(2024, 3, 5)
    assert agg.parse_date(datetime(2024, 3, 5, 9)) == date(2024, 3, 5)
    assert agg.parse_date('yesterday') is None
    assert agg.parse_date(None) is None


def test_aggregation_is_deterministic():
    expenses = [expense('10', 'Food', '2024-03-01'), expense('5', 'Rent', '2024-02-01')]
    incomes = [income('50', 'Salary', '2024-03-02')]
    first = agg.monthly_series(expenses, incomes, NOW)
    second = agg.monthly_series(expenses, incomes, NOW)
    assert first == second


def test_category_totals_conserve_the_total():
    expenses = [
        expense('12.10', 'Food', '2024-03-01'),
        expense('7.05', 'Rent', '2024-03-02'),
        expense('3.33', 'Food', '2024-03-03'),
    ]
    assert sum(agg.category_totals(expenses).values()) == agg.total_amount(expenses)


def test_recent_transactions_returns_everything_under_the_limit():
    recent = agg.recent_transactions(
        [
            expense('1', 'Food', '2024-03-01', id=1),
            expense('2', 'Food', '2024-03-04', id=2),
            expense('3', 'Food', '2024-03-02', id=3),
        ],
        [income('4', 'Salary', '2024-03-05', id=4), income('5', 'Gift', '2024-03-03', id=5)],
        limit=5,
    )
    assert [t.id for t in recent] == [4, 2, 5, 3, 1]
