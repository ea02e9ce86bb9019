from datetime import date
from decimal import Decimal

from finance_tracker import formatting
from finance_tracker.budget_health import aggregate_status, budget_percentage, evaluate_budgets
from finance_tracker.models import Budget, Expense, Period


def test_format_currency():
    assert formatting.format_currency(Decimal('1234.5')) == 'KES 1,234.50'
    assert formatting.format_currency(0.1) == 'KES 0.10'
    assert formatting.format_currency(-20) == '-KES 20.00'
    assert formatting.format_currency(5, currency='USD') == 'USD 5.00'


def test_format_remaining_marks_overspend():
    assert formatting.format_remaining(Decimal('-250')) == 'KES 250.00 over'
    assert formatting.format_remaining(Decimal('1500')) == 'KES 1,500.00'


def test_format_signed():
    assert formatting.format_signed('expense', Decimal('10')) == '-KES 10.00'
    assert formatting.format_signed('income', Decimal('10')) == '+KES 10.00'


def test_dates():
    assert formatting.format_short_date('2024-03-05') == 'Mar 5'
    assert formatting.format_long_date('2024-03-05') == 'March 5, 2024'
    assert formatting.format_short_date('garbage') == 'garbage'


def test_icons_and_colors():
    assert formatting.category_icon('Food') == '🍔'
    assert formatting.category_icon('Pets') == formatting.DEFAULT_ICON
    assert formatting.source_icon('Salary') == '💼'
    assert formatting.status_color('Over Budget') == '#ef4444'
    assert formatting.status_color('mystery') == formatting.STATUS_COLORS['No Budget']


def test_format_percentage_rounds_for_display():
    budgets = [Budget(id=1, user_id=1, category='Food', amount=Decimal('3000'), period=Period.MONTHLY)]
    expenses = [Expense(id=1, user_id=1, amount=Decimal('1000'), category='Food', date='2024-03-02')]
    row = evaluate_budgets(budgets, expenses, date(2024, 3, 10))[0]
    assert formatting.format_percentage(row.display_percentage) == '33.3%'
    status = aggregate_status(budgets, expenses, date(2024, 3, 10))
    assert formatting.format_percentage(status.percentage) == '33.3%'


def test_format_percentage_edge_values():
    assert formatting.format_percentage(Decimal('85.00')) == '85.0%'
    assert formatting.format_percentage(Decimal('66.66')) == '66.7%'
    assert formatting.format_percentage(0) == '0.0%'
    assert formatting.format_percentage(12.25) == '12.3%'


def test_format_percentage_of_zero_budget():
    percentage = budget_percentage(Decimal('50'), Decimal('0'))
    assert formatting.format_percentage(percentage) == '∞'
