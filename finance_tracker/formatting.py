"""Formatting utilities for currency, dates, icons and status colors."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Union

from .aggregation import parse_date
from .config import CURRENCY
from .models import TransactionKind

Number = Union[Decimal, float, int]

CATEGORY_ICONS = {
    'Food': '🍔',
    'Transportation': '🚗',
    'Housing': '🏠',
    'Utilities': '⚡',
    'Healthcare': '🏥',
    'Entertainment': '🎬',
    'Shopping': '🛍️',
    'Education': '📚',
    'Other': '📦',
}

SOURCE_ICONS = {
    'Salary': '💼',
    'Freelance': '💻',
    'Business': '🏢',
    'Investment': '📈',
    'Rental': '🏠',
    'Gift': '🎁',
    'Bonus': '🎉',
    'Other': '📦',
}

DEFAULT_ICON = '📦'

STATUS_COLORS = {
    'Good': '#22c55e',
    'Warning': '#f59e0b',
    'Over Budget': '#ef4444',
    'No Budget': '#666666',
    'normal': '#22c55e',
    'warning': '#f59e0b',
    'danger': '#ef4444',
}


def format_currency(amount: Number, currency: str = CURRENCY) -> str:
    """Format an amount in the fixed display currency.

    Args:
        amount: The amount to format
        currency: Currency code prefix

    Returns:
        Formatted string (e.g. "KES 1,234.56"); negatives get a leading "-"

    Example:
        >>> format_currency(Decimal('1234.5'))
        'KES 1,234.50'
    """
    value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    sign = '-' if value < 0 else ''
    return f"{sign}{currency} {abs(value):,.2f}"


def format_remaining(remaining: Number, currency: str = CURRENCY) -> str:
    """Remaining budget as a magnitude, marked "over" when overspent.

    Example:
        >>> format_remaining(Decimal('-250'))
        'KES 250.00 over'
    """
    value = Decimal(str(remaining)) if isinstance(remaining, float) else Decimal(remaining)
    if value < 0:
        return f"{format_currency(-value, currency)} over"
    return format_currency(value, currency)


def format_signed(kind: Union[TransactionKind, str], amount: Number, currency: str = CURRENCY) -> str:
    """Amount prefixed with "-" for expenses and "+" for incomes."""
    prefix = '-' if TransactionKind(kind) is TransactionKind.EXPENSE else '+'
    return f"{prefix}{format_currency(amount, currency)}"


def format_percentage(value: Number) -> str:
    """Percentage rounded to one decimal place for display.

    A non-finite value (the percentage of a zero budget) renders as ``∞``.

    Example:
        >>> format_percentage(Decimal('33.33333333333333333333333333'))
        '33.3%'
    """
    value = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    if not value.is_finite():
        return '∞'
    return f"{value.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}%"


def format_short_date(value: Any) -> str:
    """Short date such as ``Mar 5``; unparseable values are returned unchanged."""
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed.strftime('%b')} {parsed.day}"


def format_long_date(value: Any) -> str:
    """Long date such as ``March 5, 2024`` used on the list pages."""
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, DEFAULT_ICON)


def source_icon(source: str) -> str:
    return SOURCE_ICONS.get(source, DEFAULT_ICON)


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, STATUS_COLORS['No Budget'])
