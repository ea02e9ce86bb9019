"""Record types shared by the store, the aggregation engine and the API.

Amounts are always :class:`decimal.Decimal`.  Dates are calendar dates;
rows read back from storage keep the raw text when it cannot be parsed so
that the engine can skip them instead of failing the whole view.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

DateLike = Union[date, str]


class Period(str, Enum):
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'


class TransactionKind(str, Enum):
    EXPENSE = 'expense'
    INCOME = 'income'


@dataclass(frozen=True)
class User:
    id: int
    username: str
    password_hash: str = ''
    created_at: Optional[str] = None

    def public(self) -> Dict[str, Any]:
        return {'id': self.id, 'username': self.username}


@dataclass(frozen=True)
class Expense:
    id: Optional[int]
    user_id: int
    amount: Decimal
    category: str
    date: DateLike
    note: str = ''


@dataclass(frozen=True)
class Income:
    id: Optional[int]
    user_id: int
    amount: Decimal
    source: str
    date: DateLike


@dataclass(frozen=True)
class Budget:
    id: Optional[int]
    user_id: int
    category: str
    amount: Decimal
    period: Period


@dataclass(frozen=True)
class Transaction:
    """An expense or income tagged with its kind for combined listings."""

    kind: TransactionKind
    id: Optional[int]
    amount: Decimal
    date: DateLike
    title: str
    description: str

