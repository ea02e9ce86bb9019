"""Typed request schemas validated at the API boundary.

Wire names are camelCase (``userId``); attributes are snake_case.  Amounts
must be strictly positive, so the aggregation engine never sees zero or
negative values.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import Period


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class RegisterRequest(_Request):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginRequest(_Request):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class OwnerRequest(_Request):
    user_id: int = Field(alias='userId', gt=0)


class ExpenseCreate(OwnerRequest):
    amount: Decimal = Field(gt=0)
    category: str = Field(min_length=1)
    note: Optional[str] = ''
    date: dt.date

    @field_validator('note')
    @classmethod
    def blank_note(cls, value: Optional[str]) -> str:
        return value or ''


class IncomeCreate(OwnerRequest):
    amount: Decimal = Field(gt=0)
    source: str = Field(min_length=1)
    date: dt.date


class BudgetSet(OwnerRequest):
    category: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    period: Period


def missing_fields(payload: Optional[Mapping[str, Any]], required: Iterable[str]) -> List[str]:
    """Required keys that are absent or empty in ``payload``."""
    payload = payload or {}
    return [name for name in required if payload.get(name) in (None, '')]


def describe_validation_error(error: ValidationError) -> str:
    """Single-line message for the first problem in a pydantic error."""
    first: Dict[str, Any] = error.errors()[0]
    location = '.'.join(str(part) for part in first.get('loc', ()))
    field = location or 'request'
    if field == 'amount' and first.get('type') == 'greater_than':
        return "Amount must be greater than 0"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"
