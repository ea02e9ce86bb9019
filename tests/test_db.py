from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.aggregation import category_spent
from finance_tracker.db import DuplicateUsernameError, RecordStore, RecordStoreError
from finance_tracker.models import Period


def test_schema_is_created(tmp_path):
    path = tmp_path / "nested" / "tracker.db"
    RecordStore(path)
    assert path.exists()


def test_duplicate_username_is_rejected(store, user):
    with pytest.raises(DuplicateUsernameError):
        store.create_user("alice", "other")


def test_get_user_by_username(store, user):
    found = store.get_user_by_username("alice")
    assert found.id == user.id
    assert found.password_hash == "not-a-real-hash"
    assert store.get_user_by_username("bob") is None


def test_expenses_round_trip_and_newest_first(store, user):
    store.add_expense(user.id, Decimal('12.34'), 'Food', date(2024, 3, 1), 'Lunch')
    store.add_expense(user.id, '99.99', 'Rent', '2024-03-05')
    expenses = store.list_expenses(user.id)
    assert [e.category for e in expenses] == ['Rent', 'Food']
    assert expenses[1].amount == Decimal('12.34')
    assert expenses[1].date == date(2024, 3, 1)
    assert expenses[1].note == 'Lunch'
    assert expenses[0].note == ''


def test_records_are_scoped_to_owner(store, user):
    other = store.create_user("bob", "hash")
    store.add_expense(user.id, '10', 'Food', '2024-03-01')
    store.add_income(other.id, '10', 'Salary', '2024-03-01')
    assert store.list_expenses(other.id) == []
    assert store.list_incomes(user.id) == []


def test_delete_requires_ownership(store, user):
    other = store.create_user("bob", "hash")
    expense = store.add_expense(user.id, '10', 'Food', '2024-03-01')
    assert store.delete_expense(expense.id, other.id) is False
    assert len(store.list_expenses(user.id)) == 1
    assert store.delete_expense(expense.id, user.id) is True
    assert store.list_expenses(user.id) == []


def test_delete_income(store, user):
    income = store.add_income(user.id, '2500', 'Salary', '2024-03-01')
    assert store.list_incomes(user.id)[0].amount == Decimal('2500')
    assert store.delete_income(income.id, user.id) is True
    assert store.delete_income(income.id, user.id) is False


def test_unknown_user_is_rejected(store):
    with pytest.raises(RecordStoreError):
        store.add_expense(999, '10', 'Food', '2024-03-01')


def test_set_budget_upserts_and_keeps_id(store, user):
    first = store.set_budget(user.id, 'Food', '1000', 'monthly')
    second = store.set_budget(user.id, 'Food', '1500', Period.MONTHLY)
    weekly = store.set_budget(user.id, 'Food', '300', 'weekly')
    budgets = store.list_budgets(user.id)
    assert second.id == first.id
    assert second.amount == Decimal('1500')
    assert weekly.id != first.id
    assert [(b.period, b.amount) for b in budgets] == [
        (Period.MONTHLY, Decimal('1500')),
        (Period.WEEKLY, Decimal('300')),
    ]


def test_delete_budget(store, user):
    budget = store.set_budget(user.id, 'Food', '1000', 'monthly')
    assert store.delete_budget(budget.id, user.id) is True
    assert store.list_budgets(user.id) == []


def test_malformed_stored_date_is_kept_and_skipped(store, user):
    store.add_expense(user.id, '10', 'Food', 'sometime')
    store.add_expense(user.id, '5', 'Food', '2024-03-02')
    expenses = store.list_expenses(user.id)
    assert 'sometime' in [e.date for e in expenses]
    assert category_spent(expenses, 'Food', 'monthly', date(2024, 3, 15)) == Decimal('5')
