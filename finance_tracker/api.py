"""JSON HTTP API for the finance tracker.

Every response body carries ``success``; failures add an ``error`` string.
Request bodies are validated with the schemas in
:mod:`finance_tracker.schemas` before anything reaches the store or the
aggregation engine.

Run locally with::

    python -m finance_tracker.api
"""

from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional, Tuple

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from . import auth
from .budget_health import evaluate_budgets, period_overview
from .config import API_HOST, API_PORT, configure_logging
from .db import RecordStore, RecordStoreError, get_store
from .models import Period
from .schemas import (
    BudgetSet,
    ExpenseCreate,
    IncomeCreate,
    LoginRequest,
    OwnerRequest,
    RegisterRequest,
    describe_validation_error,
    missing_fields,
)
from .summary import load_dashboard

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)


# ---------------- Helpers ----------------
def to_jsonable(value: Any) -> Any:
    """Convert records, decimals, dates and enums into JSON-ready values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def _store() -> RecordStore:
    return current_app.extensions['record_store']


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


def _parse_id(raw: str) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _body(required: Iterable[str]) -> Tuple[dict, Optional[str]]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    missing = missing_fields(payload, required)
    if missing:
        return payload, f"Missing required fields: {', '.join(missing)}"
    return payload, None


def _as_of() -> datetime:
    raw = request.args.get('asOf')
    if raw:
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.info("Ignoring malformed asOf=%r", raw)
    return datetime.now()


def _delete(kind: str, raw_id: str, delete):
    record_id = _parse_id(raw_id)
    if record_id is None:
        return _error(f"Invalid {kind} ID", 400)
    payload, problem = _body(['userId'])
    if problem:
        return _error(problem, 400)
    owner = OwnerRequest.model_validate(payload)
    deleted = delete(record_id, owner.user_id)
    return jsonify({'success': True, 'deleted': deleted})


# ---------------- Authentication ----------------
@api_bp.route('/register', methods=['POST'])
def register():
    payload, problem = _body(['username', 'password'])
    if problem:
        return _error(problem, 400)
    data = RegisterRequest.model_validate(payload)
    user = auth.register_user(_store(), data.username, data.password)
    return jsonify({'success': True, 'userId': user.id}), 201


@api_bp.route('/login', methods=['POST'])
def login():
    payload, problem = _body(['username', 'password'])
    if problem:
        return _error(problem, 400)
    data = LoginRequest.model_validate(payload)
    user = auth.authenticate(_store(), data.username, data.password)
    if user is None:
        return _error("Invalid credentials", 401)
    return jsonify({'success': True, 'user': user.public()})


# ---------------- Expenses ----------------
@api_bp.route('/expenses', methods=['POST'])
def add_expense():
    payload, problem = _body(['userId', 'amount', 'category', 'date'])
    if problem:
        return _error(problem, 400)
    data = ExpenseCreate.model_validate(payload)
    expense = _store().add_expense(data.user_id, data.amount, data.category, data.date, data.note)
    return jsonify({'success': True, 'expenseId': expense.id}), 201


@api_bp.route('/expenses/<user_id>', methods=['GET'])
def list_expenses(user_id: str):
    owner = _parse_id(user_id)
    if owner is None:
        return _error("Invalid user ID", 400)
    return jsonify({'success': True, 'expenses': to_jsonable(_store().list_expenses(owner))})


@api_bp.route('/expenses/<expense_id>', methods=['DELETE'])
def delete_expense(expense_id: str):
    return _delete('expense', expense_id, _store().delete_expense)


# ---------------- Incomes ----------------
@api_bp.route('/incomes', methods=['POST'])
def add_income():
    payload, problem = _body(['userId', 'amount', 'source', 'date'])
    if problem:
        return _error(problem, 400)
    data = IncomeCreate.model_validate(payload)
    income = _store().add_income(data.user_id, data.amount, data.source, data.date)
    return jsonify({'success': True, 'incomeId': income.id}), 201


@api_bp.route('/incomes/<user_id>', methods=['GET'])
def list_incomes(user_id: str):
    owner = _parse_id(user_id)
    if owner is None:
        return _error("Invalid user ID", 400)
    return jsonify({'success': True, 'incomes': to_jsonable(_store().list_incomes(owner))})


@api_bp.route('/incomes/<income_id>', methods=['DELETE'])
def delete_income(income_id: str):
    return _delete('income', income_id, _store().delete_income)


# ---------------- Budgets ----------------
@api_bp.route('/budgets', methods=['POST'])
def set_budget():
    payload, problem = _body(['userId', 'category', 'amount', 'period'])
    if problem:
        return _error(problem, 400)
    data = BudgetSet.model_validate(payload)
    budget = _store().set_budget(data.user_id, data.category, data.amount, data.period)
    return jsonify({'success': True, 'budgetId': budget.id}), 201


@api_bp.route('/budgets/<user_id>', methods=['GET'])
def list_budgets(user_id: str):
    owner = _parse_id(user_id)
    if owner is None:
        return _error("Invalid user ID", 400)
    return jsonify({'success': True, 'budgets': to_jsonable(_store().list_budgets(owner))})


@api_bp.route('/budgets/<user_id>/progress', methods=['GET'])
def budget_progress(user_id: str):
    owner = _parse_id(user_id)
    if owner is None:
        return _error("Invalid user ID", 400)
    try:
        period = Period(request.args.get('period', Period.MONTHLY.value))
    except ValueError:
        return _error("Invalid period", 400)
    store = _store()
    budgets = store.list_budgets(owner)
    expenses = store.list_expenses(owner)
    now = _as_of()
    rows = [
        {
            'budget': row.budget,
            'spent': row.spent,
            'remaining': row.remaining,
            'percentage': row.percentage,
            'displayPercentage': row.display_percentage,
            'progressClass': row.progress_class,
            'isOver': row.is_over,
        }
        for row in evaluate_budgets(budgets, expenses, now, period)
    ]
    overview = period_overview(budgets, expenses, period, now)
    return jsonify({
        'success': True,
        'budgets': to_jsonable(rows),
        'overview': to_jsonable({
            'period': overview.period,
            'totalBudget': overview.total_budget,
            'totalSpent': overview.total_spent,
            'totalRemaining': overview.total_remaining,
            'progressClass': overview.progress_class,
        }),
    })


@api_bp.route('/budgets/<budget_id>', methods=['DELETE'])
def delete_budget(budget_id: str):
    return _delete('budget', budget_id, _store().delete_budget)


# ---------------- Dashboard ----------------
@api_bp.route('/dashboard/<user_id>', methods=['GET'])
def dashboard(user_id: str):
    owner = _parse_id(user_id)
    if owner is None:
        return _error("Invalid user ID", 400)
    snapshot = load_dashboard(_store(), owner, _as_of())
    return jsonify({
        'success': True,
        'degraded': snapshot.degraded,
        'warnings': snapshot.warnings,
        'month': {
            'income': to_jsonable(snapshot.month.income),
            'expenses': to_jsonable(snapshot.month.expenses),
            'balance': to_jsonable(snapshot.month.balance),
        },
        'budgetStatus': to_jsonable(snapshot.budget_status),
        'categoryTotals': to_jsonable(snapshot.category_totals),
        'monthly': to_jsonable(snapshot.trend),
        'recent': to_jsonable(snapshot.recent),
    })


# ---------------- Error handling ----------------
@api_bp.errorhandler(ValidationError)
def handle_validation_error(exc: ValidationError):
    return _error(describe_validation_error(exc), 400)


@api_bp.errorhandler(RecordStoreError)
def handle_store_error(exc: RecordStoreError):
    return _error(str(exc), 400)


@api_bp.errorhandler(ValueError)
def handle_value_error(exc: ValueError):
    return _error(str(exc), 400)


# ---------------- Flask App Factory ----------------
def create_app(store: Optional[RecordStore] = None) -> Flask:
    app = Flask(__name__)
    app.extensions['record_store'] = store or get_store()

    CORS(app)
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return _error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _error("Internal server error", 500)

    return app


def main() -> None:
    configure_logging()
    app = create_app()
    logger.info("Finance tracker API listening on http://%s:%s", API_HOST, API_PORT)
    app.run(host=API_HOST, port=API_PORT)


if __name__ == '__main__':
    main()
