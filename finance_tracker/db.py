"""SQLite record store for users, expenses, incomes and budgets.

Every operation opens its own connection, so a store instance can be used
from several threads at once (the dashboard fetches collections
concurrently).  Amounts are stored as canonical decimal text and dates as
ISO ``YYYY-MM-DD`` text.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

from .config import DB_PATH, ensure_data_directories
from .models import Budget, Expense, Income, Period, User

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    password TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    amount TEXT NOT NULL,
    category TEXT NOT NULL,
    note TEXT,
    date TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (user_id) REFERENCES users (id)
);

CREATE TABLE IF NOT EXISTS incomes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    amount TEXT NOT NULL,
    source TEXT NOT NULL,
    date TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (user_id) REFERENCES users (id)
);

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    category TEXT NOT NULL,
    amount TEXT NOT NULL,
    period TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (user_id) REFERENCES users (id),
    UNIQUE (user_id, category, period)
);

CREATE INDEX IF NOT EXISTS ix_expenses_user ON expenses (user_id, date);
CREATE INDEX IF NOT EXISTS ix_incomes_user ON incomes (user_id, date);
"""


class RecordStoreError(Exception):
    """Base error for record store failures."""


class DuplicateUsernameError(RecordStoreError):
    """Raised when registering a username that already exists."""


def _to_iso_date(value: Union[date, str]) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _from_db_date(value: Optional[str]) -> Union[date, str]:
    """Parse stored date text, keeping the raw text when it is malformed."""
    if value is None:
        return ''
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return value


def _to_db_amount(value: Any) -> str:
    if isinstance(value, float):
        value = Decimal(str(value))
    return str(Decimal(value))


def _from_db_amount(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning("Unreadable stored amount %r treated as 0", value)
        return Decimal('0')


def _row_to_expense(row: sqlite3.Row) -> Expense:
    return Expense(
        id=row['id'],
        user_id=row['user_id'],
        amount=_from_db_amount(row['amount']),
        category=row['category'],
        date=_from_db_date(row['date']),
        note=row['note'] or '',
    )


def _row_to_income(row: sqlite3.Row) -> Income:
    return Income(
        id=row['id'],
        user_id=row['user_id'],
        amount=_from_db_amount(row['amount']),
        source=row['source'],
        date=_from_db_date(row['date']),
    )


def _row_to_budget(row: sqlite3.Row) -> Budget:
    return Budget(
        id=row['id'],
        user_id=row['user_id'],
        category=row['category'],
        amount=_from_db_amount(row['amount']),
        period=Period(row['period']),
    )


class RecordStore:
    """Durable storage for one tracker database file."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """Open (and create if needed) the database.

        Args:
            db_path: Optional database file.  Defaults to DB_PATH from config.
        """
        self.db_path = Path(db_path) if db_path else DB_PATH
        if db_path is None:
            ensure_data_directories()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.init_db()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    # Users ---------------------------------------------------------------

    def create_user(self, username: str, password_hash: str) -> User:
        """Insert a user.

        Raises:
            DuplicateUsernameError: If the username is taken
        """
        with self.connect() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO users (username, password) VALUES (?, ?)",
                    (username, password_hash),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                raise DuplicateUsernameError(f"Username '{username}' is already taken") from e
            user_id = cursor.lastrowid
        logger.debug("Created user %s (id=%s)", username, user_id)
        return User(id=user_id, username=username, password_hash=password_hash)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT id, username, password, created_at FROM users WHERE username = ?",
                (username,),
            ).fetchone()
        if row is None:
            return None
        return User(
            id=row['id'],
            username=row['username'],
            password_hash=row['password'],
            created_at=row['created_at'],
        )

    # Expenses ------------------------------------------------------------

    def add_expense(
        self,
        user_id: int,
        amount: Any,
        category: str,
        expense_date: Union[date, str],
        note: str = '',
    ) -> Expense:
        expense_id = self._insert(
            "INSERT INTO expenses (user_id, amount, category, note, date) VALUES (?, ?, ?, ?, ?)",
            (user_id, _to_db_amount(amount), category, note or '', _to_iso_date(expense_date)),
        )
        logger.debug("Added expense %s for user %s", expense_id, user_id)
        return Expense(
            id=expense_id,
            user_id=user_id,
            amount=Decimal(_to_db_amount(amount)),
            category=category,
            date=_from_db_date(_to_iso_date(expense_date)),
            note=note or '',
        )

    def list_expenses(self, user_id: int) -> List[Expense]:
        """Expenses owned by ``user_id``, newest first."""
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM expenses WHERE user_id = ? ORDER BY date DESC, id DESC",
                (user_id,),
            ).fetchall()
        return [_row_to_expense(row) for row in rows]

    def delete_expense(self, expense_id: int, user_id: int) -> bool:
        """Delete an expense if ``user_id`` owns it.  Returns True if a row went away."""
        return self._delete_owned('expenses', expense_id, user_id)

    # Incomes -------------------------------------------------------------

    def add_income(self, user_id: int, amount: Any, source: str, income_date: Union[date, str]) -> Income:
        income_id = self._insert(
            "INSERT INTO incomes (user_id, amount, source, date) VALUES (?, ?, ?, ?)",
            (user_id, _to_db_amount(amount), source, _to_iso_date(income_date)),
        )
        logger.debug("Added income %s for user %s", income_id, user_id)
        return Income(
            id=income_id,
            user_id=user_id,
            amount=Decimal(_to_db_amount(amount)),
            source=source,
            date=_from_db_date(_to_iso_date(income_date)),
        )

    def list_incomes(self, user_id: int) -> List[Income]:
        """Incomes owned by ``user_id``, newest first."""
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM incomes WHERE user_id = ? ORDER BY date DESC, id DESC",
                (user_id,),
            ).fetchall()
        return [_row_to_income(row) for row in rows]

    def delete_income(self, income_id: int, user_id: int) -> bool:
        return self._delete_owned('incomes', income_id, user_id)

    # Budgets -------------------------------------------------------------

    def set_budget(self, user_id: int, category: str, amount: Any, period: Union[Period, str]) -> Budget:
        """Create or replace the budget for (user, category, period).

        Setting the same key twice updates the amount in place; the budget id
        is kept.
        """
        period = Period(period)
        self._insert(
            """
            INSERT INTO budgets (user_id, category, amount, period)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (user_id, category, period)
            DO UPDATE SET amount = excluded.amount
            """,
            (user_id, category, _to_db_amount(amount), period.value),
        )
        with self.connect() as conn:
            row = conn.execute(
                "SELECT * FROM budgets WHERE user_id = ? AND category = ? AND period = ?",
                (user_id, category, period.value),
            ).fetchone()
        logger.debug("Set %s budget for %s (user %s)", period.value, category, user_id)
        return _row_to_budget(row)

    def list_budgets(self, user_id: int) -> List[Budget]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM budgets WHERE user_id = ? ORDER BY id",
                (user_id,),
            ).fetchall()
        return [_row_to_budget(row) for row in rows]

    def delete_budget(self, budget_id: int, user_id: int) -> bool:
        return self._delete_owned('budgets', budget_id, user_id)

    def _insert(self, sql: str, params: tuple) -> int:
        with self.connect() as conn:
            try:
                cursor = conn.execute(sql, params)
                conn.commit()
            except sqlite3.IntegrityError as e:
                raise RecordStoreError(f"Unknown user {params[0]}") from e
        return cursor.lastrowid

    def _delete_owned(self, table: str, record_id: int, user_id: int) -> bool:
        with self.connect() as conn:
            cursor = conn.execute(
                f"DELETE FROM {table} WHERE id = ? AND user_id = ?",
                (record_id, user_id),
            )
            conn.commit()
            deleted = cursor.rowcount > 0
        logger.debug("Delete %s id=%s user=%s -> %s", table, record_id, user_id, deleted)
        return deleted


_default_store: Optional[RecordStore] = None


def get_store() -> RecordStore:
    """Store bound to the configured database path, created on first use."""
    global _default_store
    if _default_store is None:
        _default_store = RecordStore()
    return _default_store
