"""SQLite-backed record store.

Records live in a single SQLite file.  Amounts are stored as TEXT so the
decimal representation round-trips exactly, and timestamps as fixed-width
ISO-8601 text so lexical order matches chronological order.  The blocking
``sqlite3`` calls run in a worker thread to keep the coroutine interface
of :class:`~finance_tracker.storage.RecordStore`.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, Union

from .errors import StorageError
from .models import RecurringTransaction, SalaryAllocation, SavingsGoal, Transaction, User
from .storage import RecordStore, new_id

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    amount TEXT NOT NULL,
    category TEXT NOT NULL,
    description TEXT NOT NULL,
    date TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS savings_goals (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    target_amount TEXT NOT NULL,
    current_amount TEXT NOT NULL DEFAULT '0.00',
    monthly_target TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS recurring_transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    amount TEXT NOT NULL,
    category TEXT NOT NULL,
    description TEXT NOT NULL,
    frequency TEXT NOT NULL,
    next_due_date TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS salary_allocations (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL UNIQUE,
    monthly_salary TEXT NOT NULL,
    essentials TEXT NOT NULL,
    savings TEXT NOT NULL,
    lifestyle TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, date);
CREATE INDEX IF NOT EXISTS ix_goal_user ON savings_goals (user_id);
CREATE INDEX IF NOT EXISTS ix_recurring_user_due ON recurring_transactions (user_id, next_due_date);
"""

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S.%f'

Record = Union[User, Transaction, SavingsGoal, RecurringTransaction, SalaryAllocation]

# model -> (table, columns, timestamp columns, boolean columns)
TABLES: Dict[Type[Any], Tuple[str, Tuple[str, ...], Tuple[str, ...], Tuple[str, ...]]] = {
    User: ('users', ('id', 'username', 'password'), (), ()),
    Transaction: (
        'transactions',
        ('id', 'user_id', 'type', 'amount', 'category', 'description', 'date', 'created_at'),
        ('date', 'created_at'),
        (),
    ),
    SavingsGoal: (
        'savings_goals',
        ('id', 'user_id', 'name', 'target_amount', 'current_amount', 'monthly_target', 'created_at'),
        ('created_at',),
        (),
    ),
    RecurringTransaction: (
        'recurring_transactions',
        ('id', 'user_id', 'type', 'amount', 'category', 'description', 'frequency',
         'next_due_date', 'is_active', 'created_at'),
        ('next_due_date', 'created_at'),
        ('is_active',),
    ),
    SalaryAllocation: (
        'salary_allocations',
        ('id', 'user_id', 'monthly_salary', 'essentials', 'savings', 'lifestyle', 'created_at'),
        ('created_at',),
        (),
    ),
}


def _to_db(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.strftime(TIMESTAMP_FORMAT)
    if isinstance(value, bool):
        return int(value)
    return value


def _from_row(model: Type[Any], row: sqlite3.Row) -> Record:
    _, columns, timestamps, booleans = TABLES[model]
    values: Dict[str, Any] = {}
    for column in columns:
        value = row[column]
        if column in timestamps and value is not None:
            value = datetime.fromisoformat(value)
        elif column in booleans:
            value = bool(value)
        values[column] = value
    return model(**values)


class SQLiteRecordStore(RecordStore):
    """Persistent store backed by a SQLite database file."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self._initialized = False
        self._init_lock = threading.Lock()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        self._initialized = True

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.to_thread(self._guarded, func, *args)

    def _guarded(self, func: Callable[..., Any], *args: Any) -> Any:
        try:
            if not self._initialized:
                with self._init_lock:
                    if not self._initialized:
                        self.init_db()
            return func(*args)
        except sqlite3.Error as exc:
            logger.warning("SQLite operation %s failed: %s", func.__name__, exc)
            raise StorageError(f"Record store unavailable: {exc}") from exc

    # Generic row helpers

    def _select(self, model: Type[Any], where: str = '', params: Sequence[Any] = (), order_by: str = '') -> List[Record]:
        table, columns, _, _ = TABLES[model]
        sql = f"SELECT {', '.join(columns)} FROM {table}"
        if where:
            sql += f" WHERE {where}"
        if order_by:
            sql += f" ORDER BY {order_by}"
        with self.connect() as conn:
            rows = conn.execute(sql, [_to_db(p) for p in params]).fetchall()
        return [_from_row(model, row) for row in rows]

    def _select_one(self, model: Type[Any], where: str, params: Sequence[Any]) -> Optional[Record]:
        found = self._select(model, where, params)
        return found[0] if found else None

    def _insert(self, record: Record) -> Record:
        table, columns, _, _ = TABLES[type(record)]
        placeholders = ', '.join('?' for _ in columns)
        values = [_to_db(getattr(record, column)) for column in columns]
        with self.connect() as conn:
            conn.execute(f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})", values)
            conn.commit()
        logger.debug("Inserted %s %s", table, record.id)
        return record

    def _update(self, model: Type[Any], record_id: str, changes: Mapping[str, Any]) -> Optional[Record]:
        table, columns, _, _ = TABLES[model]
        unknown = set(changes) - set(columns)
        if unknown:
            raise KeyError(f"Unknown column(s) for {table}: {sorted(unknown)}")
        if changes:
            assignments = ', '.join(f"{column} = ?" for column in changes)
            values = [_to_db(v) for v in changes.values()] + [record_id]
            with self.connect() as conn:
                cursor = conn.execute(f"UPDATE {table} SET {assignments} WHERE id = ?", values)
                conn.commit()
            if cursor.rowcount == 0:
                return None
            logger.debug("Updated %s %s", table, record_id)
        return self._select_one(model, 'id = ?', (record_id,))

    def _delete(self, model: Type[Any], record_id: str) -> bool:
        table = TABLES[model][0]
        with self.connect() as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            conn.commit()
        return cursor.rowcount > 0

    def _upsert_allocation(self, fields: Mapping[str, Any]) -> SalaryAllocation:
        existing = self._select_one(SalaryAllocation, 'user_id = ?', (fields['user_id'],))
        allocation = SalaryAllocation(
            id=existing.id if existing else new_id(),
            created_at=existing.created_at if existing else datetime.now(),
            **fields,
        )
        table, columns, _, _ = TABLES[SalaryAllocation]
        values = [_to_db(getattr(allocation, column)) for column in columns]
        with self.connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO {table} ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                values,
            )
            conn.commit()
        logger.debug("Saved salary allocation for user %s", allocation.user_id)
        return allocation

    # Users
    async def get_user(self, user_id: str) -> Optional[User]:
        return await self._run(self._select_one, User, 'id = ?', (user_id,))

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self._run(self._select_one, User, 'username = ?', (username,))

    async def create_user(self, username: str, password: str, user_id: Optional[str] = None) -> User:
        return await self._run(self._insert, User(id=user_id or new_id(), username=username, password=password))

    # Transactions
    async def list_by_user(self, user_id: str) -> List[Transaction]:
        return await self._run(self._select, Transaction, 'user_id = ?', (user_id,), 'date DESC')

    async def list_by_user_and_range(self, user_id: str, start: datetime, end: datetime) -> List[Transaction]:
        return await self._run(
            self._select, Transaction, 'user_id = ? AND date >= ? AND date <= ?', (user_id, start, end), 'date DESC'
        )

    async def create_transaction(self, fields: Mapping[str, Any]) -> Transaction:
        return await self._run(self._insert, Transaction(id=new_id(), created_at=datetime.now(), **fields))

    async def update_transaction(self, transaction_id: str, changes: Mapping[str, Any]) -> Optional[Transaction]:
        return await self._run(self._update, Transaction, transaction_id, changes)

    async def delete_transaction(self, transaction_id: str) -> bool:
        return await self._run(self._delete, Transaction, transaction_id)

    # Savings goals
    async def list_goals(self, user_id: str) -> List[SavingsGoal]:
        return await self._run(self._select, SavingsGoal, 'user_id = ?', (user_id,), 'created_at DESC')

    async def create_goal(self, fields: Mapping[str, Any]) -> SavingsGoal:
        return await self._run(self._insert, SavingsGoal(id=new_id(), created_at=datetime.now(), **fields))

    async def update_goal(self, goal_id: str, changes: Mapping[str, Any]) -> Optional[SavingsGoal]:
        return await self._run(self._update, SavingsGoal, goal_id, changes)

    async def delete_goal(self, goal_id: str) -> bool:
        return await self._run(self._delete, SavingsGoal, goal_id)

    # Recurring transactions
    async def list_recurring(self, user_id: str) -> List[RecurringTransaction]:
        return await self._run(self._select, RecurringTransaction, 'user_id = ?', (user_id,), 'next_due_date ASC')

    async def create_recurring(self, fields: Mapping[str, Any]) -> RecurringTransaction:
        return await self._run(
            self._insert, RecurringTransaction(id=new_id(), created_at=datetime.now(), **fields)
        )

    async def update_recurring(self, recurring_id: str, changes: Mapping[str, Any]) -> Optional[RecurringTransaction]:
        return await self._run(self._update, RecurringTransaction, recurring_id, changes)

    async def delete_recurring(self, recurring_id: str) -> bool:
        return await self._run(self._delete, RecurringTransaction, recurring_id)

    # Salary allocation
    async def get_allocation(self, user_id: str) -> Optional[SalaryAllocation]:
        return await self._run(self._select_one, SalaryAllocation, 'user_id = ?', (user_id,))

    async def save_allocation(self, fields: Mapping[str, Any]) -> SalaryAllocation:
        return await self._run(self._upsert_allocation, fields)
