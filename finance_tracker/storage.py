"""Record store interface and the ephemeral map-backed implementation.

The aggregation code only ever talks to :class:`RecordStore`, so the
in-memory store and the SQLite store in :mod:`finance_tracker.db` are
interchangeable.  All methods are coroutines.  Writes target one record
by id with last-write-wins semantics; update and delete report a missing
id through ``None``/``False`` rather than an exception.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import RecurringTransaction, SalaryAllocation, SavingsGoal, Transaction, User
from .range_filter import transactions_for_user, transactions_in_range

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


class RecordStore(ABC):
    """Async persistence boundary for every record type, keyed by user."""

    # Users
    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    async def create_user(self, username: str, password: str, user_id: Optional[str] = None) -> User: ...

    # Transactions
    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Transaction]:
        """All transactions of a user, most recent first."""

    @abstractmethod
    async def list_by_user_and_range(self, user_id: str, start: datetime, end: datetime) -> List[Transaction]:
        """Transactions dated within the inclusive interval, most recent first."""

    @abstractmethod
    async def create_transaction(self, fields: Mapping[str, Any]) -> Transaction: ...

    @abstractmethod
    async def update_transaction(self, transaction_id: str, changes: Mapping[str, Any]) -> Optional[Transaction]: ...

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> bool: ...

    # Savings goals
    @abstractmethod
    async def list_goals(self, user_id: str) -> List[SavingsGoal]:
        """Savings goals of a user, newest first."""

    @abstractmethod
    async def create_goal(self, fields: Mapping[str, Any]) -> SavingsGoal: ...

    @abstractmethod
    async def update_goal(self, goal_id: str, changes: Mapping[str, Any]) -> Optional[SavingsGoal]: ...

    @abstractmethod
    async def delete_goal(self, goal_id: str) -> bool: ...

    # Recurring transactions
    @abstractmethod
    async def list_recurring(self, user_id: str) -> List[RecurringTransaction]:
        """Recurring transactions of a user, soonest due first."""

    @abstractmethod
    async def create_recurring(self, fields: Mapping[str, Any]) -> RecurringTransaction: ...

    @abstractmethod
    async def update_recurring(self, recurring_id: str, changes: Mapping[str, Any]) -> Optional[RecurringTransaction]: ...

    @abstractmethod
    async def delete_recurring(self, recurring_id: str) -> bool: ...

    # Salary allocation
    @abstractmethod
    async def get_allocation(self, user_id: str) -> Optional[SalaryAllocation]: ...

    @abstractmethod
    async def save_allocation(self, fields: Mapping[str, Any]) -> SalaryAllocation:
        """Create or overwrite the user's allocation, keeping its id and created_at."""


class MemoryRecordStore(RecordStore):
    """Dictionary-backed store; contents vanish with the process."""

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}
        self._transactions: Dict[str, Transaction] = {}
        self._goals: Dict[str, SavingsGoal] = {}
        self._recurring: Dict[str, RecurringTransaction] = {}
        self._allocations: Dict[str, SalaryAllocation] = {}

    def load(
        self,
        *,
        users: Iterable[User] = (),
        transactions: Iterable[Transaction] = (),
        goals: Iterable[SavingsGoal] = (),
        recurring: Iterable[RecurringTransaction] = (),
        allocations: Iterable[SalaryAllocation] = (),
    ) -> 'MemoryRecordStore':
        """Insert ready-made records synchronously (fixtures and demo data)."""
        for user in users:
            self._users[user.id] = replace(user)
        for txn in transactions:
            self._transactions[txn.id] = replace(txn)
        for goal in goals:
            self._goals[goal.id] = replace(goal)
        for item in recurring:
            self._recurring[item.id] = replace(item)
        for allocation in allocations:
            self._allocations[allocation.user_id] = replace(allocation)
        return self

    # Users
    async def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return replace(user) if user else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return replace(user)
        return None

    async def create_user(self, username: str, password: str, user_id: Optional[str] = None) -> User:
        user = User(id=user_id or new_id(), username=username, password=password)
        self._users[user.id] = user
        return replace(user)

    # Transactions
    async def list_by_user(self, user_id: str) -> List[Transaction]:
        return [replace(t) for t in transactions_for_user(self._transactions.values(), user_id)]

    async def list_by_user_and_range(self, user_id: str, start: datetime, end: datetime) -> List[Transaction]:
        own = (t for t in self._transactions.values() if t.user_id == user_id)
        return [replace(t) for t in transactions_in_range(own, start, end)]

    async def create_transaction(self, fields: Mapping[str, Any]) -> Transaction:
        txn = Transaction(id=new_id(), created_at=datetime.now(), **fields)
        self._transactions[txn.id] = txn
        logger.debug("Created transaction %s for user %s", txn.id, txn.user_id)
        return replace(txn)

    async def update_transaction(self, transaction_id: str, changes: Mapping[str, Any]) -> Optional[Transaction]:
        return self._update(self._transactions, transaction_id, changes)

    async def delete_transaction(self, transaction_id: str) -> bool:
        return self._transactions.pop(transaction_id, None) is not None

    # Savings goals
    async def list_goals(self, user_id: str) -> List[SavingsGoal]:
        goals = [g for g in self._goals.values() if g.user_id == user_id]
        return [replace(g) for g in sorted(goals, key=lambda g: g.created_at, reverse=True)]

    async def create_goal(self, fields: Mapping[str, Any]) -> SavingsGoal:
        goal = SavingsGoal(id=new_id(), created_at=datetime.now(), **fields)
        self._goals[goal.id] = goal
        logger.debug("Created savings goal %s for user %s", goal.id, goal.user_id)
        return replace(goal)

    async def update_goal(self, goal_id: str, changes: Mapping[str, Any]) -> Optional[SavingsGoal]:
        return self._update(self._goals, goal_id, changes)

    async def delete_goal(self, goal_id: str) -> bool:
        return self._goals.pop(goal_id, None) is not None

    # Recurring transactions
    async def list_recurring(self, user_id: str) -> List[RecurringTransaction]:
        items = [r for r in self._recurring.values() if r.user_id == user_id]
        return [replace(r) for r in sorted(items, key=lambda r: r.next_due_date)]

    async def create_recurring(self, fields: Mapping[str, Any]) -> RecurringTransaction:
        item = RecurringTransaction(id=new_id(), created_at=datetime.now(), **fields)
        self._recurring[item.id] = item
        logger.debug("Created recurring transaction %s for user %s", item.id, item.user_id)
        return replace(item)

    async def update_recurring(self, recurring_id: str, changes: Mapping[str, Any]) -> Optional[RecurringTransaction]:
        return self._update(self._recurring, recurring_id, changes)

    async def delete_recurring(self, recurring_id: str) -> bool:
        return self._recurring.pop(recurring_id, None) is not None

    # Salary allocation
    async def get_allocation(self, user_id: str) -> Optional[SalaryAllocation]:
        allocation = self._allocations.get(user_id)
        return replace(allocation) if allocation else None

    async def save_allocation(self, fields: Mapping[str, Any]) -> SalaryAllocation:
        existing = self._allocations.get(fields['user_id'])
        allocation = SalaryAllocation(
            id=existing.id if existing else new_id(),
            created_at=existing.created_at if existing else datetime.now(),
            **fields,
        )
        self._allocations[allocation.user_id] = allocation
        logger.debug("Saved salary allocation for user %s", allocation.user_id)
        return replace(allocation)

    @staticmethod
    def _update(table: Dict[str, Any], record_id: str, changes: Mapping[str, Any]):
        record = table.get(record_id)
        if record is None:
            return None
        updated = replace(record, **changes)
        table[record_id] = updated
        logger.debug("Updated %s %s", type(updated).__name__, record_id)
        return replace(updated)
