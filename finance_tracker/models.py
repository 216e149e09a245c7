"""Record types held by the record store.

Amounts are kept as decimal text (``"5200.00"``) exactly as they are
persisted; :mod:`finance_tracker.money` converts them to ``Decimal`` before
any arithmetic.  ``to_dict`` renders the camelCase JSON shape served to the
dashboard with ISO-8601 dates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

INCOME = 'income'
EXPENSE = 'expense'
TRANSFER = 'transfer'
TRANSACTION_TYPES = (INCOME, EXPENSE, TRANSFER)

WEEKLY = 'weekly'
MONTHLY = 'monthly'
YEARLY = 'yearly'
FREQUENCIES = (WEEKLY, MONTHLY, YEARLY)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class User:
    id: str
    username: str
    password: str

    def to_dict(self) -> Dict[str, Any]:
        # password never leaves the store
        return {'id': self.id, 'username': self.username}


@dataclass
class Transaction:
    id: str
    user_id: str
    type: str
    amount: str
    category: str
    description: str
    date: datetime
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'type': self.type,
            'amount': self.amount,
            'category': self.category,
            'description': self.description,
            'date': _iso(self.date),
            'createdAt': _iso(self.created_at),
        }


@dataclass
class SavingsGoal:
    id: str
    user_id: str
    name: str
    target_amount: str
    current_amount: str = '0.00'
    monthly_target: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'targetAmount': self.target_amount,
            'currentAmount': self.current_amount,
            'monthlyTarget': self.monthly_target,
            'createdAt': _iso(self.created_at),
        }


@dataclass
class RecurringTransaction:
    id: str
    user_id: str
    type: str
    amount: str
    category: str
    description: str
    frequency: str
    next_due_date: datetime
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'type': self.type,
            'amount': self.amount,
            'category': self.category,
            'description': self.description,
            'frequency': self.frequency,
            'nextDueDate': _iso(self.next_due_date),
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
        }


@dataclass
class SalaryAllocation:
    """Percentage split of a monthly salary; at most one per user."""

    id: str
    user_id: str
    monthly_salary: str
    essentials: str
    savings: str
    lifestyle: str
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'monthlySalary': self.monthly_salary,
            'essentials': self.essentials,
            'savings': self.savings,
            'lifestyle': self.lifestyle,
            'createdAt': _iso(self.created_at),
        }
