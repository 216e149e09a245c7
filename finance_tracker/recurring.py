"""Due-status classification and monthly normalization of recurring items.

Two presentation contracts exist:

* :class:`BillStatusPolicy` drives the dashboard's upcoming-bills widget.
  Anything further out than three days reads ``Auto-pay``.
* :class:`RecurringStatusPolicy` drives the recurring-transactions view.
  It has an extra 4-7 day ``Due in N days`` band before ``Scheduled``.

Due dates are never rolled forward here; an item whose date has passed
stays ``Overdue`` until someone edits it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from .config import MONTHS_PER_YEAR, UPCOMING_BILLS_LIMIT, WEEKS_PER_MONTH
from .errors import DataIntegrityError
from .models import EXPENSE, INCOME, MONTHLY, WEEKLY, YEARLY, RecurringTransaction
from .money import ZERO, Number, parse_amount
from .periods import local_now

DateLike = Union[date, datetime]

OVERDUE = 'Overdue'
DUE_TODAY = 'Due today'
AUTO_PAY = 'Auto-pay'
SCHEDULED = 'Scheduled'


@dataclass(frozen=True)
class DueStatus:
    label: str
    tone: str
    days_until_due: int

    def to_dict(self) -> Dict[str, Any]:
        return {'text': self.label, 'tone': self.tone, 'daysUntilDue': self.days_until_due}


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def days_until_due(next_due: DateLike, now: Optional[DateLike] = None) -> int:
    """Whole days from ``now`` until ``next_due``; partial days are dropped."""
    delta = _as_datetime(next_due) - _as_datetime(now or local_now())
    return int(delta / timedelta(days=1))


def _due_in(days: int) -> str:
    return f"Due in {days} day" if days == 1 else f"Due in {days} days"


class DueStatusPolicy:
    """Shared ladder: overdue, due today, due within ``soon_days``."""

    name = 'base'
    soon_days = 3

    def classify(self, days: int) -> DueStatus:
        if days < 0:
            return DueStatus(OVERDUE, 'danger', days)
        if days == 0:
            return DueStatus(DUE_TODAY, 'warning', days)
        if days <= self.soon_days:
            return DueStatus(_due_in(days), 'caution', days)
        return self.beyond(days)

    def beyond(self, days: int) -> DueStatus:
        raise NotImplementedError

    def status_for(self, next_due: DateLike, now: Optional[DateLike] = None) -> DueStatus:
        return self.classify(days_until_due(next_due, now))


class BillStatusPolicy(DueStatusPolicy):
    name = 'bill'

    def beyond(self, days: int) -> DueStatus:
        return DueStatus(AUTO_PAY, 'ok', days)


class RecurringStatusPolicy(DueStatusPolicy):
    name = 'recurring'
    upcoming_days = 7

    def beyond(self, days: int) -> DueStatus:
        if days <= self.upcoming_days:
            return DueStatus(_due_in(days), 'info', days)
        return DueStatus(SCHEDULED, 'ok', days)


BILL_STATUS_POLICY = BillStatusPolicy()
RECURRING_STATUS_POLICY = RecurringStatusPolicy()


def monthly_equivalent(amount: Number, frequency: str) -> Decimal:
    """Normalize a recurring amount to a monthly figure.

    Weekly amounts use the 4.33 weeks-per-month approximation and yearly
    amounts are divided by 12.  The result is not rounded:

    >>> monthly_equivalent('89.00', 'weekly')
    Decimal('385.3700')
    """
    value = parse_amount(amount, field='amount')
    if frequency == WEEKLY:
        return value * WEEKS_PER_MONTH
    if frequency == YEARLY:
        return value / MONTHS_PER_YEAR
    if frequency == MONTHLY:
        return value
    raise DataIntegrityError(f"Unknown recurring frequency: {frequency!r}")


@dataclass(frozen=True)
class RecurringOverview:
    monthly_income: Decimal
    monthly_expenses: Decimal
    active_count: int
    total_count: int

    @property
    def net_monthly(self) -> Decimal:
        return self.monthly_income - self.monthly_expenses

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalMonthlyIncome': float(self.monthly_income),
            'totalMonthlyExpenses': float(self.monthly_expenses),
            'netMonthly': float(self.net_monthly),
            'activeCount': self.active_count,
            'totalCount': self.total_count,
        }


def recurring_monthly_totals(items: Iterable[RecurringTransaction]) -> RecurringOverview:
    """Monthly-normalized income and expense totals over every recurring item."""
    income = ZERO
    expenses = ZERO
    active = 0
    count = 0
    for item in items:
        count += 1
        if item.is_active:
            active += 1
        if item.type == INCOME:
            income += monthly_equivalent(item.amount, item.frequency)
        elif item.type == EXPENSE:
            expenses += monthly_equivalent(item.amount, item.frequency)
    return RecurringOverview(income, expenses, active, count)


@dataclass(frozen=True)
class DueItem:
    item: RecurringTransaction
    status: DueStatus

    def to_dict(self) -> Dict[str, Any]:
        payload = self.item.to_dict()
        payload['dueStatus'] = self.status.to_dict()
        return payload


def upcoming_bills(
    items: Iterable[RecurringTransaction],
    now: Optional[DateLike] = None,
    limit: int = UPCOMING_BILLS_LIMIT,
    policy: DueStatusPolicy = BILL_STATUS_POLICY,
) -> List[DueItem]:
    """The ``limit`` soonest-due recurring items with their bill status."""
    now = now or local_now()
    ordered = sorted(items, key=lambda item: item.next_due_date)[:limit]
    return classify_items(ordered, now, policy)


def classify_items(
    items: Iterable[RecurringTransaction],
    now: Optional[DateLike] = None,
    policy: DueStatusPolicy = RECURRING_STATUS_POLICY,
) -> List[DueItem]:
    """Pair every recurring item with its status under ``policy``, keeping order."""
    now = now or local_now()
    return [DueItem(item, policy.status_for(item.next_due_date, now)) for item in items]
