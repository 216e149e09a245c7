"""Dashboard aggregation.

:func:`build_dashboard_summary` composes everything the dashboard shows for
the current local calendar month: income and expense totals, the amount
saved across goals, how much of the monthly salary has been spent, the
expense breakdown by category, the latest transactions and a six-month
income/expense trend.

All store reads are independent and read-only, so they are issued
concurrently.  Any one of them failing aborts the whole summary; there is
no partial result.

:func:`daily_totals` buckets one month of transactions by calendar day for
the calendar view.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import RECENT_TRANSACTIONS_LIMIT, TREND_MONTHS
from .models import EXPENSE, INCOME, SalaryAllocation, SavingsGoal, Transaction
from .money import ZERO, parse_amount, total
from .periods import current_month_bounds, local_now, month_bounds, month_label, shift_month
from .storage import RecordStore

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')


@dataclass(frozen=True)
class TrendPoint:
    """One month of the income/expense trend."""

    year: int
    month_number: int
    income: Decimal
    expenses: Decimal

    @property
    def month(self) -> str:
        return month_label(self.month_number)

    def to_dict(self) -> Dict[str, Any]:
        return {'month': self.month, 'income': float(self.income), 'expenses': float(self.expenses)}


@dataclass
class DashboardSummary:
    monthly_income: Decimal
    monthly_expenses: Decimal
    total_saved: Decimal
    budget_used: Decimal
    category_expenses: Dict[str, Decimal]
    recent_transactions: List[Transaction]
    monthly_data: List[TrendPoint]
    savings_goals: List[SavingsGoal] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dictionary in the ``/api/dashboard-stats`` shape."""
        return {
            'monthlyIncome': float(self.monthly_income),
            'monthlyExpenses': float(self.monthly_expenses),
            'totalSaved': float(self.total_saved),
            'budgetUsed': float(self.budget_used),
            'categoryExpenses': {k: float(v) for k, v in self.category_expenses.items()},
            'recentTransactions': [t.to_dict() for t in self.recent_transactions],
            'monthlyData': [p.to_dict() for p in self.monthly_data],
            'savingsGoals': [g.to_dict() for g in self.savings_goals],
        }


def transaction_amount(txn: Transaction) -> Decimal:
    return parse_amount(txn.amount, field=f"transaction {txn.id}")


def income_and_expenses(transactions: Iterable[Transaction]) -> Tuple[Decimal, Decimal]:
    """Sum income and expense amounts; transfers count toward neither."""
    income = ZERO
    expenses = ZERO
    for txn in transactions:
        if txn.type == INCOME:
            income += transaction_amount(txn)
        elif txn.type == EXPENSE:
            expenses += transaction_amount(txn)
    return income, expenses


def expenses_by_category(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Expense totals keyed by category; categories without expenses are absent."""
    totals: Dict[str, Decimal] = {}
    for txn in transactions:
        if txn.type != EXPENSE:
            continue
        totals[txn.category] = totals.get(txn.category, ZERO) + transaction_amount(txn)
    return totals


def total_saved(goals: Iterable[SavingsGoal]) -> Decimal:
    return total(g.current_amount or '0' for g in goals)


def monthly_salary(allocation: Optional[SalaryAllocation]) -> Decimal:
    if allocation is None:
        return ZERO
    return parse_amount(allocation.monthly_salary, field='monthly_salary')


def budget_used(expenses: Decimal, salary: Decimal) -> Decimal:
    """Expenses as a percentage of salary, 0 when there is no salary."""
    if salary <= 0:
        return ZERO
    return expenses / salary * HUNDRED


def recent_transactions(transactions: List[Transaction], limit: int = RECENT_TRANSACTIONS_LIMIT) -> List[Transaction]:
    """The first ``limit`` transactions in store order (most recent first)."""
    return transactions[:limit]


async def month_totals(store: RecordStore, user_id: str, year: int, month: int) -> TrendPoint:
    start, end = month_bounds(year, month)
    transactions = await store.list_by_user_and_range(user_id, start, end)
    income, expenses = income_and_expenses(transactions)
    return TrendPoint(year, month, income, expenses)


async def monthly_trend(
    store: RecordStore,
    user_id: str,
    now: Optional[datetime] = None,
    months: int = TREND_MONTHS,
) -> List[TrendPoint]:
    """Income/expense totals for the last ``months`` months, oldest first.

    The current month is the final point.
    """
    now = now or local_now()
    targets = [shift_month(now.year, now.month, -offset) for offset in range(months - 1, -1, -1)]
    return list(await asyncio.gather(*(month_totals(store, user_id, y, m) for y, m in targets)))


async def build_dashboard_summary(
    store: RecordStore,
    user_id: str,
    now: Optional[datetime] = None,
) -> DashboardSummary:
    now = now or local_now()
    start, end = current_month_bounds(now)

    month_txns, all_txns, goals, allocation, trend = await asyncio.gather(
        store.list_by_user_and_range(user_id, start, end),
        store.list_by_user(user_id),
        store.list_goals(user_id),
        store.get_allocation(user_id),
        monthly_trend(store, user_id, now),
    )

    income, expenses = income_and_expenses(month_txns)
    summary = DashboardSummary(
        monthly_income=income,
        monthly_expenses=expenses,
        total_saved=total_saved(goals),
        budget_used=budget_used(expenses, monthly_salary(allocation)),
        category_expenses=expenses_by_category(month_txns),
        recent_transactions=recent_transactions(all_txns),
        monthly_data=trend,
        savings_goals=goals,
    )
    logger.debug(
        "Built dashboard summary for %s (%s): income=%s expenses=%s",
        user_id, start.strftime('%Y-%m'), income, expenses,
    )
    return summary


@dataclass(frozen=True)
class DayTotals:
    """Income, expenses and number of transactions on one calendar day.

    ``count`` includes transfers even though they add to neither sum.
    """

    day: date
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    count: int = 0

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.day.isoformat(),
            'income': float(self.income),
            'expenses': float(self.expenses),
            'net': float(self.net),
            'count': self.count,
        }


@dataclass
class MonthCalendar:
    year: int
    month: int
    days: Dict[date, DayTotals]

    @property
    def income(self) -> Decimal:
        return sum((d.income for d in self.days.values()), ZERO)

    @property
    def expenses(self) -> Decimal:
        return sum((d.expenses for d in self.days.values()), ZERO)

    @property
    def transaction_count(self) -> int:
        return sum(d.count for d in self.days.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'year': self.year,
            'month': self.month,
            'income': float(self.income),
            'expenses': float(self.expenses),
            'transactionCount': self.transaction_count,
            'days': [d.to_dict() for d in sorted(self.days.values(), key=lambda d: d.day)],
        }


def totals_by_day(transactions: Iterable[Transaction]) -> Dict[date, DayTotals]:
    """Bucket transactions by calendar day; days without transactions are absent."""
    days: Dict[date, DayTotals] = {}
    for txn in transactions:
        day = txn.date.date()
        current = days.get(day, DayTotals(day))
        income, expenses = income_and_expenses([txn])
        days[day] = DayTotals(day, current.income + income, current.expenses + expenses, current.count + 1)
    return days


async def daily_totals(store: RecordStore, user_id: str, year: int, month: int) -> MonthCalendar:
    """Per-day totals for one calendar month plus the month summary."""
    start, end = month_bounds(year, month)
    transactions = await store.list_by_user_and_range(user_id, start, end)
    return MonthCalendar(year, month, totals_by_day(transactions))
