"""Boundary operations for the single demo user.

:class:`FinanceService` is what the dashboard and scripts call.  Every
write is validated against its input struct first, so a rejected payload
never reaches the store.  Update and delete of an unknown id return
``None`` / ``False``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Tuple, Type

from .aggregator import DashboardSummary, MonthCalendar, build_dashboard_summary, daily_totals, income_and_expenses
from .allocation import AllocationBreakdown, breakdown_for
from .budgets import DailyBudget, daily_budget
from .config import DEMO_USER_ID, UPCOMING_BILLS_LIMIT
from .errors import ValidationError
from .goals import GoalStatus, SavingsOverview, goal_statuses, savings_overview
from .models import RecurringTransaction, SalaryAllocation, SavingsGoal, Transaction
from .periods import current_month_bounds, local_now
from .recurring import (
    RECURRING_STATUS_POLICY,
    DueItem,
    RecurringOverview,
    classify_items,
    recurring_monthly_totals,
    upcoming_bills,
)
from .schemas import (
    DailyBudgetInput,
    InputModel,
    RecurringTransactionCreate,
    RecurringTransactionUpdate,
    SalaryAllocationInput,
    SavingsGoalCreate,
    SavingsGoalUpdate,
    TransactionCreate,
    TransactionUpdate,
    validate_payload,
)
from .storage import RecordStore

logger = logging.getLogger(__name__)


class FinanceService:
    """Validated CRUD plus dashboard reads against an injected record store."""

    def __init__(self, store: RecordStore, user_id: str = DEMO_USER_ID):
        self.store = store
        self.user_id = user_id

    def _validate(self, schema: Type[InputModel], payload: Mapping[str, Any], message: str) -> InputModel:
        try:
            return validate_payload(schema, payload, message)
        except ValidationError as exc:
            logger.warning("%s: %s", message, exc.errors)
            raise

    # Transactions

    async def list_transactions(self) -> List[Transaction]:
        return await self.store.list_by_user(self.user_id)

    async def transactions_between(self, start: datetime, end: datetime) -> List[Transaction]:
        return await self.store.list_by_user_and_range(self.user_id, start, end)

    async def add_transaction(self, payload: Mapping[str, Any]) -> Transaction:
        data = self._validate(TransactionCreate, payload, "Invalid transaction data")
        return await self.store.create_transaction({'user_id': self.user_id, **data.to_fields()})

    async def edit_transaction(self, transaction_id: str, payload: Mapping[str, Any]) -> Optional[Transaction]:
        data = self._validate(TransactionUpdate, payload, "Invalid transaction data")
        return await self.store.update_transaction(transaction_id, data.to_fields())

    async def remove_transaction(self, transaction_id: str) -> bool:
        return await self.store.delete_transaction(transaction_id)

    # Savings goals

    async def list_goals(self) -> List[SavingsGoal]:
        return await self.store.list_goals(self.user_id)

    async def add_goal(self, payload: Mapping[str, Any]) -> SavingsGoal:
        data = self._validate(SavingsGoalCreate, payload, "Invalid savings goal data")
        return await self.store.create_goal({'user_id': self.user_id, **data.to_fields()})

    async def edit_goal(self, goal_id: str, payload: Mapping[str, Any]) -> Optional[SavingsGoal]:
        data = self._validate(SavingsGoalUpdate, payload, "Invalid savings goal data")
        return await self.store.update_goal(goal_id, data.to_fields())

    async def remove_goal(self, goal_id: str) -> bool:
        return await self.store.delete_goal(goal_id)

    async def savings_overview(self) -> Tuple[SavingsOverview, List[GoalStatus]]:
        """Totals across goals plus each goal's progress and months remaining."""
        goals = await self.list_goals()
        return savings_overview(goals), goal_statuses(goals)

    # Recurring transactions

    async def list_recurring(self) -> List[RecurringTransaction]:
        return await self.store.list_recurring(self.user_id)

    async def add_recurring(self, payload: Mapping[str, Any]) -> RecurringTransaction:
        data = self._validate(RecurringTransactionCreate, payload, "Invalid recurring transaction data")
        return await self.store.create_recurring({'user_id': self.user_id, **data.to_fields()})

    async def edit_recurring(self, recurring_id: str, payload: Mapping[str, Any]) -> Optional[RecurringTransaction]:
        data = self._validate(RecurringTransactionUpdate, payload, "Invalid recurring transaction data")
        return await self.store.update_recurring(recurring_id, data.to_fields())

    async def remove_recurring(self, recurring_id: str) -> bool:
        return await self.store.delete_recurring(recurring_id)

    async def upcoming_bills(self, now: Optional[datetime] = None, limit: int = UPCOMING_BILLS_LIMIT) -> List[DueItem]:
        return upcoming_bills(await self.list_recurring(), now or local_now(), limit)

    async def recurring_overview(self, now: Optional[datetime] = None) -> Tuple[RecurringOverview, List[DueItem]]:
        """Monthly-normalized totals plus every item with its recurring-view status."""
        items = await self.list_recurring()
        return recurring_monthly_totals(items), classify_items(items, now or local_now(), RECURRING_STATUS_POLICY)

    # Salary allocation

    async def get_allocation(self) -> Optional[SalaryAllocation]:
        return await self.store.get_allocation(self.user_id)

    async def save_allocation(self, payload: Mapping[str, Any]) -> SalaryAllocation:
        data = self._validate(SalaryAllocationInput, payload, "Invalid salary allocation data")
        return await self.store.save_allocation({'user_id': self.user_id, **data.to_fields()})

    async def allocation_breakdown(self) -> Optional[AllocationBreakdown]:
        allocation = await self.get_allocation()
        return breakdown_for(allocation) if allocation else None

    # Dashboard

    async def dashboard_stats(self, now: Optional[datetime] = None) -> DashboardSummary:
        return await build_dashboard_summary(self.store, self.user_id, now)

    async def calendar_month(self, year: int, month: int) -> MonthCalendar:
        return await daily_totals(self.store, self.user_id, year, month)

    async def daily_budget(self, budget_amount: Any, now: Optional[datetime] = None) -> DailyBudget:
        """How much can still be spent per day this month within ``budget_amount``."""
        data = self._validate(DailyBudgetInput, {'budget_amount': budget_amount}, "Invalid daily budget data")
        now = now or local_now()
        start, end = current_month_bounds(now)
        month_txns = await self.transactions_between(start, end)
        _, month_expenses = income_and_expenses(month_txns)
        _, today_expenses = income_and_expenses(t for t in month_txns if t.date.date() == now.date())
        return daily_budget(data.budget_amount, month_expenses, now.date(), today_expenses)
