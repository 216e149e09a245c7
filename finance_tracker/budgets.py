"""Budget calculation utilities.

This module provides the daily-allowance numbers behind the daily budget
view and the per-category share of a period's expenses shown next to the
category breakdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Mapping

import pandas as pd

from .money import ZERO, Number, parse_amount
from .periods import days_remaining_in_month

HUNDRED = Decimal('100')


@dataclass(frozen=True)
class DailyBudget:
    budget_amount: Decimal
    spent: Decimal
    remaining_days: int
    spent_today: Decimal = ZERO

    @property
    def remaining_budget(self) -> Decimal:
        return self.budget_amount - self.spent

    @property
    def daily_allowance(self) -> Decimal:
        if self.remaining_days <= 0:
            return ZERO
        return self.remaining_budget / self.remaining_days

    @property
    def progress(self) -> Decimal:
        if self.budget_amount <= 0:
            return ZERO
        return self.spent / self.budget_amount * HUNDRED

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.budget_amount

    @property
    def is_over_daily_budget(self) -> bool:
        return self.spent_today > self.daily_allowance

    def to_dict(self) -> Dict[str, object]:
        return {
            'budgetAmount': float(self.budget_amount),
            'spent': float(self.spent),
            'remainingDays': self.remaining_days,
            'remainingBudget': float(self.remaining_budget),
            'dailyBudget': float(self.daily_allowance),
            'budgetProgress': float(self.progress),
            'todayExpenses': float(self.spent_today),
            'isOverBudget': self.is_over_budget,
            'isOverDailyBudget': self.is_over_daily_budget,
        }


def daily_budget(
    budget_amount: Number,
    month_expenses: Number,
    today: date,
    today_expenses: Number = 0,
) -> DailyBudget:
    """Spread what is left of a monthly budget over the rest of the month.

    Args:
        budget_amount: Budget for the whole month
        month_expenses: Expenses recorded so far this month
        today: Current day; it counts as a remaining day
        today_expenses: Expenses recorded on ``today``

    Returns:
        DailyBudget with remaining budget, daily allowance and progress
    """
    return DailyBudget(
        budget_amount=parse_amount(budget_amount, field='budget_amount'),
        spent=parse_amount(month_expenses, field='month_expenses'),
        remaining_days=days_remaining_in_month(today),
        spent_today=parse_amount(today_expenses, field='today_expenses'),
    )


def category_shares(category_expenses: Mapping[str, Number]) -> pd.DataFrame:
    """Share of total expenses per category, largest first.

    Args:
        category_expenses: Mapping of category name to expense total

    Returns:
        DataFrame with columns: Category, Amount, Percent
    """
    if not category_expenses:
        return pd.DataFrame(columns=['Category', 'Amount', 'Percent'])

    frame = pd.DataFrame(
        {
            'Category': list(category_expenses.keys()),
            'Amount': [float(parse_amount(v)) for v in category_expenses.values()],
        }
    )
    total = frame['Amount'].sum()
    frame['Percent'] = (frame['Amount'] / total * 100) if total > 0 else 0.0
    return frame.sort_values('Amount', ascending=False).reset_index(drop=True)
