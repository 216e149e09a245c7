"""Salary allocation across the essentials / savings / lifestyle buckets.

The percentages are validated (each in ``[0, 100]``, summing to exactly
100) by :mod:`finance_tracker.schemas` before anything here runs; these
helpers are plain ``Decimal`` arithmetic and never round.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict

from .models import SalaryAllocation
from .money import Number, parse_amount

HUNDRED = Decimal('100')


@dataclass(frozen=True)
class AllocationBreakdown:
    monthly_salary: Decimal
    essentials_amount: Decimal
    savings_amount: Decimal
    lifestyle_amount: Decimal

    @property
    def allocated(self) -> Decimal:
        return self.essentials_amount + self.savings_amount + self.lifestyle_amount

    def to_dict(self) -> Dict[str, float]:
        return {
            'monthlySalary': float(self.monthly_salary),
            'essentialsAmount': float(self.essentials_amount),
            'savingsAmount': float(self.savings_amount),
            'lifestyleAmount': float(self.lifestyle_amount),
        }


def bucket_amount(monthly_salary: Number, percentage: Number) -> Decimal:
    return parse_amount(monthly_salary) * parse_amount(percentage) / HUNDRED


def allocate_salary(
    monthly_salary: Number,
    essentials: Number,
    savings: Number,
    lifestyle: Number,
) -> AllocationBreakdown:
    """Split ``monthly_salary`` by the three bucket percentages.

    >>> allocate_salary(5200, 60, 25, 15).essentials_amount
    Decimal('3120')
    """
    return AllocationBreakdown(
        monthly_salary=parse_amount(monthly_salary),
        essentials_amount=bucket_amount(monthly_salary, essentials),
        savings_amount=bucket_amount(monthly_salary, savings),
        lifestyle_amount=bucket_amount(monthly_salary, lifestyle),
    )


def breakdown_for(allocation: SalaryAllocation) -> AllocationBreakdown:
    return allocate_salary(
        allocation.monthly_salary,
        allocation.essentials,
        allocation.savings,
        allocation.lifestyle,
    )
