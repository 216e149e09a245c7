"""Progress metrics for savings goals."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from .models import SavingsGoal
from .money import ZERO, parse_amount

HUNDRED = Decimal('100')


def goal_progress(goal: SavingsGoal) -> Decimal:
    """Percent of the target saved so far; may exceed 100."""
    target = parse_amount(goal.target_amount, field='target_amount')
    if target <= 0:
        return ZERO
    return parse_amount(goal.current_amount, field='current_amount') / target * HUNDRED


def months_to_goal(goal: SavingsGoal) -> int:
    """Months of ``monthly_target`` contributions still needed (0 without a target)."""
    if goal.monthly_target is None:
        return 0
    monthly = parse_amount(goal.monthly_target, field='monthly_target')
    if monthly <= 0:
        return 0
    remaining = parse_amount(goal.target_amount) - parse_amount(goal.current_amount)
    if remaining <= 0:
        return 0
    return math.ceil(remaining / monthly)


@dataclass(frozen=True)
class SavingsOverview:
    total_saved: Decimal
    total_target: Decimal

    @property
    def overall_progress(self) -> Decimal:
        if self.total_target <= 0:
            return ZERO
        return self.total_saved / self.total_target * HUNDRED

    def to_dict(self) -> Dict[str, float]:
        return {
            'totalSaved': float(self.total_saved),
            'totalTarget': float(self.total_target),
            'overallProgress': float(self.overall_progress),
        }


def savings_overview(goals: Iterable[SavingsGoal]) -> SavingsOverview:
    saved = ZERO
    target = ZERO
    for goal in goals:
        saved += parse_amount(goal.current_amount, field='current_amount')
        target += parse_amount(goal.target_amount, field='target_amount')
    return SavingsOverview(saved, target)


@dataclass(frozen=True)
class GoalStatus:
    """A goal with its progress percent and months of contributions left."""

    goal: SavingsGoal
    progress: Decimal
    months_remaining: int

    def to_dict(self) -> Dict[str, Any]:
        payload = self.goal.to_dict()
        payload['progress'] = float(self.progress)
        payload['monthsRemaining'] = self.months_remaining
        return payload


def goal_statuses(goals: Iterable[SavingsGoal]) -> List[GoalStatus]:
    return [GoalStatus(goal, goal_progress(goal), months_to_goal(goal)) for goal in goals]
