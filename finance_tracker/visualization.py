"""Plotly visualisation helpers for the finance tracker dashboard.

Each function takes one piece of a :class:`~finance_tracker.aggregator.DashboardSummary`
(or the records behind it) and returns a `plotly.graph_objects.Figure`
that Streamlit renders via ``st.plotly_chart``.  When there is nothing to
plot the figure carries a "No data to display" title instead of raising.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .aggregator import MonthCalendar, TrendPoint
from .allocation import AllocationBreakdown
from .budgets import category_shares
from .goals import GoalStatus, goal_progress
from .models import SavingsGoal, Transaction
from .money import Number, parse_amount

INCOME_COLOR = '#4CAF50'
EXPENSE_COLOR = '#FF5252'
BUCKET_COLORS = {'Essentials': '#3B82F6', 'Savings': '#10B981', 'Lifestyle': '#F59E0B'}


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def trend_frame(points: Sequence[TrendPoint]) -> pd.DataFrame:
    """Six-month trend as a DataFrame with Month, Income and Expenses columns."""
    return pd.DataFrame(
        {
            'Month': [p.month for p in points],
            'Income': [float(p.income) for p in points],
            'Expenses': [float(p.expenses) for p in points],
        }
    )


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Tabular view of transactions for ``st.dataframe``."""
    rows = [
        {
            'Date': t.date,
            'Description': t.description,
            'Category': t.category,
            'Type': t.type.title(),
            'Amount': float(parse_amount(t.amount, field=f"transaction {t.id}")),
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=['Date', 'Description', 'Category', 'Type', 'Amount'])


def create_trend_chart(points: Sequence[TrendPoint], title: str = "Income vs Expenses") -> go.Figure:
    """Grouped bar chart of monthly income against expenses, oldest month first."""
    if not points:
        return _empty_figure()
    df = trend_frame(points)
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df['Month'], y=df['Income'], name='Income', marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(x=df['Month'], y=df['Expenses'], name='Expenses', marker_color=EXPENSE_COLOR))
    fig.update_layout(barmode='group', title=title, xaxis_title="Month", yaxis_title="Amount", height=400)
    return fig


def create_category_chart(category_expenses: Mapping[str, Number], title: str = "Expenses by Category") -> go.Figure:
    """Donut chart of this month's expenses by category."""
    shares = category_shares(category_expenses)
    if shares.empty:
        return _empty_figure()
    fig = px.pie(shares, values='Amount', names='Category', hole=0.4, title=title)
    fig.update_traces(textposition='inside', textinfo='percent+label')
    return fig


def create_allocation_chart(breakdown: AllocationBreakdown, title: str = "Salary Allocation") -> go.Figure:
    """Pie chart of the salary split across the three buckets."""
    amounts = {
        'Essentials': float(breakdown.essentials_amount),
        'Savings': float(breakdown.savings_amount),
        'Lifestyle': float(breakdown.lifestyle_amount),
    }
    if sum(amounts.values()) <= 0:
        return _empty_figure()
    fig = go.Figure(
        go.Pie(
            labels=list(amounts),
            values=list(amounts.values()),
            marker=dict(colors=[BUCKET_COLORS[name] for name in amounts]),
            sort=False,
        )
    )
    fig.update_layout(title=title)
    return fig


def create_goal_progress_chart(goals: Sequence[SavingsGoal], title: str = "Savings Goals") -> go.Figure:
    """Horizontal bars of progress toward each goal, capped at 100% for display."""
    if not goals:
        return _empty_figure()
    df = pd.DataFrame(
        {
            'Goal': [g.name for g in goals],
            'Progress': [min(float(goal_progress(g)), 100.0) for g in goals],
        }
    )
    fig = px.bar(df, x='Progress', y='Goal', orientation='h', range_x=[0, 100])
    fig.update_layout(title=title, xaxis_title="Progress (%)", yaxis_title="")
    return fig


def goal_status_frame(statuses: Iterable[GoalStatus]) -> pd.DataFrame:
    """Goals with saved/target amounts, progress and months left."""
    rows = [
        {
            'Goal': s.goal.name,
            'Saved': float(parse_amount(s.goal.current_amount)),
            'Target': float(parse_amount(s.goal.target_amount)),
            'Progress (%)': round(float(s.progress), 1),
            'Months Left': s.months_remaining,
        }
        for s in statuses
    ]
    return pd.DataFrame(rows, columns=['Goal', 'Saved', 'Target', 'Progress (%)', 'Months Left'])


def create_daily_chart(calendar: MonthCalendar, title: str = "Daily Income vs Expenses") -> go.Figure:
    """Bars of income and expenses for each day of the month that has transactions."""
    if not calendar.days:
        return _empty_figure()
    days = sorted(calendar.days.values(), key=lambda d: d.day)
    labels = [d.day.isoformat() for d in days]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=labels, y=[float(d.income) for d in days], name='Income', marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(x=labels, y=[float(d.expenses) for d in days], name='Expenses', marker_color=EXPENSE_COLOR))
    fig.update_layout(barmode='group', title=title, xaxis_title="Day", yaxis_title="Amount", height=350)
    return fig
