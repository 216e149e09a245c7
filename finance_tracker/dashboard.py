"""Streamlit app for the finance tracker.

The page renders the dashboard summary for the current month: quick
stats, the six-month income/expense trend, expenses by category, recent
transactions, upcoming bills, savings goals, the salary split, a daily
budget allowance and per-day totals for the month.  A
sidebar form records new transactions through :class:`FinanceService`, so
the same validation applies as everywhere else.

To run the dashboard from the command line::

    streamlit run finance_tracker/dashboard.py

or use ``run_dashboard.py`` at the repository root.
"""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import date, datetime

import streamlit as st

# Support both ``streamlit run finance_tracker/dashboard.py`` (no package
# context) and imports as part of the package.
if __package__:
    from . import visualization as viz
    from .config import get_store
    from .errors import FinanceTrackerError, ValidationError
    from .money import format_amount
    from .service import FinanceService
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from finance_tracker import visualization as viz  # type: ignore
    from finance_tracker.config import get_store  # type: ignore
    from finance_tracker.errors import FinanceTrackerError, ValidationError  # type: ignore
    from finance_tracker.money import format_amount  # type: ignore
    from finance_tracker.service import FinanceService  # type: ignore

RECENT_DISPLAY_LIMIT = 5


def get_service() -> FinanceService:
    """One service (and store) per browser session."""
    if 'finance_service' not in st.session_state:
        st.session_state['finance_service'] = FinanceService(get_store())
    return st.session_state['finance_service']


def render_transaction_form(service: FinanceService) -> None:
    st.sidebar.header("Add Transaction")
    with st.sidebar.form("add_transaction", clear_on_submit=True):
        kind = st.selectbox("Type", options=["expense", "income", "transfer"])
        amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        category = st.text_input("Category")
        description = st.text_input("Description")
        when = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Save")

    if not submitted:
        return
    payload = {
        'type': kind,
        'amount': round(amount, 2),
        'category': category,
        'description': description,
        'date': when.isoformat(),
    }
    try:
        asyncio.run(service.add_transaction(payload))
    except ValidationError as exc:
        st.sidebar.error(exc.message)
        for error in exc.errors:
            st.sidebar.caption(f"{error['field'] or 'payload'}: {error['message']}")
    else:
        st.sidebar.success("Transaction saved")


def render_budget_and_calendar(service: FinanceService, now: datetime) -> None:
    st.subheader("Daily Budget")
    budget_amount = st.number_input("Monthly budget", min_value=0.0, step=50.0, format="%.2f", key="monthly_budget")
    if budget_amount > 0:
        try:
            budget = asyncio.run(service.daily_budget(round(budget_amount, 2), now))
        except ValidationError as exc:
            st.error(exc.message)
        else:
            col1, col2, col3, col4 = st.columns(4)
            col1.metric("Remaining Budget", f"${format_amount(budget.remaining_budget)}")
            col2.metric("Daily Allowance", f"${format_amount(budget.daily_allowance)}")
            col3.metric("Spent Today", f"${format_amount(budget.spent_today)}")
            col4.metric("Days Left", budget.remaining_days)
            st.progress(min(float(budget.progress), 100.0) / 100)
            if budget.is_over_budget:
                st.warning("You are over this month's budget.")
            elif budget.is_over_daily_budget:
                st.warning("Today's spending is above the daily allowance.")
    else:
        st.caption("Set a monthly budget to see a daily spending allowance.")

    calendar = asyncio.run(service.calendar_month(now.year, now.month))
    st.subheader(f"{now:%B %Y}: {calendar.transaction_count} transactions")
    st.plotly_chart(viz.create_daily_chart(calendar), use_container_width=True)


def render_page(service: FinanceService) -> None:
    render_transaction_form(service)

    now = datetime.now()
    summary = asyncio.run(service.dashboard_stats(now))
    bills = asyncio.run(service.upcoming_bills(now))
    breakdown = asyncio.run(service.allocation_breakdown())
    savings, goal_statuses = asyncio.run(service.savings_overview())

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("💰 Monthly Income", f"${format_amount(summary.monthly_income)}")
    col2.metric("💸 Monthly Expenses", f"${format_amount(summary.monthly_expenses)}")
    col3.metric("🐷 Total Saved", f"${format_amount(summary.total_saved)}")
    col4.metric("📊 Budget Used", f"{float(summary.budget_used):.0f}%")

    left, right = st.columns(2)
    left.plotly_chart(viz.create_trend_chart(summary.monthly_data), use_container_width=True)
    right.plotly_chart(viz.create_category_chart(summary.category_expenses), use_container_width=True)

    st.subheader("Recent Transactions")
    recent = viz.transactions_frame(summary.recent_transactions[:RECENT_DISPLAY_LIMIT])
    if recent.empty:
        st.info("No transactions yet. Add one from the sidebar.")
    else:
        st.dataframe(recent, hide_index=True, use_container_width=True)

    st.subheader("Upcoming Bills & Recurring Transactions")
    if not bills:
        st.info("No upcoming bills or recurring transactions.")
    for column, bill in zip(st.columns(max(len(bills), 1)), bills):
        column.metric(
            bill.item.description,
            f"${format_amount(bill.item.amount)}",
            help=f"{bill.item.frequency.title()} • Due {bill.item.next_due_date:%b %d}",
        )
        column.caption(bill.status.label)

    st.subheader("Savings Goals")
    st.caption(
        f"${format_amount(savings.total_saved)} of ${format_amount(savings.total_target)} saved "
        f"({float(savings.overall_progress):.1f}% overall)"
    )
    left, right = st.columns(2)
    left.plotly_chart(viz.create_goal_progress_chart(summary.savings_goals), use_container_width=True)
    if breakdown is not None:
        right.plotly_chart(viz.create_allocation_chart(breakdown), use_container_width=True)
    else:
        right.info("No salary allocation saved yet.")
    goals_table = viz.goal_status_frame(goal_statuses)
    if not goals_table.empty:
        st.dataframe(goals_table, hide_index=True, use_container_width=True)

    render_budget_and_calendar(service, now)


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="Finance Tracker", layout="wide", page_icon="💰")
    st.title("Dashboard")

    try:
        render_page(get_service())
    except FinanceTrackerError as exc:
        st.error(f"Could not load the dashboard: {exc}")


if __name__ == "__main__":  # pragma: no cover
    main()
