"""Unit tests for finance_tracker.aggregator.

The store is an in-memory one loaded with a fixed set of transactions and
every call passes an explicit ``now`` so results do not depend on the
wall clock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from finance_tracker import aggregator as agg
from finance_tracker.errors import DataIntegrityError, StorageError
from finance_tracker.models import SalaryAllocation, SavingsGoal, Transaction
from finance_tracker.periods import month_bounds
from finance_tracker.storage import MemoryRecordStore

NOW = datetime(2024, 3, 15, 12, 0)
USER = 'user-1'


def _txn(idx, kind, amount, when, category='Misc', user=USER):
    return Transaction(
        id=f"t{idx}",
        user_id=user,
        type=kind,
        amount=amount,
        category=category,
        description=f"{category} {idx}",
        date=when,
    )


def _sample_transactions():
    return [
        _txn(1, 'income', '5000.00', datetime(2024, 3, 1, 0, 0), 'Salary'),
        _txn(2, 'expense', '1200.00', datetime(2024, 3, 2, 9, 30), 'Housing'),
        _txn(3, 'expense', '45.50', datetime(2024, 3, 10, 18, 0), 'Food'),
        _txn(4, 'expense', '30.25', datetime(2024, 3, 14, 8, 15), 'Food'),
        _txn(5, 'transfer', '500.00', datetime(2024, 3, 5), 'Savings'),
        _txn(6, 'expense', '99.99', datetime(2024, 2, 29, 23, 59, 59), 'Food'),
        _txn(7, 'income', '4800.00', datetime(2024, 2, 1), 'Salary'),
        _txn(8, 'expense', '10.00', datetime(2023, 10, 31, 23, 59), 'Misc'),
        _txn(9, 'expense', '20.00', datetime(2023, 9, 30), 'Misc'),
        _txn(10, 'expense', '999.00', datetime(2024, 3, 3), 'Food', user='someone-else'),
    ]


def _goals():
    return [
        SavingsGoal(id='g1', user_id=USER, name='Emergency Fund', target_amount='10000.00', current_amount='3500.00'),
        SavingsGoal(id='g2', user_id=USER, name='New Car', target_amount='25000.00', current_amount='8200.00'),
        SavingsGoal(id='g3', user_id=USER, name='Vacation', target_amount='5000.00', current_amount='1800.00'),
    ]


def _allocation(salary='5200.00'):
    return SalaryAllocation(
        id='a1', user_id=USER, monthly_salary=salary, essentials='60.00', savings='25.00', lifestyle='15.00'
    )


@pytest.fixture
def store():
    return MemoryRecordStore().load(
        transactions=_sample_transactions(),
        goals=_goals(),
        allocations=[_allocation()],
    )


@pytest.mark.asyncio
async def test_monthly_totals_exclude_transfers_and_other_months(store):
    summary = await agg.build_dashboard_summary(store, USER, NOW)

    assert summary.monthly_income == Decimal('5000.00')
    assert summary.monthly_expenses == Decimal('1275.75')
    assert summary.category_expenses == {'Housing': Decimal('1200.00'), 'Food': Decimal('75.75')}


@pytest.mark.asyncio
async def test_total_saved_and_budget_used(store):
    summary = await agg.build_dashboard_summary(store, USER, NOW)

    assert summary.total_saved == Decimal('13500.00')
    assert summary.budget_used == Decimal('1275.75') / Decimal('5200.00') * 100
    assert len(summary.savings_goals) == 3


@pytest.mark.asyncio
async def test_budget_used_is_zero_without_allocation():
    store = MemoryRecordStore().load(transactions=_sample_transactions())
    summary = await agg.build_dashboard_summary(store, USER, NOW)

    assert summary.monthly_expenses > 0
    assert summary.budget_used == 0


def test_budget_used_is_zero_for_zero_salary():
    assert agg.budget_used(Decimal('300'), Decimal('0')) == 0
    assert agg.budget_used(Decimal('300'), agg.monthly_salary(_allocation('0.00'))) == 0


@pytest.mark.asyncio
async def test_trend_covers_six_months_oldest_first(store):
    trend = await agg.monthly_trend(store, USER, NOW)

    assert [p.month for p in trend] == ['Oct', 'Nov', 'Dec', 'Jan', 'Feb', 'Mar']
    assert [(p.year, p.month_number) for p in trend][0] == (2023, 10)
    by_month = {p.month: p for p in trend}
    assert by_month['Oct'].expenses == Decimal('10.00')
    assert by_month['Feb'].income == Decimal('4800.00')
    assert by_month['Feb'].expenses == Decimal('99.99')
    assert by_month['Mar'].income == Decimal('5000.00')
    assert by_month['Nov'].income == 0 and by_month['Nov'].expenses == 0


@pytest.mark.asyncio
async def test_trend_points_match_independent_range_queries(store):
    trend = await agg.monthly_trend(store, USER, NOW)

    for point in trend:
        start, end = month_bounds(point.year, point.month_number)
        in_range = await store.list_by_user_and_range(USER, start, end)
        income, expenses = agg.income_and_expenses(in_range)
        assert (point.income, point.expenses) == (income, expenses)


@pytest.mark.asyncio
async def test_trend_crosses_year_boundary(store):
    trend = await agg.monthly_trend(store, USER, datetime(2024, 2, 10))

    assert [(p.year, p.month_number) for p in trend] == [
        (2023, 9), (2023, 10), (2023, 11), (2023, 12), (2024, 1), (2024, 2),
    ]
    assert trend[0].expenses == Decimal('20.00')


@pytest.mark.asyncio
async def test_recent_transactions_are_latest_ten():
    start = datetime(2024, 1, 1)
    txns = [_txn(i, 'expense', '1.00', start + timedelta(days=i)) for i in range(12)]
    store = MemoryRecordStore().load(transactions=txns)

    summary = await agg.build_dashboard_summary(store, USER, NOW)

    assert len(summary.recent_transactions) == 10
    assert [t.id for t in summary.recent_transactions] == [f"t{i}" for i in range(11, 1, -1)]


@pytest.mark.asyncio
async def test_empty_user_gives_zero_summary():
    summary = await agg.build_dashboard_summary(MemoryRecordStore(), USER, NOW)

    assert summary.monthly_income == 0
    assert summary.monthly_expenses == 0
    assert summary.total_saved == 0
    assert summary.budget_used == 0
    assert summary.category_expenses == {}
    assert summary.recent_transactions == []
    assert len(summary.monthly_data) == 6
    assert all(p.income == 0 and p.expenses == 0 for p in summary.monthly_data)


@pytest.mark.asyncio
async def test_malformed_amount_fails_the_summary():
    store = MemoryRecordStore().load(
        transactions=[_txn(1, 'expense', 'twelve', datetime(2024, 3, 3), 'Food')]
    )

    with pytest.raises(DataIntegrityError):
        await agg.build_dashboard_summary(store, USER, NOW)


@pytest.mark.asyncio
async def test_payload_uses_dashboard_keys(store):
    summary = await agg.build_dashboard_summary(store, USER, NOW)
    payload = summary.to_payload()

    assert set(payload) == {
        'monthlyIncome', 'monthlyExpenses', 'totalSaved', 'budgetUsed',
        'categoryExpenses', 'recentTransactions', 'monthlyData', 'savingsGoals',
    }
    assert payload['monthlyIncome'] == 5000.0
    assert payload['categoryExpenses']['Food'] == pytest.approx(75.75)
    assert payload['monthlyData'][-1] == {'month': 'Mar', 'income': 5000.0, 'expenses': 1275.75}
    assert payload['recentTransactions'][0]['userId'] == USER


class _FailingRangeStore(MemoryRecordStore):
    """Raises for the range query that starts at ``failing_start``."""

    def __init__(self, failing_start):
        super().__init__()
        self.failing_start = failing_start

    async def list_by_user_and_range(self, user_id, start, end):
        if start == self.failing_start:
            raise StorageError("disk went away")
        return await super().list_by_user_and_range(user_id, start, end)


class _FailingAllocationStore(MemoryRecordStore):
    async def get_allocation(self, user_id):
        raise StorageError("disk went away")


@pytest.mark.asyncio
async def test_one_failing_trend_month_aborts_the_summary():
    store = _FailingRangeStore(datetime(2023, 11, 1)).load(transactions=_sample_transactions())

    with pytest.raises(StorageError):
        await agg.build_dashboard_summary(store, USER, NOW)


@pytest.mark.asyncio
async def test_failing_allocation_read_aborts_the_summary():
    store = _FailingAllocationStore().load(transactions=_sample_transactions(), goals=_goals())

    with pytest.raises(StorageError):
        await agg.build_dashboard_summary(store, USER, NOW)


@pytest.mark.asyncio
async def test_daily_totals_bucket_by_day_and_skip_transfers(store):
    calendar = await agg.daily_totals(store, USER, 2024, 3)

    assert sorted(d.day for d in calendar.days) == [
        date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 5), date(2024, 3, 10), date(2024, 3, 14),
    ]
    transfer_day = calendar.days[date(2024, 3, 5)]
    assert (transfer_day.income, transfer_day.expenses, transfer_day.count) == (0, 0, 1)
    assert calendar.days[date(2024, 3, 1)].net == Decimal('5000.00')
    assert calendar.income == Decimal('5000.00')
    assert calendar.expenses == Decimal('1275.75')
    assert calendar.transaction_count == 5


@pytest.mark.asyncio
async def test_daily_totals_respect_month_boundaries(store):
    calendar = await agg.daily_totals(store, USER, 2024, 2)

    assert set(calendar.days) == {date(2024, 2, 1), date(2024, 2, 29)}
    assert calendar.days[date(2024, 2, 29)].expenses == Decimal('99.99')
    payload = calendar.to_dict()
    assert payload['transactionCount'] == 2
    assert [d['date'] for d in payload['days']] == ['2024-02-01', '2024-02-29']


def test_totals_by_day_sums_same_day_transactions():
    days = agg.totals_by_day([
        _txn(1, 'expense', '10.00', datetime(2024, 3, 3, 8)),
        _txn(2, 'expense', '5.50', datetime(2024, 3, 3, 20)),
        _txn(3, 'income', '100.00', datetime(2024, 3, 3, 12)),
    ])

    [day] = days.values()
    assert (day.income, day.expenses, day.count) == (Decimal('100.00'), Decimal('15.50'), 3)
