from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from finance_tracker.errors import DataIntegrityError
from finance_tracker.models import RecurringTransaction
from finance_tracker.recurring import (
    BILL_STATUS_POLICY,
    RECURRING_STATUS_POLICY,
    classify_items,
    days_until_due,
    monthly_equivalent,
    recurring_monthly_totals,
    upcoming_bills,
)

NOW = datetime(2024, 3, 15, 12, 0)


def _item(idx, due, kind='expense', amount='100.00', frequency='monthly', active=True):
    return RecurringTransaction(
        id=f"r{idx}",
        user_id='user-1',
        type=kind,
        amount=amount,
        category='Bills',
        description=f"Bill {idx}",
        frequency=frequency,
        next_due_date=due,
        is_active=active,
    )


@pytest.mark.parametrize(
    'days, label, tone',
    [
        (-1, 'Overdue', 'danger'),
        (0, 'Due today', 'warning'),
        (1, 'Due in 1 day', 'caution'),
        (2, 'Due in 2 days', 'caution'),
        (3, 'Due in 3 days', 'caution'),
        (4, 'Auto-pay', 'ok'),
        (10, 'Auto-pay', 'ok'),
    ],
)
def test_bill_policy(days, label, tone):
    status = BILL_STATUS_POLICY.classify(days)
    assert (status.label, status.tone, status.days_until_due) == (label, tone, days)


@pytest.mark.parametrize(
    'days, label, tone',
    [
        (-3, 'Overdue', 'danger'),
        (0, 'Due today', 'warning'),
        (1, 'Due in 1 day', 'caution'),
        (3, 'Due in 3 days', 'caution'),
        (5, 'Due in 5 days', 'info'),
        (7, 'Due in 7 days', 'info'),
        (8, 'Scheduled', 'ok'),
        (10, 'Scheduled', 'ok'),
    ],
)
def test_recurring_policy(days, label, tone):
    status = RECURRING_STATUS_POLICY.classify(days)
    assert (status.label, status.tone) == (label, tone)


def test_policies_differ_beyond_three_days():
    assert BILL_STATUS_POLICY.classify(5).label == 'Auto-pay'
    assert RECURRING_STATUS_POLICY.classify(5).label == 'Due in 5 days'


def test_days_until_due_drops_partial_days():
    assert days_until_due(NOW + timedelta(days=1), NOW) == 1
    assert days_until_due(NOW + timedelta(hours=12), NOW) == 0
    assert days_until_due(NOW + timedelta(days=2, hours=23), NOW) == 2
    assert days_until_due(NOW - timedelta(days=1, hours=2), NOW) == -1


def test_status_for_accepts_plain_dates():
    status = BILL_STATUS_POLICY.status_for(datetime(2024, 3, 14).date(), datetime(2024, 3, 15).date())
    assert status.label == 'Overdue'
    assert status.to_dict() == {'text': 'Overdue', 'tone': 'danger', 'daysUntilDue': -1}


def test_monthly_equivalent():
    assert monthly_equivalent('89.00', 'weekly') == Decimal('385.37')
    assert str(monthly_equivalent('89.00', 'weekly')) == '385.3700'
    assert monthly_equivalent('1200.00', 'yearly') == Decimal('100')
    assert monthly_equivalent('15.99', 'monthly') == Decimal('15.99')


def test_monthly_equivalent_rejects_unknown_frequency():
    with pytest.raises(DataIntegrityError):
        monthly_equivalent('10.00', 'daily')


def test_recurring_totals_normalize_and_include_inactive():
    items = [
        _item(1, NOW, kind='income', amount='4000.00'),
        _item(2, NOW, amount='89.00', frequency='weekly'),
        _item(3, NOW, amount='1200.00', frequency='yearly', active=False),
        _item(4, NOW, kind='transfer', amount='250.00'),
    ]

    overview = recurring_monthly_totals(items)

    assert overview.monthly_income == Decimal('4000.00')
    assert overview.monthly_expenses == Decimal('485.37')
    assert overview.net_monthly == Decimal('3514.63')
    assert (overview.active_count, overview.total_count) == (3, 4)
    assert overview.to_dict()['netMonthly'] == pytest.approx(3514.63)


def test_upcoming_bills_are_the_four_soonest():
    items = [_item(i, NOW + timedelta(days=offset)) for i, offset in enumerate([9, -2, 4, 0, 1, 30])]

    bills = upcoming_bills(items, NOW)

    assert [b.item.id for b in bills] == ['r1', 'r3', 'r4', 'r2']
    assert [b.status.label for b in bills] == ['Overdue', 'Due today', 'Due in 1 day', 'Auto-pay']


def test_upcoming_bills_respects_limit_and_empty_input():
    items = [_item(i, NOW + timedelta(days=i)) for i in range(3)]
    assert len(upcoming_bills(items, NOW, limit=2)) == 2
    assert upcoming_bills([], NOW) == []


def test_overdue_items_are_not_rolled_forward():
    item = _item(1, NOW - timedelta(days=40))
    [bill] = upcoming_bills([item], NOW)
    assert bill.status.label == 'Overdue'
    assert bill.item.next_due_date == NOW - timedelta(days=40)


def test_classify_items_keeps_order_and_serializes():
    items = [_item(1, NOW + timedelta(days=6)), _item(2, NOW + timedelta(days=2))]

    classified = classify_items(items, NOW)

    assert [c.item.id for c in classified] == ['r1', 'r2']
    payload = classified[0].to_dict()
    assert payload['dueStatus'] == {'text': 'Due in 6 days', 'tone': 'info', 'daysUntilDue': 6}
    assert payload['nextDueDate'] == (NOW + timedelta(days=6)).isoformat()
