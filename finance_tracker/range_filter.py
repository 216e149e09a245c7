"""Selection of transactions by inclusive date interval.

Every store returns range results most recent first; the dashboard trend
does not care about order but the recent-transactions list does.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List

from .models import Transaction


def newest_first(transactions: Iterable[Transaction]) -> List[Transaction]:
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def transactions_in_range(
    transactions: Iterable[Transaction],
    start: datetime,
    end: datetime,
) -> List[Transaction]:
    """Return transactions dated within ``[start, end]``, newest first."""
    return newest_first(t for t in transactions if start <= t.date <= end)


def transactions_for_user(transactions: Iterable[Transaction], user_id: str) -> List[Transaction]:
    return newest_first(t for t in transactions if t.user_id == user_id)
