"""Demo data loaded into a fresh store."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .config import DEMO_USER_ID
from .models import SalaryAllocation, SavingsGoal, User
from .storage import MemoryRecordStore, RecordStore, new_id

logger = logging.getLogger(__name__)

DEMO_USERNAME = 'demo'
DEMO_PASSWORD = 'password'

DEMO_ALLOCATION = {
    'monthly_salary': '5200.00',
    'essentials': '60.00',
    'savings': '25.00',
    'lifestyle': '15.00',
}

DEMO_GOALS: List[Dict[str, Optional[str]]] = [
    {'name': 'Emergency Fund', 'target_amount': '10000.00', 'current_amount': '3500.00', 'monthly_target': '500.00'},
    {'name': 'New Car', 'target_amount': '25000.00', 'current_amount': '8200.00', 'monthly_target': '800.00'},
    {'name': 'Vacation', 'target_amount': '5000.00', 'current_amount': '1800.00', 'monthly_target': '300.00'},
]


def seeded_memory_store(user_id: str = DEMO_USER_ID, now: Optional[datetime] = None) -> MemoryRecordStore:
    now = now or datetime.now()
    # goals listed newest first, so stagger creation times to keep the listed order
    goals = [
        SavingsGoal(id=new_id(), user_id=user_id, created_at=now - timedelta(seconds=index), **fields)
        for index, fields in enumerate(DEMO_GOALS)
    ]
    return MemoryRecordStore().load(
        users=[User(id=user_id, username=DEMO_USERNAME, password=DEMO_PASSWORD)],
        goals=goals,
        allocations=[SalaryAllocation(id=new_id(), user_id=user_id, created_at=now, **DEMO_ALLOCATION)],
    )


async def seed_store(store: RecordStore, user_id: str = DEMO_USER_ID) -> bool:
    """Add the demo user, allocation and goals unless the user already exists."""
    if await store.get_user(user_id) is not None:
        return False
    await store.create_user(DEMO_USERNAME, DEMO_PASSWORD, user_id=user_id)
    await store.save_allocation({'user_id': user_id, **DEMO_ALLOCATION})
    for fields in DEMO_GOALS:
        await store.create_goal({'user_id': user_id, **fields})
    logger.info("Seeded demo data for user %s", user_id)
    return True
