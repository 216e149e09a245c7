#!/usr/bin/env python3
"""Print the dashboard summary for the configured user as JSON.

Uses the record store selected by ``FINTRACK_STORE``.  With ``--seed`` the
demo user, salary allocation and savings goals are added first when the
user does not exist yet.  With ``--budget`` the daily budget allowance for
that monthly amount is included.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from finance_tracker.config import DEMO_USER_ID, get_store  # noqa: E402
from finance_tracker.errors import FinanceTrackerError  # noqa: E402
from finance_tracker.seed import seed_store  # noqa: E402
from finance_tracker.service import FinanceService  # noqa: E402


async def collect(user_id: str, seed: bool, budget: Optional[str] = None) -> dict:
    store = get_store()
    if seed:
        await seed_store(store, user_id)
    service = FinanceService(store, user_id)
    now = datetime.now()
    summary = await service.dashboard_stats(now)
    overview, items = await service.recurring_overview(now)
    savings, goals = await service.savings_overview()
    payload = summary.to_payload()
    payload['recurring'] = overview.to_dict()
    payload['upcomingBills'] = [item.to_dict() for item in await service.upcoming_bills(now)]
    payload['recurringItems'] = [item.to_dict() for item in items]
    payload['savingsOverview'] = savings.to_dict()
    payload['goals'] = [goal.to_dict() for goal in goals]
    payload['calendar'] = (await service.calendar_month(now.year, now.month)).to_dict()
    if budget is not None:
        payload['dailyBudget'] = (await service.daily_budget(budget, now)).to_dict()
    return payload


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--user", default=DEMO_USER_ID, help="user id to summarise")
    parser.add_argument("--seed", action="store_true", help="add demo data when the user is missing")
    parser.add_argument("--budget", help="monthly budget used to compute the daily allowance")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        payload = asyncio.run(collect(args.user, args.seed, args.budget))
    except FinanceTrackerError as exc:
        print(f"Could not build dashboard summary: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
