from __future__ import annotations

from datetime import datetime

import pytest

from incentive_ledger.economy.points.locks import ledger_session
from incentive_ledger.economy.rewards.catalog import RewardCatalog
from scripts.seed_incentives import seed_catalog
from tests.integration.incentive_fixtures import UTC

DOCUMENT = {
    "rewards": [
        {"name": "Coffee", "category": "food", "type": "voucher", "point_cost": 50},
        {"name": "Day Off", "category": "time_off", "type": "benefit", "point_cost": 1000},
    ],
    "challenges": [
        {
            "name": "Sprint",
            "category": "sales",
            "start_date": "2026-10-01T00:00:00Z",
            "end_date": "2026-12-31T23:59:59Z",
            "criteria": {"minSales": 10},
            "reward_points": 300,
        }
    ],
}


@pytest.mark.asyncio
async def test_seed_catalog_is_idempotent_by_name() -> None:
    now_utc = datetime.now(UTC)

    async with ledger_session() as session:
        first = await seed_catalog(session, document=DOCUMENT, now_utc=now_utc)
    async with ledger_session() as session:
        second = await seed_catalog(session, document=DOCUMENT, now_utc=now_utc)

    assert first == {"rewards_created": 2, "challenges_created": 1}
    assert second == {"rewards_created": 0, "challenges_created": 0}

    async with ledger_session() as session:
        rewards = await RewardCatalog.list_available(session)
    assert [reward.name for reward in rewards] == ["Coffee", "Day Off"]
