from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from incentive_ledger.economy.challenges.participation import ParticipationService
from incentive_ledger.economy.points.locks import ledger_session, locked_user_session
from incentive_ledger.economy.rewards.redemption import RedemptionService
from incentive_ledger.economy.rewards.user_rewards import UserRewardsService
from incentive_ledger.economy.summary.service import IncentiveSummaryService
from tests.integration.incentive_fixtures import UTC, _create_challenge, _create_reward, _credit


async def _seed_catalog(now_utc: datetime) -> dict[str, int]:
    return {
        "coffee": await _create_reward(name="Coffee", point_cost=50, now_utc=now_utc),
        "lunch": await _create_reward(name="Lunch", point_cost=400, now_utc=now_utc),
        "day_off": await _create_reward(
            name="Day Off",
            point_cost=1000,
            now_utc=now_utc,
            category="time_off",
        ),
        "sprint": await _create_challenge(name="Sprint", now_utc=now_utc, reward_points=100),
        "ended": await _create_challenge(
            name="Ended",
            now_utc=now_utc,
            starts_in=timedelta(days=-5),
            ends_in=timedelta(days=-1),
        ),
    }


@pytest.mark.asyncio
async def test_anonymous_summary_has_catalog_figures_only() -> None:
    now_utc = datetime.now(UTC)
    await _seed_catalog(now_utc)

    async with ledger_session() as session:
        summary = await IncentiveSummaryService.get_summary(session, now_utc=now_utc)

    assert summary.user_id is None
    assert summary.balance is None
    assert summary.total_rewards == 3
    assert summary.total_active_challenges == 1
    assert summary.rewards_by_category == {"food": 2, "time_off": 1}
    assert summary.recent_transactions == []
    assert summary.affordable_rewards == []
    assert summary.user_challenges == []
    assert summary.total_redeemed == 0


@pytest.mark.asyncio
async def test_user_summary_reflects_balance_rewards_and_challenges() -> None:
    now_utc = datetime.now(UTC)
    ids = await _seed_catalog(now_utc)
    for offset in range(6):
        await _credit(
            user_id=7,
            amount=100,
            now_utc=now_utc - timedelta(minutes=10 - offset),
            description=f"deal {offset}",
        )

    async with locked_user_session(7) as session:
        first = await RedemptionService.redeem(session, user_id=7, reward_id=ids["coffee"])
    async with locked_user_session(7) as session:
        await RedemptionService.redeem(session, user_id=7, reward_id=ids["coffee"])
    async with ledger_session() as session:
        await UserRewardsService.mark_redeemed(session, user_reward_id=first.user_reward.id)
    async with locked_user_session(7) as session:
        await ParticipationService.join(session, user_id=7, challenge_id=ids["sprint"])

    async with ledger_session() as session:
        summary = await IncentiveSummaryService.get_summary(session, user_id=7, now_utc=now_utc)

    assert summary.balance == 500
    assert len(summary.recent_transactions) == 5
    assert [reward.name for reward in summary.affordable_rewards] == ["Coffee", "Lunch"]
    assert len(summary.user_rewards) == 2
    assert summary.total_redeemed == 1
    assert [item.challenge.name for item in summary.user_challenges] == ["Sprint"]
    assert [challenge.name for challenge in summary.active_challenges] == ["Sprint"]
