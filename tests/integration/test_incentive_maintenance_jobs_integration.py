from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from incentive_ledger.economy.challenges.participation import ParticipationService
from incentive_ledger.economy.points.locks import ledger_session, locked_user_session
from incentive_ledger.economy.rewards.redemption import RedemptionService
from incentive_ledger.workers.tasks.incentive_maintenance import (
    run_challenge_settlement_async,
    run_user_reward_expiry_async,
)
from tests.integration.incentive_fixtures import UTC, _create_challenge, _create_reward, _credit


@pytest.mark.asyncio
async def test_user_reward_expiry_job_expires_overdue_pending_rewards() -> None:
    now_utc = datetime.now(UTC)
    redeemed_at = now_utc - timedelta(days=120)
    await _credit(user_id=7, amount=100, now_utc=redeemed_at)
    reward_id = await _create_reward(name="Coffee", point_cost=50, now_utc=redeemed_at)
    async with locked_user_session(7) as session:
        await RedemptionService.redeem(session, user_id=7, reward_id=reward_id, now_utc=redeemed_at)

    assert await run_user_reward_expiry_async(now_utc=now_utc) == {"expired_user_rewards": 1}
    assert await run_user_reward_expiry_async(now_utc=now_utc) == {"expired_user_rewards": 0}


@pytest.mark.asyncio
async def test_challenge_settlement_job_closes_ended_participants() -> None:
    now_utc = datetime.now(UTC)
    challenge_id = await _create_challenge(
        name="Last Week",
        now_utc=now_utc,
        criteria={"minSales": 3},
        reward_points=30,
        starts_in=timedelta(days=-3),
        ends_in=timedelta(days=-1),
    )
    async with locked_user_session(7) as session:
        await ParticipationService.join(
            session,
            user_id=7,
            challenge_id=challenge_id,
            initial_progress={"currentSales": 1},
            now_utc=now_utc - timedelta(days=2),
        )

    result = await run_challenge_settlement_async(now_utc=now_utc)

    assert result == {"completed_participants": 0, "failed_participants": 1}
    async with ledger_session() as session:
        user_challenges = await ParticipationService.list_for_user(session, user_id=7)
    assert user_challenges[0].participant.status == "failed"
