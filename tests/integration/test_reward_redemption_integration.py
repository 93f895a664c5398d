from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from incentive_ledger.db.models.activities import Activity
from incentive_ledger.db.models.point_transactions import PointTransaction
from incentive_ledger.db.models.user_rewards import UserReward
from incentive_ledger.economy.errors import (
    IncentiveNotFoundError,
    InsufficientPointsError,
    RewardUnavailableError,
)
from incentive_ledger.economy.points.locks import ledger_session, locked_user_session
from incentive_ledger.economy.points.types import TransactionType
from incentive_ledger.economy.rewards.catalog import RewardCatalog
from incentive_ledger.economy.rewards.redemption import RedemptionService
from tests.integration.incentive_fixtures import UTC, _balance, _create_reward, _credit


async def _redeem(*, user_id: int, reward_id: int, now_utc: datetime | None = None):
    async with locked_user_session(user_id) as session:
        return await RedemptionService.redeem(
            session,
            user_id=user_id,
            reward_id=reward_id,
            now_utc=now_utc,
        )


async def _rows(model) -> list:
    async with ledger_session() as session:
        return list((await session.execute(select(model))).scalars().all())


@pytest.mark.asyncio
async def test_redeem_debits_points_and_creates_pending_user_reward() -> None:
    now_utc = datetime.now(UTC)
    await _credit(user_id=7, amount=150, now_utc=now_utc)
    reward_id = await _create_reward(name="Team Lunch", point_cost=100, now_utc=now_utc)

    result = await _redeem(user_id=7, reward_id=reward_id, now_utc=now_utc)

    assert result.balance == 50
    assert await _balance(7) == 50
    assert result.user_reward.status == "pending"
    assert result.user_reward.expires_at == now_utc + timedelta(days=90)

    debits = [row for row in await _rows(PointTransaction) if row.transaction_type == "redemption"]
    assert len(debits) == 1
    assert debits[0].amount == 100
    assert debits[0].reference_id == result.user_reward.id

    activity_types = sorted(row.type for row in await _rows(Activity))
    assert activity_types == ["points_earned", "points_redeemed", "reward_redeemed"]


@pytest.mark.asyncio
async def test_redeem_with_insufficient_points_changes_nothing() -> None:
    now_utc = datetime.now(UTC)
    await _credit(user_id=7, amount=50, now_utc=now_utc)
    reward_id = await _create_reward(name="Team Lunch", point_cost=100, now_utc=now_utc)

    with pytest.raises(InsufficientPointsError) as exc_info:
        await _redeem(user_id=7, reward_id=reward_id, now_utc=now_utc)

    assert exc_info.value.balance == 50
    assert exc_info.value.required == 100
    assert await _balance(7) == 50
    assert await _rows(UserReward) == []
    assert [row.type for row in await _rows(Activity)] == ["points_earned"]


@pytest.mark.asyncio
async def test_redeem_rejects_unknown_and_unavailable_rewards() -> None:
    now_utc = datetime.now(UTC)
    await _credit(user_id=7, amount=500, now_utc=now_utc)
    retired_id = await _create_reward(
        name="Old Mug",
        point_cost=20,
        now_utc=now_utc,
        is_available=False,
    )

    with pytest.raises(IncentiveNotFoundError):
        await _redeem(user_id=7, reward_id=999_999)
    with pytest.raises(RewardUnavailableError):
        await _redeem(user_id=7, reward_id=retired_id)

    assert await _balance(7) == 500
    assert await _rows(UserReward) == []


@pytest.mark.asyncio
async def test_concurrent_redemptions_never_overdraw() -> None:
    now_utc = datetime.now(UTC)
    await _credit(user_id=7, amount=150, now_utc=now_utc)
    reward_id = await _create_reward(name="Team Lunch", point_cost=100, now_utc=now_utc)

    results = await asyncio.gather(
        _redeem(user_id=7, reward_id=reward_id),
        _redeem(user_id=7, reward_id=reward_id),
        _redeem(user_id=7, reward_id=reward_id),
        return_exceptions=True,
    )

    succeeded = [item for item in results if not isinstance(item, BaseException)]
    rejected = [item for item in results if isinstance(item, InsufficientPointsError)]
    assert len(succeeded) == 1
    assert len(rejected) == 2
    assert await _balance(7) == 50
    assert len(await _rows(UserReward)) == 1


@pytest.mark.asyncio
async def test_catalog_lists_only_available_rewards_by_cost() -> None:
    now_utc = datetime.now(UTC)
    await _create_reward(name="Day Off", point_cost=1000, now_utc=now_utc, category="time_off")
    await _create_reward(name="Coffee", point_cost=50, now_utc=now_utc)
    hidden_id = await _create_reward(name="Lunch", point_cost=400, now_utc=now_utc)

    async with ledger_session() as session:
        await RewardCatalog.set_availability(session, reward_id=hidden_id, is_available=False)

    async with ledger_session() as session:
        rewards = await RewardCatalog.list_available(session)

    assert [reward.name for reward in rewards] == ["Coffee", "Day Off"]

    with pytest.raises(IncentiveNotFoundError):
        async with ledger_session() as session:
            await RewardCatalog.set_availability(session, reward_id=999_999, is_available=True)


@pytest.mark.asyncio
async def test_redeeming_exact_balance_empties_it_and_next_redemption_fails() -> None:
    now_utc = datetime.now(UTC)
    await _credit(
        user_id=7,
        amount=5000,
        now_utc=now_utc,
        transaction_type=TransactionType.BONUS,
        description="bonus",
    )
    assert await _balance(7) == 5000
    headset_id = await _create_reward(name="Headset", point_cost=5000, now_utc=now_utc)
    sticker_id = await _create_reward(name="Sticker", point_cost=1, now_utc=now_utc)

    result = await _redeem(user_id=7, reward_id=headset_id, now_utc=now_utc)

    assert result.balance == 0
    assert await _balance(7) == 0
    user_rewards = await _rows(UserReward)
    assert [(row.reward_id, row.status) for row in user_rewards] == [(headset_id, "pending")]

    with pytest.raises(InsufficientPointsError) as exc_info:
        await _redeem(user_id=7, reward_id=sticker_id, now_utc=now_utc)

    assert exc_info.value.balance == 0
    assert exc_info.value.required == 1
    assert await _balance(7) == 0
    assert len(await _rows(UserReward)) == 1
