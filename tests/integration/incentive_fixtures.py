from __future__ import annotations

from datetime import datetime, timedelta, timezone

from incentive_ledger.db.models.challenges import Challenge
from incentive_ledger.db.models.rewards import Reward
from incentive_ledger.db.repo.challenges_repo import ChallengesRepo
from incentive_ledger.db.repo.rewards_repo import RewardsRepo
from incentive_ledger.economy.points.locks import ledger_session
from incentive_ledger.economy.points.service import PointsService
from incentive_ledger.economy.points.types import TransactionType

UTC = timezone.utc


async def _create_reward(
    *,
    name: str,
    point_cost: int,
    now_utc: datetime,
    category: str = "food",
    is_available: bool = True,
) -> int:
    async with ledger_session() as session:
        reward = await RewardsRepo.create(
            session,
            reward=Reward(
                name=name,
                description=f"{name} description",
                category=category,
                type="voucher",
                point_cost=point_cost,
                is_available=is_available,
                image=None,
                created_at=now_utc,
            ),
        )
        return reward.id


async def _create_challenge(
    *,
    name: str,
    now_utc: datetime,
    criteria: dict[str, object] | None = None,
    reward_points: int = 0,
    status: str = "active",
    starts_in: timedelta = timedelta(days=-1),
    ends_in: timedelta = timedelta(days=1),
) -> int:
    async with ledger_session() as session:
        challenge = await ChallengesRepo.create(
            session,
            challenge=Challenge(
                name=name,
                description=f"{name} description",
                category="sales",
                start_date=now_utc + starts_in,
                end_date=now_utc + ends_in,
                criteria=dict(criteria or {}),
                status=status,
                reward_points=reward_points,
                created_at=now_utc,
            ),
        )
        return challenge.id


async def _credit(
    *,
    user_id: int,
    amount: int,
    now_utc: datetime,
    transaction_type: TransactionType = TransactionType.REWARD,
    description: str = "Quarterly target",
) -> int:
    async with ledger_session() as session:
        transaction = await PointsService.add_transaction(
            session,
            user_id=user_id,
            amount=amount,
            description=description,
            transaction_type=transaction_type,
            now_utc=now_utc,
        )
        return transaction.id


async def _balance(user_id: int) -> int:
    async with ledger_session() as session:
        return await PointsService.get_balance(session, user_id=user_id)
