from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.core.activity_events import emit_activity
from incentive_ledger.core.config import get_settings
from incentive_ledger.db.models.user_rewards import UserReward
from incentive_ledger.db.repo.user_rewards_repo import UserRewardsRepo
from incentive_ledger.economy.errors import (
    InsufficientPointsError,
    RewardUnavailableError,
)
from incentive_ledger.economy.points.service import PointsService
from incentive_ledger.economy.points.types import ActivityType, TransactionType
from incentive_ledger.economy.rewards.catalog import RewardCatalog
from incentive_ledger.economy.rewards.types import RedemptionResult, UserRewardStatus

logger = structlog.get_logger(__name__)


def _expires_at(now_utc: datetime) -> datetime | None:
    ttl_days = get_settings().user_reward_ttl_days
    if ttl_days <= 0:
        return None
    return now_utc + timedelta(days=ttl_days)


class RedemptionService:
    @staticmethod
    async def redeem(
        session: AsyncSession,
        *,
        user_id: int,
        reward_id: int,
        now_utc: datetime | None = None,
    ) -> RedemptionResult:
        now_utc = now_utc or datetime.now(timezone.utc)

        await PointsService.lock_account(session, user_id=user_id, now_utc=now_utc)

        reward = await RewardCatalog.get_by_id(session, reward_id)
        if not reward.is_available:
            raise RewardUnavailableError(f"reward {reward_id} is not available")

        balance = await PointsService.get_balance(session, user_id=user_id)
        if balance < reward.point_cost:
            logger.info(
                "reward_redeem_rejected",
                user_id=user_id,
                reward_id=reward_id,
                balance=balance,
                required=reward.point_cost,
            )
            raise InsufficientPointsError(balance=balance, required=reward.point_cost)

        user_reward = await UserRewardsRepo.create(
            session,
            user_reward=UserReward(
                user_id=user_id,
                reward_id=reward.id,
                status=UserRewardStatus.PENDING.value,
                awarded_at=now_utc,
                redeemed_at=None,
                expires_at=_expires_at(now_utc),
                metadata_={
                    "reward_name": reward.name,
                    "point_cost": reward.point_cost,
                },
                updated_at=now_utc,
            ),
        )
        await PointsService.add_transaction(
            session,
            user_id=user_id,
            amount=reward.point_cost,
            description=f"Redeemed {reward.name}",
            transaction_type=TransactionType.REDEMPTION,
            reference_id=user_reward.id,
            metadata={"reward_id": reward.id},
            now_utc=now_utc,
        )
        await emit_activity(
            session,
            user_id=user_id,
            activity_type=ActivityType.REWARD_REDEEMED,
            content=f"Redeemed reward {reward.name}",
            related_id=user_reward.id,
            metadata={"reward_id": reward.id, "point_cost": reward.point_cost},
            happened_at=now_utc,
        )

        new_balance = balance - reward.point_cost
        logger.info(
            "reward_redeemed",
            user_id=user_id,
            reward_id=reward.id,
            user_reward_id=user_reward.id,
            point_cost=reward.point_cost,
            balance=new_balance,
        )
        return RedemptionResult(user_reward=user_reward, reward=reward, balance=new_balance)
