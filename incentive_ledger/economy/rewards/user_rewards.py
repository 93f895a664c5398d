from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.core.activity_events import emit_activity
from incentive_ledger.db.models.user_rewards import UserReward
from incentive_ledger.db.repo.user_rewards_repo import UserRewardsRepo
from incentive_ledger.economy.errors import IncentiveNotFoundError, InvalidStatusTransitionError
from incentive_ledger.economy.points.types import ActivityType
from incentive_ledger.economy.rewards.types import UserRewardStatus

logger = structlog.get_logger(__name__)


class UserRewardsService:
    """Lifecycle of redeemed rewards. Points spent are never refunded."""

    @staticmethod
    async def list_for_user(session: AsyncSession, *, user_id: int) -> list[UserReward]:
        return await UserRewardsRepo.list_for_user(session, user_id=user_id)

    @staticmethod
    async def _transition(
        session: AsyncSession,
        *,
        user_reward_id: int,
        target: UserRewardStatus,
        now_utc: datetime,
    ) -> UserReward:
        user_reward = await UserRewardsRepo.get_by_id_for_update(session, user_reward_id)
        if user_reward is None:
            raise IncentiveNotFoundError("user_reward", user_reward_id)

        current = UserRewardStatus(user_reward.status)
        if current.is_terminal:
            raise InvalidStatusTransitionError(current=current.value, target=target.value)
        if (
            target is UserRewardStatus.REDEEMED
            and user_reward.expires_at is not None
            and user_reward.expires_at <= now_utc
        ):
            # Past its expiry the reward is expired even if the sweep has not flipped it yet.
            raise InvalidStatusTransitionError(
                current=UserRewardStatus.EXPIRED.value,
                target=target.value,
            )

        user_reward.status = target.value
        user_reward.updated_at = now_utc
        if target is UserRewardStatus.REDEEMED:
            user_reward.redeemed_at = now_utc
        await session.flush()

        await emit_activity(
            session,
            user_id=user_reward.user_id,
            activity_type=ActivityType.REWARD_STATUS_CHANGED,
            content=f"Reward {user_reward.id} is now {target.value}",
            related_id=user_reward.id,
            metadata={"from": current.value, "to": target.value, "reward_id": user_reward.reward_id},
            happened_at=now_utc,
        )
        logger.info(
            "user_reward_status_changed",
            user_reward_id=user_reward.id,
            user_id=user_reward.user_id,
            from_status=current.value,
            to_status=target.value,
        )
        return user_reward

    @staticmethod
    async def mark_redeemed(
        session: AsyncSession,
        *,
        user_reward_id: int,
        now_utc: datetime | None = None,
    ) -> UserReward:
        return await UserRewardsService._transition(
            session,
            user_reward_id=user_reward_id,
            target=UserRewardStatus.REDEEMED,
            now_utc=now_utc or datetime.now(timezone.utc),
        )

    @staticmethod
    async def cancel(
        session: AsyncSession,
        *,
        user_reward_id: int,
        now_utc: datetime | None = None,
    ) -> UserReward:
        return await UserRewardsService._transition(
            session,
            user_reward_id=user_reward_id,
            target=UserRewardStatus.CANCELED,
            now_utc=now_utc or datetime.now(timezone.utc),
        )

    @staticmethod
    async def expire_due(session: AsyncSession, *, now_utc: datetime) -> int:
        expired_rows = await UserRewardsRepo.expire_pending(session, now_utc=now_utc)
        for user_reward_id, user_id, reward_id in expired_rows:
            await emit_activity(
                session,
                user_id=user_id,
                activity_type=ActivityType.REWARD_STATUS_CHANGED,
                content=f"Reward {user_reward_id} is now {UserRewardStatus.EXPIRED.value}",
                related_id=user_reward_id,
                metadata={
                    "from": UserRewardStatus.PENDING.value,
                    "to": UserRewardStatus.EXPIRED.value,
                    "reward_id": reward_id,
                },
                happened_at=now_utc,
            )
        if expired_rows:
            logger.info("user_rewards_expired", expired=len(expired_rows))
        return len(expired_rows)
