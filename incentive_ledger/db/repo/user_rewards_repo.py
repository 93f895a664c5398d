from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.user_rewards import UserReward


class UserRewardsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, user_reward: UserReward) -> UserReward:
        session.add(user_reward)
        await session.flush()
        return user_reward

    @staticmethod
    async def get_by_id(session: AsyncSession, user_reward_id: int) -> UserReward | None:
        return await session.get(UserReward, user_reward_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, user_reward_id: int) -> UserReward | None:
        stmt = select(UserReward).where(UserReward.id == user_reward_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_user(session: AsyncSession, *, user_id: int) -> list[UserReward]:
        stmt = (
            select(UserReward)
            .where(UserReward.user_id == user_id)
            .order_by(UserReward.awarded_at.desc(), UserReward.id.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def expire_pending(
        session: AsyncSession,
        *,
        now_utc: datetime,
    ) -> list[tuple[int, int, int]]:
        stmt = (
            update(UserReward)
            .where(
                UserReward.status == "pending",
                UserReward.expires_at.is_not(None),
                UserReward.expires_at <= now_utc,
            )
            .values(status="expired", updated_at=now_utc)
            .returning(UserReward.id, UserReward.user_id, UserReward.reward_id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return [(int(row[0]), int(row[1]), int(row[2])) for row in result.all()]
