from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.rewards import Reward


class RewardsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, reward_id: int) -> Reward | None:
        return await session.get(Reward, reward_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, reward_id: int) -> Reward | None:
        stmt = select(Reward).where(Reward.id == reward_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_name(session: AsyncSession, name: str) -> Reward | None:
        stmt = select(Reward).where(Reward.name == name).order_by(Reward.id.asc()).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_available(session: AsyncSession) -> list[Reward]:
        stmt = (
            select(Reward)
            .where(Reward.is_available.is_(True))
            .order_by(Reward.point_cost.asc(), Reward.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(session: AsyncSession, *, reward: Reward) -> Reward:
        session.add(reward)
        await session.flush()
        return reward
