from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.rewards import Reward
from incentive_ledger.db.repo.rewards_repo import RewardsRepo
from incentive_ledger.economy.errors import IncentiveNotFoundError

logger = structlog.get_logger(__name__)


class RewardCatalog:
    @staticmethod
    async def list_available(session: AsyncSession) -> list[Reward]:
        return await RewardsRepo.list_available(session)

    @staticmethod
    async def get_by_id(session: AsyncSession, reward_id: int) -> Reward:
        reward = await RewardsRepo.get_by_id(session, reward_id)
        if reward is None:
            raise IncentiveNotFoundError("reward", reward_id)
        return reward

    @staticmethod
    async def set_availability(
        session: AsyncSession,
        *,
        reward_id: int,
        is_available: bool,
    ) -> Reward:
        # Retirement is a soft toggle; catalog rows referenced by user rewards are never deleted.
        reward = await RewardsRepo.get_by_id_for_update(session, reward_id)
        if reward is None:
            raise IncentiveNotFoundError("reward", reward_id)
        if reward.is_available != is_available:
            reward.is_available = is_available
            await session.flush()
            logger.info("reward_availability_changed", reward_id=reward_id, is_available=is_available)
        return reward
