from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.core.config import get_settings
from incentive_ledger.db.models.rewards import Reward
from incentive_ledger.economy.challenges.participation import ParticipationService
from incentive_ledger.economy.challenges.registry import ChallengeRegistry
from incentive_ledger.economy.points.service import PointsService
from incentive_ledger.economy.rewards.catalog import RewardCatalog
from incentive_ledger.economy.rewards.types import UserRewardStatus
from incentive_ledger.economy.rewards.user_rewards import UserRewardsService
from incentive_ledger.economy.summary.types import IncentiveSummary


def _rewards_by_category(rewards: list[Reward]) -> dict[str, int]:
    return dict(sorted(Counter(reward.category for reward in rewards).items()))


class IncentiveSummaryService:
    @staticmethod
    async def get_summary(
        session: AsyncSession,
        *,
        user_id: int | None = None,
        now_utc: datetime | None = None,
    ) -> IncentiveSummary:
        now_utc = now_utc or datetime.now(timezone.utc)

        available_rewards = await RewardCatalog.list_available(session)
        active_challenges = await ChallengeRegistry.list_active(session, now_utc=now_utc)
        summary = IncentiveSummary(
            user_id=user_id,
            balance=None,
            available_rewards=available_rewards,
            active_challenges=active_challenges,
            total_rewards=len(available_rewards),
            total_active_challenges=len(active_challenges),
            rewards_by_category=_rewards_by_category(available_rewards),
        )
        if user_id is None:
            return summary

        balance = await PointsService.get_balance(session, user_id=user_id)
        user_rewards = await UserRewardsService.list_for_user(session, user_id=user_id)

        summary.balance = balance
        summary.recent_transactions = await PointsService.list_transactions(
            session,
            user_id=user_id,
            limit=get_settings().recent_transactions_limit,
        )
        summary.affordable_rewards = [
            reward for reward in available_rewards if reward.point_cost <= balance
        ]
        summary.user_rewards = user_rewards
        summary.user_challenges = await ParticipationService.list_for_user(session, user_id=user_id)
        summary.total_redeemed = sum(
            1 for user_reward in user_rewards if user_reward.status == UserRewardStatus.REDEEMED.value
        )
        return summary
