from __future__ import annotations

from dataclasses import dataclass, field

from incentive_ledger.db.models.challenges import Challenge
from incentive_ledger.db.models.point_transactions import PointTransaction
from incentive_ledger.db.models.rewards import Reward
from incentive_ledger.db.models.user_rewards import UserReward
from incentive_ledger.economy.challenges.types import UserChallenge


@dataclass(slots=True)
class IncentiveSummary:
    user_id: int | None
    balance: int | None
    recent_transactions: list[PointTransaction] = field(default_factory=list)
    available_rewards: list[Reward] = field(default_factory=list)
    affordable_rewards: list[Reward] = field(default_factory=list)
    user_rewards: list[UserReward] = field(default_factory=list)
    active_challenges: list[Challenge] = field(default_factory=list)
    user_challenges: list[UserChallenge] = field(default_factory=list)
    total_rewards: int = 0
    total_active_challenges: int = 0
    total_redeemed: int = 0
    rewards_by_category: dict[str, int] = field(default_factory=dict)
