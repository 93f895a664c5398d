from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from incentive_ledger.db.models.rewards import Reward
from incentive_ledger.db.models.user_rewards import UserReward


class UserRewardStatus(str, Enum):
    PENDING = "pending"
    REDEEMED = "redeemed"
    EXPIRED = "expired"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self is not UserRewardStatus.PENDING


@dataclass(slots=True)
class RedemptionResult:
    user_reward: UserReward
    reward: Reward
    balance: int
