from __future__ import annotations

from enum import Enum


class TransactionType(str, Enum):
    REWARD = "reward"
    BONUS = "bonus"
    REDEMPTION = "redemption"

    @property
    def is_credit(self) -> bool:
        return self is not TransactionType.REDEMPTION


class ActivityType(str, Enum):
    POINTS_EARNED = "points_earned"
    POINTS_BONUS = "points_bonus"
    POINTS_REDEEMED = "points_redeemed"
    REWARD_REDEEMED = "reward_redeemed"
    REWARD_STATUS_CHANGED = "reward_status_changed"
    CHALLENGE_JOINED = "challenge_joined"
    CHALLENGE_COMPLETED = "challenge_completed"
    CHALLENGE_FAILED = "challenge_failed"


ACTIVITY_BY_TRANSACTION_TYPE: dict[TransactionType, ActivityType] = {
    TransactionType.REWARD: ActivityType.POINTS_EARNED,
    TransactionType.BONUS: ActivityType.POINTS_BONUS,
    TransactionType.REDEMPTION: ActivityType.POINTS_REDEEMED,
}
