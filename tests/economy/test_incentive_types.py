from __future__ import annotations

from incentive_ledger.economy.points.types import (
    ACTIVITY_BY_TRANSACTION_TYPE,
    ActivityType,
    TransactionType,
)
from incentive_ledger.economy.rewards.types import UserRewardStatus


def test_transaction_type_sign() -> None:
    assert TransactionType.REWARD.is_credit is True
    assert TransactionType.BONUS.is_credit is True
    assert TransactionType.REDEMPTION.is_credit is False


def test_every_transaction_type_has_an_activity() -> None:
    assert set(ACTIVITY_BY_TRANSACTION_TYPE) == set(TransactionType)
    assert ACTIVITY_BY_TRANSACTION_TYPE[TransactionType.REDEMPTION] is ActivityType.POINTS_REDEEMED


def test_only_pending_user_reward_is_open() -> None:
    assert UserRewardStatus.PENDING.is_terminal is False
    assert all(
        status.is_terminal for status in UserRewardStatus if status is not UserRewardStatus.PENDING
    )
