from incentive_ledger.db.models.activities import Activity
from incentive_ledger.db.models.challenge_participants import ChallengeParticipant
from incentive_ledger.db.models.challenges import Challenge
from incentive_ledger.db.models.point_accounts import PointAccount
from incentive_ledger.db.models.point_transactions import PointTransaction
from incentive_ledger.db.models.rewards import Reward
from incentive_ledger.db.models.user_rewards import UserReward

__all__ = [
    "Activity",
    "Challenge",
    "ChallengeParticipant",
    "PointAccount",
    "PointTransaction",
    "Reward",
    "UserReward",
]
