from incentive_ledger.db.repo.activities_repo import ActivitiesRepo
from incentive_ledger.db.repo.challenge_participants_repo import ChallengeParticipantsRepo
from incentive_ledger.db.repo.challenges_repo import ChallengesRepo
from incentive_ledger.db.repo.point_accounts_repo import PointAccountsRepo
from incentive_ledger.db.repo.point_transactions_repo import PointTransactionsRepo
from incentive_ledger.db.repo.rewards_repo import RewardsRepo
from incentive_ledger.db.repo.user_rewards_repo import UserRewardsRepo

__all__ = [
    "ActivitiesRepo",
    "ChallengeParticipantsRepo",
    "ChallengesRepo",
    "PointAccountsRepo",
    "PointTransactionsRepo",
    "RewardsRepo",
    "UserRewardsRepo",
]
