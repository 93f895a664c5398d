from incentive_ledger.workers.tasks.incentive_maintenance import (
    run_challenge_settlement,
    run_user_reward_expiry,
)

__all__ = [
    "run_challenge_settlement",
    "run_user_reward_expiry",
]
