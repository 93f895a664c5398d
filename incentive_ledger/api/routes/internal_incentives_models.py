from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from incentive_ledger.db.models.activities import Activity
from incentive_ledger.db.models.challenge_participants import ChallengeParticipant
from incentive_ledger.db.models.challenges import Challenge
from incentive_ledger.db.models.point_transactions import PointTransaction
from incentive_ledger.db.models.rewards import Reward
from incentive_ledger.db.models.user_rewards import UserReward
from incentive_ledger.economy.challenges.types import UserChallenge
from incentive_ledger.economy.summary.types import IncentiveSummary


class UserScopedRequest(BaseModel):
    user_id: int = Field(gt=0)


class JoinChallengeRequest(UserScopedRequest):
    progress: dict[str, object] | None = None


class ProgressUpdateRequest(BaseModel):
    progress: dict[str, object]


class RewardAvailabilityRequest(BaseModel):
    is_available: bool


class BonusGrantRequest(UserScopedRequest):
    amount: int = Field(gt=0)
    description: str = Field(min_length=1, max_length=256)
    reference_id: int | None = Field(default=None, gt=0)
    metadata: dict[str, object] | None = None


class PointTransactionResponse(BaseModel):
    id: int
    user_id: int
    amount: int = Field(gt=0)
    description: str
    transaction_type: str
    reference_id: int | None = None
    metadata: dict[str, object]
    created_at: datetime


class RewardResponse(BaseModel):
    id: int
    name: str
    description: str
    category: str
    type: str
    point_cost: int = Field(gt=0)
    is_available: bool
    image: str | None = None


class UserRewardResponse(BaseModel):
    id: int
    user_id: int
    reward_id: int
    status: str
    awarded_at: datetime
    redeemed_at: datetime | None = None
    expires_at: datetime | None = None
    metadata: dict[str, object]


class ChallengeResponse(BaseModel):
    id: int
    name: str
    description: str
    category: str
    start_date: datetime
    end_date: datetime
    criteria: dict[str, object]
    status: str
    reward_points: int = Field(ge=0)


class ChallengeParticipantResponse(BaseModel):
    id: int
    challenge_id: int
    user_id: int
    joined_at: datetime
    status: str
    progress: dict[str, object]
    completed_at: datetime | None = None


class UserChallengeResponse(BaseModel):
    challenge: ChallengeResponse
    participant: ChallengeParticipantResponse


class ActivityResponse(BaseModel):
    id: int
    user_id: int
    type: str
    content: str
    related_id: int | None = None
    metadata: dict[str, object]
    created_at: datetime


class BalanceResponse(BaseModel):
    user_id: int
    balance: int


class RedeemResponse(BaseModel):
    user_reward: UserRewardResponse
    reward: RewardResponse
    balance: int


class CompletionResponse(BaseModel):
    participant: ChallengeParticipantResponse
    granted_points: int = Field(ge=0)
    idempotent_replay: bool


class EvaluationResponse(BaseModel):
    criteria_met: bool
    completion: CompletionResponse | None = None


class IncentiveSummaryResponse(BaseModel):
    user_id: int | None = None
    balance: int | None = None
    recent_transactions: list[PointTransactionResponse]
    available_rewards: list[RewardResponse]
    affordable_rewards: list[RewardResponse]
    user_rewards: list[UserRewardResponse]
    active_challenges: list[ChallengeResponse]
    user_challenges: list[UserChallengeResponse]
    total_rewards: int = Field(ge=0)
    total_active_challenges: int = Field(ge=0)
    total_redeemed: int = Field(ge=0)
    rewards_by_category: dict[str, int]


def transaction_as_response(transaction: PointTransaction) -> PointTransactionResponse:
    return PointTransactionResponse(
        id=transaction.id,
        user_id=transaction.user_id,
        amount=transaction.amount,
        description=transaction.description,
        transaction_type=transaction.transaction_type,
        reference_id=transaction.reference_id,
        metadata=dict(transaction.metadata_ or {}),
        created_at=transaction.created_at,
    )


def reward_as_response(reward: Reward) -> RewardResponse:
    return RewardResponse(
        id=reward.id,
        name=reward.name,
        description=reward.description,
        category=reward.category,
        type=reward.type,
        point_cost=reward.point_cost,
        is_available=reward.is_available,
        image=reward.image,
    )


def user_reward_as_response(user_reward: UserReward) -> UserRewardResponse:
    return UserRewardResponse(
        id=user_reward.id,
        user_id=user_reward.user_id,
        reward_id=user_reward.reward_id,
        status=user_reward.status,
        awarded_at=user_reward.awarded_at,
        redeemed_at=user_reward.redeemed_at,
        expires_at=user_reward.expires_at,
        metadata=dict(user_reward.metadata_ or {}),
    )


def challenge_as_response(challenge: Challenge) -> ChallengeResponse:
    return ChallengeResponse(
        id=challenge.id,
        name=challenge.name,
        description=challenge.description,
        category=challenge.category,
        start_date=challenge.start_date,
        end_date=challenge.end_date,
        criteria=dict(challenge.criteria or {}),
        status=challenge.status,
        reward_points=challenge.reward_points,
    )


def participant_as_response(participant: ChallengeParticipant) -> ChallengeParticipantResponse:
    return ChallengeParticipantResponse(
        id=participant.id,
        challenge_id=participant.challenge_id,
        user_id=participant.user_id,
        joined_at=participant.joined_at,
        status=participant.status,
        progress=dict(participant.progress or {}),
        completed_at=participant.completed_at,
    )


def user_challenge_as_response(user_challenge: UserChallenge) -> UserChallengeResponse:
    return UserChallengeResponse(
        challenge=challenge_as_response(user_challenge.challenge),
        participant=participant_as_response(user_challenge.participant),
    )


def activity_as_response(activity: Activity) -> ActivityResponse:
    return ActivityResponse(
        id=activity.id,
        user_id=activity.user_id,
        type=activity.type,
        content=activity.content,
        related_id=activity.related_id,
        metadata=dict(activity.metadata_ or {}),
        created_at=activity.created_at,
    )


def summary_as_response(summary: IncentiveSummary) -> IncentiveSummaryResponse:
    return IncentiveSummaryResponse(
        user_id=summary.user_id,
        balance=summary.balance,
        recent_transactions=[transaction_as_response(item) for item in summary.recent_transactions],
        available_rewards=[reward_as_response(item) for item in summary.available_rewards],
        affordable_rewards=[reward_as_response(item) for item in summary.affordable_rewards],
        user_rewards=[user_reward_as_response(item) for item in summary.user_rewards],
        active_challenges=[challenge_as_response(item) for item in summary.active_challenges],
        user_challenges=[user_challenge_as_response(item) for item in summary.user_challenges],
        total_rewards=summary.total_rewards,
        total_active_challenges=summary.total_active_challenges,
        total_redeemed=summary.total_redeemed,
        rewards_by_category=summary.rewards_by_category,
    )
