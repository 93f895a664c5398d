from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from incentive_ledger.economy.errors import IncentiveError
from incentive_ledger.economy.points.locks import ledger_session, locked_user_session
from incentive_ledger.economy.rewards.catalog import RewardCatalog
from incentive_ledger.economy.rewards.redemption import RedemptionService
from incentive_ledger.economy.rewards.user_rewards import UserRewardsService

from .internal_helpers import as_http_error, assert_internal_access
from .internal_incentives_models import (
    RedeemResponse,
    RewardAvailabilityRequest,
    RewardResponse,
    UserRewardResponse,
    UserScopedRequest,
    reward_as_response,
    user_reward_as_response,
)

router = APIRouter(tags=["internal", "rewards"])


@router.get("/internal/rewards", response_model=list[RewardResponse])
async def list_available_rewards(request: Request) -> list[RewardResponse]:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            rewards = await RewardCatalog.list_available(session)
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return [reward_as_response(reward) for reward in rewards]


@router.post("/internal/rewards/redeem/{reward_id}", response_model=RedeemResponse)
async def redeem_reward(
    reward_id: int,
    payload: UserScopedRequest,
    request: Request,
) -> RedeemResponse:
    assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with locked_user_session(payload.user_id) as session:
            result = await RedemptionService.redeem(
                session,
                user_id=payload.user_id,
                reward_id=reward_id,
                now_utc=now_utc,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc

    return RedeemResponse(
        user_reward=user_reward_as_response(result.user_reward),
        reward=reward_as_response(result.reward),
        balance=result.balance,
    )


@router.patch("/internal/rewards/{reward_id}/availability", response_model=RewardResponse)
async def set_reward_availability(
    reward_id: int,
    payload: RewardAvailabilityRequest,
    request: Request,
) -> RewardResponse:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            reward = await RewardCatalog.set_availability(
                session,
                reward_id=reward_id,
                is_available=payload.is_available,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return reward_as_response(reward)


@router.get("/internal/user-rewards/{user_id}", response_model=list[UserRewardResponse])
async def list_user_rewards(user_id: int, request: Request) -> list[UserRewardResponse]:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            user_rewards = await UserRewardsService.list_for_user(session, user_id=user_id)
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return [user_reward_as_response(item) for item in user_rewards]


@router.post("/internal/user-rewards/{user_reward_id}/redeemed", response_model=UserRewardResponse)
async def mark_user_reward_redeemed(user_reward_id: int, request: Request) -> UserRewardResponse:
    assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with ledger_session() as session:
            user_reward = await UserRewardsService.mark_redeemed(
                session,
                user_reward_id=user_reward_id,
                now_utc=now_utc,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return user_reward_as_response(user_reward)


@router.post("/internal/user-rewards/{user_reward_id}/cancel", response_model=UserRewardResponse)
async def cancel_user_reward(user_reward_id: int, request: Request) -> UserRewardResponse:
    assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with ledger_session() as session:
            user_reward = await UserRewardsService.cancel(
                session,
                user_reward_id=user_reward_id,
                now_utc=now_utc,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return user_reward_as_response(user_reward)
