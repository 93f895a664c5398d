from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from incentive_ledger.economy.challenges.participation import ParticipationService
from incentive_ledger.economy.challenges.registry import ChallengeRegistry
from incentive_ledger.economy.challenges.types import CompletionResult
from incentive_ledger.economy.errors import IncentiveError
from incentive_ledger.economy.points.locks import ledger_session, locked_user_session

from .internal_helpers import as_http_error, assert_internal_access
from .internal_incentives_models import (
    ChallengeParticipantResponse,
    ChallengeResponse,
    CompletionResponse,
    EvaluationResponse,
    JoinChallengeRequest,
    ProgressUpdateRequest,
    UserChallengeResponse,
    challenge_as_response,
    participant_as_response,
    user_challenge_as_response,
)

router = APIRouter(tags=["internal", "challenges"])


def _completion_as_response(result: CompletionResult) -> CompletionResponse:
    return CompletionResponse(
        participant=participant_as_response(result.participant),
        granted_points=result.granted_points,
        idempotent_replay=result.idempotent_replay,
    )


async def _participant_user_id(participant_id: int) -> int:
    async with ledger_session() as session:
        participant = await ParticipationService.get_participant(session, participant_id)
        return participant.user_id


@router.get("/internal/challenges/active", response_model=list[ChallengeResponse])
async def list_active_challenges(request: Request) -> list[ChallengeResponse]:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            challenges = await ChallengeRegistry.list_active(session)
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return [challenge_as_response(challenge) for challenge in challenges]


@router.get("/internal/challenges/user/{user_id}", response_model=list[UserChallengeResponse])
async def list_user_challenges(user_id: int, request: Request) -> list[UserChallengeResponse]:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            user_challenges = await ParticipationService.list_for_user(session, user_id=user_id)
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return [user_challenge_as_response(item) for item in user_challenges]


@router.post(
    "/internal/challenges/join/{challenge_id}",
    response_model=ChallengeParticipantResponse,
)
async def join_challenge(
    challenge_id: int,
    payload: JoinChallengeRequest,
    request: Request,
) -> ChallengeParticipantResponse:
    assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with locked_user_session(payload.user_id) as session:
            participant = await ParticipationService.join(
                session,
                user_id=payload.user_id,
                challenge_id=challenge_id,
                initial_progress=payload.progress,
                now_utc=now_utc,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return participant_as_response(participant)


@router.post(
    "/internal/challenges/participants/{participant_id}/progress",
    response_model=ChallengeParticipantResponse,
)
async def update_participant_progress(
    participant_id: int,
    payload: ProgressUpdateRequest,
    request: Request,
) -> ChallengeParticipantResponse:
    assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with ledger_session() as session:
            participant = await ParticipationService.update_progress(
                session,
                participant_id=participant_id,
                progress=payload.progress,
                now_utc=now_utc,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return participant_as_response(participant)


@router.post(
    "/internal/challenges/participants/{participant_id}/complete",
    response_model=CompletionResponse,
)
async def complete_participant(participant_id: int, request: Request) -> CompletionResponse:
    assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        user_id = await _participant_user_id(participant_id)
        async with locked_user_session(user_id) as session:
            result = await ParticipationService.mark_completed(
                session,
                participant_id=participant_id,
                now_utc=now_utc,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return _completion_as_response(result)


@router.post(
    "/internal/challenges/participants/{participant_id}/evaluate",
    response_model=EvaluationResponse,
)
async def evaluate_participant(participant_id: int, request: Request) -> EvaluationResponse:
    assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        user_id = await _participant_user_id(participant_id)
        async with locked_user_session(user_id) as session:
            result = await ParticipationService.evaluate(
                session,
                participant_id=participant_id,
                now_utc=now_utc,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc

    if result is None:
        return EvaluationResponse(criteria_met=False, completion=None)
    return EvaluationResponse(criteria_met=True, completion=_completion_as_response(result))
