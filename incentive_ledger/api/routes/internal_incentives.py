from __future__ import annotations

from fastapi import APIRouter, Query, Request

from incentive_ledger.db.repo.activities_repo import ActivitiesRepo
from incentive_ledger.economy.errors import IncentiveError
from incentive_ledger.economy.points.locks import ledger_session
from incentive_ledger.economy.summary.service import IncentiveSummaryService

from .internal_helpers import as_http_error, assert_internal_access
from .internal_incentives_models import (
    ActivityResponse,
    IncentiveSummaryResponse,
    activity_as_response,
    summary_as_response,
)

router = APIRouter(tags=["internal", "incentives"])


@router.get("/internal/incentives", response_model=IncentiveSummaryResponse)
async def get_incentive_summary(
    request: Request,
    user_id: int | None = Query(default=None, gt=0),
) -> IncentiveSummaryResponse:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            summary = await IncentiveSummaryService.get_summary(session, user_id=user_id)
            return summary_as_response(summary)
    except IncentiveError as exc:
        raise as_http_error(exc) from exc


@router.get("/internal/activities", response_model=list[ActivityResponse])
async def list_recent_activities(
    request: Request,
    user_id: int = Query(gt=0),
    limit: int = Query(default=20, ge=1, le=200),
) -> list[ActivityResponse]:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            activities = await ActivitiesRepo.list_recent_for_user(
                session,
                user_id=user_id,
                limit=limit,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return [activity_as_response(item) for item in activities]
