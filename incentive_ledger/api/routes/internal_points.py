from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query, Request

from incentive_ledger.economy.errors import IncentiveError
from incentive_ledger.economy.points.locks import ledger_session, locked_user_session
from incentive_ledger.economy.points.service import PointsService

from .internal_helpers import as_http_error, assert_internal_access
from .internal_incentives_models import (
    BalanceResponse,
    BonusGrantRequest,
    PointTransactionResponse,
    transaction_as_response,
)

router = APIRouter(tags=["internal", "points"])


@router.post("/internal/points/bonus", response_model=PointTransactionResponse)
async def grant_bonus(payload: BonusGrantRequest, request: Request) -> PointTransactionResponse:
    assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with locked_user_session(payload.user_id) as session:
            await PointsService.lock_account(session, user_id=payload.user_id, now_utc=now_utc)
            transaction = await PointsService.grant_bonus(
                session,
                user_id=payload.user_id,
                amount=payload.amount,
                description=payload.description,
                reference_id=payload.reference_id,
                metadata=payload.metadata,
                now_utc=now_utc,
            )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_AMOUNT"}) from exc
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return transaction_as_response(transaction)


@router.get("/internal/points/{user_id}/balance", response_model=BalanceResponse)
async def get_balance(user_id: int, request: Request) -> BalanceResponse:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            balance = await PointsService.get_balance(session, user_id=user_id)
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return BalanceResponse(user_id=user_id, balance=balance)


@router.get(
    "/internal/points/{user_id}/transactions",
    response_model=list[PointTransactionResponse],
)
async def list_transactions(
    user_id: int,
    request: Request,
    limit: int | None = Query(default=None, ge=1, le=500),
) -> list[PointTransactionResponse]:
    assert_internal_access(request)
    try:
        async with ledger_session() as session:
            transactions = await PointsService.list_transactions(
                session,
                user_id=user_id,
                limit=limit,
            )
    except IncentiveError as exc:
        raise as_http_error(exc) from exc
    return [transaction_as_response(item) for item in transactions]
