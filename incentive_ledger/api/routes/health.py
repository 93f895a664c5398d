from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import literal, select, text

from incentive_ledger.core.config import get_settings
from incentive_ledger.db.models.challenge_participants import ChallengeParticipant
from incentive_ledger.db.models.point_accounts import PointAccount
from incentive_ledger.db.models.point_transactions import PointTransaction
from incentive_ledger.db.models.user_rewards import UserReward
from incentive_ledger.db.session import SessionLocal
from incentive_ledger.workers.celery_app import celery_app

router = APIRouter(tags=["health"])

LEDGER_MODELS = (PointTransaction, PointAccount, UserReward, ChallengeParticipant)


def _ok_check(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"status": "ok"}
    if extra:
        payload.update(extra)
    return payload


def _failed_check(error: str) -> dict[str, str]:
    return {"status": "failed", "error": error}


async def _check_database() -> dict[str, Any]:
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return _ok_check()
    except Exception as exc:
        return _failed_check(str(exc))


async def _check_ledger_tables() -> dict[str, Any]:
    try:
        async with SessionLocal() as session:
            for model in LEDGER_MODELS:
                await session.execute(select(literal(1)).select_from(model).limit(1))
        return _ok_check({"tables": len(LEDGER_MODELS)})
    except Exception as exc:
        return _failed_check(str(exc))


async def _check_redis() -> dict[str, Any]:
    redis_client: Redis | None = None
    try:
        redis_client = Redis.from_url(get_settings().redis_url)
        pong = await redis_client.ping()
        if pong is not True:
            return _failed_check(f"unexpected redis ping response: {pong!r}")
        return _ok_check()
    except Exception as exc:
        return _failed_check(str(exc))
    finally:
        if redis_client is not None:
            await redis_client.aclose()


def _check_celery_worker_sync() -> dict[str, Any]:
    try:
        inspector = celery_app.control.inspect(timeout=1.0)
        if inspector is None:
            return _failed_check("celery inspector is unavailable")

        replies = inspector.ping() or {}
        if not replies:
            return _failed_check("no celery workers responded to ping")

        return _ok_check({"workers": len(replies)})
    except Exception as exc:
        return _failed_check(str(exc))


async def _check_celery_worker() -> dict[str, Any]:
    return await asyncio.to_thread(_check_celery_worker_sync)


async def _collect_checks() -> dict[str, dict[str, Any]]:
    checks = await asyncio.gather(
        _check_database(),
        _check_ledger_tables(),
        _check_redis(),
        _check_celery_worker(),
    )
    return {
        "database": checks[0],
        "ledger": checks[1],
        "redis": checks[2],
        "celery": checks[3],
    }


def _all_checks_ok(checks: dict[str, dict[str, Any]]) -> bool:
    return all(check.get("status") == "ok" for check in checks.values())


@router.get("/health")
async def health() -> JSONResponse:
    checks = await _collect_checks()
    is_healthy = _all_checks_ok(checks)
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ok" if is_healthy else "degraded",
            "checks": checks,
        },
    )


@router.get("/ready")
async def ready() -> JSONResponse:
    checks = await _collect_checks()
    is_ready = _all_checks_ok(checks)
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if is_ready else "not_ready",
            "checks": checks,
        },
    )


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "live"}
