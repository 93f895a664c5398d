from __future__ import annotations

from datetime import datetime, timezone

import structlog

from incentive_ledger.economy.challenges.participation import ParticipationService
from incentive_ledger.economy.points.locks import ledger_session
from incentive_ledger.economy.rewards.user_rewards import UserRewardsService
from incentive_ledger.workers.asyncio_runner import run_async_job
from incentive_ledger.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def run_user_reward_expiry_async(*, now_utc: datetime | None = None) -> dict[str, int]:
    now_utc = now_utc or datetime.now(timezone.utc)
    async with ledger_session() as session:
        expired_count = await UserRewardsService.expire_due(session, now_utc=now_utc)

    result = {"expired_user_rewards": expired_count}
    logger.info("user_reward_expiry_finished", **result)
    return result


async def run_challenge_settlement_async(*, now_utc: datetime | None = None) -> dict[str, int]:
    now_utc = now_utc or datetime.now(timezone.utc)
    async with ledger_session() as session:
        result = await ParticipationService.settle_ended(session, now_utc=now_utc)

    logger.info("challenge_settlement_finished", **result)
    return result


@celery_app.task(name="incentive_ledger.workers.tasks.incentive_maintenance.run_user_reward_expiry")
def run_user_reward_expiry() -> dict[str, int]:
    return run_async_job(run_user_reward_expiry_async())


@celery_app.task(name="incentive_ledger.workers.tasks.incentive_maintenance.run_challenge_settlement")
def run_challenge_settlement() -> dict[str, int]:
    return run_async_job(run_challenge_settlement_async())


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "user-reward-expiry-every-10-minutes": {
            "task": "incentive_ledger.workers.tasks.incentive_maintenance.run_user_reward_expiry",
            "schedule": 600.0,
            "options": {"queue": "q_normal"},
        },
        "challenge-settlement-every-10-minutes": {
            "task": "incentive_ledger.workers.tasks.incentive_maintenance.run_challenge_settlement",
            "schedule": 600.0,
            "options": {"queue": "q_normal"},
        },
    }
)
