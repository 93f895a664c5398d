from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.challenges import Challenge
from incentive_ledger.db.repo.challenges_repo import ChallengesRepo
from incentive_ledger.economy.challenges.types import ChallengeStatus
from incentive_ledger.economy.errors import IncentiveNotFoundError


def is_challenge_active(challenge: Challenge, now_utc: datetime) -> bool:
    # Status and date window are independent; both must hold.
    return (
        challenge.status == ChallengeStatus.ACTIVE.value
        and challenge.start_date <= now_utc <= challenge.end_date
    )


class ChallengeRegistry:
    @staticmethod
    async def list_active(
        session: AsyncSession,
        *,
        now_utc: datetime | None = None,
    ) -> list[Challenge]:
        return await ChallengesRepo.list_active(
            session,
            now_utc=now_utc or datetime.now(timezone.utc),
        )

    @staticmethod
    async def get_by_id(session: AsyncSession, challenge_id: int) -> Challenge:
        challenge = await ChallengesRepo.get_by_id(session, challenge_id)
        if challenge is None:
            raise IncentiveNotFoundError("challenge", challenge_id)
        return challenge
