from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.challenges import Challenge


class ChallengesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, challenge_id: int) -> Challenge | None:
        return await session.get(Challenge, challenge_id)

    @staticmethod
    async def get_by_name(session: AsyncSession, name: str) -> Challenge | None:
        stmt = select(Challenge).where(Challenge.name == name).order_by(Challenge.id.asc()).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_active(session: AsyncSession, *, now_utc: datetime) -> list[Challenge]:
        stmt = (
            select(Challenge)
            .where(
                Challenge.status == "active",
                Challenge.start_date <= now_utc,
                Challenge.end_date >= now_utc,
            )
            .order_by(Challenge.end_date.asc(), Challenge.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_by_ids(session: AsyncSession, challenge_ids: set[int]) -> dict[int, Challenge]:
        if not challenge_ids:
            return {}
        stmt = select(Challenge).where(Challenge.id.in_(tuple(challenge_ids)))
        result = await session.execute(stmt)
        return {challenge.id: challenge for challenge in result.scalars().all()}

    @staticmethod
    async def create(session: AsyncSession, *, challenge: Challenge) -> Challenge:
        session.add(challenge)
        await session.flush()
        return challenge
