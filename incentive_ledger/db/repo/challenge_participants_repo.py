from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.challenge_participants import ChallengeParticipant
from incentive_ledger.db.models.challenges import Challenge


class ChallengeParticipantsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        participant: ChallengeParticipant,
    ) -> ChallengeParticipant:
        session.add(participant)
        await session.flush()
        return participant

    @staticmethod
    async def get_by_id(session: AsyncSession, participant_id: int) -> ChallengeParticipant | None:
        return await session.get(ChallengeParticipant, participant_id)

    @staticmethod
    async def get_by_id_for_update(
        session: AsyncSession,
        participant_id: int,
    ) -> ChallengeParticipant | None:
        stmt = (
            select(ChallengeParticipant)
            .where(ChallengeParticipant.id == participant_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_challenge_and_user(
        session: AsyncSession,
        *,
        challenge_id: int,
        user_id: int,
    ) -> ChallengeParticipant | None:
        stmt = select(ChallengeParticipant).where(
            ChallengeParticipant.challenge_id == challenge_id,
            ChallengeParticipant.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_user(session: AsyncSession, *, user_id: int) -> list[ChallengeParticipant]:
        stmt = (
            select(ChallengeParticipant)
            .where(ChallengeParticipant.user_id == user_id)
            .order_by(ChallengeParticipant.joined_at.desc(), ChallengeParticipant.id.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_in_progress_for_ended_challenges(
        session: AsyncSession,
        *,
        now_utc: datetime,
        limit: int = 500,
    ) -> list[tuple[ChallengeParticipant, Challenge]]:
        stmt = (
            select(ChallengeParticipant, Challenge)
            .join(Challenge, Challenge.id == ChallengeParticipant.challenge_id)
            .where(
                ChallengeParticipant.status == "in_progress",
                Challenge.end_date < now_utc,
            )
            .order_by(ChallengeParticipant.id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(participant, challenge) for participant, challenge in result.all()]
