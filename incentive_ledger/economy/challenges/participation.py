from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.core.activity_events import emit_activity
from incentive_ledger.db.models.challenge_participants import ChallengeParticipant
from incentive_ledger.db.models.challenges import Challenge
from incentive_ledger.db.repo.challenge_participants_repo import ChallengeParticipantsRepo
from incentive_ledger.db.repo.challenges_repo import ChallengesRepo
from incentive_ledger.economy.challenges.registry import ChallengeRegistry, is_challenge_active
from incentive_ledger.economy.challenges.scoring import criteria_met, merge_progress
from incentive_ledger.economy.challenges.types import (
    CompletionResult,
    ParticipantStatus,
    UserChallenge,
)
from incentive_ledger.economy.errors import (
    AlreadyJoinedError,
    ChallengeNotActiveError,
    IncentiveNotFoundError,
    InvalidStatusTransitionError,
)
from incentive_ledger.economy.points.service import PointsService
from incentive_ledger.economy.points.types import ActivityType, TransactionType

logger = structlog.get_logger(__name__)


class ParticipationService:
    @staticmethod
    async def join(
        session: AsyncSession,
        *,
        user_id: int,
        challenge_id: int,
        initial_progress: Mapping[str, object] | None = None,
        now_utc: datetime | None = None,
    ) -> ChallengeParticipant:
        now_utc = now_utc or datetime.now(timezone.utc)

        challenge = await ChallengeRegistry.get_by_id(session, challenge_id)
        if not is_challenge_active(challenge, now_utc):
            raise ChallengeNotActiveError(f"challenge {challenge_id} is not active")

        existing = await ChallengeParticipantsRepo.get_for_challenge_and_user(
            session,
            challenge_id=challenge_id,
            user_id=user_id,
        )
        if existing is not None:
            raise AlreadyJoinedError(f"user {user_id} already joined challenge {challenge_id}")

        try:
            participant = await ChallengeParticipantsRepo.create(
                session,
                participant=ChallengeParticipant(
                    challenge_id=challenge_id,
                    user_id=user_id,
                    joined_at=now_utc,
                    status=ParticipantStatus.IN_PROGRESS.value,
                    progress=dict(initial_progress or {}),
                    completed_at=None,
                    updated_at=now_utc,
                ),
            )
        except IntegrityError as exc:
            raise AlreadyJoinedError(
                f"user {user_id} already joined challenge {challenge_id}"
            ) from exc

        await emit_activity(
            session,
            user_id=user_id,
            activity_type=ActivityType.CHALLENGE_JOINED,
            content=f"Joined challenge {challenge.name}",
            related_id=challenge.id,
            metadata={"participant_id": participant.id},
            happened_at=now_utc,
        )
        logger.info(
            "challenge_joined",
            user_id=user_id,
            challenge_id=challenge_id,
            participant_id=participant.id,
        )
        return participant

    @staticmethod
    async def get_participant(session: AsyncSession, participant_id: int) -> ChallengeParticipant:
        participant = await ChallengeParticipantsRepo.get_by_id(session, participant_id)
        if participant is None:
            raise IncentiveNotFoundError("challenge_participant", participant_id)
        return participant

    @staticmethod
    async def update_progress(
        session: AsyncSession,
        *,
        participant_id: int,
        progress: Mapping[str, object],
        now_utc: datetime | None = None,
    ) -> ChallengeParticipant:
        participant = await ChallengeParticipantsRepo.get_by_id_for_update(session, participant_id)
        if participant is None:
            raise IncentiveNotFoundError("challenge_participant", participant_id)
        if participant.status != ParticipantStatus.IN_PROGRESS.value:
            raise InvalidStatusTransitionError(
                current=participant.status,
                target=ParticipantStatus.IN_PROGRESS.value,
            )

        participant.progress = merge_progress(participant.progress, progress)
        participant.updated_at = now_utc or datetime.now(timezone.utc)
        await session.flush()
        return participant

    @staticmethod
    async def _complete(
        session: AsyncSession,
        *,
        participant: ChallengeParticipant,
        challenge: Challenge,
        now_utc: datetime,
    ) -> CompletionResult:
        await PointsService.lock_account(session, user_id=participant.user_id, now_utc=now_utc)

        participant.status = ParticipantStatus.COMPLETED.value
        participant.completed_at = now_utc
        participant.updated_at = now_utc
        await session.flush()

        granted_points = challenge.reward_points
        if granted_points > 0:
            await PointsService.add_transaction(
                session,
                user_id=participant.user_id,
                amount=granted_points,
                description=f"Completed challenge {challenge.name}",
                transaction_type=TransactionType.REWARD,
                reference_id=challenge.id,
                metadata={"participant_id": participant.id},
                now_utc=now_utc,
            )
        await emit_activity(
            session,
            user_id=participant.user_id,
            activity_type=ActivityType.CHALLENGE_COMPLETED,
            content=f"Completed challenge {challenge.name}",
            related_id=challenge.id,
            metadata={"participant_id": participant.id, "reward_points": granted_points},
            happened_at=now_utc,
        )
        logger.info(
            "challenge_completed",
            user_id=participant.user_id,
            challenge_id=challenge.id,
            participant_id=participant.id,
            granted_points=granted_points,
        )
        return CompletionResult(
            participant=participant,
            granted_points=granted_points,
            idempotent_replay=False,
        )

    @staticmethod
    async def _lock_participant(
        session: AsyncSession,
        *,
        participant_id: int,
        user_id: int,
        now_utc: datetime,
    ) -> ChallengeParticipant | None:
        # Account lock first: it is a write, so it serializes on every backend, SQLite included.
        await PointsService.lock_account(session, user_id=user_id, now_utc=now_utc)
        return await ChallengeParticipantsRepo.get_by_id_for_update(session, participant_id)

    @staticmethod
    async def mark_completed(
        session: AsyncSession,
        *,
        participant_id: int,
        now_utc: datetime | None = None,
    ) -> CompletionResult:
        now_utc = now_utc or datetime.now(timezone.utc)

        participant = await ParticipationService.get_participant(session, participant_id)
        participant = await ParticipationService._lock_participant(
            session,
            participant_id=participant_id,
            user_id=participant.user_id,
            now_utc=now_utc,
        )
        if participant is None:
            raise IncentiveNotFoundError("challenge_participant", participant_id)

        status = ParticipantStatus(participant.status)
        if status is ParticipantStatus.COMPLETED:
            return CompletionResult(participant=participant, granted_points=0, idempotent_replay=True)
        if status is ParticipantStatus.FAILED:
            raise InvalidStatusTransitionError(
                current=status.value,
                target=ParticipantStatus.COMPLETED.value,
            )

        challenge = await ChallengesRepo.get_by_id(session, participant.challenge_id)
        if challenge is None:
            raise IncentiveNotFoundError("challenge", participant.challenge_id)

        return await ParticipationService._complete(
            session,
            participant=participant,
            challenge=challenge,
            now_utc=now_utc,
        )

    @staticmethod
    async def evaluate(
        session: AsyncSession,
        *,
        participant_id: int,
        now_utc: datetime | None = None,
    ) -> CompletionResult | None:
        """Completes the participant when its progress meets the challenge criteria."""
        participant = await ParticipationService.get_participant(session, participant_id)
        challenge = await ChallengesRepo.get_by_id(session, participant.challenge_id)
        if challenge is None:
            raise IncentiveNotFoundError("challenge", participant.challenge_id)

        if participant.status == ParticipantStatus.COMPLETED.value:
            return CompletionResult(participant=participant, granted_points=0, idempotent_replay=True)
        if not criteria_met(challenge.criteria, participant.progress):
            return None

        return await ParticipationService.mark_completed(
            session,
            participant_id=participant_id,
            now_utc=now_utc,
        )

    @staticmethod
    async def _fail(
        session: AsyncSession,
        *,
        participant: ChallengeParticipant,
        challenge: Challenge,
        now_utc: datetime,
    ) -> None:
        participant.status = ParticipantStatus.FAILED.value
        participant.updated_at = now_utc
        await session.flush()

        await emit_activity(
            session,
            user_id=participant.user_id,
            activity_type=ActivityType.CHALLENGE_FAILED,
            content=f"Challenge {challenge.name} ended before the goal was reached",
            related_id=challenge.id,
            metadata={"participant_id": participant.id},
            happened_at=now_utc,
        )
        logger.info(
            "challenge_participant_failed",
            user_id=participant.user_id,
            challenge_id=challenge.id,
            participant_id=participant.id,
        )

    @staticmethod
    async def settle_ended(session: AsyncSession, *, now_utc: datetime) -> dict[str, int]:
        """Closes in-progress participants of challenges whose window has ended.

        Each candidate is re-read under its user's account lock, so a participant
        completed concurrently through the API is skipped rather than settled twice.
        """
        rows = await ChallengeParticipantsRepo.list_in_progress_for_ended_challenges(
            session,
            now_utc=now_utc,
        )
        completed = 0
        failed = 0
        for candidate, challenge in rows:
            participant = await ParticipationService._lock_participant(
                session,
                participant_id=candidate.id,
                user_id=candidate.user_id,
                now_utc=now_utc,
            )
            if participant is None or participant.status != ParticipantStatus.IN_PROGRESS.value:
                continue

            if criteria_met(challenge.criteria, participant.progress):
                await ParticipationService._complete(
                    session,
                    participant=participant,
                    challenge=challenge,
                    now_utc=now_utc,
                )
                completed += 1
                continue

            await ParticipationService._fail(
                session,
                participant=participant,
                challenge=challenge,
                now_utc=now_utc,
            )
            failed += 1
        return {"completed_participants": completed, "failed_participants": failed}

    @staticmethod
    async def list_for_user(session: AsyncSession, *, user_id: int) -> list[UserChallenge]:
        participants = await ChallengeParticipantsRepo.list_for_user(session, user_id=user_id)
        challenges = await ChallengesRepo.list_by_ids(
            session,
            {participant.challenge_id for participant in participants},
        )
        return [
            UserChallenge(challenge=challenges[participant.challenge_id], participant=participant)
            for participant in participants
            if participant.challenge_id in challenges
        ]
