from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from incentive_ledger.db.models.challenge_participants import ChallengeParticipant
from incentive_ledger.db.models.challenges import Challenge


class ChallengeStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELED = "canceled"


class ParticipantStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class UserChallenge:
    challenge: Challenge
    participant: ChallengeParticipant


@dataclass(slots=True)
class CompletionResult:
    participant: ChallengeParticipant
    granted_points: int
    idempotent_replay: bool
