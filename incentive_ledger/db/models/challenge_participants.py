from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from incentive_ledger.db.models.base import BigIntPK, Base, JSONDocument, UTCDateTime


class ChallengeParticipant(Base):
    __tablename__ = "challenge_participants"
    __table_args__ = (
        CheckConstraint(
            "status IN ('in_progress','completed','failed')",
            name="ck_challenge_participants_status",
        ),
        UniqueConstraint("challenge_id", "user_id", name="uq_challenge_participants_challenge_user"),
        Index("idx_challenge_participants_user", "user_id"),
        Index("idx_challenge_participants_status", "status"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    challenge_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("challenges.id"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    progress: Mapped[dict[str, object]] = mapped_column(JSONDocument, nullable=False, default=dict)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
