from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from incentive_ledger.db.models.base import BigIntPK, Base, JSONDocument, UTCDateTime


class UserReward(Base):
    __tablename__ = "user_rewards"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','redeemed','expired','canceled')",
            name="ck_user_rewards_status",
        ),
        Index("idx_user_rewards_user_awarded", "user_id", "awarded_at"),
        Index("idx_user_rewards_reward", "reward_id"),
        Index("idx_user_rewards_status_expires", "status", "expires_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reward_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("rewards.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    awarded_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    redeemed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    metadata_: Mapped[dict[str, object]] = mapped_column(
        "metadata",
        JSONDocument,
        nullable=False,
        default=dict,
    )
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
