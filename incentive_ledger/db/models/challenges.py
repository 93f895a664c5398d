from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from incentive_ledger.db.models.base import BigIntPK, Base, JSONDocument, UTCDateTime


class Challenge(Base):
    __tablename__ = "challenges"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active','completed','canceled')",
            name="ck_challenges_status",
        ),
        CheckConstraint("reward_points >= 0", name="ck_challenges_reward_points_non_negative"),
        CheckConstraint("start_date <= end_date", name="ck_challenges_window"),
        Index("idx_challenges_status_window", "status", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    criteria: Mapped[dict[str, object]] = mapped_column(JSONDocument, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    reward_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
