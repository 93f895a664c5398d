from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from incentive_ledger.db.models.base import Base, UTCDateTime


class PointAccount(Base):
    """Per-user lock anchor. The balance is always folded from point_transactions."""

    __tablename__ = "point_accounts"

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    opened_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    last_locked_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
