from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from incentive_ledger.db.models.base import BigIntPK, Base, JSONDocument, UTCDateTime


class PointTransaction(Base):
    __tablename__ = "point_transactions"
    __append_only__ = True
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_point_transactions_amount_positive"),
        CheckConstraint(
            "transaction_type IN ('reward','bonus','redemption')",
            name="ck_point_transactions_type",
        ),
        Index("idx_point_transactions_user_created", "user_id", "created_at"),
        Index("idx_point_transactions_type", "transaction_type"),
        Index("idx_point_transactions_reference", "reference_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(16), nullable=False)
    reference_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    metadata_: Mapped[dict[str, object]] = mapped_column(
        "metadata",
        JSONDocument,
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
