from __future__ import annotations

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.point_transactions import PointTransaction

CREDIT_TRANSACTION_TYPES = ("reward", "bonus")
DEBIT_TRANSACTION_TYPES = ("redemption",)


class PointTransactionsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, transaction: PointTransaction) -> PointTransaction:
        session.add(transaction)
        await session.flush()
        return transaction

    @staticmethod
    async def get_balance(session: AsyncSession, *, user_id: int) -> int:
        signed_amount = case(
            (PointTransaction.transaction_type.in_(CREDIT_TRANSACTION_TYPES), PointTransaction.amount),
            (PointTransaction.transaction_type.in_(DEBIT_TRANSACTION_TYPES), -PointTransaction.amount),
            else_=0,
        )
        stmt = select(func.coalesce(func.sum(signed_amount), 0)).where(
            PointTransaction.user_id == user_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def list_for_user(
        session: AsyncSession,
        *,
        user_id: int,
        limit: int | None = None,
    ) -> list[PointTransaction]:
        stmt = (
            select(PointTransaction)
            .where(PointTransaction.user_id == user_id)
            .order_by(PointTransaction.created_at.desc(), PointTransaction.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())
