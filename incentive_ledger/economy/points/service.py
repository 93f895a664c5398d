from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.core.activity_events import emit_activity
from incentive_ledger.db.models.point_transactions import PointTransaction
from incentive_ledger.db.repo.point_accounts_repo import PointAccountsRepo
from incentive_ledger.db.repo.point_transactions_repo import PointTransactionsRepo
from incentive_ledger.economy.points.types import ACTIVITY_BY_TRANSACTION_TYPE, TransactionType

logger = structlog.get_logger(__name__)


def _activity_content(*, transaction_type: TransactionType, amount: int, description: str) -> str:
    if transaction_type.is_credit:
        return f"Earned {amount} points: {description}"
    return f"Spent {amount} points: {description}"


class PointsService:
    @staticmethod
    async def lock_account(
        session: AsyncSession,
        *,
        user_id: int,
        now_utc: datetime | None = None,
    ) -> None:
        """Serializes read-validate-append sequences for one user until the transaction ends."""
        await PointAccountsRepo.lock(
            session,
            user_id=user_id,
            now_utc=now_utc or datetime.now(timezone.utc),
        )

    @staticmethod
    async def add_transaction(
        session: AsyncSession,
        *,
        user_id: int,
        amount: int,
        description: str,
        transaction_type: TransactionType,
        reference_id: int | None = None,
        metadata: dict[str, object] | None = None,
        now_utc: datetime | None = None,
    ) -> PointTransaction:
        if amount <= 0:
            raise ValueError("amount must be a positive magnitude")
        transaction_type = TransactionType(transaction_type)
        now_utc = now_utc or datetime.now(timezone.utc)

        transaction = await PointTransactionsRepo.create(
            session,
            transaction=PointTransaction(
                user_id=user_id,
                amount=amount,
                description=description,
                transaction_type=transaction_type.value,
                reference_id=reference_id,
                metadata_=metadata or {},
                created_at=now_utc,
            ),
        )
        await emit_activity(
            session,
            user_id=user_id,
            activity_type=ACTIVITY_BY_TRANSACTION_TYPE[transaction_type],
            content=_activity_content(
                transaction_type=transaction_type,
                amount=amount,
                description=description,
            ),
            related_id=reference_id,
            metadata={
                "transaction_id": transaction.id,
                "transaction_type": transaction_type.value,
                "amount": amount,
            },
            happened_at=now_utc,
        )
        logger.info(
            "point_transaction_appended",
            user_id=user_id,
            transaction_id=transaction.id,
            transaction_type=transaction_type.value,
            amount=amount,
            reference_id=reference_id,
        )
        return transaction

    @staticmethod
    async def grant_bonus(
        session: AsyncSession,
        *,
        user_id: int,
        amount: int,
        description: str,
        reference_id: int | None = None,
        metadata: dict[str, object] | None = None,
        now_utc: datetime | None = None,
    ) -> PointTransaction:
        return await PointsService.add_transaction(
            session,
            user_id=user_id,
            amount=amount,
            description=description,
            transaction_type=TransactionType.BONUS,
            reference_id=reference_id,
            metadata=metadata,
            now_utc=now_utc,
        )

    @staticmethod
    async def get_balance(session: AsyncSession, *, user_id: int) -> int:
        return await PointTransactionsRepo.get_balance(session, user_id=user_id)

    @staticmethod
    async def list_transactions(
        session: AsyncSession,
        *,
        user_id: int,
        limit: int | None = None,
    ) -> list[PointTransaction]:
        return await PointTransactionsRepo.list_for_user(session, user_id=user_id, limit=limit)
