from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from incentive_ledger.db.models.activities import Activity
from incentive_ledger.db.models.point_transactions import PointTransaction
from incentive_ledger.economy.errors import LedgerStorageError
from incentive_ledger.economy.points.locks import ledger_session
from incentive_ledger.economy.points.service import PointsService
from incentive_ledger.economy.points.types import TransactionType
from tests.integration.incentive_fixtures import UTC, _balance, _credit


@pytest.mark.asyncio
async def test_balance_folds_credits_minus_redemptions() -> None:
    now_utc = datetime.now(UTC)
    await _credit(user_id=7, amount=100, now_utc=now_utc)
    await _credit(user_id=7, amount=50, now_utc=now_utc, transaction_type=TransactionType.BONUS)
    await _credit(
        user_id=7,
        amount=30,
        now_utc=now_utc,
        transaction_type=TransactionType.REDEMPTION,
        description="Coffee Voucher",
    )
    await _credit(user_id=8, amount=999, now_utc=now_utc)

    assert await _balance(7) == 120
    assert await _balance(8) == 999
    assert await _balance(404) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -5])
async def test_add_transaction_rejects_non_positive_amount(amount: int) -> None:
    with pytest.raises(ValueError):
        async with ledger_session() as session:
            await PointsService.add_transaction(
                session,
                user_id=7,
                amount=amount,
                description="broken",
                transaction_type=TransactionType.REWARD,
            )

    async with ledger_session() as session:
        count = await session.scalar(select(func.count(PointTransaction.id)))
    assert count == 0


@pytest.mark.asyncio
async def test_transactions_listed_newest_first_with_limit() -> None:
    now_utc = datetime.now(UTC)
    for offset in range(4):
        await _credit(
            user_id=11,
            amount=10 + offset,
            now_utc=now_utc + timedelta(minutes=offset),
            description=f"deal {offset}",
        )

    async with ledger_session() as session:
        latest_two = await PointsService.list_transactions(session, user_id=11, limit=2)
        everything = await PointsService.list_transactions(session, user_id=11)

    assert [item.description for item in latest_two] == ["deal 3", "deal 2"]
    assert len(everything) == 4


@pytest.mark.asyncio
async def test_point_transactions_reject_update_and_delete() -> None:
    now_utc = datetime.now(UTC)
    transaction_id = await _credit(user_id=7, amount=100, now_utc=now_utc)

    with pytest.raises(ValueError, match="append-only"):
        async with ledger_session() as session:
            transaction = await session.get(PointTransaction, transaction_id)
            transaction.amount = 1000
            await session.flush()

    with pytest.raises(ValueError, match="append-only"):
        async with ledger_session() as session:
            transaction = await session.get(PointTransaction, transaction_id)
            await session.delete(transaction)
            await session.flush()

    assert await _balance(7) == 100


@pytest.mark.asyncio
async def test_each_transaction_emits_one_activity() -> None:
    now_utc = datetime.now(UTC)
    transaction_id = await _credit(user_id=7, amount=40, now_utc=now_utc, description="Onboarding")

    async with ledger_session() as session:
        activities = (await session.execute(select(Activity))).scalars().all()

    assert len(activities) == 1
    assert activities[0].type == "points_earned"
    assert activities[0].content == "Earned 40 points: Onboarding"
    assert activities[0].metadata_["transaction_id"] == transaction_id


@pytest.mark.asyncio
async def test_rolled_back_transaction_leaves_no_entry_or_activity() -> None:
    now_utc = datetime.now(UTC)
    with pytest.raises(RuntimeError):
        async with ledger_session() as session:
            await PointsService.add_transaction(
                session,
                user_id=7,
                amount=40,
                description="Onboarding",
                transaction_type=TransactionType.REWARD,
                now_utc=now_utc,
            )
            raise RuntimeError("caller failed after append")

    async with ledger_session() as session:
        assert await session.scalar(select(func.count(PointTransaction.id))) == 0
        assert await session.scalar(select(func.count(Activity.id))) == 0


@pytest.mark.asyncio
async def test_storage_errors_surface_as_ledger_storage_error() -> None:
    with pytest.raises(LedgerStorageError):
        async with ledger_session():
            raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))
