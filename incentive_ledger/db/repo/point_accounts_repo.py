from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.point_accounts import PointAccount


class PointAccountsRepo:
    @staticmethod
    async def get_by_user_id_for_update(session: AsyncSession, user_id: int) -> PointAccount | None:
        stmt = select(PointAccount).where(PointAccount.user_id == user_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def ensure_exists(session: AsyncSession, *, user_id: int, now_utc: datetime) -> None:
        dialect_name = session.get_bind().dialect.name
        insert = postgresql_insert if dialect_name == "postgresql" else sqlite_insert
        stmt = (
            insert(PointAccount)
            .values(user_id=user_id, opened_at=now_utc, last_locked_at=now_utc)
            .on_conflict_do_nothing(index_elements=[PointAccount.user_id])
        )
        await session.execute(stmt)

    @staticmethod
    async def lock(session: AsyncSession, *, user_id: int, now_utc: datetime) -> PointAccount:
        await PointAccountsRepo.ensure_exists(session, user_id=user_id, now_utc=now_utc)
        account = await PointAccountsRepo.get_by_user_id_for_update(session, user_id)
        if account is None:
            raise RuntimeError(f"point account for user {user_id} is missing after upsert")
        account.last_locked_at = now_utc
        await session.flush()
        return account
