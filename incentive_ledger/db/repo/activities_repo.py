from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.activities import Activity


class ActivitiesRepo:
    @staticmethod
    async def create(session: AsyncSession, *, activity: Activity) -> Activity:
        session.add(activity)
        await session.flush()
        return activity

    @staticmethod
    async def list_recent_for_user(
        session: AsyncSession,
        *,
        user_id: int,
        limit: int = 20,
    ) -> list[Activity]:
        stmt = (
            select(Activity)
            .where(Activity.user_id == user_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
