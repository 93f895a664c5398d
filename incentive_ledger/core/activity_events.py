from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.activities import Activity
from incentive_ledger.db.repo.activities_repo import ActivitiesRepo
from incentive_ledger.economy.points.types import ActivityType

logger = structlog.get_logger(__name__)


async def emit_activity(
    session: AsyncSession,
    *,
    user_id: int,
    activity_type: ActivityType,
    content: str,
    happened_at: datetime,
    related_id: int | None = None,
    metadata: dict[str, object] | None = None,
) -> Activity:
    """Writes a feed entry in the caller's transaction, so it commits or rolls back with the change."""
    activity = await ActivitiesRepo.create(
        session,
        activity=Activity(
            user_id=user_id,
            type=activity_type.value,
            content=content,
            related_id=related_id,
            metadata_=metadata or {},
            created_at=happened_at,
        ),
    )
    logger.debug(
        "activity_emitted",
        user_id=user_id,
        activity_type=activity_type.value,
        related_id=related_id,
    )
    return activity
