"""Read-only selection of drills ready to be shown."""
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from drill_engine.models.drill_queue import ACTIVE_STATUSES, DrillQueueEntry


async def due_drills(session: AsyncSession, user_id: str, limit: int, now: datetime) -> list[DrillQueueEntry]:
    """The user's rows with ``due_at <= now``, oldest first, at most ``limit``."""
    if limit <= 0:
        return []
    result = await session.execute(
        select(DrillQueueEntry)
        .where(
            DrillQueueEntry.user_id == user_id,
            DrillQueueEntry.due_at <= now,
            DrillQueueEntry.status.in_(ACTIVE_STATUSES),
        )
        .order_by(DrillQueueEntry.due_at.asc(), DrillQueueEntry.id.asc())
        .limit(limit)
    )
    return list(result.scalars().all())
