"""Drill queue rows: one mutable scheduling record per (user, leak)."""
from datetime import datetime

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from drill_engine.core.errors import PersistenceError
from drill_engine.models.drill_queue import STATUS_DUE, DrillQueueEntry
from drill_engine.services.leaks import top_leak_tags
from drill_engine.services.scheduling import Schedule


class DrillQueueRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_owned(self, entry_id: str, user_id: str) -> DrillQueueEntry | None:
        """Row by id, only if it belongs to ``user_id``."""
        result = await self.session.execute(
            select(DrillQueueEntry).where(DrillQueueEntry.id == entry_id, DrillQueueEntry.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def advance(
        self,
        entry: DrillQueueEntry,
        schedule: Schedule,
        *,
        last_score: int,
        last_drill_id: str,
        now: datetime,
    ) -> bool:
        """Write a new schedule if nobody else has since the row was read.

        The update is conditioned on the version observed in ``entry``; a
        False return means another writer advanced the row first.
        """
        observed_version = entry.version
        result = await self.session.execute(
            update(DrillQueueEntry)
            .where(
                DrillQueueEntry.id == entry.id,
                DrillQueueEntry.user_id == entry.user_id,
                DrillQueueEntry.version == observed_version,
            )
            .values(
                repetition=schedule.repetition,
                status=schedule.status,
                due_at=schedule.due_at,
                last_score=last_score,
                last_drill_id=last_drill_id,
                updated_at=now,
                version=observed_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_for_user(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count(DrillQueueEntry.id)).where(DrillQueueEntry.user_id == user_id)
        )
        return result.scalar_one()

    async def bootstrap(self, user_id: str, leak_tags: list[str], now: datetime) -> list[DrillQueueEntry]:
        """Create due rows for a user who has none yet. Tags must be canonical.

        Returns an empty list when a concurrent bootstrap for the same user
        committed first.
        """
        entries = [
            DrillQueueEntry(
                user_id=user_id,
                leak_tag=tag,
                status=STATUS_DUE,
                due_at=now,
                repetition=0,
                version=0,
                created_at=now,
                updated_at=now,
            )
            for tag in leak_tags
        ]
        self.session.add_all(entries)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info(f"drill queue already bootstrapped by another request: user={user_id}")
            return []
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(f"failed to bootstrap drill queue: user={user_id}: {exc}")
            raise PersistenceError("failed to create drill queue") from exc
        return entries


async def bootstrap_queue(
    session: AsyncSession,
    user_id: str,
    labels: list[str],
    *,
    max_leaks: int,
    now: datetime,
) -> list[DrillQueueEntry]:
    """Seed the queue from identified leaks, once per user.

    Returns the created rows; an empty list when the user already has a queue.
    """
    repo = DrillQueueRepository(session)
    if await repo.count_for_user(user_id) > 0:
        return []
    return await repo.bootstrap(user_id, top_leak_tags(labels, max_leaks), now)
