"""Append-only log of graded attempts."""
import json
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from drill_engine.models.training_event import TrainingEvent
from drill_engine.schemas.drill import TrainingEventOut

MISTAKE_REASONS = ("range", "sizing", "position", "board", "stack", "unknown")
UNKNOWN_REASON = "unknown"


def coerce_mistake_reason(is_correct: bool, reason: str | None) -> str | None:
    """Null for a correct answer, otherwise an allowed reason (default "unknown")."""
    if is_correct:
        return None
    value = (reason or "").strip().lower()
    return value if value in MISTAKE_REASONS else UNKNOWN_REASON


class TrainingEventLog:
    """Events are inserted once and never deleted. The only later write is
    the mistake reason of an incorrect attempt."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(
        self,
        *,
        user_id: str,
        drill_queue_id: str | None,
        scenario: dict[str, Any],
        drill_type: str,
        user_answer: str,
        correct_answer: str,
        is_correct: bool,
        leak_tag: str,
        mistake_reason: str | None,
        created_at: datetime,
        raise_size_bb: float | None = None,
    ) -> TrainingEvent:
        """Stage the event and flush so its id is available; the caller commits."""
        event = TrainingEvent(
            user_id=user_id,
            drill_queue_id=drill_queue_id,
            scenario_json=json.dumps(scenario, ensure_ascii=False),
            drill_type=drill_type,
            user_answer=user_answer,
            correct_answer=correct_answer,
            raise_size_bb=raise_size_bb,
            is_correct=is_correct,
            leak_tag=leak_tag,
            mistake_tag=None if is_correct else leak_tag,
            mistake_reason=coerce_mistake_reason(is_correct, mistake_reason),
            created_at=created_at,
        )
        self.session.add(event)
        await self.session.flush()
        return event

    async def get_owned(self, event_id: str, user_id: str) -> TrainingEvent | None:
        result = await self.session.execute(
            select(TrainingEvent).where(TrainingEvent.id == event_id, TrainingEvent.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def update_reason(self, event_id: str, user_id: str, reason: str | None) -> bool:
        """Set the mistake reason of an owned, incorrect event. Returns False on no match.

        A missing ``reason`` leaves the stored one untouched. The caller commits.
        """
        if reason is None:
            return False
        result = await self.session.execute(
            update(TrainingEvent)
            .where(
                TrainingEvent.id == event_id,
                TrainingEvent.user_id == user_id,
                TrainingEvent.is_correct == False,  # noqa: E712
            )
            .values(mistake_reason=coerce_mistake_reason(False, reason))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.debug(f"mistake reason update matched nothing: event={event_id} user={user_id}")
            return False
        return True


def event_to_schema(event: TrainingEvent) -> TrainingEventOut:
    return TrainingEventOut(
        id=event.id,
        drill_queue_id=event.drill_queue_id,
        scenario=json.loads(event.scenario_json),
        drill_type=event.drill_type,
        user_answer=event.user_answer,
        correct_answer=event.correct_answer,
        raise_size_bb=event.raise_size_bb,
        is_correct=event.is_correct,
        leak_tag=event.leak_tag,
        mistake_tag=event.mistake_tag,
        mistake_reason=event.mistake_reason,
        created_at=event.created_at,
    )
