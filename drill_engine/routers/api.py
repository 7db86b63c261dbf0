"""API routes: JSON for due drills, submissions, events and skill ratings."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from drill_engine.core.config import get_settings
from drill_engine.core.errors import EntryNotFoundError
from drill_engine.core.security import get_current_user_id
from drill_engine.db.session import get_db
from drill_engine.schemas.drill import (
    BootstrapOut,
    BootstrapSchema,
    DrillQueueEntryOut,
    DrillResultOut,
    DrillSubmitSchema,
    ReasonUpdateSchema,
    TrainingEventOut,
)
from drill_engine.schemas.skill import SkillRatingSnapshot
from drill_engine.services.due import due_drills
from drill_engine.services.event_log import TrainingEventLog, event_to_schema
from drill_engine.services.queue import bootstrap_queue
from drill_engine.services.scheduling import SchedulingPolicy, utcnow
from drill_engine.services.skill_rating import SqlSkillRatingAggregator, StepRatingStrategy
from drill_engine.services.submission import SubmissionHandler

router = APIRouter(prefix="/api", tags=["api"])
settings = get_settings()

UserId = Annotated[str, Depends(get_current_user_id)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_skill_rating_aggregator(db: DbSession) -> SqlSkillRatingAggregator:
    return SqlSkillRatingAggregator(db, StepRatingStrategy.from_settings(settings))


def get_submission_handler(
    db: DbSession,
    aggregator: Annotated[SqlSkillRatingAggregator, Depends(get_skill_rating_aggregator)],
) -> SubmissionHandler:
    return SubmissionHandler(db, aggregator, SchedulingPolicy.from_settings(settings))


@router.get("/drills/due", response_model=list[DrillQueueEntryOut])
async def get_due_drills(
    user_id: UserId,
    db: DbSession,
    limit: Annotated[int, Query(ge=1, le=settings.due_limit_max)] = settings.due_limit_default,
):
    """Queue rows ready to be drilled, oldest first."""
    return await due_drills(db, user_id, limit, utcnow())


@router.post("/drills/submit", response_model=DrillResultOut, response_model_exclude_unset=True)
async def submit_drill_result(
    body: DrillSubmitSchema,
    user_id: UserId,
    handler: Annotated[SubmissionHandler, Depends(get_submission_handler)],
):
    """Grade one attempt, advance the schedule, return the result."""
    return await handler.submit(user_id, body)


@router.post("/drills/reason")
async def update_reason_only(
    body: ReasonUpdateSchema,
    user_id: UserId,
    handler: Annotated[SubmissionHandler, Depends(get_submission_handler)],
):
    """Attach a mistake reason to an earlier incorrect attempt."""
    await handler.update_reason_only(user_id, body.training_event_id, body.mistake_reason)
    return {"ok": True}


@router.post("/drills/bootstrap", response_model=BootstrapOut)
async def bootstrap_drill_queue(body: BootstrapSchema, user_id: UserId, db: DbSession):
    """Create the first queue rows from identified leaks; no-op when a queue exists."""
    created = await bootstrap_queue(
        db, user_id, body.leak_tags, max_leaks=settings.bootstrap_max_leaks, now=utcnow()
    )
    return BootstrapOut(created=len(created), leak_tags=[e.leak_tag for e in created])


@router.get("/training-events/{event_id}", response_model=TrainingEventOut)
async def get_training_event(event_id: str, user_id: UserId, db: DbSession):
    event = await TrainingEventLog(db).get_owned(event_id, user_id)
    if event is None:
        raise EntryNotFoundError("training event not found")
    return event_to_schema(event)


@router.get("/skill-ratings", response_model=list[SkillRatingSnapshot])
async def list_skill_ratings(
    user_id: UserId,
    aggregator: Annotated[SqlSkillRatingAggregator, Depends(get_skill_rating_aggregator)],
):
    return await aggregator.list_for_user(user_id)
