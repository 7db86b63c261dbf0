"""Grading of one drill attempt and the follow-up mistake-reason update.

A submission runs validate -> authorize -> grade -> persist -> aggregate ->
respond. Persisting the event and advancing the queue row is all-or-nothing;
the skill-rating step afterwards is best-effort.
"""
from collections.abc import Callable
from datetime import datetime

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from drill_engine.core.errors import (
    ConflictError,
    DrillEngineError,
    EntryNotFoundError,
    PersistenceError,
    SubmissionValidationError,
)
from drill_engine.schemas.drill import DrillResultOut, DrillSubmitSchema
from drill_engine.schemas.scenario import ACTION_DECISION, DRILL_TYPES, VALID_ANSWERS, parse_scenario
from drill_engine.services.event_log import TrainingEventLog
from drill_engine.services.leaks import normalize_leak_tag
from drill_engine.services.queue import DrillQueueRepository
from drill_engine.services.scheduling import SchedulingPolicy, utcnow
from drill_engine.services.skill_rating import SkillRatingAggregator, record_outcome_best_effort

SCORE_CORRECT = 100
SCORE_WRONG = 0


def resolve_drill_type(body: DrillSubmitSchema) -> str:
    """Submission first, then the snapshot, then action_decision."""
    scenario_type = body.scenario.get("drill_type")
    drill_type = body.drill_type or scenario_type or ACTION_DECISION
    if drill_type not in DRILL_TYPES:
        raise SubmissionValidationError(f"drill_type must be one of {', '.join(DRILL_TYPES)}")
    if scenario_type and scenario_type != drill_type:
        raise SubmissionValidationError("scenario.drill_type does not match drill_type")
    return drill_type


def resolve_answer(body: DrillSubmitSchema, drill_type: str) -> str:
    raw = body.user_answer if body.user_answer is not None else body.user_action
    answer = (raw or "").strip().lower()
    allowed = VALID_ANSWERS[drill_type]
    if answer not in allowed:
        raise SubmissionValidationError(f"answer for {drill_type} must be one of {', '.join(allowed)}")
    return answer


class SubmissionHandler:
    def __init__(
        self,
        session: AsyncSession,
        aggregator: SkillRatingAggregator,
        policy: SchedulingPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.aggregator = aggregator
        self.policy = policy or SchedulingPolicy()
        self.clock = clock
        self.queue = DrillQueueRepository(session)
        self.events = TrainingEventLog(session)

    async def submit(self, user_id: str, body: DrillSubmitSchema) -> DrillResultOut:
        # Validate
        drill_type = resolve_drill_type(body)
        answer = resolve_answer(body, drill_type)
        try:
            scenario = parse_scenario(drill_type, body.scenario)
        except ValidationError as exc:
            raise SubmissionValidationError(f"invalid {drill_type} scenario: {exc.errors()[0]['msg']}") from exc

        # Authorize
        entry = await self.queue.get_owned(body.drill_queue_id, user_id)
        if entry is None:
            raise EntryNotFoundError("drill_queue not found or access denied")

        # Grade
        expected = scenario.expected_answer
        is_correct = answer == expected
        leak_tag = normalize_leak_tag(entry.leak_tag)
        now = self.clock()
        schedule = self.policy.next_schedule(entry.repetition, is_correct, now)

        # Persist: event first, then the guarded queue write, one transaction
        try:
            event = await self.events.append(
                user_id=user_id,
                drill_queue_id=entry.id,
                scenario=body.scenario,
                drill_type=drill_type,
                user_answer=answer,
                correct_answer=expected,
                is_correct=is_correct,
                leak_tag=leak_tag,
                mistake_reason=body.mistake_reason,
                created_at=now,
                raise_size_bb=body.raise_size_bb,
            )
            advanced = await self.queue.advance(
                entry,
                schedule,
                last_score=SCORE_CORRECT if is_correct else SCORE_WRONG,
                last_drill_id=event.id,
                now=now,
            )
            if not advanced:
                raise ConflictError("drill_queue entry was updated by another request")
            event_id = event.id
            await self.session.commit()
        except DrillEngineError as exc:
            await self.session.rollback()
            if isinstance(exc, ConflictError):
                logger.warning(f"submission conflict: user={user_id} entry={body.drill_queue_id}")
            raise
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(f"failed to persist graded attempt: user={user_id} entry={body.drill_queue_id}: {exc}")
            raise PersistenceError("failed to save training result") from exc

        logger.info(
            f"graded drill user={user_id} entry={entry.id} leak={leak_tag} "
            f"correct={is_correct} repetition={schedule.repetition}"
        )

        # Aggregate
        outcome = await record_outcome_best_effort(
            self.aggregator,
            self.session,
            user_id=user_id,
            leak_tag=leak_tag,
            is_correct=is_correct,
            practiced_at=now,
        )

        fields = dict(
            ok=True,
            correct=is_correct,
            explanation=scenario.explanation,
            next_due_at=schedule.due_at,
            repetition=schedule.repetition,
            training_event_id=event_id,
        )
        # skill_rating stays unset when the aggregate step failed
        if outcome.snapshot is not None:
            fields["skill_rating"] = outcome.snapshot
        return DrillResultOut(**fields)

    async def update_reason_only(self, user_id: str, training_event_id: str, mistake_reason: str | None) -> None:
        """Best-effort enrichment; unknown or foreign ids are a no-op."""
        try:
            await self.events.update_reason(training_event_id, user_id, mistake_reason)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError("failed to update mistake reason") from exc
