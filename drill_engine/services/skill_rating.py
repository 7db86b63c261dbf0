"""Rolling skill rating per leak, updated after each graded attempt.

The submission path only knows the ``SkillRatingAggregator`` call contract:
(user, leak_tag, is_correct, practiced_at) in, snapshot out. How the rating
moves is a replaceable ``RatingStrategy``.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from loguru import logger
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from drill_engine.core.errors import AggregatorError
from drill_engine.models.skill_rating import SkillRating
from drill_engine.models.training_event import TrainingEvent
from drill_engine.schemas.skill import SkillRatingSnapshot


class SkillRatingAggregator(Protocol):
    async def record_outcome(
        self, user_id: str, leak_tag: str, is_correct: bool, practiced_at: datetime
    ) -> SkillRatingSnapshot:
        ...


class RatingStrategy(Protocol):
    def next_rating(self, current: int | None, is_correct: bool) -> int:
        ...


class StepRatingStrategy:
    """Fixed step up on a correct answer, larger step down on a miss, clamped."""

    def __init__(self, initial: int = 50, correct_delta: int = 4, wrong_delta: int = -6, lo: int = 0, hi: int = 100):
        self.initial = initial
        self.correct_delta = correct_delta
        self.wrong_delta = wrong_delta
        self.lo = lo
        self.hi = hi

    @classmethod
    def from_settings(cls, settings) -> "StepRatingStrategy":
        return cls(
            initial=settings.rating_initial,
            correct_delta=settings.rating_correct_delta,
            wrong_delta=settings.rating_wrong_delta,
            lo=settings.rating_min,
            hi=settings.rating_max,
        )

    def next_rating(self, current: int | None, is_correct: bool) -> int:
        base = self.initial if current is None else current
        delta = self.correct_delta if is_correct else self.wrong_delta
        return max(self.lo, min(self.hi, base + delta))


class SqlSkillRatingAggregator:
    """Keeps ``skill_ratings`` rows, windowed counts come from the event log."""

    def __init__(self, session: AsyncSession, strategy: RatingStrategy | None = None):
        self.session = session
        self.strategy = strategy or StepRatingStrategy()

    async def _window_counts(self, user_id: str, leak_tag: str, since: datetime) -> tuple[int, int]:
        result = await self.session.execute(
            select(
                func.count(TrainingEvent.id),
                func.sum(case((TrainingEvent.is_correct == True, 1), else_=0)),  # noqa: E712
            ).where(
                TrainingEvent.user_id == user_id,
                TrainingEvent.leak_tag == leak_tag,
                TrainingEvent.created_at >= since,
            )
        )
        attempts, correct = result.one()
        return attempts or 0, correct or 0

    async def record_outcome(
        self, user_id: str, leak_tag: str, is_correct: bool, practiced_at: datetime
    ) -> SkillRatingSnapshot:
        attempts_7d, correct_7d = await self._window_counts(user_id, leak_tag, practiced_at - timedelta(days=7))
        attempts_30d, correct_30d = await self._window_counts(user_id, leak_tag, practiced_at - timedelta(days=30))

        result = await self.session.execute(
            select(SkillRating).where(SkillRating.user_id == user_id, SkillRating.leak_tag == leak_tag)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = SkillRating(
                user_id=user_id,
                leak_tag=leak_tag,
                rating=self.strategy.next_rating(None, is_correct),
                streak_correct=1 if is_correct else 0,
                total_attempts=1,
                total_correct=1 if is_correct else 0,
                last_mistake_at=None if is_correct else practiced_at,
                created_at=practiced_at,
            )
            self.session.add(row)
        else:
            row.rating = self.strategy.next_rating(row.rating, is_correct)
            row.streak_correct = row.streak_correct + 1 if is_correct else 0
            row.total_attempts += 1
            row.total_correct += 1 if is_correct else 0
            if not is_correct:
                row.last_mistake_at = practiced_at

        row.last_practice_at = practiced_at
        row.attempts_7d = attempts_7d
        row.correct_7d = correct_7d
        row.attempts_30d = attempts_30d
        row.correct_30d = correct_30d
        row.updated_at = practiced_at

        await self.session.commit()
        return SkillRatingSnapshot.model_validate(row)

    async def list_for_user(self, user_id: str) -> list[SkillRatingSnapshot]:
        result = await self.session.execute(
            select(SkillRating).where(SkillRating.user_id == user_id).order_by(SkillRating.leak_tag.asc())
        )
        return [SkillRatingSnapshot.model_validate(r) for r in result.scalars().all()]


@dataclass(frozen=True)
class AggregateOutcome:
    snapshot: SkillRatingSnapshot | None = None
    error: AggregatorError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def record_outcome_best_effort(
    aggregator: SkillRatingAggregator,
    session: AsyncSession,
    *,
    user_id: str,
    leak_tag: str,
    is_correct: bool,
    practiced_at: datetime,
) -> AggregateOutcome:
    """Run the aggregator without letting its failure escape.

    Only called after grading is committed; a failure rolls back the
    aggregator's own pending work and is reported in the outcome.
    """
    try:
        snapshot = await aggregator.record_outcome(user_id, leak_tag, is_correct, practiced_at)
    except Exception as exc:  # Intentionally broad - statistics must never fail a graded attempt
        await session.rollback()
        logger.warning(f"skill rating update failed for user={user_id} leak={leak_tag}: {exc!r}")
        return AggregateOutcome(error=AggregatorError(detail=str(exc)))
    return AggregateOutcome(snapshot=snapshot)
