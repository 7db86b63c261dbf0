"""Pydantic schemas for the drill queue, submissions and training events."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from drill_engine.schemas.skill import SkillRatingSnapshot


class DrillQueueEntryOut(BaseModel):
    id: str
    user_id: str
    leak_tag: str
    drill_type: str
    status: str
    due_at: datetime
    repetition: int
    last_score: int | None = None
    last_drill_id: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DrillSubmitSchema(BaseModel):
    drill_queue_id: str = Field(min_length=1)
    scenario: dict[str, Any]
    drill_type: str | None = None
    user_action: str | None = None
    user_answer: str | None = None
    raise_size_bb: float | None = Field(default=None, gt=0)
    mistake_reason: str | None = None


class DrillResultOut(BaseModel):
    ok: bool = True
    correct: bool
    explanation: str
    next_due_at: datetime
    repetition: int
    training_event_id: str
    skill_rating: SkillRatingSnapshot | None = None


class ReasonUpdateSchema(BaseModel):
    training_event_id: str
    mistake_reason: str | None = None


class TrainingEventOut(BaseModel):
    id: str
    drill_queue_id: str | None = None
    scenario: dict[str, Any]
    drill_type: str
    user_answer: str
    correct_answer: str
    raise_size_bb: float | None = None
    is_correct: bool
    leak_tag: str
    mistake_tag: str | None = None
    mistake_reason: str | None = None
    created_at: datetime


class BootstrapSchema(BaseModel):
    leak_tags: list[str] = []


class BootstrapOut(BaseModel):
    ok: bool = True
    created: int
    leak_tags: list[str] = []
