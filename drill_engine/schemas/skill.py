"""Pydantic schema for the skill-rating snapshot."""
from datetime import datetime

from pydantic import BaseModel


class SkillRatingSnapshot(BaseModel):
    leak_tag: str
    rating: int
    streak_correct: int = 0
    attempts_7d: int = 0
    correct_7d: int = 0
    attempts_30d: int = 0
    correct_30d: int = 0
    total_attempts: int = 0
    total_correct: int = 0
    last_practice_at: datetime | None = None
    last_mistake_at: datetime | None = None

    class Config:
        from_attributes = True
