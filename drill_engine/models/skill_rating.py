"""Skill rating: rolling proficiency per (user, leak), owned by the aggregator."""
import uuid

from sqlalchemy import Column, Integer, String, UniqueConstraint

from drill_engine.db.session import Base
from drill_engine.db.types import UTCDateTime


class SkillRating(Base):
    __tablename__ = "skill_ratings"
    __table_args__ = (UniqueConstraint("user_id", "leak_tag", name="uq_skill_ratings_user_leak_tag"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    leak_tag = Column(String(64), nullable=False)
    rating = Column(Integer, nullable=False, default=50)  # 0-100
    streak_correct = Column(Integer, nullable=False, default=0)
    attempts_7d = Column(Integer, nullable=False, default=0)
    correct_7d = Column(Integer, nullable=False, default=0)
    attempts_30d = Column(Integer, nullable=False, default=0)
    correct_30d = Column(Integer, nullable=False, default=0)
    total_attempts = Column(Integer, nullable=False, default=0)
    total_correct = Column(Integer, nullable=False, default=0)
    last_practice_at = Column(UTCDateTime(), nullable=True)
    last_mistake_at = Column(UTCDateTime(), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=False)
