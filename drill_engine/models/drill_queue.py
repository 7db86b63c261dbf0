"""Drill queue entry: scheduling state for one (user, leak) pair."""
import uuid

from sqlalchemy import Column, ForeignKey, Index, Integer, String, UniqueConstraint

from drill_engine.db.session import Base
from drill_engine.db.types import UTCDateTime

STATUS_SCHEDULED = "scheduled"
STATUS_DUE = "due"
ACTIVE_STATUSES = (STATUS_DUE, STATUS_SCHEDULED)


def _new_id() -> str:
    return str(uuid.uuid4())


class DrillQueueEntry(Base):
    __tablename__ = "drill_queue"
    __table_args__ = (
        UniqueConstraint("user_id", "leak_tag", name="uq_drill_queue_user_leak_tag"),
        Index("ix_drill_queue_user_due_at", "user_id", "due_at"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    leak_tag = Column(String(64), nullable=False)
    drill_type = Column(String(32), nullable=False, default="action_decision")
    status = Column(String(16), nullable=False, default=STATUS_DUE)  # due | scheduled
    due_at = Column(UTCDateTime(), nullable=False)
    repetition = Column(Integer, nullable=False, default=0)
    # bumped on every scheduling write; guards concurrent submissions
    version = Column(Integer, nullable=False, default=0)
    last_score = Column(Integer, nullable=True)  # 0 or 100
    last_drill_id = Column(String(36), ForeignKey("training_events.id"), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=False)
