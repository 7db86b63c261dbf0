"""Training event: immutable record of one graded attempt."""
import uuid

from sqlalchemy import Boolean, Column, Float, Index, String, Text

from drill_engine.db.session import Base
from drill_engine.db.types import UTCDateTime

# SQLite doesn't have native JSON; scenario is kept as the JSON text that was
# submitted so it reads back unchanged


class TrainingEvent(Base):
    __tablename__ = "training_events"
    __table_args__ = (
        Index("ix_training_events_user_leak_created", "user_id", "leak_tag", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    drill_queue_id = Column(String(36), nullable=True, index=True)
    scenario_json = Column(Text, nullable=False)
    drill_type = Column(String(32), nullable=False)  # action_decision | raise_sizing
    user_answer = Column(String(16), nullable=False)
    correct_answer = Column(String(16), nullable=False)
    raise_size_bb = Column(Float, nullable=True)
    is_correct = Column(Boolean, nullable=False)
    leak_tag = Column(String(64), nullable=False)
    mistake_tag = Column(String(64), nullable=True)  # = leak_tag when incorrect
    mistake_reason = Column(String(16), nullable=True)  # null iff is_correct
    created_at = Column(UTCDateTime(), nullable=False)
