"""SQLAlchemy declarative base and model imports for Alembic."""
from drill_engine.db.session import Base

# Import all models so Alembic can see them
from drill_engine.models.drill_queue import DrillQueueEntry  # noqa: F401
from drill_engine.models.skill_rating import SkillRating  # noqa: F401
from drill_engine.models.training_event import TrainingEvent  # noqa: F401

__all__ = ["Base", "DrillQueueEntry", "TrainingEvent", "SkillRating"]
