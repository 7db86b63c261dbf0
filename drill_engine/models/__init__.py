from drill_engine.models.drill_queue import DrillQueueEntry
from drill_engine.models.training_event import TrainingEvent
from drill_engine.models.skill_rating import SkillRating

__all__ = ["DrillQueueEntry", "TrainingEvent", "SkillRating"]
