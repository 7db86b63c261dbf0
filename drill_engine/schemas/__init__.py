from drill_engine.schemas.drill import (
    BootstrapOut,
    BootstrapSchema,
    DrillQueueEntryOut,
    DrillResultOut,
    DrillSubmitSchema,
    ReasonUpdateSchema,
    TrainingEventOut,
)
from drill_engine.schemas.scenario import ActionDecisionScenario, RaiseSizingScenario, parse_scenario
from drill_engine.schemas.skill import SkillRatingSnapshot

__all__ = [
    "ActionDecisionScenario",
    "BootstrapOut",
    "BootstrapSchema",
    "DrillQueueEntryOut",
    "DrillResultOut",
    "DrillSubmitSchema",
    "RaiseSizingScenario",
    "ReasonUpdateSchema",
    "SkillRatingSnapshot",
    "TrainingEventOut",
    "parse_scenario",
]
