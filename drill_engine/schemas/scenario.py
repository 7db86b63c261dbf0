"""Quiz snapshot shown to the user, one variant per drill type.

The snapshot is generated elsewhere and submitted back verbatim. Only the
fields grading needs are required; everything else is carried through.
"""
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

ACTION_DECISION = "action_decision"
RAISE_SIZING = "raise_sizing"
DRILL_TYPES = (ACTION_DECISION, RAISE_SIZING)

ACTION_ANSWERS = ("fold", "call", "raise")
RAISE_SIZING_ANSWERS = ("2.5x", "3x", "overbet")

VALID_ANSWERS = {
    ACTION_DECISION: ACTION_ANSWERS,
    RAISE_SIZING: RAISE_SIZING_ANSWERS,
}


def _normalize_answer(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class BoardSchema(BaseModel):
    flop: list[str]
    turn: str | None = None
    river: str | None = None


class ActionToHeroSchema(BaseModel):
    type: str  # bet | check | raise
    size_bb: float = 0


class _TableScenario(BaseModel):
    game: str | None = None
    hero_pos: str | None = None
    villain_pos: str | None = None
    effective_stack_bb: float | None = None
    hero_cards: list[str] | None = None
    board: BoardSchema | None = None
    pot_bb: float | None = None
    street: str | None = None
    action_to_hero: ActionToHeroSchema | None = None
    explanation: str = ""
    leak_tag: str | None = None

    class Config:
        extra = "allow"


class ActionDecisionScenario(_TableScenario):
    drill_type: Literal["action_decision"]
    correct_action: Literal["fold", "call", "raise"]

    lower_correct_action = field_validator("correct_action", mode="before")(_normalize_answer)

    @property
    def expected_answer(self) -> str:
        return self.correct_action


class RaiseSizingScenario(_TableScenario):
    drill_type: Literal["raise_sizing"]
    options: list[str] | None = None
    correct_option: Literal["2.5x", "3x", "overbet"]
    rule_of_thumb: str | None = None

    lower_correct_option = field_validator("correct_option", mode="before")(_normalize_answer)

    @property
    def expected_answer(self) -> str:
        return self.correct_option


Scenario = Annotated[
    Union[ActionDecisionScenario, RaiseSizingScenario],
    Field(discriminator="drill_type"),
]

_scenario_adapter = TypeAdapter(Scenario)


def parse_scenario(drill_type: str, raw: dict[str, Any]) -> ActionDecisionScenario | RaiseSizingScenario:
    """Validate a raw snapshot as the variant for ``drill_type``.

    Raises pydantic.ValidationError when the snapshot does not fit.
    """
    return _scenario_adapter.validate_python({**raw, "drill_type": drill_type})
