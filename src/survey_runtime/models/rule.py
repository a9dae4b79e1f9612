"""Branching rule models.

A rule is attached to a question and can redirect the next-question choice
based on the answer just given:

  - condition: equals | not_equals | greater_than | less_than
  - comparison_value: string or number the answer is compared against
  - target: another question's id, or the sentinel ``end``

Rules on a question are evaluated in list order; the first match wins.
"""

from typing import Literal, Union

from pydantic import BaseModel, field_validator

from survey_runtime.constants import END_TARGET

# Closed set of conditions.  The evaluator dispatches on these exhaustively.
Condition = Literal["equals", "not_equals", "greater_than", "less_than"]


class Rule(BaseModel):
    """A single conditional branch attached to a question."""

    condition: Condition
    comparison_value: Union[int, float, str]
    target: str

    @field_validator("target")
    @classmethod
    def _non_blank_target(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("rule target must not be blank")
        return v

    @property
    def ends_survey(self) -> bool:
        """True if matching this rule terminates the survey."""
        return self.target == END_TARGET
