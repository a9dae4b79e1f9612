"""Question kind models for survey definitions.

Each kind maps to a specific UI control and answer shape:

    - scale: integer slider between ``min`` and ``max``      → number
    - rating: fixed 1-5 stars                                → number
    - text: open-ended text input                            → string
    - choice: pick one of ``options``                        → string
    - multi_select: pick one or more of ``options``          → list[str]

The discriminated ``Question`` union uses ``kind`` as its discriminator.
The ``question_mapper`` dict maps kind strings to their Pydantic classes.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from survey_runtime.constants import (
    DEFAULT_SCALE_MAX,
    DEFAULT_SCALE_MIN,
    END_TARGET,
    RATING_MAX,
    RATING_MIN,
)

from .rule import Rule


# --- Base question type ---

class BaseQuestion(BaseModel):
    """Fields shared by all question kinds.  Immutable for a session."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    required: bool = True
    position: int = 0
    branching_rules: List[Rule] = Field(default_factory=list)

    @model_validator(mode="after")
    def _chk_id(self):
        if not self.id or self.id == END_TARGET:
            raise ValueError(f"question id must be non-empty and not {END_TARGET!r}")
        return self


# --- Numeric kinds ---

class ScaleQuestion(BaseQuestion):
    """Integer scale with inclusive ``min``/``max`` bounds."""

    kind: Literal["scale"] = "scale"
    min: int = DEFAULT_SCALE_MIN
    max: int = DEFAULT_SCALE_MAX
    min_label: Optional[str] = None
    max_label: Optional[str] = None

    @model_validator(mode="after")
    def _chk(self):
        if self.min >= self.max:
            raise ValueError("min must be < max")
        return self


class RatingQuestion(BaseQuestion):
    """Fixed 1-5 rating."""

    kind: Literal["rating"] = "rating"

    @property
    def min(self) -> int:
        return RATING_MIN

    @property
    def max(self) -> int:
        return RATING_MAX


# --- Text kinds ---

class TextQuestion(BaseQuestion):
    """Open-ended text input."""

    kind: Literal["text"] = "text"


class ChoiceQuestion(BaseQuestion):
    """Pick exactly one option label."""

    kind: Literal["choice"] = "choice"
    options: List[str] = Field(min_length=1)


class MultiSelectQuestion(BaseQuestion):
    """Pick one or more option labels."""

    kind: Literal["multi_select"] = "multi_select"
    options: List[str] = Field(min_length=1)


# --- Discriminated union of all kinds ---

Question = Annotated[
    Union[
        ScaleQuestion,
        RatingQuestion,
        TextQuestion,
        ChoiceQuestion,
        MultiSelectQuestion,
    ],
    Field(discriminator="kind"),
]

# Maps kind string → Pydantic class for dynamic deserialization.
question_mapper = {
    "scale": ScaleQuestion,
    "rating": RatingQuestion,
    "text": TextQuestion,
    "choice": ChoiceQuestion,
    "multi_select": MultiSelectQuestion,
}
