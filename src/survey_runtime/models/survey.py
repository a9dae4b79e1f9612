"""Survey definition model — what a Survey Definition Provider hands back.

Questions must already be sorted by ``position``; the navigator never
re-sorts them.  Rule targets are *not* checked against question ids here:
a dangling target is a defined runtime fallback, not a load error.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .question import Question


class SurveyDefinition(BaseModel):
    """Read-only survey definition fetched once per session."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    questions: List[Question] = Field(min_length=1)

    @model_validator(mode="after")
    def _chk_unique_ids(self):
        seen: set[str] = set()
        for q in self.questions:
            if q.id in seen:
                raise ValueError(f"duplicate question id: {q.id}")
            seen.add(q.id)
        return self

    def index_of(self, question_id: str) -> int | None:
        """Return the list index of ``question_id``, or None if absent."""
        for i, q in enumerate(self.questions):
            if q.id == question_id:
                return i
        return None
