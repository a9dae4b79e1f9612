"""Session and result models — the contract between the navigator and its callers.

  - Stage: lifecycle state of one respondent session
  - SubmitResult: outcome of ``submit_answer`` (ok, or a validation reason)
  - Progress: visited-question count for progress-bar rendering
"""

import enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel

# Value shapes an answer can take: number (scale/rating), string
# (text/choice) or list of strings (multi_select).
AnswerValue = Union[int, float, str, list[str]]


class Stage(str, enum.Enum):
    """Lifecycle states for a navigator session.

    Transitions:
        loading -> consent      (survey definition fetched)
        loading -> error        (provider failure)
        consent -> in_progress  (consent accepted, session id obtained)
        consent -> error        (session could not be started)
        in_progress -> complete (last question submitted, or rule target ``end``)
    """

    LOADING = "loading"
    CONSENT = "consent"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    ERROR = "error"


class SubmitResult(BaseModel):
    """Outcome of a submission.

    ``reason`` is ``"required"`` when a required question got an empty
    value, ``"invalid"`` when the value does not fit the question kind.
    """

    ok: bool
    reason: Optional[Literal["required", "invalid"]] = None
    detail: Optional[str] = None

    @classmethod
    def accepted(cls) -> "SubmitResult":
        return cls(ok=True)

    @classmethod
    def rejected(cls, reason: Literal["required", "invalid"], detail: Any = None) -> "SubmitResult":
        return cls(ok=False, reason=reason, detail=None if detail is None else str(detail))


class Progress(BaseModel):
    """Progress through the survey.

    ``current_index`` counts visited questions on the current path (the
    history depth), not the raw list position.
    """

    current_index: int
    total: int

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.current_index / self.total * 100)
