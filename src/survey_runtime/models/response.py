"""Response models — what the response service returns to API callers.

Decoupled from the ORM models in ``survey_db`` so API consumers never see
database internals.  ``response_id`` is the session id a navigator uses
with its sink.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ResponseItemInfo(BaseModel):
    """One recorded answer."""

    question_id: str
    value: Any
    answered_at: datetime


class ResponseInfo(BaseModel):
    """Public view of one respondent's response."""

    response_id: str
    survey_id: str
    email: str
    status: str
    consented_at: datetime
    created_at: datetime
    completed_at: Optional[datetime] = None
    # question_id -> value, least recently answered first
    answers: dict[str, Any] = {}
