"""ORM models for survey_db."""

from survey_db.models.base import Base
from survey_db.models.enums import ResponseStatus, SurveyStatus
from survey_db.models.response import Response, ResponseItem
from survey_db.models.survey import Survey, SurveyQuestion

__all__ = [
    "Base",
    "Response",
    "ResponseItem",
    "ResponseStatus",
    "Survey",
    "SurveyQuestion",
    "SurveyStatus",
]
