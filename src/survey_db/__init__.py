"""survey_db — PostgreSQL persistence layer for surveys and responses.

Provides the ORM models, async engine factory and repositories used by
the response service and the REST server.
"""

from survey_db.engine import (
    dispose_engine,
    get_engine,
    get_session_factory,
    ping_database,
    session_scope,
)
from survey_db.models import (
    Response,
    ResponseItem,
    ResponseStatus,
    Survey,
    SurveyQuestion,
    SurveyStatus,
)
from survey_db.repository import ResponseRepository, SurveyRepository

__all__ = [
    "Response",
    "ResponseItem",
    "ResponseRepository",
    "ResponseStatus",
    "Survey",
    "SurveyQuestion",
    "SurveyRepository",
    "SurveyStatus",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "ping_database",
    "session_scope",
]
