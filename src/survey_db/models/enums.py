"""Database-level enumerations for surveys and responses."""

import enum


class SurveyStatus(str, enum.Enum):
    """Authoring lifecycle of a survey.  Only ``active`` surveys accept responses."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"


class ResponseStatus(str, enum.Enum):
    """Lifecycle of one respondent's response.

    Transitions:
        in_progress -> completed (navigator signalled completion)
    """

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
