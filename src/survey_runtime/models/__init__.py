"""Public model re-exports for survey_runtime.

Consumers should import from ``survey_runtime.models`` rather than
reaching into sub-modules directly.
"""

# --- Rules ---
from survey_runtime.models.rule import Condition, Rule

# --- Questions ---
from survey_runtime.models.question import (
    BaseQuestion,
    ChoiceQuestion,
    MultiSelectQuestion,
    Question,
    RatingQuestion,
    ScaleQuestion,
    TextQuestion,
    question_mapper,
)

# --- Survey ---
from survey_runtime.models.survey import SurveyDefinition

# --- Session ---
from survey_runtime.models.session import AnswerValue, Progress, Stage, SubmitResult

# --- Responses ---
from survey_runtime.models.response import ResponseInfo, ResponseItemInfo

__all__ = [
    # Rules
    "Condition",
    "Rule",
    # Questions
    "BaseQuestion",
    "ChoiceQuestion",
    "MultiSelectQuestion",
    "Question",
    "RatingQuestion",
    "ScaleQuestion",
    "TextQuestion",
    "question_mapper",
    # Survey
    "SurveyDefinition",
    # Session
    "AnswerValue",
    "Progress",
    "Stage",
    "SubmitResult",
    # Responses
    "ResponseInfo",
    "ResponseItemInfo",
]
