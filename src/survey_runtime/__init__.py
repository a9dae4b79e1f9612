"""survey_runtime — branching survey runtime SDK.

Public API:
    SurveyNavigator   — per-respondent state machine: consent, answers, branching, back
    RuleEvaluator     — matches branching rules against an answer
    SurveyStore       — loads YAML survey definitions; a definition provider
    ResponseService   — server-side response storage rules over the database
    SurveyApiClient   — provider, sink and consent gateway over the REST API

Collaborator interfaces:
    SurveyDefinitionProvider — supplies the ordered question list
    AnswerSink               — receives answers and the completion signal
    ConsentGateway           — records consent and opens a session

Models:
    SurveyDefinition, Question (scale / rating / text / choice / multi_select),
    Rule, Stage, SubmitResult, Progress, ResponseInfo, ResponseItemInfo
"""

from survey_runtime.client import SurveyApiClient
from survey_runtime.evaluator import RuleEvaluator
from survey_runtime.interfaces import AnswerSink, ConsentGateway, SurveyDefinitionProvider
from survey_runtime.models import (
    AnswerValue,
    Progress,
    Question,
    ResponseInfo,
    ResponseItemInfo,
    Rule,
    Stage,
    SubmitResult,
    SurveyDefinition,
)
from survey_runtime.navigator import SurveyNavigator
from survey_runtime.persistence import (
    DatabaseAnswerSink,
    DatabaseConsentGateway,
    DatabaseSurveyProvider,
)
from survey_runtime.responses import ResponseService
from survey_runtime.store import SurveyStore

__all__ = [
    # Runtime
    "SurveyNavigator",
    "RuleEvaluator",
    "SurveyStore",
    "ResponseService",
    "SurveyApiClient",
    # Interfaces
    "AnswerSink",
    "ConsentGateway",
    "SurveyDefinitionProvider",
    # Database adapters
    "DatabaseAnswerSink",
    "DatabaseConsentGateway",
    "DatabaseSurveyProvider",
    # Models
    "AnswerValue",
    "Progress",
    "Question",
    "ResponseInfo",
    "ResponseItemInfo",
    "Rule",
    "Stage",
    "SubmitResult",
    "SurveyDefinition",
]
