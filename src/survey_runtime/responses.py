"""ResponseService — server-side rules for survey runtime and response storage.

Stateless service pattern: each call loads what it needs from the
database, applies the business rules, writes through the repositories and
returns a public model.  No in-memory state is kept between calls.

The service accepts an ``AsyncSession`` from the caller so that the caller
(a FastAPI endpoint or a persistence adapter) controls transaction
boundaries.

Rules enforced here:

  - only ``active`` surveys are served to the runtime or accept responses
  - a response starts only with explicit consent, recorded with its text
  - items are accepted only for in-progress responses, for questions of
    the response's survey, and only when the value fits the question kind
  - a response completes once; required answers are not re-checked at
    completion because branching may legitimately skip required questions
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from survey_db.models.enums import ResponseStatus, SurveyStatus
from survey_db.models.response import Response
from survey_db.models.survey import Survey, SurveyQuestion
from survey_db.repository import ResponseRepository, SurveyRepository

from survey_runtime.constants import CONSENT_TEXT
from survey_runtime.models.question import Question
from survey_runtime.models.response import ResponseInfo, ResponseItemInfo
from survey_runtime.models.survey import SurveyDefinition
from survey_runtime.validation import check_answer, is_empty

logger = logging.getLogger(__name__)

_question_adapter: TypeAdapter[Question] = TypeAdapter(Question)


# ---------------------------------------------------------------------------
# Row <-> model conversion
# ---------------------------------------------------------------------------

def question_from_row(row: SurveyQuestion) -> dict[str, Any]:
    """Map a ``questions`` row to the raw dict the ``Question`` union validates."""
    data: dict[str, Any] = {
        "id": row.question_key,
        "kind": row.kind,
        "text": row.text,
        "required": row.required,
        "position": row.position,
        "branching_rules": row.branching_rules or [],
    }
    if row.kind == "scale":
        if row.scale_min is not None:
            data["min"] = row.scale_min
        if row.scale_max is not None:
            data["max"] = row.scale_max
        data["min_label"] = row.scale_min_label
        data["max_label"] = row.scale_max_label
    elif row.kind in ("choice", "multi_select"):
        data["options"] = row.options or []
    return data


def question_to_columns(question: Question) -> dict[str, Any]:
    """Map a validated question to ``SurveyQuestion`` column values."""
    columns: dict[str, Any] = {
        "question_key": question.id,
        "kind": question.kind,
        "text": question.text,
        "required": question.required,
        "position": question.position,
        "branching_rules": [r.model_dump() for r in question.branching_rules],
    }
    if question.kind == "scale":
        columns.update(
            scale_min=question.min,
            scale_max=question.max,
            scale_min_label=question.min_label,
            scale_max_label=question.max_label,
        )
    elif question.kind in ("choice", "multi_select"):
        columns["options"] = list(question.options)
    return columns


def definition_from_rows(survey: Survey, questions: list[SurveyQuestion]) -> SurveyDefinition:
    """Build the runtime definition from a survey row and its ordered questions."""
    return SurveyDefinition.model_validate({
        "id": survey.slug,
        "title": survey.title,
        "description": survey.description,
        "questions": [question_from_row(q) for q in questions],
    })


def _parse_response_id(response_id: str | uuid.UUID) -> uuid.UUID:
    if isinstance(response_id, uuid.UUID):
        return response_id
    try:
        return uuid.UUID(str(response_id))
    except ValueError:
        # A malformed id cannot match any row
        raise ValueError(f"Response not found: {response_id}") from None


# ---------------------------------------------------------------------------
# ResponseService
# ---------------------------------------------------------------------------

class ResponseService:
    """Serves runtime survey definitions and stores respondent answers."""

    def __init__(self) -> None:
        self._surveys = SurveyRepository()
        self._responses = ResponseRepository()

    # ==================================================================
    # Runtime survey
    # ==================================================================

    async def get_runtime_survey(self, db: AsyncSession, survey_id: str) -> SurveyDefinition:
        """Return the definition of an active survey with questions in position order.

        Raises ``ValueError`` if the survey is unknown or not active.
        """
        survey = await self._get_active_survey(db, survey_id)
        questions = await self._surveys.list_questions(db, survey.id)
        return definition_from_rows(survey, questions)

    async def save_definition(
        self,
        db: AsyncSession,
        definition: SurveyDefinition,
        status: str = SurveyStatus.ACTIVE,
    ) -> None:
        """Create or overwrite a survey from a validated definition (used for seeding)."""
        await self._surveys.replace_survey(
            db,
            slug=definition.id,
            title=definition.title,
            description=definition.description,
            status=SurveyStatus(status),
            questions=[question_to_columns(q) for q in definition.questions],
        )
        logger.info(
            "Saved survey %s (%s, %d questions)",
            definition.id, status, len(definition.questions),
        )

    # ==================================================================
    # Responses
    # ==================================================================

    async def start_response(
        self,
        db: AsyncSession,
        *,
        survey_id: str,
        email: str,
        consent_given: bool,
    ) -> ResponseInfo:
        """Open a new response after the respondent consented.

        The caller must ``await db.commit()`` to persist.
        """
        if not consent_given:
            raise ValueError("Consent is required to start a response")
        survey = await self._get_active_survey(db, survey_id)
        row = await self._responses.create_response(
            db, survey_pk=survey.id, email=email, consent_text=CONSENT_TEXT,
        )
        logger.info("Response %s started for survey %s", row.id, survey_id)
        return self._to_response_info(row, survey, [])

    async def get_response(self, db: AsyncSession, response_id: str) -> ResponseInfo:
        """Fetch a response with its recorded answers."""
        row = await self._require_response(db, response_id)
        survey = await self._surveys.get_by_id(db, row.survey_id)
        items = await self._responses.list_items(db, row.id)
        return self._to_response_info(row, survey, items)

    async def record_item(
        self,
        db: AsyncSession,
        response_id: str,
        question_id: str,
        value: Any,
    ) -> ResponseItemInfo:
        """Store one answer, replacing any earlier answer to the same question."""
        row = await self._require_response(db, response_id)
        if row.status == ResponseStatus.COMPLETED:
            raise ValueError(f"Response is already completed: {row.id}")

        question = await self._find_question(db, row, question_id)
        if is_empty(value):
            raise ValueError(f"Answer for question {question_id} is empty")
        result = check_answer(question, value)
        if not result.ok:
            raise ValueError(f"Invalid answer for question {question_id}: {result.detail}")

        item = await self._responses.upsert_item(db, row, question_id, value)
        return ResponseItemInfo(
            question_id=item.question_key,
            value=item.value,
            answered_at=item.answered_at,
        )

    async def complete_response(self, db: AsyncSession, response_id: str) -> ResponseInfo:
        """Mark a response completed.  A response completes only once."""
        row = await self._require_response(db, response_id)
        if row.status == ResponseStatus.COMPLETED:
            raise ValueError(f"Response is already completed: {row.id}")
        row = await self._responses.complete_response(db, row)
        logger.info("Response %s completed", row.id)
        return await self.get_response(db, row.id)

    # ==================================================================
    # Internal helpers
    # ==================================================================

    async def _get_active_survey(self, db: AsyncSession, survey_id: str) -> Survey:
        survey = await self._surveys.get_by_slug(db, survey_id)
        if survey is None:
            raise ValueError(f"Survey not found: {survey_id}")
        if survey.status != SurveyStatus.ACTIVE:
            raise ValueError(f"Survey is not active: {survey_id} (status={survey.status})")
        return survey

    async def _require_response(self, db: AsyncSession, response_id: str | uuid.UUID) -> Response:
        pk = _parse_response_id(response_id)
        row = await self._responses.get_response(db, pk)
        if row is None:
            raise ValueError(f"Response not found: {response_id}")
        return row

    async def _find_question(
        self, db: AsyncSession, response: Response, question_id: str
    ) -> Question:
        for q in await self._surveys.list_questions(db, response.survey_id):
            if q.question_key == question_id:
                return _question_adapter.validate_python(question_from_row(q))
        raise ValueError(f"Question not found: {question_id} in response {response.id}")

    @staticmethod
    def _to_response_info(row: Response, survey: Survey | None, items: list) -> ResponseInfo:
        return ResponseInfo(
            response_id=str(row.id),
            survey_id=survey.slug if survey is not None else str(row.survey_id),
            email=row.email,
            status=str(getattr(row.status, "value", row.status)),
            consented_at=row.consented_at,
            created_at=row.created_at,
            completed_at=row.completed_at,
            answers={item.question_key: item.value for item in items},
        )
