"""Async CRUD repositories for surveys and responses.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  Methods ``flush()`` but never ``commit()``.

The repositories deliberately avoid business-logic validation — that
belongs in :mod:`survey_runtime.responses`.  Structural invariants (one
item per question per response, completed responses carry a timestamp)
are enforced by DB constraints.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from survey_db.models.enums import ResponseStatus, SurveyStatus
from survey_db.models.response import Response, ResponseItem
from survey_db.models.survey import Survey, SurveyQuestion


class SurveyRepository:
    """Read/write operations on the ``surveys`` and ``questions`` tables."""

    async def get_by_slug(self, db: AsyncSession, slug: str) -> Survey | None:
        """Fetch a survey by its external identifier."""
        stmt = select(Survey).where(Survey.slug == slug)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, db: AsyncSession, survey_pk: uuid.UUID) -> Survey | None:
        return await db.get(Survey, survey_pk)

    async def list_questions(
        self, db: AsyncSession, survey_pk: uuid.UUID
    ) -> list[SurveyQuestion]:
        """Questions of a survey in default (position) order."""
        stmt = (
            select(SurveyQuestion)
            .where(SurveyQuestion.survey_id == survey_pk)
            .order_by(SurveyQuestion.position)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def replace_survey(
        self,
        db: AsyncSession,
        *,
        slug: str,
        title: str,
        description: str | None,
        status: SurveyStatus,
        questions: list[dict[str, Any]],
    ) -> Survey:
        """Create or overwrite a survey and all of its questions.

        ``questions`` are column dicts for :class:`SurveyQuestion` (without
        ``survey_id``).  Existing questions are deleted and re-inserted;
        the survey version is bumped on overwrite.
        """
        survey = await self.get_by_slug(db, slug)
        if survey is None:
            survey = Survey(slug=slug, title=title, description=description, status=status)
            db.add(survey)
            await db.flush()
        else:
            survey.title = title
            survey.description = description
            survey.status = status
            survey.version += 1
            survey.updated_at = datetime.now(timezone.utc)
            await db.execute(
                delete(SurveyQuestion).where(SurveyQuestion.survey_id == survey.id)
            )

        for columns in questions:
            db.add(SurveyQuestion(survey_id=survey.id, **columns))
        await db.flush()
        return survey


class ResponseRepository:
    """Read/write operations on the ``responses`` and ``response_items`` tables."""

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    async def create_response(
        self,
        db: AsyncSession,
        *,
        survey_pk: uuid.UUID,
        email: str,
        consent_text: str,
    ) -> Response:
        """Insert a new in-progress response with its consent record."""
        response = Response(
            survey_id=survey_pk,
            email=email,
            consent_given=True,
            consent_text=consent_text,
        )
        db.add(response)
        await db.flush()  # Populate defaults (id, timestamps)
        return response

    async def get_response(
        self, db: AsyncSession, response_pk: uuid.UUID
    ) -> Response | None:
        return await db.get(Response, response_pk)

    async def complete_response(
        self, db: AsyncSession, response: Response
    ) -> Response:
        """Mark a response as completed."""
        response.status = ResponseStatus.COMPLETED
        response.completed_at = datetime.now(timezone.utc)
        await db.flush()
        return response

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def list_items(
        self, db: AsyncSession, response_pk: uuid.UUID
    ) -> list[ResponseItem]:
        """Items of a response, least recently answered first."""
        stmt = (
            select(ResponseItem)
            .where(ResponseItem.response_id == response_pk)
            .order_by(ResponseItem.answered_at)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def upsert_item(
        self,
        db: AsyncSession,
        response: Response,
        question_key: str,
        value: Any,
    ) -> ResponseItem:
        """Record an answer, overwriting any earlier answer to the same question.

        ``answered_at`` always holds the time of the latest write.
        """
        stmt = select(ResponseItem).where(
            ResponseItem.response_id == response.id,
            ResponseItem.question_key == question_key,
        )
        result = await db.execute(stmt)
        item = result.scalar_one_or_none()

        now = datetime.now(timezone.utc)
        if item is None:
            item = ResponseItem(
                response_id=response.id,
                question_key=question_key,
                value=value,
                answered_at=now,
            )
            db.add(item)
        else:
            item.value = value
            item.answered_at = now
        await db.flush()
        return item
