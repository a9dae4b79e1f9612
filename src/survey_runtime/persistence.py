"""Database-backed navigator collaborators.

Each adapter wraps :class:`~survey_runtime.responses.ResponseService` and
opens one :func:`~survey_db.engine.session_scope` per call, the same
unit of work the server's ``get_db`` dependency uses, so a navigator
running in-process writes exactly what the REST API would.

Usage::

    service = ResponseService()
    navigator = SurveyNavigator(
        "customer-pulse",
        provider=DatabaseSurveyProvider(service),
        sink=DatabaseAnswerSink(service),
        consent=DatabaseConsentGateway(service),
    )
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from survey_db.engine import session_scope

from survey_runtime.interfaces import AnswerSink, ConsentGateway, SurveyDefinitionProvider
from survey_runtime.models.session import AnswerValue
from survey_runtime.models.survey import SurveyDefinition
from survey_runtime.responses import ResponseService


class _DatabaseAdapter:
    """Shared session handling for the adapters below."""

    def __init__(
        self,
        service: ResponseService | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._service = service or ResponseService()
        self._session_factory = session_factory

    def _session(self) -> AbstractAsyncContextManager[AsyncSession]:
        return session_scope(self._session_factory)


class DatabaseSurveyProvider(_DatabaseAdapter, SurveyDefinitionProvider):
    """Serves active survey definitions from the ``surveys`` tables."""

    async def fetch_survey(self, survey_id: str) -> SurveyDefinition:
        async with self._session() as db:
            return await self._service.get_runtime_survey(db, survey_id)


class DatabaseAnswerSink(_DatabaseAdapter, AnswerSink):
    """Writes answers and completion to the ``responses`` tables."""

    async def record_answer(
        self, session_id: str, question_id: str, value: AnswerValue
    ) -> None:
        async with self._session() as db:
            await self._service.record_item(db, session_id, question_id, value)

    async def record_completion(self, session_id: str) -> None:
        async with self._session() as db:
            await self._service.complete_response(db, session_id)


class DatabaseConsentGateway(_DatabaseAdapter, ConsentGateway):
    """Opens a response row; its id becomes the navigator's session id."""

    async def start_session(self, survey_id: str, respondent: str) -> str:
        async with self._session() as db:
            info = await self._service.start_response(
                db, survey_id=survey_id, email=respondent, consent_given=True,
            )
        return info.response_id
