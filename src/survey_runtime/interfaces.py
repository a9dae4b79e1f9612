"""Abstract interfaces for the navigator's external collaborators.

These ABCs define the contract that concrete implementations must fulfil.
The SDK ships several implementations: a YAML-backed provider
(:class:`~survey_runtime.store.SurveyStore`), database-backed adapters
(:mod:`survey_runtime.persistence`) and an HTTP client
(:class:`~survey_runtime.client.SurveyApiClient`).

Typical integration flow::

    navigator = SurveyNavigator(survey_id, provider=store, sink=sink, consent=gateway)
    await navigator.load()                    # SurveyDefinitionProvider.fetch_survey
    await navigator.accept_consent(email)     # ConsentGateway.start_session
    navigator.submit_answer(value)            # AnswerSink.record_answer (detached)
    navigator.advance()                       # AnswerSink.record_completion on the last step
"""

from abc import ABC, abstractmethod

from survey_runtime.models.session import AnswerValue
from survey_runtime.models.survey import SurveyDefinition


class SurveyDefinitionProvider(ABC):
    """Supplies the ordered question list for a survey.

    Called once, while the navigator is loading.  The returned questions
    must already be sorted by ``position``.
    """

    @abstractmethod
    async def fetch_survey(self, survey_id: str) -> SurveyDefinition:
        """Return the survey definition.

        Raises
        ------
        ValueError
            If the survey does not exist ("not found") or is not currently
            accepting responses ("not active").
        """
        ...


class AnswerSink(ABC):
    """Accepts answers and the completion signal for a session.

    The navigator never awaits these calls on its navigation path; any
    exception raised here is logged and dropped.
    """

    @abstractmethod
    async def record_answer(
        self, session_id: str, question_id: str, value: AnswerValue
    ) -> None:
        """Persist one answer, overwriting any earlier answer to the question."""
        ...

    @abstractmethod
    async def record_completion(self, session_id: str) -> None:
        """Mark the session as finished."""
        ...


class ConsentGateway(ABC):
    """Records respondent consent and opens a session for the sink."""

    @abstractmethod
    async def start_session(self, survey_id: str, respondent: str) -> str:
        """Record consent for ``respondent`` and return the new session id."""
        ...
