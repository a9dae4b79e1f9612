"""SurveyNavigator — walks one respondent through a survey's question list.

In-memory state machine, one instance per respondent session.  The
navigator owns the current position, the answer store and the navigation
history; the survey definition, consent and answer persistence are
delegated to collaborators (see :mod:`survey_runtime.interfaces`).

Lifecycle::

    loading ──load()──▶ consent ──accept_consent()──▶ in_progress ──advance()──▶ complete
       │                   │
       └──────────────▶ error ◀┘

Navigation:

  - ``submit_answer`` validates and stores the answer for the displayed
    question and hands it to the sink in the background
  - ``advance`` evaluates the question's branching rules (first match wins)
    and pushes the next question onto the history stack, or completes
  - ``go_back`` pops the history stack, returning to the question the
    respondent actually came from (not ``index - 1`` when rules skipped)

Persistence is fire-and-forget: sink calls run as detached asyncio tasks
that the navigation path never awaits.  Notifications are delivered in
the order they were issued; failures are logged and otherwise ignored.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from survey_runtime.evaluator import RuleEvaluator
from survey_runtime.interfaces import AnswerSink, ConsentGateway, SurveyDefinitionProvider
from survey_runtime.models.question import Question
from survey_runtime.models.session import AnswerValue, Progress, Stage, SubmitResult
from survey_runtime.models.survey import SurveyDefinition
from survey_runtime.validation import check_answer, is_empty

logger = logging.getLogger(__name__)


class SurveyNavigator:
    """Drives a single respondent session.

    Args:
        survey_id: id of the survey to run
        provider: supplies the survey definition at load time
        sink: receives answers and the completion signal (optional; without
            a sink nothing is persisted, e.g. in preview mode)
        consent: opens the session on consent (optional; without a gateway
            a local session id is generated)
    """

    def __init__(
        self,
        survey_id: str,
        *,
        provider: SurveyDefinitionProvider,
        sink: AnswerSink | None = None,
        consent: ConsentGateway | None = None,
    ) -> None:
        self._survey_id = survey_id
        self._provider = provider
        self._sink = sink
        self._consent = consent
        self._evaluator = RuleEvaluator()

        self._stage = Stage.LOADING
        self._survey: SurveyDefinition | None = None
        self._session_id: str | None = None
        self._error: str | None = None

        # History stack of visited question indices; top = displayed question
        self._history: list[int] = []
        self._answers: dict[str, AnswerValue] = {}
        # (question_id, value) of the last accepted submission, consumed by advance()
        self._submitted: tuple[str, Any] | None = None

        # Detached sink notifications still running
        self._pending: set[asyncio.Task] = set()
        self._last_task: asyncio.Task | None = None

    # ==================================================================
    # Session lifecycle
    # ==================================================================

    async def load(self) -> Stage:
        """Fetch the survey definition.  ``loading`` → ``consent`` or ``error``."""
        self._require_stage(Stage.LOADING, "load")
        try:
            survey = await self._provider.fetch_survey(self._survey_id)
        except ValidationError:
            logger.exception("Survey %s has an invalid definition", self._survey_id)
            return self._fail("Survey definition is invalid")
        except ValueError as exc:
            logger.warning("Survey %s unavailable: %s", self._survey_id, exc)
            return self._fail(str(exc))
        except Exception:
            logger.exception("Failed to load survey %s", self._survey_id)
            return self._fail("Failed to load survey")

        self._survey = survey
        self._stage = Stage.CONSENT
        logger.info(
            "Survey %s loaded: %r, %d questions",
            survey.id, survey.title, len(survey.questions),
        )
        return self._stage

    async def accept_consent(self, respondent: str) -> Stage:
        """Record consent and open the session.  ``consent`` → ``in_progress`` or ``error``."""
        self._require_stage(Stage.CONSENT, "accept_consent")
        if self._consent is None:
            session_id = str(uuid.uuid4())
        else:
            try:
                session_id = await self._consent.start_session(self._survey_id, respondent)
            except Exception:
                logger.exception("Failed to start session for survey %s", self._survey_id)
                return self._fail("Failed to start survey")

        self._session_id = session_id
        self._history = [0]
        self._stage = Stage.IN_PROGRESS
        logger.info("Session %s started for survey %s", session_id, self._survey_id)
        return self._stage

    # ==================================================================
    # Read API for the presentation layer
    # ==================================================================

    def get_stage(self) -> Stage:
        return self._stage

    def get_current_question(self) -> Question:
        """Return the question on top of the history stack."""
        if not self._history or self._survey is None:
            raise ValueError(
                f"No question is displayed: stage is '{self._stage.value}'"
            )
        return self._survey.questions[self._history[-1]]

    def get_current_answer(self) -> AnswerValue | None:
        """Return the stored answer for the displayed question, if any."""
        answer = self._answers.get(self.get_current_question().id)
        if isinstance(answer, list):
            return list(answer)
        return answer

    def get_progress(self) -> Progress:
        """Visited-question count on the current path and the survey size."""
        total = len(self._survey.questions) if self._survey is not None else 0
        return Progress(current_index=len(self._history), total=total)

    @property
    def survey(self) -> SurveyDefinition | None:
        return self._survey

    @property
    def title(self) -> str | None:
        return self._survey.title if self._survey is not None else None

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def error_message(self) -> str | None:
        """Respondent-facing message when the stage is ``error``."""
        return self._error

    @property
    def history(self) -> tuple[int, ...]:
        return tuple(self._history)

    @property
    def answers(self) -> dict[str, AnswerValue]:
        return {
            qid: list(value) if isinstance(value, list) else value
            for qid, value in self._answers.items()
        }

    # ==================================================================
    # Navigation
    # ==================================================================

    def submit_answer(self, value: Any, question_id: str | None = None) -> SubmitResult:
        """Validate and record the answer for the displayed question.

        ``question_id`` is optional; when given it must be the displayed
        question's id.  A rejected submission keeps the stored answer but
        withdraws the pending one, so ``advance()`` waits for a valid submit.
        """
        self._require_stage(Stage.IN_PROGRESS, "submit_answer")
        question = self.get_current_question()
        if question_id is not None and question_id != question.id:
            raise ValueError(
                f"Cannot submit for question '{question_id}': "
                f"displayed question is '{question.id}'"
            )

        result = check_answer(question, value)
        if not result.ok:
            logger.debug("Rejected answer for %s: %s (%s)", question.id, result.reason, result.detail)
            # A rejected value replaces the pending one: advance() needs a fresh valid submit
            self._submitted = None
            return result

        if not is_empty(value):
            stored = list(value) if isinstance(value, (list, tuple)) else value
            self._answers[question.id] = stored
            if self._sink is not None:
                self._notify(
                    "record_answer",
                    self._sink.record_answer,
                    self._session_id, question.id, stored,
                )

        self._submitted = (question.id, value)
        return result

    def advance(self) -> None:
        """Move to the next question, or complete the survey.

        Valid only after a successful ``submit_answer`` for the displayed
        question.
        """
        self._require_stage(Stage.IN_PROGRESS, "advance")
        question = self.get_current_question()
        if self._submitted is None or self._submitted[0] != question.id:
            raise ValueError(
                f"Cannot advance: no accepted answer for question '{question.id}'"
            )
        _, answer = self._submitted
        self._submitted = None

        next_index = self._resolve_next(self._history[-1], question, answer)
        if next_index is None:
            self._complete()
            return
        self._history.append(next_index)

    def go_back(self) -> None:
        """Return to the previously visited question.  No-op on the first question."""
        self._require_stage(Stage.IN_PROGRESS, "go_back")
        if len(self._history) <= 1:
            logger.debug("go_back ignored: already at the first question")
            return
        self._history.pop()
        self._submitted = None

    def _resolve_next(self, index: int, question: Question, answer: Any) -> int | None:
        """Compute the next question index, or None to complete.

        Decision order:
          1. first matching branching rule
          2. rule target ``end`` → complete
          3. rule target found → that index; dangling target → fall through
          4. default order: ``index + 1``, or complete after the last question
        """
        survey = self._survey
        rule = self._evaluator.first_match(question.branching_rules, answer)
        if rule is not None:
            if rule.ends_survey:
                return None
            target = survey.index_of(rule.target)
            if target is not None:
                return target
            logger.warning(
                "Rule on question %s targets unknown question %r; using default order",
                question.id, rule.target,
            )

        if index >= len(survey.questions) - 1:
            return None
        return index + 1

    def _complete(self) -> None:
        self._stage = Stage.COMPLETE
        logger.info("Session %s completed (%d answers)", self._session_id, len(self._answers))
        if self._sink is not None:
            self._notify("record_completion", self._sink.record_completion, self._session_id)

    # ==================================================================
    # Fire-and-forget persistence
    # ==================================================================

    def _notify(
        self, name: str, call: Callable[..., Awaitable[None]], *args: Any
    ) -> None:
        """Schedule a sink call as a detached task; never blocks the caller."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running event loop; dropping %s for session %s", name, self._session_id,
            )
            return

        task = loop.create_task(self._deliver(self._last_task, name, call, *args))
        self._last_task = task
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(
        self,
        previous: asyncio.Task | None,
        name: str,
        call: Callable[..., Awaitable[None]],
        *args: Any,
    ) -> None:
        # Keep notifications in issue order
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        try:
            await call(*args)
        except Exception:
            logger.warning("%s failed for session %s", name, self._session_id, exc_info=True)

    async def wait_for_persistence(self) -> None:
        """Wait until every scheduled sink notification has settled."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ==================================================================
    # Internal helpers
    # ==================================================================

    def _require_stage(self, expected: Stage, operation: str) -> None:
        if self._stage is not expected:
            raise ValueError(
                f"{operation}() is only valid during '{expected.value}', "
                f"stage is '{self._stage.value}'"
            )

    def _fail(self, message: str) -> Stage:
        self._stage = Stage.ERROR
        self._error = message or "Something went wrong"
        return self._stage
