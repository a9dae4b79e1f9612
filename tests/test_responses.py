"""ResponseService tests with mocked DB layer.

Uses plain dataclasses mimicking the ORM rows and in-memory repositories
implementing the SurveyRepository / ResponseRepository interfaces, so the
service is tested without a real database.

Mock strategy:
  - Mock*Row dataclasses have the same attributes as the ORM models but
    no SQLAlchemy dependency.  The service reads attributes directly.
  - MockSurveyRepository / MockResponseRepository implement every async
    method the service calls, mutating rows in place like the real ones.
  - AsyncMock stands in for AsyncSession (db); flush/commit are no-ops.
"""

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from survey_db.models.enums import ResponseStatus, SurveyStatus
from survey_db.models.response import ResponseItem
from survey_db.repository import ResponseRepository
from survey_runtime.constants import CONSENT_TEXT
from survey_runtime.models.session import Stage
from survey_runtime.navigator import SurveyNavigator
from survey_runtime.persistence import (
    DatabaseAnswerSink,
    DatabaseConsentGateway,
    DatabaseSurveyProvider,
)
from survey_runtime.responses import ResponseService

from helpers.builders import choice, make_survey, multi, rating, rule, scale, text


def _now():
    return datetime.now(timezone.utc)


# =====================================================================
# Mock infrastructure
# =====================================================================


@dataclass
class MockSurveyRow:
    slug: str
    title: str
    description: str | None = None
    status: SurveyStatus = SurveyStatus.DRAFT
    version: int = 1
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class MockQuestionRow:
    survey_id: uuid.UUID
    question_key: str
    kind: str
    text: str = ""
    required: bool = True
    position: int = 0
    scale_min: int | None = None
    scale_max: int | None = None
    scale_min_label: str | None = None
    scale_max_label: str | None = None
    options: list | None = None
    branching_rules: list = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class MockResponseRow:
    survey_id: uuid.UUID
    email: str
    consent_text: str
    consent_given: bool = True
    status: ResponseStatus = ResponseStatus.IN_PROGRESS
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    consented_at: datetime = field(default_factory=_now)
    created_at: datetime = field(default_factory=_now)
    completed_at: datetime | None = None


@dataclass
class MockItemRow:
    response_id: uuid.UUID
    question_key: str
    value: Any
    answered_at: datetime = field(default_factory=_now)


class MockSurveyRepository:
    """In-memory SurveyRepository replacement."""

    def __init__(self):
        self.surveys: dict[str, MockSurveyRow] = {}
        self.questions: dict[uuid.UUID, list[MockQuestionRow]] = {}

    async def get_by_slug(self, db, slug):
        return self.surveys.get(slug)

    async def get_by_id(self, db, survey_pk):
        return next((s for s in self.surveys.values() if s.id == survey_pk), None)

    async def list_questions(self, db, survey_pk):
        return sorted(self.questions.get(survey_pk, []), key=lambda q: q.position)

    async def replace_survey(self, db, *, slug, title, description, status, questions):
        survey = self.surveys.get(slug)
        if survey is None:
            survey = MockSurveyRow(slug=slug, title=title, description=description, status=status)
            self.surveys[slug] = survey
        else:
            survey.title = title
            survey.description = description
            survey.status = status
            survey.version += 1
        self.questions[survey.id] = [
            MockQuestionRow(survey_id=survey.id, **columns) for columns in questions
        ]
        return survey


class MockResponseRepository:
    """In-memory ResponseRepository replacement."""

    def __init__(self):
        self.responses: dict[uuid.UUID, MockResponseRow] = {}
        self.items: dict[uuid.UUID, list[MockItemRow]] = {}

    async def create_response(self, db, *, survey_pk, email, consent_text):
        row = MockResponseRow(survey_id=survey_pk, email=email, consent_text=consent_text)
        self.responses[row.id] = row
        self.items[row.id] = []
        return row

    async def get_response(self, db, response_pk):
        return self.responses.get(response_pk)

    async def complete_response(self, db, response):
        response.status = ResponseStatus.COMPLETED
        response.completed_at = _now()
        return response

    async def list_items(self, db, response_pk):
        return list(self.items.get(response_pk, []))

    async def upsert_item(self, db, response, question_key, value):
        for item in self.items[response.id]:
            if item.question_key == question_key:
                item.value = value
                item.answered_at = _now()
                return item
        item = MockItemRow(response_id=response.id, question_key=question_key, value=value)
        self.items[response.id].append(item)
        return item


class MockSessionFactory:
    """Stands in for ``async_sessionmaker``: one AsyncMock session per call."""

    def __init__(self):
        self.sessions: list[AsyncMock] = []

    def __call__(self):
        session = AsyncMock()
        self.sessions.append(session)

        @asynccontextmanager
        async def scope():
            yield session

        return scope()


def pulse_survey():
    """satisfaction (scale 1-5, <3 → reason), recommend, reason (multi_select), comments."""
    return make_survey(
        scale("satisfaction", min=1, max=5, rules=[rule("less_than", 3, "reason")]),
        rating("recommend"),
        multi("reason", ["Price", "Speed", "Support"]),
        text("comments", required=False),
        survey_id="pulse",
        title="Pulse",
    )


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def survey_repo():
    return MockSurveyRepository()


@pytest.fixture
def response_repo():
    return MockResponseRepository()


@pytest.fixture
def service(survey_repo, response_repo):
    """ResponseService with mocked repositories."""
    svc = ResponseService()
    svc._surveys = survey_repo
    svc._responses = response_repo
    return svc


@pytest.fixture
def mock_db():
    """AsyncMock standing in for AsyncSession — flush/commit are no-ops."""
    return AsyncMock()


@pytest_asyncio.fixture
async def seeded(service, mock_db):
    """Service with an active 'pulse' survey and a draft 'later' survey."""
    await service.save_definition(mock_db, pulse_survey(), "active")
    await service.save_definition(
        mock_db, make_survey(text("q1"), survey_id="later", title="Later"), "draft",
    )
    return service


async def _start(service, db, survey_id="pulse"):
    return await service.start_response(
        db, survey_id=survey_id, email="a@example.com", consent_given=True,
    )


# =====================================================================
# Runtime survey
# =====================================================================


class TestRuntimeSurvey:

    @pytest.mark.asyncio
    async def test_definition_round_trips_through_rows(self, seeded, mock_db):
        survey = await seeded.get_runtime_survey(mock_db, "pulse")
        assert survey == pulse_survey(), "Stored definition should match the saved one"

    @pytest.mark.asyncio
    async def test_unknown_survey(self, seeded, mock_db):
        with pytest.raises(ValueError, match="not found"):
            await seeded.get_runtime_survey(mock_db, "missing")

    @pytest.mark.asyncio
    async def test_inactive_survey(self, seeded, mock_db):
        with pytest.raises(ValueError, match="not active"):
            await seeded.get_runtime_survey(mock_db, "later")

    @pytest.mark.asyncio
    async def test_save_overwrites_and_bumps_version(self, seeded, survey_repo, mock_db):
        updated = make_survey(choice("only", ["A", "B"]), survey_id="pulse", title="Pulse v2")
        await seeded.save_definition(mock_db, updated, "active")

        survey = await seeded.get_runtime_survey(mock_db, "pulse")
        assert [q.id for q in survey.questions] == ["only"]
        assert survey.title == "Pulse v2"
        assert survey_repo.surveys["pulse"].version == 2


# =====================================================================
# Responses
# =====================================================================


class TestStartResponse:

    @pytest.mark.asyncio
    async def test_start_records_consent(self, seeded, response_repo, mock_db):
        info = await _start(seeded, mock_db)

        assert info.status == "in_progress"
        assert info.survey_id == "pulse"
        assert info.email == "a@example.com"
        assert info.answers == {}
        row = response_repo.responses[uuid.UUID(info.response_id)]
        assert row.consent_given is True
        assert row.consent_text == CONSENT_TEXT

    @pytest.mark.asyncio
    async def test_consent_required(self, seeded, mock_db):
        with pytest.raises(ValueError, match="Consent is required"):
            await seeded.start_response(
                mock_db, survey_id="pulse", email="a@example.com", consent_given=False,
            )

    @pytest.mark.asyncio
    async def test_inactive_survey_rejects_responses(self, seeded, mock_db):
        with pytest.raises(ValueError, match="not active"):
            await _start(seeded, mock_db, survey_id="later")


class TestRecordItem:

    @pytest.mark.asyncio
    async def test_record_and_read_back(self, seeded, mock_db):
        info = await _start(seeded, mock_db)
        item = await seeded.record_item(mock_db, info.response_id, "satisfaction", 4)
        assert item.question_id == "satisfaction"
        assert item.value == 4

        await seeded.record_item(mock_db, info.response_id, "reason", ["Price"])
        fetched = await seeded.get_response(mock_db, info.response_id)
        assert fetched.answers == {"satisfaction": 4, "reason": ["Price"]}

    @pytest.mark.asyncio
    async def test_rerecord_overwrites(self, seeded, response_repo, mock_db):
        info = await _start(seeded, mock_db)
        await seeded.record_item(mock_db, info.response_id, "satisfaction", 4)
        await seeded.record_item(mock_db, info.response_id, "satisfaction", 2)

        fetched = await seeded.get_response(mock_db, info.response_id)
        assert fetched.answers == {"satisfaction": 2}
        assert len(response_repo.items[uuid.UUID(info.response_id)]) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response_id", [str(uuid.uuid4()), "not-a-uuid"])
    async def test_unknown_response(self, seeded, mock_db, response_id):
        with pytest.raises(ValueError, match="Response not found"):
            await seeded.record_item(mock_db, response_id, "satisfaction", 4)

    @pytest.mark.asyncio
    async def test_unknown_question(self, seeded, mock_db):
        info = await _start(seeded, mock_db)
        with pytest.raises(ValueError, match="Question not found"):
            await seeded.record_item(mock_db, info.response_id, "q1", "x")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question_id, value", [
        ("satisfaction", 9),
        ("satisfaction", "four"),
        ("recommend", 0),
        ("reason", ["Price", "Colour"]),
        ("comments", 12),
    ])
    async def test_invalid_value(self, seeded, mock_db, question_id, value):
        info = await _start(seeded, mock_db)
        with pytest.raises(ValueError, match="Invalid answer"):
            await seeded.record_item(mock_db, info.response_id, question_id, value)

    @pytest.mark.asyncio
    async def test_empty_value(self, seeded, mock_db):
        info = await _start(seeded, mock_db)
        with pytest.raises(ValueError, match="is empty"):
            await seeded.record_item(mock_db, info.response_id, "comments", "")

    @pytest.mark.asyncio
    async def test_completed_response_rejects_items(self, seeded, mock_db):
        info = await _start(seeded, mock_db)
        await seeded.complete_response(mock_db, info.response_id)
        with pytest.raises(ValueError, match="already completed"):
            await seeded.record_item(mock_db, info.response_id, "satisfaction", 4)


class TestCompleteResponse:

    @pytest.mark.asyncio
    async def test_complete(self, seeded, mock_db):
        info = await _start(seeded, mock_db)
        await seeded.record_item(mock_db, info.response_id, "satisfaction", 5)

        done = await seeded.complete_response(mock_db, info.response_id)
        assert done.status == "completed"
        assert done.completed_at is not None
        assert done.answers == {"satisfaction": 5}

    @pytest.mark.asyncio
    async def test_complete_skips_required_check(self, seeded, mock_db):
        """Branching may skip required questions, so completion never re-checks them."""
        info = await _start(seeded, mock_db)
        done = await seeded.complete_response(mock_db, info.response_id)
        assert done.status == "completed"

    @pytest.mark.asyncio
    async def test_complete_twice(self, seeded, mock_db):
        info = await _start(seeded, mock_db)
        await seeded.complete_response(mock_db, info.response_id)
        with pytest.raises(ValueError, match="already completed"):
            await seeded.complete_response(mock_db, info.response_id)


# =====================================================================
# Database adapters driving a navigator
# =====================================================================


class TestDatabaseAdapters:

    @pytest.mark.asyncio
    async def test_navigator_session_is_persisted(self, seeded, response_repo):
        factory = MockSessionFactory()
        nav = SurveyNavigator(
            "pulse",
            provider=DatabaseSurveyProvider(seeded, factory),
            sink=DatabaseAnswerSink(seeded, factory),
            consent=DatabaseConsentGateway(seeded, factory),
        )
        await nav.load()
        await nav.accept_consent("b@example.com")

        for value in (2, ["Speed"], "Faster please"):
            assert nav.submit_answer(value).ok
            nav.advance()
        assert nav.get_stage() is Stage.COMPLETE
        await nav.wait_for_persistence()

        row = response_repo.responses[uuid.UUID(nav.session_id)]
        assert row.status == ResponseStatus.COMPLETED
        stored = {i.question_key: i.value for i in response_repo.items[row.id]}
        assert stored == {
            "satisfaction": 2, "reason": ["Speed"], "comments": "Faster please",
        }
        for session in factory.sessions:
            session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_provider_propagates_not_active(self, seeded):
        factory = MockSessionFactory()
        nav = SurveyNavigator("later", provider=DatabaseSurveyProvider(seeded, factory))
        assert await nav.load() is Stage.ERROR
        assert "not active" in nav.error_message
        factory.sessions[0].rollback.assert_awaited_once()
        factory.sessions[0].commit.assert_not_awaited()


# =====================================================================
# ResponseRepository (SQLAlchemy session mocked)
# =====================================================================


class TestResponseRepositoryUpsert:

    @pytest.mark.asyncio
    async def test_overwrite_replaces_value_and_refreshes_answered_at(self):
        earlier = datetime(2026, 1, 1, tzinfo=timezone.utc)
        response_pk = uuid.uuid4()
        existing = ResponseItem(
            response_id=response_pk, question_key="q1", value=1, answered_at=earlier,
        )
        db = AsyncMock()
        db.execute.return_value = MagicMock(scalar_one_or_none=MagicMock(return_value=existing))

        item = await ResponseRepository().upsert_item(
            db, MagicMock(id=response_pk), "q1", 2,
        )

        assert item is existing, "Overwrite updates the row in place"
        assert item.value == 2
        assert item.answered_at > earlier, "answered_at tracks the latest write"
        db.add.assert_not_called()
        db.flush.assert_awaited_once()
