"""REST API tests — FastAPI TestClient with dependency overrides.

The response service runs on the in-memory repositories from
``test_responses`` and ``get_db`` yields an AsyncMock session, so no
database is needed.  Covers the status-code mapping of SDK errors.
"""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

import survey_server.app as server_app
from survey_runtime.responses import ResponseService
from survey_server.app import create_app
from survey_server.config import ServerSettings, load_settings
from survey_server.dependencies import get_db, get_service
from survey_server.errors import status_for_message

from helpers.builders import make_survey, text
from test_responses import MockResponseRepository, MockSurveyRepository, pulse_survey


# =====================================================================
# Fixtures
# =====================================================================


def build_service() -> ResponseService:
    """ResponseService on in-memory repositories with 'pulse' (active) and 'later' (draft)."""
    service = ResponseService()
    service._surveys = MockSurveyRepository()
    service._responses = MockResponseRepository()
    db = AsyncMock()
    asyncio.run(service.save_definition(db, pulse_survey(), "active"))
    asyncio.run(service.save_definition(
        db, make_survey(text("q1"), survey_id="later", title="Later"), "draft",
    ))
    return service


def build_app(service: ResponseService):
    app = create_app(ServerSettings())

    async def _mock_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = _mock_db
    app.dependency_overrides[get_service] = lambda: service
    return app


@pytest.fixture
def client():
    return TestClient(build_app(build_service()))


def _start(client, survey_id="pulse", consent=True):
    return client.post("/api/v1/responses", json={
        "survey_id": survey_id, "email": "a@example.com", "consent_given": consent,
    })


# =====================================================================
# Runtime
# =====================================================================


class TestRuntime:

    def test_get_active_survey(self, client):
        resp = client.get("/api/v1/runtime/pulse")
        assert resp.status_code == 200
        body = resp.json()
        assert body["title"] == "Pulse"
        assert [q["id"] for q in body["questions"]] == [
            "satisfaction", "recommend", "reason", "comments",
        ]
        assert body["questions"][0]["kind"] == "scale"
        assert body["questions"][0]["branching_rules"][0]["target"] == "reason"

    def test_unknown_survey_is_404(self, client):
        resp = client.get("/api/v1/runtime/missing")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Resource not found"}

    def test_inactive_survey_is_403(self, client):
        resp = client.get("/api/v1/runtime/later")
        assert resp.status_code == 403


# =====================================================================
# Responses
# =====================================================================


class TestResponses:

    def test_full_response_flow(self, client):
        resp = _start(client)
        assert resp.status_code == 201
        response_id = resp.json()["response_id"]

        resp = client.post(f"/api/v1/responses/{response_id}/items",
                           json={"question_id": "satisfaction", "value": 2})
        assert resp.status_code == 200
        assert resp.json()["value"] == 2

        client.post(f"/api/v1/responses/{response_id}/items",
                    json={"question_id": "reason", "value": ["Price", "Support"]})

        resp = client.post(f"/api/v1/responses/{response_id}/complete")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "completed"
        assert body["answers"] == {"satisfaction": 2, "reason": ["Price", "Support"]}

        resp = client.get(f"/api/v1/responses/{response_id}")
        assert resp.json()["status"] == "completed"

    def test_consent_false_is_422(self, client):
        assert _start(client, consent=False).status_code == 422

    def test_missing_email_is_422(self, client):
        resp = client.post("/api/v1/responses", json={"survey_id": "pulse", "consent_given": True})
        assert resp.status_code == 422

    def test_start_on_inactive_survey_is_403(self, client):
        assert _start(client, survey_id="later").status_code == 403

    def test_unknown_response_is_404(self, client):
        assert client.get("/api/v1/responses/not-a-uuid").status_code == 404

    def test_invalid_value_is_400(self, client):
        response_id = _start(client).json()["response_id"]
        resp = client.post(f"/api/v1/responses/{response_id}/items",
                           json={"question_id": "satisfaction", "value": 42})
        assert resp.status_code == 400
        assert resp.json() == {"detail": "Invalid request"}, "Raw message must not leak"

    def test_boolean_value_is_400(self, client):
        response_id = _start(client).json()["response_id"]
        resp = client.post(f"/api/v1/responses/{response_id}/items",
                           json={"question_id": "satisfaction", "value": True})
        assert resp.status_code == 400

    def test_unknown_question_is_404(self, client):
        response_id = _start(client).json()["response_id"]
        resp = client.post(f"/api/v1/responses/{response_id}/items",
                           json={"question_id": "nope", "value": "x"})
        assert resp.status_code == 404

    def test_completed_response_is_409(self, client):
        response_id = _start(client).json()["response_id"]
        assert client.post(f"/api/v1/responses/{response_id}/complete").status_code == 200
        assert client.post(f"/api/v1/responses/{response_id}/complete").status_code == 409
        resp = client.post(f"/api/v1/responses/{response_id}/items",
                           json={"question_id": "satisfaction", "value": 3})
        assert resp.status_code == 409


# =====================================================================
# Errors, health and settings
# =====================================================================


def test_unexpected_error_is_500():
    service = build_service()
    service.get_runtime_survey = AsyncMock(side_effect=RuntimeError("boom"))
    client = TestClient(build_app(service), raise_server_exceptions=False)

    resp = client.get("/api/v1/runtime/pulse")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}


@pytest.mark.parametrize("message, status", [
    ("Survey not found: x", 404),
    ("Response not found: abc", 404),
    ("Survey is not active: x (status=draft)", 403),
    ("Response is already completed: abc", 409),
    ("Consent is required to start a response", 400),
    ("Invalid answer for question q1: 9 is outside 1..5", 400),
])
def test_status_for_message(message, status):
    assert status_for_message(message)[0] == status


@pytest.mark.parametrize("fail, status", [(False, "ok"), (True, "error")])
def test_health(monkeypatch, fail, status):
    async def _ping():
        if fail:
            raise ConnectionRefusedError("db down")

    monkeypatch.setattr(server_app, "ping_database", _ping)
    client = TestClient(build_app(build_service()))
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == status


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "9000")
    monkeypatch.setenv("SERVER_CORS_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("SERVER_LOG_LEVEL", "debug")
    monkeypatch.delenv("SURVEY_SEED_DIR", raising=False)
    settings = load_settings()
    assert settings.port == 9000
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.log_level == "DEBUG"
    assert settings.seed_dir is None


def test_seed_dir_from_env(monkeypatch):
    monkeypatch.setenv("SURVEY_SEED_DIR", "/srv/surveys")
    assert load_settings().seed_dir == "/srv/surveys"


# =====================================================================
# Startup seeding
# =====================================================================

_SEED_YAML = {
    "alpha.yaml": (
        "id: alpha\ntitle: Alpha\nstatus: active\n"
        "questions:\n  - {id: q1, kind: rating}\n"
    ),
    "beta.yaml": (
        "id: beta\ntitle: Beta\nstatus: draft\n"
        "questions:\n  - {id: q1, kind: text}\n"
    ),
}


@pytest.fixture
def seed_dir(tmp_path):
    for name, body in _SEED_YAML.items():
        (tmp_path / name).write_text(body, encoding="utf-8")
    return tmp_path


@pytest.fixture
def empty_service():
    service = ResponseService()
    service._surveys = MockSurveyRepository()
    service._responses = MockResponseRepository()
    return service


@pytest.fixture
def mock_scope(monkeypatch):
    """Replace the DB unit of work used by startup seeding; records each session."""
    sessions = []

    @asynccontextmanager
    async def _scope():
        session = AsyncMock()
        sessions.append(session)
        yield session

    monkeypatch.setattr(server_app, "session_scope", _scope)
    return sessions


def test_seed_from_directory_keeps_yaml_status(seed_dir, empty_service, mock_scope):
    seeded = asyncio.run(server_app.seed_from_directory(empty_service, str(seed_dir)))

    assert seeded == ["alpha", "beta"]
    assert len(mock_scope) == 1, "All surveys are seeded in one transaction"
    survey = asyncio.run(empty_service.get_runtime_survey(AsyncMock(), "alpha"))
    assert survey.title == "Alpha"
    with pytest.raises(ValueError, match="not active"):
        asyncio.run(empty_service.get_runtime_survey(AsyncMock(), "beta"))


def test_lifespan_seeds_and_serves(monkeypatch, seed_dir, empty_service, mock_scope):
    monkeypatch.setattr(server_app, "ResponseService", lambda: empty_service)
    app = create_app(ServerSettings(seed_dir=str(seed_dir)))

    async def _mock_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = _mock_db

    with TestClient(app) as client:
        assert client.get("/api/v1/runtime/alpha").status_code == 200
        assert client.get("/api/v1/runtime/beta").status_code == 403
