"""SurveyApiClient — navigator collaborators over the survey REST API.

One httpx client implements all three collaborator interfaces, so a
navigator can run in a separate process from the server::

    async with SurveyApiClient("http://localhost:8080") as api:
        navigator = SurveyNavigator(
            "customer-pulse", provider=api, sink=api, consent=api,
        )
        await navigator.load()

The server only returns generic error details, so the provider rebuilds
the "not found" / "not active" messages from the status code.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from survey_runtime.constants import HTTP_TIMEOUT
from survey_runtime.interfaces import AnswerSink, ConsentGateway, SurveyDefinitionProvider
from survey_runtime.models.response import ResponseInfo
from survey_runtime.models.session import AnswerValue
from survey_runtime.models.survey import SurveyDefinition

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class SurveyApiClient(SurveyDefinitionProvider, AnswerSink, ConsentGateway):
    """Async HTTP client for the survey server API.

    Args:
        base_url: server root, e.g. ``http://localhost:8080``
        timeout: request timeout in seconds
        transport: optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> SurveyApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def health_check(self) -> bool:
        """Check server health.  Returns True if the server is reachable."""
        try:
            resp = await self._client.get("/health")
            return resp.status_code == 200 and resp.json().get("status") == "ok"
        except (httpx.ConnectError, httpx.TimeoutException):
            return False

    # ------------------------------------------------------------------
    # SurveyDefinitionProvider
    # ------------------------------------------------------------------

    async def fetch_survey(self, survey_id: str) -> SurveyDefinition:
        resp = await self._send(
            "GET", f"{API_PREFIX}/runtime/{quote(survey_id, safe='')}", retry=True,
        )
        if resp.status_code == 404:
            raise ValueError(f"Survey not found: {survey_id}")
        if resp.status_code == 403:
            raise ValueError(f"Survey is not active: {survey_id}")
        resp.raise_for_status()
        return SurveyDefinition.model_validate(resp.json())

    # ------------------------------------------------------------------
    # ConsentGateway
    # ------------------------------------------------------------------

    async def start_session(self, survey_id: str, respondent: str) -> str:
        resp = await self._send(
            "POST",
            f"{API_PREFIX}/responses",
            json={"survey_id": survey_id, "email": respondent, "consent_given": True},
        )
        resp.raise_for_status()
        return ResponseInfo.model_validate(resp.json()).response_id

    # ------------------------------------------------------------------
    # AnswerSink
    # ------------------------------------------------------------------

    async def record_answer(
        self, session_id: str, question_id: str, value: AnswerValue
    ) -> None:
        resp = await self._send(
            "POST",
            f"{API_PREFIX}/responses/{session_id}/items",
            json={"question_id": question_id, "value": value},
            retry=True,
        )
        resp.raise_for_status()

    async def record_completion(self, session_id: str) -> None:
        resp = await self._send("POST", f"{API_PREFIX}/responses/{session_id}/complete")
        resp.raise_for_status()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_response(self, response_id: str) -> ResponseInfo:
        resp = await self._send("GET", f"{API_PREFIX}/responses/{response_id}", retry=True)
        resp.raise_for_status()
        return ResponseInfo.model_validate(resp.json())

    async def _send(
        self, method: str, path: str, json: Any = None, *, retry: bool = False
    ) -> httpx.Response:
        """Send one request.

        With ``retry`` a timeout is retried once.  Only idempotent calls pass
        it: reads and the item upsert.  Starting or completing a response is
        never repeated, since a timed-out request may still have been applied.
        """
        try:
            return await self._client.request(method, path, json=json)
        except httpx.TimeoutException:
            if not retry:
                raise
            logger.warning("%s %s timed out; retrying once", method, path)
            return await self._client.request(method, path, json=json)
