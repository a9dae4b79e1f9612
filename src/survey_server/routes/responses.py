"""Response endpoints — start, read, answer and complete a response.

The response id returned by ``POST /responses`` is the session id the
navigator passes to its sink for every later call.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from survey_runtime.models.response import ResponseInfo, ResponseItemInfo
from survey_runtime.responses import ResponseService

from survey_server.dependencies import get_db, get_service

router = APIRouter(tags=["responses"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class StartResponseRequest(BaseModel):
    """Body for POST /responses."""
    survey_id: str = Field(min_length=1)
    email: str = Field(min_length=1)
    consent_given: bool

    @field_validator("consent_given")
    @classmethod
    def _chk_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError("consent must be given to start a response")
        return v


class RecordItemRequest(BaseModel):
    """Body for POST /responses/{response_id}/items.

    ``value`` is checked against the question kind by the service.
    """
    question_id: str = Field(min_length=1)
    value: Any


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/responses", status_code=201)
async def start_response(
    body: StartResponseRequest,
    db: AsyncSession = Depends(get_db),
    service: ResponseService = Depends(get_service),
) -> ResponseInfo:
    """Record consent and open a new response.

    Returns 201 on success, 404 for unknown surveys and 403 for surveys
    that are not active.
    """
    return await service.start_response(
        db,
        survey_id=body.survey_id,
        email=body.email,
        consent_given=body.consent_given,
    )


@router.get("/responses/{response_id}")
async def get_response(
    response_id: str,
    db: AsyncSession = Depends(get_db),
    service: ResponseService = Depends(get_service),
) -> ResponseInfo:
    """Get a response with its recorded answers."""
    return await service.get_response(db, response_id)


@router.post("/responses/{response_id}/items")
async def record_item(
    response_id: str,
    body: RecordItemRequest,
    db: AsyncSession = Depends(get_db),
    service: ResponseService = Depends(get_service),
) -> ResponseItemInfo:
    """Store one answer; re-posting the same question overwrites it.

    Raises 409 if the response is already completed and 400 if the value
    does not fit the question.
    """
    return await service.record_item(db, response_id, body.question_id, body.value)


@router.post("/responses/{response_id}/complete")
async def complete_response(
    response_id: str,
    db: AsyncSession = Depends(get_db),
    service: ResponseService = Depends(get_service),
) -> ResponseInfo:
    """Mark the response completed.  Raises 409 on a second completion."""
    return await service.complete_response(db, response_id)
