"""Runtime endpoint — the survey definition a respondent client navigates."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from survey_runtime.models.survey import SurveyDefinition
from survey_runtime.responses import ResponseService

from survey_server.dependencies import get_db, get_service

router = APIRouter(tags=["runtime"])


@router.get("/runtime/{survey_id}")
async def get_runtime_survey(
    survey_id: str,
    db: AsyncSession = Depends(get_db),
    service: ResponseService = Depends(get_service),
) -> SurveyDefinition:
    """Return an active survey with its questions in position order.

    Raises 404 for unknown surveys and 403 for surveys that are not active.
    """
    return await service.get_runtime_survey(db, survey_id)
