import logging
import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from services.scoring_engine.comparison import calculate_differences
from services.scoring_engine.engine import ResultCalculator
from services.scoring_engine.errors import ConfigurationError
from src.db.models import Result
from src.db.session import db_session
from src.schemas.results import (
    ComparedResult,
    ResultComparison,
    ResultPage,
    ResultRead,
    SubmitResultRequest,
    SubmitResultResponse,
    SurveyRef,
)
from src.services import storage

router = APIRouter()
logger = logging.getLogger(__name__)


# Authentication lives in front of this service; it forwards the caller's id.
def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    return x_user_id or None


def require_user_id(user_id: Optional[str] = Depends(get_current_user_id)) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


def get_result_calculator() -> ResultCalculator:
    return ResultCalculator()


def to_result_read(result: Result, language: str = "en") -> ResultRead:
    survey_ref = None
    if result.survey is not None:
        survey_ref = SurveyRef(
            id=result.survey.id,
            name=result.survey.localized_name(language),
            description=result.survey.localized_description(language),
            category=result.survey.category,
        )
    return ResultRead(
        id=result.id,
        user_id=result.user_id,
        survey_id=result.survey_id,
        answers=result.answers_json,
        results=result.results_json,
        completed_at=result.completed_at,
        time_spent=result.time_spent,
        session_id=result.session_id,
        survey=survey_ref,
    )


@router.post("/results", response_model=SubmitResultResponse, status_code=201)
async def submit_result(
    request: SubmitResultRequest,
    session: AsyncSession = Depends(db_session),
    calculator: ResultCalculator = Depends(get_result_calculator),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    Scores a survey submission and stores it as one completed result.
    External surveys are recorded as completed without scoring.
    """
    if not user_id and not request.session_id:
        raise HTTPException(status_code=400, detail="Either authentication or session ID is required")

    survey = await storage.get_survey(session, request.survey_id)
    if survey is None:
        raise HTTPException(status_code=404, detail="Survey not found")

    is_external = request.is_external or bool(survey.is_external)
    try:
        score_result = calculator.calculate(
            survey.to_definition_data(), request.answers, force_external=is_external
        )
    except ConfigurationError as e:
        logger.error(f"Result calculation failed for survey {survey.id}: {e!r} (cause: {e.__cause__!r})")
        raise HTTPException(status_code=500, detail="Failed to submit results")

    results_json = score_result.to_json_dict()
    answers = {"external_completion": True} if is_external else request.answers
    result = await storage.create_result(
        session,
        survey_id=survey.id,
        user_id=user_id,
        answers=answers,
        results=results_json,
        time_spent=request.time_spent or 0,
        session_id=request.session_id,
    )

    logger.info(f"Result submission processed for survey {survey.id}. External: {is_external}")
    return SubmitResultResponse(
        message="External survey completion recorded" if is_external else "Results submitted successfully",
        result_id=result.id,
        results=results_json,
        needs_registration=not user_id,
    )


@router.get("/results", response_model=ResultPage)
async def get_user_results(
    survey_id: Optional[uuid.UUID] = Query(None, alias="surveyId"),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    language: str = Query("en"),
    session: AsyncSession = Depends(db_session),
    user_id: str = Depends(require_user_id),
):
    rows, total = await storage.list_user_results(session, user_id, survey_id, limit, offset)
    return ResultPage(
        results=[to_result_read(row, language) for row in rows],
        total=total,
        page=offset // limit + 1,
        total_pages=math.ceil(total / limit),
    )


@router.get("/results/{result_id1}/compare/{result_id2}", response_model=ResultComparison)
async def compare_results(
    result_id1: uuid.UUID,
    result_id2: uuid.UUID,
    language: str = Query("en"),
    session: AsyncSession = Depends(db_session),
    user_id: str = Depends(require_user_id),
):
    result1 = await storage.get_result(session, result_id1, user_id)
    result2 = await storage.get_result(session, result_id2, user_id)
    if result1 is None or result2 is None:
        raise HTTPException(status_code=404, detail="One or both results not found")
    if result1.survey_id != result2.survey_id:
        raise HTTPException(status_code=400, detail="Cannot compare results from different surveys")

    return ResultComparison(
        survey=result1.survey.localized_name(language),
        result1=ComparedResult(id=result1.id, completed_at=result1.completed_at, results=result1.results_json),
        result2=ComparedResult(id=result2.id, completed_at=result2.completed_at, results=result2.results_json),
        differences=calculate_differences(result1.results_json, result2.results_json),
    )


@router.get("/results/{result_id}", response_model=ResultRead)
async def get_result(
    result_id: uuid.UUID,
    language: str = Query("en"),
    session: AsyncSession = Depends(db_session),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await storage.get_result(session, result_id, user_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Result not found")
    if not user_id and result.user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return to_result_read(result, language)


@router.get("/results/{result_id}/export")
async def export_result(
    result_id: uuid.UUID,
    format: str = Query("json"),
    session: AsyncSession = Depends(db_session),
    user_id: str = Depends(require_user_id),
):
    result = await storage.get_result(session, result_id, user_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Result not found")
    if format != "json":
        raise HTTPException(status_code=400, detail="Unsupported export format")

    return JSONResponse(
        content=to_result_read(result).model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="survey-result-{result_id}.json"'},
    )
