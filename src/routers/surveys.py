import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Survey
from src.db.session import db_session
from src.schemas.surveys import SurveyDetail, SurveyList, SurveyQuestions, SurveyRead, SurveyStats
from src.services import storage

router = APIRouter()
logger = logging.getLogger(__name__)


def _survey_fields(survey: Survey, language: str) -> dict:
    return dict(
        id=survey.id,
        name=survey.localized_name(language),
        description=survey.localized_description(language),
        category=survey.category,
        language=survey.language,
        estimated_time=survey.estimated_time,
        difficulty=survey.difficulty,
        tags=survey.tags or [],
        survey_types=survey.survey_types,
        is_external=bool(survey.is_external),
        external_url=survey.external_url,
    )


def _questions(survey: Survey) -> List[Dict[str, Any]]:
    questions = survey.questions_json or []
    if isinstance(questions, dict):
        questions = questions.get("questions", [])
    return questions


def _priority_at_most(question: Dict[str, Any], limit: int) -> bool:
    priority = question.get("priority")
    return isinstance(priority, (int, float)) and not isinstance(priority, bool) and priority <= limit


def select_questions(
    questions: List[Dict[str, Any]],
    survey_types: Optional[Dict[str, Any]],
    survey_type: str,
) -> Tuple[List[Dict[str, Any]], Optional[int]]:
    """
    Picks the questions for a short (``simple``), medium (``general``) or
    ``full`` run of a survey.

    Without a configuration for the requested type every question is returned
    and no estimated time is known.
    """
    type_config = (survey_types or {}).get(survey_type)
    if not type_config:
        return questions, None

    max_questions = type_config.get("questions")
    if survey_type == "simple":
        selected = [q for q in questions if q.get("priority") == 1]
    elif survey_type == "general":
        selected = [q for q in questions if _priority_at_most(q, 2)]
    else:
        selected = list(questions)
    if max_questions is not None:
        selected = selected[:max_questions]
    return selected, type_config.get("time")


@router.get("/surveys", response_model=SurveyList)
async def list_surveys(
    language: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    session: AsyncSession = Depends(db_session),
):
    surveys = await storage.list_surveys(session, language=language, category=category)
    display_language = language or "en"
    return SurveyList(
        surveys=[SurveyRead(**_survey_fields(s, display_language)) for s in surveys],
        total=len(surveys),
    )


@router.get("/surveys/{survey_id}", response_model=SurveyDetail)
async def get_survey(
    survey_id: uuid.UUID,
    language: str = Query("en"),
    session: AsyncSession = Depends(db_session),
):
    survey = await storage.get_survey(session, survey_id)
    if survey is None:
        raise HTTPException(status_code=404, detail="Survey not found")
    return SurveyDetail(**_survey_fields(survey, language), questions=_questions(survey))


@router.get("/surveys/{survey_id}/questions", response_model=SurveyQuestions)
async def get_survey_questions(
    survey_id: uuid.UUID,
    type: str = Query("full"),
    language: str = Query("en"),
    session: AsyncSession = Depends(db_session),
):
    survey = await storage.get_survey(session, survey_id)
    if survey is None or not survey.is_active:
        raise HTTPException(status_code=404, detail="Survey not found")

    questions, estimated_time = select_questions(_questions(survey), survey.survey_types, type)
    return SurveyQuestions(
        id=survey.id,
        name=survey.localized_name(language),
        language=survey.language,
        type=type,
        estimated_time=estimated_time,
        questions=questions,
    )


@router.get("/surveys/{survey_id}/stats", response_model=SurveyStats)
async def get_survey_stats(
    survey_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
):
    survey = await storage.get_survey(session, survey_id)
    if survey is None:
        raise HTTPException(status_code=404, detail="Survey not found")

    stats = await storage.get_survey_stats(session, survey_id)
    logger.debug(f"Stats for survey {survey_id}: {stats['total_responses']} responses")
    return SurveyStats(**stats)
