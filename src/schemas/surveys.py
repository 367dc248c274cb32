import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.schemas.results import CamelModel


class SurveyRead(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    category: str
    language: str
    estimated_time: Optional[int] = None
    difficulty: Optional[str] = None
    tags: List[str] = []
    survey_types: Optional[Dict[str, Any]] = None
    is_external: bool = False
    external_url: Optional[str] = None


class SurveyDetail(SurveyRead):
    questions: List[Dict[str, Any]] = []


class SurveyList(CamelModel):
    surveys: List[SurveyRead]
    total: int


class SurveyQuestions(CamelModel):
    id: uuid.UUID
    name: str
    language: str
    type: str
    estimated_time: Optional[int] = None
    questions: List[Dict[str, Any]]


class RecentActivity(CamelModel):
    completed_at: datetime
    time_spent: Optional[int] = None


class SurveyStats(CamelModel):
    total_responses: int
    average_time: Optional[float] = None
    recent_activity: List[RecentActivity]
