import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmitResultRequest(CamelModel):
    survey_id: uuid.UUID
    answers: Dict[str, Any] = Field(default_factory=dict) # question_id → answer value
    time_spent: Optional[int] = Field(None, ge=0)
    session_id: Optional[str] = None
    is_external: bool = False


class SubmitResultResponse(CamelModel):
    message: str
    result_id: uuid.UUID
    results: Dict[str, Any]
    needs_registration: bool


class SurveyRef(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    category: str


class ResultRead(CamelModel):
    id: uuid.UUID
    user_id: Optional[str] = None
    survey_id: uuid.UUID
    answers: Dict[str, Any]
    results: Dict[str, Any]
    completed_at: datetime
    time_spent: Optional[int] = None
    session_id: Optional[str] = None
    survey: Optional[SurveyRef] = None


class ResultPage(CamelModel):
    results: List[ResultRead]
    total: int
    page: int
    total_pages: int


class ComparedResult(CamelModel):
    id: uuid.UUID
    completed_at: datetime
    results: Dict[str, Any]


class ResultComparison(CamelModel):
    survey: str
    result1: ComparedResult
    result2: ComparedResult
    differences: Dict[str, Dict[str, float]]
