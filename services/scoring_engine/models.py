from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ScoringCategory(BaseModel):
    key: str
    min: float
    max: float
    description: str = ""
    traits: List[str] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("traits", mode="before")
    @classmethod
    def _null_traits(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _check_range(self) -> "ScoringCategory":
        if self.min > self.max:
            raise ValueError(f"Category '{self.key}' has min {self.min} greater than max {self.max}")
        return self


class ResultType(BaseModel):
    dimension: str
    categories: List[ScoringCategory]


class Dimension(BaseModel):
    key: str
    questions: List[str] = Field(default_factory=list)
    scoring: Dict[str, float] = Field(default_factory=dict) # answer value -> weight

    @model_validator(mode="before")
    @classmethod
    def _stringify_scoring_keys(cls, data: Any) -> Any:
        # YAML loads `1: 0` with an int key; JSON always gives strings. A null weight scores 0.
        if isinstance(data, dict) and isinstance(data.get("scoring"), dict):
            data = dict(data)
            data["scoring"] = {answer_key(k): 0 if v is None else v for k, v in data["scoring"].items()}
        return data


class SummaryTemplate(BaseModel):
    text: Optional[str] = None


class AnalysisConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dimensions: List[Dimension]
    result_types: List[ResultType] = Field(..., alias="resultTypes")
    summary: Optional[SummaryTemplate] = None


class SurveyDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: Union[Dict[str, str], str, None] = None
    is_external: bool = Field(False, alias="isExternal")
    external_url: Optional[str] = Field(None, alias="externalUrl")
    questions: Optional[List[Dict[str, Any]]] = None
    analysis: Optional[AnalysisConfig] = None


class CategoryResult(BaseModel):
    category: str
    score: int
    description: str = ""
    traits: List[str] = Field(default_factory=list)


class ScoreResult(BaseModel):
    """Immutable outcome of scoring one submission."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    scores: Dict[str, int] = Field(default_factory=dict)
    results: Dict[str, CategoryResult] = Field(default_factory=dict)
    summary: str
    external_url: Optional[str] = Field(None, alias="externalUrl")

    def to_json_dict(self) -> Dict[str, Any]:
        """Shape stored in ``results_json`` and returned over HTTP."""
        return self.model_dump(by_alias=True, exclude_none=True)


def answer_key(value: Any) -> str:
    """Canonical string form used to match an answer against a scoring table."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
