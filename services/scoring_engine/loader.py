import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml
from pydantic import ValidationError

from services.scoring_engine.errors import ConfigurationError
from services.scoring_engine.models import AnalysisConfig, SurveyDefinition

logger = logging.getLogger(__name__)


def _check_analysis(config: AnalysisConfig) -> None:
    """Validations not covered by the pydantic schema."""
    dimension_keys = set()
    for dimension in config.dimensions:
        if dimension.key in dimension_keys:
            raise ConfigurationError(f"Duplicate dimension key found: {dimension.key}")
        dimension_keys.add(dimension.key)

    for result_type in config.result_types:
        if result_type.dimension not in dimension_keys:
            # Tolerated: such a result type simply never matches.
            logger.warning(f"Result type references undeclared dimension '{result_type.dimension}'")


def _check_question_references(survey: SurveyDefinition) -> None:
    if not survey.questions or survey.analysis is None:
        return
    known = {str(q.get("id")) for q in survey.questions if isinstance(q, dict) and "id" in q}
    for dimension in survey.analysis.dimensions:
        unknown = [qid for qid in dimension.questions if qid not in known]
        if unknown:
            logger.warning(f"Dimension '{dimension.key}' references unknown questions: {unknown}")


def load_analysis_config(data: Mapping[str, Any]) -> AnalysisConfig:
    """
    Validates a raw analysis mapping (``dimensions``, ``resultTypes``, ``summary``)
    and returns the typed config.

    Raises:
        ConfigurationError: If required fields are missing or malformed.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Analysis configuration must be a mapping, got {type(data).__name__}")
    try:
        config = AnalysisConfig.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid analysis configuration: {e}") from e
    _check_analysis(config)
    return config


def load_survey_definition(data: Mapping[str, Any]) -> SurveyDefinition:
    """
    Validates a raw survey mapping and returns a SurveyDefinition.

    Accepts the analysis under ``analysis`` or ``analysisJson`` and the question
    list under ``questions`` or ``questionsJson``. External surveys may omit the
    analysis entirely.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Survey definition must be a mapping, got {type(data).__name__}")

    raw: Dict[str, Any] = dict(data)
    analysis = raw.pop("analysis", None)
    analysis_json = raw.pop("analysisJson", None)
    if analysis is None:
        analysis = analysis_json
    if "questions" not in raw and "questionsJson" in raw:
        raw["questions"] = raw.pop("questionsJson")
    else:
        raw.pop("questionsJson", None)
    if isinstance(raw.get("questions"), dict):
        # questionsJson is sometimes stored as {"questions": [...]}
        raw["questions"] = raw["questions"].get("questions")
    if raw.get("id") is not None:
        raw["id"] = str(raw["id"])

    try:
        survey = SurveyDefinition.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid survey definition: {e}") from e

    if survey.is_external:
        # Off-platform surveys are never scored.
        return survey
    if analysis is None:
        raise ConfigurationError(f"Survey '{survey.id}' has no analysis configuration")

    survey = survey.model_copy(update={"analysis": load_analysis_config(analysis)})

    _check_question_references(survey)
    return survey


def load_survey_definition_from_file(file_path: Union[str, Path]) -> SurveyDefinition:
    """
    Loads a survey definition from a YAML (or JSON) file, validates it,
    and returns a SurveyDefinition object.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"File not found: {file_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing survey file {file_path}: {e}")

    if data is None:
        raise ConfigurationError(f"Survey file is empty or invalid: {file_path}")

    return load_survey_definition(data)
