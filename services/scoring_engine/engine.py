import logging
from typing import Any, Mapping, Optional, Union

from services.scoring_engine.errors import ConfigurationError, ResultCalculationError
from services.scoring_engine.loader import load_survey_definition
from services.scoring_engine.models import CategoryResult, ScoreResult, SurveyDefinition
from services.scoring_engine.scorer import classify_scores, generate_summary, score_dimensions

logger = logging.getLogger(__name__)

EXTERNAL_RESULT_KEY = "external"
EXTERNAL_SUMMARY = "External survey completed successfully. Results are managed by the external platform."


def external_result(external_url: Optional[str] = None) -> ScoreResult:
    """Fixed result recorded for surveys hosted off-platform."""
    return ScoreResult(
        scores={},
        results={
            EXTERNAL_RESULT_KEY: CategoryResult(
                category="completed",
                score=100,
                description="External survey completed successfully",
                traits=["completed"],
            )
        },
        summary=EXTERNAL_SUMMARY,
        external_url=external_url,
    )


def compute_result(
    survey: Union[SurveyDefinition, Mapping[str, Any]],
    answers: Optional[Mapping[str, Any]],
) -> ScoreResult:
    """
    Computes the result of one survey submission.

    Args:
        survey: A SurveyDefinition, or a raw survey mapping which is validated first.
        answers: Question ID to answer value. May be empty.

    Returns:
        The ScoreResult. External surveys always get the fixed completion result.

    Raises:
        ResultCalculationError: If the survey definition is malformed. The underlying
            cause is chained; no partial result is produced.
    """
    try:
        if not isinstance(survey, SurveyDefinition):
            survey = load_survey_definition(survey)
    except ConfigurationError as e:
        logger.error(f"Result calculation error: {e}")
        raise ResultCalculationError() from e

    if survey.is_external:
        return external_result(survey.external_url)

    if survey.analysis is None:
        logger.error(f"Result calculation error: survey '{survey.id}' has no analysis configuration")
        raise ResultCalculationError()

    analysis = survey.analysis
    answers = answers or {}

    scores = score_dimensions(answers, analysis.dimensions)
    results = classify_scores(scores, analysis.result_types)
    summary = generate_summary(results, analysis.summary)

    logger.debug(f"Scored survey '{survey.id}': {scores}")
    return ScoreResult(scores=scores, results=results, summary=summary)


class ResultCalculator:
    """
    Stateless facade over compute_result, injected into the HTTP layer so it
    can be replaced in tests.
    """

    def calculate(
        self,
        survey: Union[SurveyDefinition, Mapping[str, Any]],
        answers: Optional[Mapping[str, Any]],
        force_external: bool = False,
    ) -> ScoreResult:
        if force_external:
            external_url = survey.external_url if isinstance(survey, SurveyDefinition) else survey.get("externalUrl")
            return external_result(external_url)
        return compute_result(survey, answers)
