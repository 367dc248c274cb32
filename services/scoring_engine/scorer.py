# services/scoring_engine/scorer.py
# Dimension scoring, category classification and summary generation.

import logging
import math
from typing import Any, Dict, Mapping, Optional, Sequence

from services.scoring_engine.models import (
    CategoryResult,
    Dimension,
    ResultType,
    SummaryTemplate,
    answer_key,
)

logger = logging.getLogger(__name__)

# --- Constants ---

MIN_SCORE = 0
MAX_SCORE = 100

DEFAULT_SUMMARY = "Results calculated successfully."
DEFAULT_TEMPLATE_TEXT = "Your personality profile has been calculated."

# --- Dimension Scorer ---

def _clamp(value: float) -> int:
    clamped = max(MIN_SCORE, min(MAX_SCORE, value))
    return int(math.floor(clamped + 0.5))


def score_dimension(answers: Mapping[str, Any], dimension: Dimension) -> int:
    """
    Sums the scoring weight of each answered question in the dimension and
    clamps the total to [0, 100].

    Unanswered questions and answer values missing from the scoring table
    contribute 0.
    """
    total = 0.0
    for question_id in dimension.questions:
        if question_id not in answers or answers[question_id] is None:
            continue
        total += dimension.scoring.get(answer_key(answers[question_id]), 0)
    return _clamp(total)


def score_dimensions(answers: Mapping[str, Any], dimensions: Sequence[Dimension]) -> Dict[str, int]:
    """Calculates a score for every dimension, in declaration order."""
    return {dimension.key: score_dimension(answers, dimension) for dimension in dimensions}

# --- Category Classifier ---

def classify_score(score: int, result_type: ResultType) -> Optional[CategoryResult]:
    """Returns the first category whose inclusive [min, max] range contains the score."""
    for category in result_type.categories:
        if category.min <= score <= category.max:
            return CategoryResult(
                category=category.key,
                score=score,
                description=category.description,
                traits=list(category.traits),
            )
    return None


def classify_scores(scores: Mapping[str, int], result_types: Sequence[ResultType]) -> Dict[str, CategoryResult]:
    """
    Builds the results mapping. Dimensions without a score or without a matching
    category are left out; they remain visible in ``scores``. When several result
    types name the same dimension, a later match replaces an earlier one.
    """
    results: Dict[str, CategoryResult] = {}
    for result_type in result_types:
        score = scores.get(result_type.dimension)
        if score is None:
            logger.debug(f"No score for result type dimension '{result_type.dimension}'")
            continue
        matched = classify_score(score, result_type)
        if matched is None:
            logger.debug(f"Score {score} for dimension '{result_type.dimension}' matched no category")
            continue
        results[result_type.dimension] = matched
    return results

# --- Summary Generator ---

def generate_summary(results: Mapping[str, CategoryResult], template: Optional[SummaryTemplate]) -> str:
    """
    Fills ``{dimension}`` placeholders in the summary template with the matched
    category keys. Placeholders for unmatched dimensions are left as they are.
    """
    if template is None:
        return DEFAULT_SUMMARY

    summary = template.text if template.text else DEFAULT_TEMPLATE_TEXT
    for dimension, result in results.items():
        summary = summary.replace("{" + dimension + "}", result.category)
    return summary

