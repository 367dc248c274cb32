from typing import Any, Dict, Mapping


def calculate_differences(results1: Mapping[str, Any], results2: Mapping[str, Any]) -> Dict[str, Dict[str, float]]:
    """
    Per-dimension score differences between two stored results of the same survey.

    ``percentageChange`` is relative to the first score and is 0 when the first
    score is 0. Dimensions missing from the second result count as 0.
    """
    differences: Dict[str, Dict[str, float]] = {}
    scores1 = results1.get("scores") if results1 else None
    scores2 = results2.get("scores") if results2 else None
    if not scores1 or not scores2:
        return differences

    for dimension, score1 in scores1.items():
        score2 = scores2.get(dimension, 0)
        differences[dimension] = {
            "scoreDifference": score2 - score1,
            "percentageChange": ((score2 - score1) / score1) * 100 if score1 > 0 else 0,
        }
    return differences
