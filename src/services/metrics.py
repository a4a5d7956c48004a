# src/services/metrics.py
"""Metric extraction and best-model selection.

Two separate extraction rule sets live here:

* ``extract_primary_metric`` reads flattened fields first (``f1_score``,
  ``r2_score``, ``silhouette_score``) and is used when ranking the models
  returned by the ML service's compare endpoint.
* ``extract_comparison_score`` reads nested metric maps (``test_metrics``,
  ``training_metrics``, ``metrics``) and is used by the multi-algorithm
  trainer.

Both treat a missing, null, zero, NaN or non-numeric value as absent and fall
through to the next candidate, ending at ``0.0``.
"""
import math
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional


class ProblemType(str, Enum):
    CLASSIFICATION = "classification"
    REGRESSION = "regression"
    CLUSTERING = "clustering"
    DIMENSIONALITY_REDUCTION = "dimensionality_reduction"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


ModelResult = Dict[str, Any]
MetricFn = Callable[[Mapping[str, Any], Any], float]


def _problem_value(problem_type: Any) -> Any:
    if isinstance(problem_type, ProblemType):
        return problem_type.value
    return problem_type


def _as_metric(value: Any) -> Optional[float]:
    """Return value as a float if it counts as a present metric, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or value == 0:
        return None
    return float(value)


def _nested(result: Mapping[str, Any], section: str, key: str) -> Any:
    metrics = result.get(section)
    if isinstance(metrics, Mapping):
        return metrics.get(key)
    return None


def _first_metric(*candidates: Any) -> float:
    for candidate in candidates:
        value = _as_metric(candidate)
        if value is not None:
            return value
    return 0.0


def extract_primary_metric(result: Mapping[str, Any], problem_type: Any) -> float:
    """Primary ranking metric of a model result.

    classification: f1_score -> test_metrics.f1_score -> 0
    regression: r2_score -> test_metrics.r2_score -> 0
    clustering: silhouette_score -> 0
    anything else follows the classification rule.
    """
    if not isinstance(result, Mapping):
        return 0.0

    kind = _problem_value(problem_type)

    if kind == ProblemType.REGRESSION.value:
        # NOTE: a missing R² resolves to 0, not -inf, so a negative-R² model
        # ranks below "no data". Kept as-is; see DESIGN.md.
        return _first_metric(result.get("r2_score"), _nested(result, "test_metrics", "r2_score"))

    if kind == ProblemType.CLUSTERING.value:
        return _first_metric(result.get("silhouette_score"))

    return _first_metric(result.get("f1_score"), _nested(result, "test_metrics", "f1_score"))


def extract_comparison_score(result: Mapping[str, Any], problem_type: Any) -> float:
    """Score used by the multi-algorithm trainer to rank successful runs.

    classification: test_metrics.accuracy -> training_metrics.accuracy -> 0
    regression: test_metrics.r2_score -> training_metrics.r2_score -> 0
    clustering: metrics.silhouette_score -> 0
    other problem types score 0.
    """
    if not isinstance(result, Mapping):
        return 0.0

    kind = _problem_value(problem_type)

    if kind == ProblemType.CLASSIFICATION.value:
        return _first_metric(
            _nested(result, "test_metrics", "accuracy"),
            _nested(result, "training_metrics", "accuracy"),
        )

    if kind == ProblemType.REGRESSION.value:
        return _first_metric(
            _nested(result, "test_metrics", "r2_score"),
            _nested(result, "training_metrics", "r2_score"),
        )

    if kind == ProblemType.CLUSTERING.value:
        return _first_metric(_nested(result, "metrics", "silhouette_score"))

    return 0.0


def select_best(results: List[ModelResult], problem_type: Any,
                metric: MetricFn = extract_primary_metric) -> Optional[ModelResult]:
    """Pick the result with the highest metric; the earliest one wins ties.

    The winner is annotated in place with ``primaryMetric`` and returned as
    the same object that was passed in.
    """
    if not results:
        return None

    best = results[0]
    best_score = metric(best, problem_type)

    for candidate in results[1:]:
        score = metric(candidate, problem_type)
        if score > best_score:
            best = candidate
            best_score = score

    best["primaryMetric"] = best_score
    return best
