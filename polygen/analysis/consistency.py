"""Cross-target consistency of preserved business logic."""

from __future__ import annotations

from typing import List, Sequence

from ..logging import get_logger
from ..models import ConsistencyMetric, ConsistencyReport, Dimension, GenerationResult
from .base import Analyzer


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class ConsistencyAnalyzer(Analyzer[ConsistencyReport]):
    """Score how uniformly each dimension was preserved across targets.

    Per dimension, over the targets for which that dimension applies:

    * consistency: share of targets that succeeded and report no variation;
    * completeness: mean share of specification elements covered;
    * accuracy: mean per-dimension preservation accuracy.

    A dimension that applies to no target scores consistency 1.0 with zero
    completeness and accuracy.
    """

    name = "consistency"

    def __init__(self) -> None:
        self.logger = get_logger("analysis.consistency")

    def analyze(self, results: Sequence[GenerationResult]) -> ConsistencyReport:
        metrics: List[ConsistencyMetric] = [self._dimension(dimension, results) for dimension in Dimension]
        report = ConsistencyReport(metrics=tuple(metrics))
        self.logger.debug("Consistency across %s result(s): %.2f", len(results), report.overall)
        return report

    def _dimension(self, dimension: Dimension, results: Sequence[GenerationResult]) -> ConsistencyMetric:
        applicable: List[GenerationResult] = []
        for result in results:
            coverage = result.coverage_for(dimension)
            if coverage is not None and coverage.applicable:
                applicable.append(result)
        if not applicable:
            return ConsistencyMetric(dimension=dimension, consistency=1.0, completeness=0.0, accuracy=0.0)

        consistent = [
            result.target_id
            for result in applicable
            if result.success and not result.variations_for(dimension)
        ]
        completeness = _mean([result.coverage_for(dimension).ratio for result in applicable])  # type: ignore[union-attr]
        accuracy = _mean([result.score.dimension_accuracy.get(dimension, 0.0) for result in applicable])
        variations = tuple(item for result in applicable for item in result.variations_for(dimension))
        return ConsistencyMetric(
            dimension=dimension,
            consistency=len(consistent) / len(applicable),
            completeness=completeness,
            accuracy=accuracy,
            variations=variations,
            applicable_targets=tuple(result.target_id for result in applicable),
            consistent_targets=tuple(consistent),
        )


__all__ = ["ConsistencyAnalyzer"]
