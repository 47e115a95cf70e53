"""Aggregate the optimizations each target applied and their estimated effect."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ..generators.performance import CATEGORY_METRICS
from ..logging import get_logger
from ..models import GenerationResult, OptimizationMetric, OptimizationReport, OptimizationSummary
from ..targets.catalog import OptimizationCategory
from ..targets.registry import TargetRegistry
from .base import Analyzer


def improvement_percent(baseline: float, optimized: float) -> float:
    """Relative reduction from ``baseline`` in percent, exactly 0.0 when nothing changed."""
    if baseline == 0 or optimized == baseline:
        return 0.0
    value = round((baseline - optimized) / baseline * 100, 2)
    # round() can yield -0.0 for tiny regressions
    return value if value != 0 else 0.0


class OptimizationAnalyzer(Analyzer[OptimizationReport]):
    """Group optimization effects by category and pick the standout targets.

    Results are ranked in target registration order so ties resolve the same
    way on every run.
    """

    name = "optimization"

    def __init__(self, registry: TargetRegistry | None = None) -> None:
        self.registry = registry or TargetRegistry.default()
        self.logger = get_logger("analysis.optimization")

    def analyze(self, results: Sequence[GenerationResult]) -> OptimizationReport:
        ordered = sorted(results, key=lambda result: self.registry.position(result.target_id))
        categories: Dict[OptimizationCategory, List[OptimizationMetric]] = {
            category: [] for category in OptimizationCategory
        }
        per_target: Dict[str, List[float]] = {}
        for result in ordered:
            target = self.registry.get(result.target_id)
            improvements = per_target.setdefault(result.target_id, [])
            for optimization in target.optimizations:
                metric = CATEGORY_METRICS[optimization.category]
                baseline = float(getattr(target.baseline, metric))
                optimized = float(getattr(result.performance, metric))
                improvement = improvement_percent(baseline, optimized)
                improvements.append(improvement)
                categories[optimization.category].append(
                    OptimizationMetric(
                        target_id=result.target_id,
                        optimization_id=optimization.id,
                        category=optimization.category,
                        metric=metric,
                        baseline=baseline,
                        optimized=optimized,
                        improvement=improvement,
                        technique=optimization.technique,
                        impact=optimization.impact,
                    )
                )

        frozen = {category: tuple(items) for category, items in categories.items()}
        summary = self._summarize(ordered, frozen, per_target)
        self.logger.debug(
            "Optimization summary: overall %.2f%%, best %s, smallest %s",
            summary.overall_improvement,
            summary.best_performing,
            summary.most_optimized,
        )
        return OptimizationReport(categories=frozen, summary=summary)

    def _summarize(
        self,
        ordered: Sequence[GenerationResult],
        categories: Dict[OptimizationCategory, Tuple[OptimizationMetric, ...]],
        per_target: Dict[str, List[float]],
    ) -> OptimizationSummary:
        all_improvements = [metric.improvement for group in categories.values() for metric in group]
        overall = round(sum(all_improvements) / len(all_improvements), 2) if all_improvements else 0.0

        successful = [result for result in ordered if result.success]
        best: Optional[str] = None
        best_score = 0.0
        for result in successful:
            values = per_target.get(result.target_id, [])
            score = sum(values) / len(values) if values else 0.0
            if best is None or score > best_score:
                best, best_score = result.target_id, score

        smallest: Optional[str] = None
        smallest_size = 0
        for result in successful:
            size = result.output.total_bytes
            if smallest is None or size < smallest_size:
                smallest, smallest_size = result.target_id, size

        recommendations: List[str] = []
        for category, metrics in categories.items():
            if not metrics:
                recommendations.append(f"No selected target applies {category.value} optimizations")
        for group in categories.values():
            for metric in group:
                if metric.improvement < 0:
                    recommendations.append(
                        f"{metric.target_id}: {metric.metric} exceeds baseline despite {metric.optimization_id}"
                    )
        if best is not None and best_score > 0:
            recommendations.append(f"Prefer {best} where runtime performance matters most")
        if smallest is not None:
            recommendations.append(f"Prefer {smallest} where bundle size matters most")

        return OptimizationSummary(
            overall_improvement=overall,
            best_performing=best,
            most_optimized=smallest,
            recommendations=tuple(recommendations),
        )


__all__ = ["OptimizationAnalyzer", "improvement_percent"]
