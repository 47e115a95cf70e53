"""Performance estimation for an emitted bundle."""

from __future__ import annotations

from typing import Dict, Iterable

from ..models import OutputBundle
from ..targets.catalog import Optimization, OptimizationCategory, PerformanceMetrics, Target

# Lower is better for every metric an optimization category acts on.
CATEGORY_METRICS: Dict[OptimizationCategory, str] = {
    OptimizationCategory.PERFORMANCE: "startup_time",
    OptimizationCategory.BATTERY: "startup_time",
    OptimizationCategory.MEMORY: "memory_usage",
    OptimizationCategory.SIZE: "output_size",
}

PER_FILE_COMPILE_MS = 10


def retained_fraction(optimizations: Iterable[Optimization], metric: str) -> float:
    """Share of a metric left after applying every optimization that acts on it."""
    fraction = 1.0
    for optimization in optimizations:
        if CATEGORY_METRICS[optimization.category] == metric:
            fraction *= 1.0 - optimization.factor
    return fraction


def estimate_performance(target: Target, bundle: OutputBundle) -> PerformanceMetrics:
    baseline = target.baseline
    applied = target.optimizations
    return PerformanceMetrics(
        compilation_time=round(baseline.compilation_time + PER_FILE_COMPILE_MS * len(bundle.files), 2),
        output_size=round(
            (baseline.output_size + bundle.total_bytes) * retained_fraction(applied, "output_size"), 2
        ),
        execution_speed=baseline.execution_speed,
        memory_usage=round(baseline.memory_usage * retained_fraction(applied, "memory_usage"), 2),
        startup_time=round(baseline.startup_time * retained_fraction(applied, "startup_time"), 2),
    )


__all__ = ["CATEGORY_METRICS", "PER_FILE_COMPILE_MS", "estimate_performance", "retained_fraction"]
