"""Assemble the evidence report for one compilation run."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import (
    ConsistencyReport,
    EvidenceReport,
    GenerationResult,
    OptimizationReport,
    ReportSummary,
    SpecificationInfo,
    TargetEvidence,
    ValidationSummary,
)
from ..spec.model import Specification
from ..targets.catalog import Impact

OVERALL_AXIS = "overall"


def build_report(
    spec: Specification,
    results: Sequence[GenerationResult],
    consistency: ConsistencyReport,
    optimization: OptimizationReport,
    validation: Sequence[ValidationSummary],
    *,
    missing: Sequence[str] = (),
    title: str | None = None,
) -> EvidenceReport:
    """Build an immutable report; identical inputs always give an identical report.

    ``missing`` names targets that have no result because the run was
    cancelled or timed out; such a report is flagged incomplete.
    """
    successful = sum(1 for result in results if result.success)
    overall = _overall_validation(validation)
    summary = ReportSummary(
        total_targets=len(results) + len(missing),
        successful=successful,
        failed=len(results) - successful,
        missing=len(missing),
        overall_consistency=round(consistency.overall, 4),
        overall_improvement=optimization.summary.overall_improvement,
        validation_success_rate=round(overall.success_rate, 4) if overall else 0.0,
    )
    return EvidenceReport(
        title=title or f"Compilation evidence for {spec.metadata.name}",
        specification=SpecificationInfo(
            name=spec.metadata.name,
            version=spec.metadata.version,
            schema_version=spec.schema_version,
            fingerprint=spec.fingerprint(),
            entities=len(spec.entities),
            flows=len(spec.flows),
            components=len(spec.architecture.components),
            rules=len(spec.compliance.rules),
        ),
        complete=not missing,
        summary=summary,
        targets=tuple(_target_evidence(result) for result in results),
        consistency=consistency,
        optimization=optimization,
        validation=tuple(validation),
        missing_targets=tuple(missing),
        conclusions=_conclusions(summary, consistency, optimization, missing),
        recommendations=_recommendations(results, consistency, optimization, validation),
    )


def _overall_validation(validation: Sequence[ValidationSummary]) -> Optional[ValidationSummary]:
    for item in validation:
        if item.axis == OVERALL_AXIS:
            return item
    return None


def _target_evidence(result: GenerationResult) -> TargetEvidence:
    score = result.score
    highlights: List[str] = []
    if result.success:
        highlights.append(f"{len(result.output.files)} artifact(s), {result.output.total_bytes} bytes")
        if result.optimizations_applied:
            highlights.append("Optimizations: " + ", ".join(result.optimizations_applied))
        mapped = [item for item in result.features if item.feature_id]
        if mapped:
            highlights.append(
                "Capabilities: " + ", ".join(f"{item.capability} via {item.feature_id}" for item in mapped)
            )
        severe = [item for item in result.variations if item.impact in (Impact.HIGH, Impact.CRITICAL)]
        if severe:
            highlights.append(f"{len(severe)} high-impact variation(s)")
    elif result.error is not None:
        highlights.append(f"{result.error.kind.value}: {result.error.message}")
    if result.attempts > 1:
        highlights.append(f"Took {result.attempts} attempts")
    return TargetEvidence(
        target_id=result.target_id,
        success=result.success,
        files=len(result.output.files),
        bytes=result.output.total_bytes,
        variations=len(result.variations),
        validation_passed=bool(result.validation and result.validation.passed),
        preservation={
            "consistency": score.consistency.value,
            "completeness": score.completeness.value,
            "accuracy": score.accuracy.value,
            "traceability": score.traceability.value,
        },
        error=result.error,
        highlights=tuple(highlights),
    )


def _conclusions(
    summary: ReportSummary,
    consistency: ConsistencyReport,
    optimization: OptimizationReport,
    missing: Sequence[str],
) -> Tuple[str, ...]:
    lines = [f"{summary.successful} of {summary.total_targets} target(s) compiled successfully"]
    if missing:
        lines.append("Run incomplete; no result for: " + ", ".join(missing))
    lines.append(f"Average cross-target consistency: {summary.overall_consistency:.2f}")
    weakest = [metric for metric in consistency.metrics if metric.consistency < 1.0]
    if weakest:
        lowest = min(weakest, key=lambda metric: metric.consistency)
        lines.append(f"Least consistent dimension: {lowest.dimension.value} ({lowest.consistency:.2f})")
    elif consistency.metrics:
        lines.append("Every dimension was preserved without variation")
    if optimization.summary.best_performing:
        lines.append(f"Best performing target: {optimization.summary.best_performing}")
    if optimization.summary.most_optimized:
        lines.append(f"Smallest emitted bundle: {optimization.summary.most_optimized}")
    return tuple(lines)


def _recommendations(
    results: Sequence[GenerationResult],
    consistency: ConsistencyReport,
    optimization: OptimizationReport,
    validation: Sequence[ValidationSummary],
) -> Tuple[str, ...]:
    collected: List[str] = []
    for metric in consistency.metrics:
        if any(item.impact in (Impact.HIGH, Impact.CRITICAL) for item in metric.variations):
            collected.append(f"Resolve high-impact {metric.dimension.value} variations")
    for result in results:
        if not result.success and result.error is not None:
            collected.append(f"Fix {result.target_id}: {result.error.message}")
    for item in validation:
        collected.extend(item.recommendations)
    collected.extend(optimization.summary.recommendations)
    return _dedupe(collected)


def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    seen: set[str] = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return tuple(ordered)


__all__ = ["build_report"]
