"""Aggregate per-target validation outcomes into per-axis summaries."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from ..models import VALIDATION_AXES, GenerationResult, ValidationSummary

OVERALL = "overall"

_RECOMMENDATIONS: Dict[str, str] = {
    "syntax": "Review the templates that produced unparseable files",
    "semantics": "Align target type mappings with the declared field types",
    "business_logic": "Ensure page templates render a handler for every flow step",
    "platform_compliance": "Choose targets whose features cover the required capabilities",
    "performance": "Enable size or performance optimizations for targets over budget",
    "security": "Render an enforcement point for every compliance rule",
}


def summarize_validation(results: Sequence[GenerationResult]) -> Tuple[ValidationSummary, ...]:
    """One summary per validation axis followed by an ``overall`` summary.

    Results without a validation outcome are not counted.
    """
    validated = [result for result in results if result.validation is not None]
    summaries: List[ValidationSummary] = []
    for axis in VALIDATION_AXES:
        passed = 0
        failed = 0
        issues: List[str] = []
        for result in validated:
            outcome = result.validation.axis(axis)  # type: ignore[union-attr]
            if outcome is None:
                continue
            if outcome.passed:
                passed += 1
                continue
            failed += 1
            critical = [item for item in outcome.details if not item.passed and item.severity == "critical"]
            if critical:
                issues.extend(f"{result.target_id}: {item.subject}: {item.message}" for item in critical)
            elif not outcome.details:
                issues.append(f"{result.target_id}: {outcome.evidence}")
        total = passed + failed
        recommendations: Tuple[str, ...] = ()
        if failed:
            recommendations = (_RECOMMENDATIONS.get(axis, f"Investigate {axis} failures"),)
        summaries.append(
            ValidationSummary(
                axis=axis,
                passed=passed,
                failed=failed,
                total=total,
                success_rate=passed / total if total else 0.0,
                critical_issues=tuple(issues),
                recommendations=recommendations,
            )
        )

    passed_targets = [result for result in validated if result.validation.passed]  # type: ignore[union-attr]
    failed_targets = [result for result in validated if not result.validation.passed]  # type: ignore[union-attr]
    overall_issues = tuple(
        f"{result.target_id}: {result.error.message}" for result in failed_targets if result.error is not None
    )
    overall_recommendations: Tuple[str, ...] = ()
    if failed_targets:
        names = ", ".join(result.target_id for result in failed_targets)
        overall_recommendations = (f"Re-run or investigate failing targets: {names}",)
    summaries.append(
        ValidationSummary(
            axis=OVERALL,
            passed=len(passed_targets),
            failed=len(failed_targets),
            total=len(validated),
            success_rate=len(passed_targets) / len(validated) if validated else 0.0,
            critical_issues=overall_issues,
            recommendations=overall_recommendations,
        )
    )
    return tuple(summaries)


__all__ = ["OVERALL", "summarize_validation"]
