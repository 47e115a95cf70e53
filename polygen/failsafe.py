"""Fail-safe results for targets whose generation could not complete."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from .errors import ErrorKind
from .models import (
    VALIDATION_AXES,
    AxisOutcome,
    BusinessLogicPreservationScore,
    Dimension,
    DimensionCoverage,
    GenerationError,
    GenerationResult,
    OutputBundle,
    ValidationOutcome,
)
from .spec.model import Specification
from .targets.catalog import Target


def empty_coverage(spec: Specification, target: Target) -> Tuple[DimensionCoverage, ...]:
    """Coverage of a target that produced nothing: every declared element is uncovered."""
    entities = len(spec.entities)
    totals: Dict[Dimension, int] = {
        Dimension.BUSINESS_LOGIC: len(spec.flows),
        Dimension.DATA_MODELS: entities,
        Dimension.USER_INTERFACE: entities,
        Dimension.API_CONTRACTS: entities,
        Dimension.ERROR_HANDLING: entities,
        Dimension.SECURITY: len(spec.compliance.rules),
    }
    return tuple(
        DimensionCoverage(
            dimension,
            0,
            totals[dimension],
            applicable=dimension != Dimension.USER_INTERFACE or target.has_user_interface,
        )
        for dimension in Dimension
    )


def failed_result(
    spec: Specification,
    target: Target,
    error: GenerationError,
    *,
    fingerprint: str | None = None,
    attempts: int = 1,
) -> GenerationResult:
    """Return an empty but well-formed result so later stages see a uniform shape."""
    return GenerationResult(
        target_id=target.id,
        spec_fingerprint=fingerprint or spec.fingerprint(),
        success=False,
        output=OutputBundle(),
        score=BusinessLogicPreservationScore.zero(f"{error.kind.value}: {error.message}"),
        performance=target.baseline,
        coverage=empty_coverage(spec, target),
        error=error,
        attempts=attempts,
    )


def failed_validation(
    result: GenerationResult, axes: Sequence[str] = VALIDATION_AXES
) -> ValidationOutcome:
    """Every axis fails with the generation error as its evidence."""
    if result.error is not None:
        evidence = f"Generation failed ({result.error.kind.value}): {result.error.message}"
    else:
        evidence = "Generation failed"
    return ValidationOutcome(
        axes=tuple(
            AxisOutcome(axis=name, passed=False, confidence=1.0, evidence=evidence) for name in axes
        )
    )


def timeout_error(target: Target, seconds: float) -> GenerationError:
    return GenerationError(
        kind=ErrorKind.TARGET_TIMEOUT,
        message=f"Target '{target.id}' exceeded its {seconds:g}s budget",
    )


__all__ = ["empty_coverage", "failed_result", "failed_validation", "timeout_error"]
