"""Core validation data structures and helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence

from ..models import VALIDATION_AXES, AxisOutcome, GenerationResult, ValidationDetail
from ..spec.model import Specification
from ..targets.catalog import Target

AXES = VALIDATION_AXES
DEFAULT_PERFORMANCE_TOLERANCE = 0.5


@dataclass(frozen=True)
class ValidationContext:
    """Everything an axis validator may inspect for one target."""

    spec: Specification
    target: Target
    result: GenerationResult
    performance_tolerance: float = DEFAULT_PERFORMANCE_TOLERANCE


class Validator(Protocol):
    """Protocol implemented by per-axis validators."""

    name: str

    def validate(self, context: ValidationContext) -> AxisOutcome:
        """Score one axis of a generation result."""


def outcome(
    axis: str,
    details: Sequence[ValidationDetail],
    *,
    checked: int,
    satisfied: int,
    empty_evidence: str,
    weight: float = 1.0,
) -> AxisOutcome:
    """Build an axis outcome from per-subject details.

    The axis passes when no detail failed. Confidence is the satisfied share
    of checked subjects scaled by ``weight``; an axis with nothing to check
    passes with full confidence.
    """
    failures: List[ValidationDetail] = [item for item in details if not item.passed]
    if checked == 0:
        return AxisOutcome(axis=axis, passed=not failures, confidence=1.0, evidence=empty_evidence,
                           details=tuple(details))
    confidence = round(weight * satisfied / checked, 4)
    if failures:
        evidence = f"{len(failures)} problem(s): " + "; ".join(item.message for item in failures[:3])
    else:
        evidence = f"{satisfied} of {checked} checks passed"
    return AxisOutcome(
        axis=axis,
        passed=not failures,
        confidence=confidence,
        evidence=evidence,
        details=tuple(details),
    )


__all__ = [
    "AXES",
    "DEFAULT_PERFORMANCE_TOLERANCE",
    "ValidationContext",
    "Validator",
    "outcome",
]
