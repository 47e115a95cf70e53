"""Run every validation axis over one generation result."""

from __future__ import annotations

from typing import List, Sequence

from ..failsafe import failed_validation
from ..logging import get_logger
from ..models import AxisOutcome, GenerationResult, ValidationDetail, ValidationOutcome
from ..spec.model import Specification
from ..targets.catalog import Target
from .base import DEFAULT_PERFORMANCE_TOLERANCE, ValidationContext, Validator
from .registry import discover_validators


class CompilationValidator:
    """Score a :class:`GenerationResult` along each configured axis.

    Axes are independent: an axis that raises is reported as failed with the
    exception as evidence, and the remaining axes still run.
    """

    def __init__(
        self,
        validators: Sequence[Validator] | None = None,
        *,
        performance_tolerance: float = DEFAULT_PERFORMANCE_TOLERANCE,
    ) -> None:
        if performance_tolerance < 0:
            raise ValueError("performance_tolerance must be non-negative")
        self.validators: List[Validator] = list(validators) if validators is not None else discover_validators()
        self.performance_tolerance = performance_tolerance
        self.logger = get_logger("validator")

    @property
    def axes(self) -> tuple[str, ...]:
        return tuple(validator.name for validator in self.validators)

    def validate(self, spec: Specification, target: Target, result: GenerationResult) -> ValidationOutcome:
        if not result.success:
            return failed_validation(result, self.axes)

        context = ValidationContext(
            spec=spec,
            target=target,
            result=result,
            performance_tolerance=self.performance_tolerance,
        )
        outcomes: List[AxisOutcome] = []
        for validator in self.validators:
            try:
                outcomes.append(validator.validate(context))
            except Exception as exc:
                self.logger.warning("Validator %s failed on %s: %s", validator.name, target.id, exc)
                outcomes.append(
                    AxisOutcome(
                        axis=validator.name,
                        passed=False,
                        confidence=0.0,
                        evidence=f"validator raised {type(exc).__name__}: {exc}",
                        details=(ValidationDetail(target.id, str(exc), False, "critical"),),
                    )
                )
        validation = ValidationOutcome(axes=tuple(outcomes))
        self.logger.debug(
            "Validated %s: %s (confidence %.2f)",
            target.id,
            "passed" if validation.passed else "failed",
            validation.confidence,
        )
        return validation


__all__ = ["CompilationValidator"]
