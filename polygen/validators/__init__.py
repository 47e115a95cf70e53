"""Validation of generated output along independent axes."""

from .axes import (
    BusinessLogicValidator,
    PerformanceValidator,
    PlatformComplianceValidator,
    SecurityValidator,
    SemanticsValidator,
    SyntaxValidator,
)
from .base import AXES, DEFAULT_PERFORMANCE_TOLERANCE, ValidationContext, Validator, outcome
from .compilation import CompilationValidator
from .registry import discover_validators
from .summary import OVERALL, summarize_validation

__all__ = [
    "AXES",
    "BusinessLogicValidator",
    "CompilationValidator",
    "DEFAULT_PERFORMANCE_TOLERANCE",
    "OVERALL",
    "PerformanceValidator",
    "PlatformComplianceValidator",
    "SecurityValidator",
    "SemanticsValidator",
    "SyntaxValidator",
    "ValidationContext",
    "Validator",
    "discover_validators",
    "outcome",
    "summarize_validation",
]
