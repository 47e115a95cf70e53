"""Selection of the validation axes a run checks."""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from ..models import VALIDATION_AXES
from ..spec.naming import identifier_key
from .axes import (
    BusinessLogicValidator,
    PerformanceValidator,
    PlatformComplianceValidator,
    SecurityValidator,
    SemanticsValidator,
    SyntaxValidator,
)
from .base import Validator

_AXIS_FACTORIES: Dict[str, Callable[[], Validator]] = {
    "syntax": SyntaxValidator,
    "semantics": SemanticsValidator,
    "business_logic": BusinessLogicValidator,
    "platform_compliance": PlatformComplianceValidator,
    "performance": PerformanceValidator,
    "security": SecurityValidator,
}


def discover_validators(enabled: Sequence[str] | None = None) -> List[Validator]:
    """Instantiate the validators for ``enabled`` axes (all axes by default).

    Names match regardless of casing and separators, so ``business-logic``
    and ``BusinessLogic`` both select ``business_logic``. The result always
    follows the canonical axis order, whatever order the names came in, so
    reports from differently configured runs line up.
    """
    if enabled is None:
        selected = set(VALIDATION_AXES)
    else:
        selected = _resolve(enabled)
    return [_AXIS_FACTORIES[axis]() for axis in VALIDATION_AXES if axis in selected]


def _resolve(enabled: Sequence[str]) -> set[str]:
    selected: set[str] = set()
    unknown: List[str] = []
    for name in enabled:
        key = identifier_key(name)
        if key in _AXIS_FACTORIES:
            selected.add(key)
        else:
            unknown.append(name)
    if unknown:
        raise ValueError(f"Unknown validators requested: {', '.join(sorted(unknown))}")
    if not selected:
        # An outcome with no axes can never pass.
        raise ValueError("At least one validation axis must be enabled")
    return selected


__all__ = ["discover_validators"]
