"""Target catalog and registry."""

from .catalog import (
    CAPABILITIES,
    DEFAULT_CATALOG,
    IMPACT_FACTORS,
    Feature,
    FeatureProfile,
    Framework,
    Impact,
    Language,
    Maturity,
    Optimization,
    OptimizationCategory,
    PerformanceMetrics,
    Platform,
    Target,
    describe_target,
)
from .registry import TargetRegistry

__all__ = [
    "CAPABILITIES",
    "DEFAULT_CATALOG",
    "Feature",
    "FeatureProfile",
    "Framework",
    "IMPACT_FACTORS",
    "Impact",
    "Language",
    "Maturity",
    "Optimization",
    "OptimizationCategory",
    "PerformanceMetrics",
    "Platform",
    "Target",
    "TargetRegistry",
    "describe_target",
]
