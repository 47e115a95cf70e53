"""Core data models shared across polygen stages.

Everything produced by a stage is a frozen dataclass. Later stages read these
records and build new ones; nothing downstream of the generator mutates a
:class:`GenerationResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from .errors import ErrorKind
from .spec.model import TypeFamily
from .targets.catalog import Impact, OptimizationCategory, PerformanceMetrics


class Dimension(str, Enum):
    """Aspects of business logic tracked for cross-target consistency."""

    BUSINESS_LOGIC = "business_logic"
    DATA_MODELS = "data_models"
    USER_INTERFACE = "user_interface"
    API_CONTRACTS = "api_contracts"
    ERROR_HANDLING = "error_handling"
    SECURITY = "security"


# Validation axes in the order they are evaluated and reported.
VALIDATION_AXES: Tuple[str, ...] = (
    "syntax",
    "semantics",
    "business_logic",
    "platform_compliance",
    "performance",
    "security",
)


def freeze_mapping(record: Any, name: str) -> None:
    """Replace a mapping field of a frozen record with a read-only copy."""
    value = getattr(record, name)
    if not isinstance(value, MappingProxyType):
        object.__setattr__(record, name, MappingProxyType(dict(value)))


class ArtifactKind(str, Enum):
    COMPONENT = "component"
    MODEL = "model"
    PAGE = "page"
    SERVICE = "service"
    REPOSITORY = "repository"


@dataclass(frozen=True)
class ContractElement:
    """One element of a contract: a field, operation, step or rule."""

    name: str
    family: Optional[TypeFamily] = None
    required: bool = False
    native_type: str = ""


@dataclass(frozen=True)
class Contract:
    """Shape of one spec element (``subject``) in one dimension."""

    dimension: Dimension
    subject: str
    elements: Tuple[ContractElement, ...] = ()

    def element(self, name: str) -> Optional[ContractElement]:
        for item in self.elements:
            if item.name == name:
                return item
        return None


@dataclass(frozen=True)
class Artifact:
    path: str
    kind: ArtifactKind
    language: str
    framework: str
    content: str
    source: str
    template: str
    capabilities: Tuple[str, ...] = ()
    contracts: Tuple[Contract, ...] = ()

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))


@dataclass(frozen=True)
class ConfigurationFile:
    path: str
    format: str
    content: str


@dataclass(frozen=True)
class Dependency:
    name: str
    version: str
    scope: str = "runtime"


@dataclass(frozen=True)
class BuildScript:
    name: str
    command: str


@dataclass(frozen=True)
class DocumentationFile:
    path: str
    content: str


@dataclass(frozen=True)
class OutputBundle:
    files: Tuple[Artifact, ...] = ()
    configuration: Tuple[ConfigurationFile, ...] = ()
    dependencies: Tuple[Dependency, ...] = ()
    build_scripts: Tuple[BuildScript, ...] = ()
    documentation: Tuple[DocumentationFile, ...] = ()

    @property
    def total_bytes(self) -> int:
        return sum(artifact.size for artifact in self.files)

    def file(self, path: str) -> Optional[Artifact]:
        for artifact in self.files:
            if artifact.path == path:
                return artifact
        return None

    def of_kind(self, kind: ArtifactKind) -> Tuple[Artifact, ...]:
        return tuple(artifact for artifact in self.files if artifact.kind == kind)


@dataclass(frozen=True)
class Variation:
    """A divergence between an emitted contract and the declared one."""

    dimension: Dimension
    target_id: str
    subject: str
    element: str
    description: str
    impact: Impact
    expected: str = ""
    actual: str = ""


@dataclass(frozen=True)
class DimensionCoverage:
    dimension: Dimension
    covered: int
    total: int
    applicable: bool = True

    @property
    def ratio(self) -> float:
        return self.covered / self.total if self.total else 0.0


@dataclass(frozen=True)
class Score:
    """A value in [0, 1] with the notes that justify it."""

    value: float
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BusinessLogicPreservationScore:
    consistency: Score
    completeness: Score
    accuracy: Score
    traceability: Score
    dimension_accuracy: Mapping[Dimension, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        freeze_mapping(self, "dimension_accuracy")

    @classmethod
    def zero(cls, reason: str) -> "BusinessLogicPreservationScore":
        empty = Score(0.0, (reason,))
        return cls(empty, empty, empty, empty, {dimension: 0.0 for dimension in Dimension})


@dataclass(frozen=True)
class PlatformSpecificFeature:
    """How a capability the specification needs maps onto a target feature."""

    capability: str
    feature_id: Optional[str]
    implementation: str
    exercised: bool


@dataclass(frozen=True)
class GenerationError:
    kind: ErrorKind
    message: str
    problems: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationDetail:
    subject: str
    message: str
    passed: bool
    severity: str = "info"


@dataclass(frozen=True)
class AxisOutcome:
    axis: str
    passed: bool
    confidence: float
    evidence: str
    details: Tuple[ValidationDetail, ...] = ()


@dataclass(frozen=True)
class ValidationOutcome:
    axes: Tuple[AxisOutcome, ...] = ()

    @property
    def passed(self) -> bool:
        return bool(self.axes) and all(axis.passed for axis in self.axes)

    @property
    def confidence(self) -> float:
        if not self.axes:
            return 0.0
        return sum(axis.confidence for axis in self.axes) / len(self.axes)

    def axis(self, name: str) -> Optional[AxisOutcome]:
        for outcome in self.axes:
            if outcome.axis == name:
                return outcome
        return None


@dataclass(frozen=True)
class GenerationResult:
    """Output of compiling one specification snapshot against one target."""

    target_id: str
    spec_fingerprint: str
    success: bool
    output: OutputBundle
    score: BusinessLogicPreservationScore
    performance: PerformanceMetrics
    features: Tuple[PlatformSpecificFeature, ...] = ()
    coverage: Tuple[DimensionCoverage, ...] = ()
    variations: Tuple[Variation, ...] = ()
    optimizations_applied: Tuple[str, ...] = ()
    error: Optional[GenerationError] = None
    validation: Optional[ValidationOutcome] = None
    attempts: int = 1

    def coverage_for(self, dimension: Dimension) -> Optional[DimensionCoverage]:
        for item in self.coverage:
            if item.dimension == dimension:
                return item
        return None

    def variations_for(self, dimension: Dimension) -> Tuple[Variation, ...]:
        return tuple(item for item in self.variations if item.dimension == dimension)


@dataclass(frozen=True)
class ConsistencyMetric:
    dimension: Dimension
    consistency: float
    completeness: float
    accuracy: float
    variations: Tuple[Variation, ...] = ()
    applicable_targets: Tuple[str, ...] = ()
    consistent_targets: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ConsistencyReport:
    metrics: Tuple[ConsistencyMetric, ...] = ()

    def metric(self, dimension: Dimension) -> ConsistencyMetric:
        for item in self.metrics:
            if item.dimension == dimension:
                return item
        raise KeyError(dimension)

    @property
    def overall(self) -> float:
        if not self.metrics:
            return 0.0
        return sum(item.consistency for item in self.metrics) / len(self.metrics)

    @property
    def business_logic(self) -> ConsistencyMetric:
        return self.metric(Dimension.BUSINESS_LOGIC)

    @property
    def data_models(self) -> ConsistencyMetric:
        return self.metric(Dimension.DATA_MODELS)

    @property
    def user_interface(self) -> ConsistencyMetric:
        return self.metric(Dimension.USER_INTERFACE)

    @property
    def api_contracts(self) -> ConsistencyMetric:
        return self.metric(Dimension.API_CONTRACTS)

    @property
    def error_handling(self) -> ConsistencyMetric:
        return self.metric(Dimension.ERROR_HANDLING)

    @property
    def security(self) -> ConsistencyMetric:
        return self.metric(Dimension.SECURITY)


@dataclass(frozen=True)
class OptimizationMetric:
    target_id: str
    optimization_id: str
    category: OptimizationCategory
    metric: str
    baseline: float
    optimized: float
    improvement: float
    technique: str
    impact: Impact


@dataclass(frozen=True)
class OptimizationSummary:
    overall_improvement: float
    best_performing: Optional[str]
    most_optimized: Optional[str]
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class OptimizationReport:
    categories: Mapping[OptimizationCategory, Tuple[OptimizationMetric, ...]]
    summary: OptimizationSummary

    def __post_init__(self) -> None:
        freeze_mapping(self, "categories")

    def metrics(self) -> Tuple[OptimizationMetric, ...]:
        return tuple(metric for group in self.categories.values() for metric in group)


@dataclass(frozen=True)
class ValidationSummary:
    axis: str
    passed: int
    failed: int
    total: int
    success_rate: float
    critical_issues: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SpecificationInfo:
    name: str
    version: str
    schema_version: str
    fingerprint: str
    entities: int
    flows: int
    components: int
    rules: int


@dataclass(frozen=True)
class ReportSummary:
    total_targets: int
    successful: int
    failed: int
    missing: int
    overall_consistency: float
    overall_improvement: float
    validation_success_rate: float


@dataclass(frozen=True)
class TargetEvidence:
    target_id: str
    success: bool
    files: int
    bytes: int
    variations: int
    validation_passed: bool
    preservation: Mapping[str, float] = field(default_factory=dict)
    error: Optional[GenerationError] = None
    highlights: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        freeze_mapping(self, "preservation")


@dataclass(frozen=True)
class EvidenceReport:
    title: str
    specification: SpecificationInfo
    complete: bool
    summary: ReportSummary
    targets: Tuple[TargetEvidence, ...]
    consistency: ConsistencyReport
    optimization: OptimizationReport
    validation: Tuple[ValidationSummary, ...]
    missing_targets: Tuple[str, ...] = ()
    conclusions: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


def to_dict(value: Any) -> Any:
    """Convert nested records into JSON-ready builtins."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {item.name: to_dict(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, Mapping):
        return {str(to_dict(key)): to_dict(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dict(item) for item in value]
    return value


__all__ = [
    "VALIDATION_AXES",
    "ArtifactKind",
    "Artifact",
    "AxisOutcome",
    "BuildScript",
    "BusinessLogicPreservationScore",
    "ConfigurationFile",
    "ConsistencyMetric",
    "ConsistencyReport",
    "Contract",
    "ContractElement",
    "Dependency",
    "Dimension",
    "DimensionCoverage",
    "DocumentationFile",
    "EvidenceReport",
    "GenerationError",
    "GenerationResult",
    "OptimizationMetric",
    "OptimizationReport",
    "OptimizationSummary",
    "OutputBundle",
    "PerformanceMetrics",
    "PlatformSpecificFeature",
    "ReportSummary",
    "Score",
    "SpecificationInfo",
    "TargetEvidence",
    "ValidationDetail",
    "ValidationOutcome",
    "ValidationSummary",
    "Variation",
    "to_dict",
    "freeze_mapping",
]
