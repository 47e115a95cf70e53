"""Declared contracts and their comparison with what a target emitted.

The declared side is derived from the specification alone and is identical
for every target, so it is the reference baseline for consistency. The
emitted side is recorded by the generator for each artifact it renders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..models import Contract, ContractElement, Dimension, DimensionCoverage, Variation, freeze_mapping
from ..spec.model import ComplianceRule, Entity, Flow, FlowStep, RuleImplementation, Specification
from ..targets.catalog import Impact, Target
from .conventions import canonical_name, kebab_case

# (operation, method, suffix) for the CRUD surface every entity exposes.
ENTITY_OPERATIONS: Tuple[Tuple[str, str, str], ...] = (
    ("list", "GET", ""),
    ("get", "GET", "/{id}"),
    ("create", "POST", ""),
    ("update", "PUT", "/{id}"),
    ("delete", "DELETE", "/{id}"),
)

RULE_KEYWORDS: Dict[RuleImplementation, str] = {
    RuleImplementation.ENCRYPTION: "encrypt",
    RuleImplementation.ACCESS_CONTROL: "authorize",
    RuleImplementation.VALIDATION: "validate",
    RuleImplementation.TRANSFORMATION: "transform",
}

# Dimensions whose elements carry a wire shape in ``native_type`` that must match.
_SHAPE_DIMENSIONS = frozenset({Dimension.API_CONTRACTS})


def entity_subject(entity: Entity) -> str:
    return f"entity:{entity.id}"


def flow_subject(flow: Flow) -> str:
    return f"flow:{flow.id}"


def rule_subject(rule: ComplianceRule) -> str:
    return f"rule:{rule.id}"


def api_base_path(entity: Entity) -> str:
    return f"/api/{kebab_case(entity.name)}"


def step_handler(step: FlowStep) -> str:
    """Language-neutral handler name for a flow step."""
    return canonical_name(f"handle_{step.id}")


def error_codes(spec: Specification) -> Tuple[str, ...]:
    codes = ["NOT_FOUND", "INVALID_INPUT"]
    if spec.requires_auth:
        codes.append("UNAUTHORIZED")
    return tuple(codes)


def applicable_dimensions(target: Target) -> Tuple[Dimension, ...]:
    return tuple(
        dimension
        for dimension in Dimension
        if dimension != Dimension.USER_INTERFACE or target.has_user_interface
    )


def field_elements(entity: Entity) -> Tuple[ContractElement, ...]:
    return tuple(
        ContractElement(
            name=canonical_name(item.id),
            family=item.family,
            required=item.required,
            native_type=item.type.value,
        )
        for item in entity.fields
    )


def operation_elements(entity: Entity) -> Tuple[ContractElement, ...]:
    base = api_base_path(entity)
    return tuple(
        ContractElement(name=name, required=True, native_type=f"{method} {base}{suffix}")
        for name, method, suffix in ENTITY_OPERATIONS
    )


def declared_contracts(
    spec: Specification, target: Target
) -> Dict[Dimension, Tuple[Contract, ...]]:
    """Contracts the specification declares, keyed by every dimension applicable to ``target``."""
    dimensions = applicable_dimensions(target)
    declared: Dict[Dimension, Tuple[Contract, ...]] = {}
    for dimension in dimensions:
        if dimension in (Dimension.DATA_MODELS, Dimension.USER_INTERFACE):
            contracts = [
                Contract(dimension, entity_subject(entity), field_elements(entity))
                for entity in spec.entities
            ]
        elif dimension == Dimension.API_CONTRACTS:
            contracts = [
                Contract(dimension, entity_subject(entity), operation_elements(entity))
                for entity in spec.entities
            ]
        elif dimension == Dimension.ERROR_HANDLING:
            codes = error_codes(spec)
            contracts = [
                Contract(
                    dimension,
                    entity_subject(entity),
                    tuple(ContractElement(name=code, required=True) for code in codes),
                )
                for entity in spec.entities
            ]
        elif dimension == Dimension.BUSINESS_LOGIC:
            contracts = [
                Contract(
                    dimension,
                    flow_subject(flow),
                    tuple(
                        ContractElement(name=step_handler(step), required=True, native_type=step.type.value)
                        for step in flow.steps
                    ),
                )
                for flow in spec.flows
            ]
        else:
            contracts = [
                Contract(
                    dimension,
                    rule_subject(rule),
                    (ContractElement(name=RULE_KEYWORDS[rule.implementation], required=True),),
                )
                for rule in spec.compliance.rules
            ]
        declared[dimension] = tuple(contracts)
    return declared


@dataclass(frozen=True)
class ContractComparison:
    variations: Tuple[Variation, ...]
    coverage: Tuple[DimensionCoverage, ...]
    elements: Mapping[Dimension, int] = field(default_factory=dict)
    matched: Mapping[Dimension, int] = field(default_factory=dict)
    varied: Mapping[Dimension, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("elements", "matched", "varied"):
            freeze_mapping(self, name)

    def accuracy(self, dimension: Dimension) -> float:
        total = self.elements.get(dimension, 0)
        return self.matched.get(dimension, 0) / total if total else 0.0


def compare_contracts(
    target_id: str,
    declared: Mapping[Dimension, Sequence[Contract]],
    emitted: Sequence[Contract],
) -> ContractComparison:
    emitted_index: Dict[Tuple[Dimension, str], Contract] = {
        (contract.dimension, contract.subject): contract for contract in emitted
    }
    variations: List[Variation] = []
    coverage: List[DimensionCoverage] = []
    elements: Dict[Dimension, int] = {}
    matched: Dict[Dimension, int] = {}
    varied: Dict[Dimension, int] = {}

    for dimension in Dimension:
        if dimension not in declared:
            coverage.append(DimensionCoverage(dimension, 0, 0, applicable=False))
            continue
        contracts = declared[dimension]
        covered = 0
        element_count = 0
        matched_count = 0
        varied_count = 0
        for contract in contracts:
            element_count += len(contract.elements)
            actual = emitted_index.get((dimension, contract.subject))
            if actual is None:
                continue
            covered += 1
            for expected in contract.elements:
                found = _compare_element(target_id, dimension, contract.subject, expected, actual)
                variations.extend(found)
                if found:
                    varied_count += 1
                # Renaming alone still counts as a semantic match.
                if all(item.impact == Impact.LOW for item in found):
                    matched_count += 1
        coverage.append(DimensionCoverage(dimension, covered, len(contracts)))
        elements[dimension] = element_count
        matched[dimension] = matched_count
        varied[dimension] = varied_count

    return ContractComparison(
        variations=tuple(variations),
        coverage=tuple(coverage),
        elements=elements,
        matched=matched,
        varied=varied,
    )


def _find_by_canonical(contract: Contract, name: str) -> Optional[ContractElement]:
    for element in contract.elements:
        if canonical_name(element.name) == name:
            return element
    return None


def _compare_element(
    target_id: str,
    dimension: Dimension,
    subject: str,
    expected: ContractElement,
    contract: Contract,
) -> List[Variation]:
    def _variation(description: str, impact: Impact, want: str, got: str) -> Variation:
        return Variation(
            dimension=dimension,
            target_id=target_id,
            subject=subject,
            element=expected.name,
            description=description,
            impact=impact,
            expected=want,
            actual=got,
        )

    weight = Impact.HIGH if expected.required else Impact.MEDIUM
    actual = contract.element(expected.name)
    found: List[Variation] = []
    if actual is None:
        actual = _find_by_canonical(contract, expected.name)
        if actual is None:
            return [_variation("element missing from emitted contract", weight, expected.name, "")]
        found.append(_variation("element renamed", Impact.LOW, expected.name, actual.name))

    if expected.family is not None and actual.family != expected.family:
        found.append(
            _variation(
                "type family differs",
                weight,
                expected.family.value,
                actual.family.value if actual.family else "",
            )
        )
    if actual.required != expected.required:
        found.append(
            _variation(
                "required flag differs",
                Impact.HIGH,
                str(expected.required).lower(),
                str(actual.required).lower(),
            )
        )
    if dimension in _SHAPE_DIMENSIONS and actual.native_type != expected.native_type:
        found.append(_variation("shape differs", weight, expected.native_type, actual.native_type))
    return found


__all__ = [
    "ContractComparison",
    "ENTITY_OPERATIONS",
    "RULE_KEYWORDS",
    "api_base_path",
    "applicable_dimensions",
    "compare_contracts",
    "declared_contracts",
    "entity_subject",
    "error_codes",
    "field_elements",
    "flow_subject",
    "operation_elements",
    "rule_subject",
    "step_handler",
]
