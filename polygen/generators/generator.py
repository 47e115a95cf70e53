"""Per-target generation of an output bundle from a specification."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from ..errors import ErrorKind
from ..failsafe import failed_result
from ..logging import get_logger
from ..models import (
    Artifact,
    ArtifactKind,
    Contract,
    ContractElement,
    Dimension,
    DocumentationFile,
    GenerationError,
    GenerationResult,
    OutputBundle,
    PlatformSpecificFeature,
    Variation,
)
from ..spec.loader import find_structural_errors
from ..spec.model import Specification
from ..targets.catalog import Impact, Target
from .contracts import (
    compare_contracts,
    declared_contracts,
    entity_subject,
    error_codes,
    flow_subject,
    rule_subject,
)
from .conventions import LanguageConventions, conventions_for
from .manifest import build_manifest
from .performance import estimate_performance
from .scoring import score_preservation, trace_marker
from .templates import TemplateLibrary, has_template_set, template_set_for
from .views import (
    FieldView,
    artifact_path,
    component_view,
    entity_view,
    field_views,
    flow_views,
    operation_views,
    rule_views,
)

ARTIFACT_CAPABILITIES: Dict[ArtifactKind, Tuple[str, ...]] = {
    ArtifactKind.COMPONENT: ("components",),
    ArtifactKind.MODEL: ("persistence",),
    ArtifactKind.PAGE: ("routing",),
    ArtifactKind.SERVICE: ("async",),
    ArtifactKind.REPOSITORY: ("security",),
}


def required_capabilities(spec: Specification) -> Tuple[str, ...]:
    """Capabilities a target must offer to carry this specification."""
    required: List[str] = []
    if spec.entities:
        required.append("components")
    if spec.flows:
        required.append("routing")
    if spec.architecture.components:
        required.append("async")
    if spec.compliance.rules:
        required.append("security")
    return tuple(required)


def map_features(
    spec: Specification, target: Target, artifacts: Sequence[Artifact]
) -> Tuple[PlatformSpecificFeature, ...]:
    exercised = {cap for artifact in artifacts for cap in artifact.capabilities}
    features: List[PlatformSpecificFeature] = []
    for capability in required_capabilities(spec):
        feature = next((item for item in target.features if capability in item.capabilities), None)
        features.append(
            PlatformSpecificFeature(
                capability=capability,
                feature_id=feature.id if feature else None,
                implementation=feature.implementation if feature else "",
                exercised=capability in exercised,
            )
        )
    return tuple(features)


class Generator:
    """Render one specification for one target.

    ``generate`` is deterministic: the same specification and target always
    produce byte-identical artifacts. Template-source failures surface as
    :class:`~polygen.errors.TransientGenerationError` for the caller to retry.
    """

    def __init__(self, templates: TemplateLibrary | None = None) -> None:
        self.templates = templates or TemplateLibrary()
        self.logger = get_logger("generator")

    def generate(self, spec: Specification, target: Target) -> GenerationResult:
        fingerprint = spec.fingerprint()
        problems = find_structural_errors(spec)
        if problems:
            self.logger.debug("Specification invalid for %s: %s", target.id, "; ".join(problems))
            error = GenerationError(
                kind=ErrorKind.SPEC_INVALID,
                message=f"Specification is structurally invalid ({len(problems)} problem(s))",
                problems=tuple(problems),
            )
            return failed_result(spec, target, error, fingerprint=fingerprint)

        run = _TargetRun(self.templates, spec, target)
        artifacts = run.render_all()

        manifest = build_manifest(spec, target, self.templates)
        readme = self.templates.render(
            "readme.md.j2",
            spec=spec.metadata,
            target=target,
            artifacts=artifacts,
            dependencies=manifest.dependencies,
            build_scripts=manifest.build_scripts,
        )
        bundle = OutputBundle(
            files=tuple(artifacts),
            configuration=manifest.configuration,
            dependencies=manifest.dependencies,
            build_scripts=manifest.build_scripts,
            documentation=(DocumentationFile("README.md", readme),),
        )

        comparison = compare_contracts(
            target.id,
            declared_contracts(spec, target),
            [contract for artifact in artifacts for contract in artifact.contracts],
        )
        result = GenerationResult(
            target_id=target.id,
            spec_fingerprint=fingerprint,
            success=True,
            output=bundle,
            score=score_preservation(comparison, artifacts),
            performance=estimate_performance(target, bundle),
            features=map_features(spec, target, artifacts),
            coverage=comparison.coverage,
            variations=tuple(run.template_variations) + comparison.variations,
            optimizations_applied=tuple(item.id for item in target.optimizations),
        )
        self.logger.debug(
            "Generated %s artifact(s) for %s (%s variation(s))",
            len(artifacts),
            target.id,
            len(result.variations),
        )
        return result


class _TargetRun:
    """Rendering state for one (specification, target) pair."""

    def __init__(self, templates: TemplateLibrary, spec: Specification, target: Target) -> None:
        self.templates = templates
        self.spec = spec
        self.target = target
        self.conventions: LanguageConventions = conventions_for(target.language)
        self.template_set = template_set_for(target.framework)
        self.own_set = has_template_set(target.framework)
        self.template_variations: List[Variation] = []
        self._noted: set[ArtifactKind] = set()

    def render_all(self) -> List[Artifact]:
        spec = self.spec
        artifacts: List[Artifact] = []
        codes = error_codes(spec)
        for entity in spec.entities:
            view = entity_view(spec, entity, self.conventions)
            fields = field_views(entity, self.conventions)
            operations = operation_views(entity)
            subject = entity_subject(entity)
            field_contract_elements = _field_elements(fields)

            component_contracts = [
                Contract(
                    Dimension.API_CONTRACTS,
                    subject,
                    tuple(
                        ContractElement(
                            name=item.name, required=True, native_type=f"{item.method} {item.route}"
                        )
                        for item in operations
                    ),
                ),
                Contract(
                    Dimension.ERROR_HANDLING,
                    subject,
                    tuple(ContractElement(name=code, required=True) for code in codes),
                ),
            ]
            if self.target.has_user_interface:
                component_contracts.insert(
                    0, Contract(Dimension.USER_INTERFACE, subject, field_contract_elements)
                )
            context = {
                "entity": view,
                "fields": fields,
                "operations": operations,
                "errors": codes,
            }
            artifacts.append(
                self._render(ArtifactKind.COMPONENT, entity.name, subject, context, component_contracts)
            )
            artifacts.append(
                self._render(
                    ArtifactKind.MODEL,
                    entity.name,
                    subject,
                    context,
                    [Contract(Dimension.DATA_MODELS, subject, field_contract_elements)],
                )
            )

        for flow in spec.flows:
            flow_view, steps = flow_views(spec, flow, self.conventions)
            subject = flow_subject(flow)
            contract = Contract(
                Dimension.BUSINESS_LOGIC,
                subject,
                tuple(
                    ContractElement(name=step.handler, required=True, native_type=step.type)
                    for step in steps
                ),
            )
            artifacts.append(
                self._render(
                    ArtifactKind.PAGE,
                    flow.name,
                    subject,
                    {"flow": flow_view, "steps": steps},
                    [contract],
                )
            )

        for component in spec.architecture.components:
            artifacts.append(
                self._render(
                    ArtifactKind.SERVICE,
                    component.name,
                    f"component:{component.id}",
                    {"component": component_view(spec, component)},
                    [],
                )
            )

        if spec.compliance.rules:
            rules = rule_views(spec.compliance.rules, self.conventions)
            contracts = [
                Contract(
                    Dimension.SECURITY,
                    rule_subject(rule),
                    (ContractElement(name=view.keyword, required=True),),
                )
                for rule, view in zip(spec.compliance.rules, rules)
            ]
            artifacts.append(
                self._render(
                    ArtifactKind.REPOSITORY,
                    "data access policy",
                    "compliance:rules",
                    {"rules": rules},
                    contracts,
                )
            )
        return artifacts

    def _render(
        self,
        kind: ArtifactKind,
        name: str,
        source: str,
        context: Dict[str, object],
        contracts: Sequence[Contract],
    ) -> Artifact:
        resolved = self.templates.resolve(self.template_set, kind.value)
        if resolved.fell_back or not self.own_set:
            self._note_template_missing(kind, resolved.name)
        content = resolved.template.render(
            trace=trace_marker(source),
            spec=self.spec.metadata,
            target=self.target,
            **context,
        )
        return Artifact(
            path=artifact_path(self.template_set, kind, name, self.conventions),
            kind=kind,
            language=self.target.language.value,
            framework=self.target.framework.value,
            content=content,
            source=source,
            template=resolved.name,
            capabilities=ARTIFACT_CAPABILITIES[kind],
            contracts=tuple(contracts),
        )

    def _note_template_missing(self, kind: ArtifactKind, used: str) -> None:
        if kind in self._noted:
            return
        self._noted.add(kind)
        self.template_variations.append(
            Variation(
                dimension=_template_dimension(kind, self.target),
                target_id=self.target.id,
                subject=f"template:{kind.value}",
                element=kind.value,
                description=(
                    f"{ErrorKind.TEMPLATE_MISSING.value}: no {kind.value} template for "
                    f"{self.target.framework.value}, rendered with {used}"
                ),
                impact=Impact.LOW,
                expected=self.target.framework.value,
                actual=used,
            )
        )


def _field_elements(fields: Sequence[FieldView]) -> Tuple[ContractElement, ...]:
    return tuple(
        ContractElement(
            name=item.name, family=item.family, required=item.required, native_type=item.native_type
        )
        for item in fields
    )


def _template_dimension(kind: ArtifactKind, target: Target) -> Dimension:
    match kind:
        case ArtifactKind.COMPONENT:
            return Dimension.USER_INTERFACE if target.has_user_interface else Dimension.API_CONTRACTS
        case ArtifactKind.MODEL:
            return Dimension.DATA_MODELS
        case ArtifactKind.REPOSITORY:
            return Dimension.SECURITY
        case _:
            return Dimension.BUSINESS_LOGIC


__all__ = ["ARTIFACT_CAPABILITIES", "Generator", "map_features", "required_capabilities"]
