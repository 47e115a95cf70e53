"""Template-facing views of specification elements in a target's conventions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..models import ArtifactKind
from ..spec.model import (
    ArchitectureComponent,
    ComplianceRule,
    Entity,
    Flow,
    Specification,
    TypeFamily,
)
from .contracts import ENTITY_OPERATIONS, RULE_KEYWORDS, api_base_path
from .conventions import LanguageConventions, camel_case, canonical_name, kebab_case, pascal_case

_MANY = frozenset({"one-to-many", "many-to-many"})

_LAYOUTS: Dict[str, Dict[ArtifactKind, str]] = {
    "react": {
        ArtifactKind.COMPONENT: "src/components/{pascal}.tsx",
        ArtifactKind.MODEL: "src/models/{pascal}.ts",
        ArtifactKind.PAGE: "src/app/{kebab}/page.tsx",
        ArtifactKind.SERVICE: "src/services/{camel}.ts",
        ArtifactKind.REPOSITORY: "src/services/dataAccessPolicy.ts",
    },
    "vue": {
        ArtifactKind.COMPONENT: "src/components/{pascal}.vue",
        ArtifactKind.MODEL: "src/models/{pascal}.ts",
        ArtifactKind.PAGE: "src/views/{pascal}View.vue",
        ArtifactKind.SERVICE: "src/services/{camel}.ts",
        ArtifactKind.REPOSITORY: "src/services/dataAccessPolicy.ts",
    },
    "angular": {
        ArtifactKind.COMPONENT: "src/app/{kebab}/{kebab}.component.ts",
        ArtifactKind.MODEL: "src/app/models/{kebab}.model.ts",
        ArtifactKind.PAGE: "src/app/pages/{kebab}.page.ts",
        ArtifactKind.SERVICE: "src/app/services/{kebab}.service.ts",
        ArtifactKind.REPOSITORY: "src/app/services/data-access-policy.ts",
    },
    "ios_swift": {
        ArtifactKind.COMPONENT: "Sources/Views/{pascal}View.swift",
        ArtifactKind.MODEL: "Sources/Models/{pascal}.swift",
        ArtifactKind.PAGE: "Sources/Screens/{pascal}Screen.swift",
        ArtifactKind.SERVICE: "Sources/Services/{pascal}.swift",
        ArtifactKind.REPOSITORY: "Sources/Services/DataAccessPolicy.swift",
    },
    "android_kotlin": {
        ArtifactKind.COMPONENT: "app/src/main/java/com/example/app/ui/{pascal}Card.kt",
        ArtifactKind.MODEL: "app/src/main/java/com/example/app/model/{pascal}.kt",
        ArtifactKind.PAGE: "app/src/main/java/com/example/app/ui/{pascal}Screen.kt",
        ArtifactKind.SERVICE: "app/src/main/java/com/example/app/service/{pascal}.kt",
        ArtifactKind.REPOSITORY: "app/src/main/java/com/example/app/data/DataAccessPolicy.kt",
    },
    "nodejs": {
        ArtifactKind.COMPONENT: "src/controllers/{camel}Controller.ts",
        ArtifactKind.MODEL: "src/models/{pascal}.ts",
        ArtifactKind.PAGE: "src/routes/{camel}.ts",
        ArtifactKind.SERVICE: "src/services/{camel}.ts",
        ArtifactKind.REPOSITORY: "src/middleware/dataAccessPolicy.ts",
    },
    "python": {
        ArtifactKind.COMPONENT: "app/routers/{module}.py",
        ArtifactKind.MODEL: "app/models/{module}.py",
        ArtifactKind.PAGE: "app/views/{module}.py",
        ArtifactKind.SERVICE: "app/services/{module}.py",
        ArtifactKind.REPOSITORY: "app/policies/data_access.py",
    },
    "java": {
        ArtifactKind.COMPONENT: "src/main/java/com/example/app/controller/{pascal}Controller.java",
        ArtifactKind.MODEL: "src/main/java/com/example/app/model/{pascal}.java",
        ArtifactKind.PAGE: "src/main/java/com/example/app/flow/{pascal}Flow.java",
        ArtifactKind.SERVICE: "src/main/java/com/example/app/service/{pascal}.java",
        ArtifactKind.REPOSITORY: "src/main/java/com/example/app/security/DataAccessPolicy.java",
    },
}


def artifact_path(template_set: str, kind: ArtifactKind, name: str, conventions: LanguageConventions) -> str:
    """Logical path of an artifact; a pure function of set, kind and element name."""
    layout = _LAYOUTS.get(template_set, _LAYOUTS["react"])
    return layout[kind].format(
        pascal=pascal_case(name),
        camel=camel_case(name),
        kebab=kebab_case(name),
        module=conventions.identifier(name),
    )


def clean_text(text: str) -> str:
    """Collapse text to one line that is safe inside comments and string literals."""
    cleaned = " ".join(text.split())
    return cleaned.replace("*/", "* /").replace('"', "'").replace("`", "'")


@dataclass(frozen=True)
class FieldView:
    name: str
    label: str
    native_type: str
    family: TypeFamily
    required: bool
    canonical: str


@dataclass(frozen=True)
class RelationView:
    name: str
    target_class: str
    many: bool


@dataclass(frozen=True)
class EntityView:
    id: str
    name: str
    class_name: str
    var_name: str
    module: str
    description: str
    base_path: str
    relationships: Tuple[RelationView, ...]
    related_classes: Tuple[str, ...]
    has_id_field: bool


@dataclass(frozen=True)
class OperationView:
    name: str
    method: str
    route: str


@dataclass(frozen=True)
class StepView:
    id: str
    name: str
    type: str
    handler: str
    entity_class: str
    next_handlers: Tuple[str, ...]
    is_entry: bool


@dataclass(frozen=True)
class FlowView:
    id: str
    name: str
    class_name: str
    var_name: str
    description: str
    route: str
    roles: Tuple[str, ...]


@dataclass(frozen=True)
class ComponentView:
    id: str
    name: str
    class_name: str
    type: str
    layer: str
    responsibilities: Tuple[str, ...]
    dependencies: Tuple[str, ...]


@dataclass(frozen=True)
class RuleView:
    id: str
    name: str
    keyword: str
    function: str
    location: str
    framework: str
    severity: str


def field_views(entity: Entity, conventions: LanguageConventions) -> Tuple[FieldView, ...]:
    views: List[FieldView] = []
    for item in entity.fields:
        mapping = conventions.type_name(item)
        views.append(
            FieldView(
                name=conventions.identifier(item.id),
                label=clean_text(item.name),
                native_type=mapping.native,
                family=mapping.family,
                required=item.required,
                canonical=canonical_name(item.id),
            )
        )
    return tuple(views)


def entity_view(spec: Specification, entity: Entity, conventions: LanguageConventions) -> EntityView:
    class_name = pascal_case(entity.name)
    relationships: List[RelationView] = []
    related: List[str] = []
    for relationship in entity.relationships:
        target = spec.entity(relationship.target_entity)
        target_class = pascal_case(target.name) if target else pascal_case(relationship.target_entity)
        relationships.append(
            RelationView(
                name=conventions.identifier(relationship.name),
                target_class=target_class,
                many=relationship.type in _MANY,
            )
        )
        if target_class != class_name and target_class not in related:
            related.append(target_class)
    return EntityView(
        id=entity.id,
        name=clean_text(entity.name),
        class_name=class_name,
        var_name=conventions.identifier(entity.name),
        module=conventions.identifier(entity.name),
        description=clean_text(entity.description),
        base_path=api_base_path(entity),
        relationships=tuple(relationships),
        related_classes=tuple(related),
        has_id_field=any(canonical_name(item.id) == "id" for item in entity.fields),
    )


def operation_views(entity: Entity) -> Tuple[OperationView, ...]:
    base = api_base_path(entity)
    return tuple(
        OperationView(name=name, method=method, route=f"{base}{suffix}")
        for name, method, suffix in ENTITY_OPERATIONS
    )


def flow_views(
    spec: Specification, flow: Flow, conventions: LanguageConventions
) -> Tuple[FlowView, Tuple[StepView, ...]]:
    handlers = {step.id: conventions.identifier(f"handle_{step.id}") for step in flow.steps}
    targets = {next_id for step in flow.steps for next_id in step.next_steps}
    steps: List[StepView] = []
    for step in flow.steps:
        entity = spec.entity(step.entity) if step.entity else None
        steps.append(
            StepView(
                id=step.id,
                name=clean_text(step.name),
                type=step.type.value,
                handler=handlers[step.id],
                entity_class=pascal_case(entity.name) if entity else "",
                next_handlers=tuple(handlers[next_id] for next_id in step.next_steps if next_id in handlers),
                is_entry=step.id not in targets,
            )
        )
    roles: List[str] = []
    for requirement in flow.auth:
        role = clean_text(requirement.role)
        if role not in roles:
            roles.append(role)
    view = FlowView(
        id=flow.id,
        name=clean_text(flow.name),
        class_name=pascal_case(flow.name),
        var_name=conventions.identifier(flow.name),
        description=clean_text(flow.description),
        route=kebab_case(flow.name),
        roles=tuple(roles),
    )
    return view, tuple(steps)


def component_view(
    spec: Specification, component: ArchitectureComponent
) -> ComponentView:
    names = {item.id: item.name for item in spec.architecture.components}
    return ComponentView(
        id=component.id,
        name=clean_text(component.name),
        class_name=pascal_case(component.name),
        type=component.type,
        layer=clean_text(component.layer),
        responsibilities=tuple(clean_text(item) for item in component.responsibilities),
        dependencies=tuple(
            pascal_case(names[dependency]) for dependency in component.dependencies if dependency in names
        ),
    )


def rule_views(rules: Tuple[ComplianceRule, ...], conventions: LanguageConventions) -> Tuple[RuleView, ...]:
    views: List[RuleView] = []
    for rule in rules:
        keyword = RULE_KEYWORDS[rule.implementation]
        views.append(
            RuleView(
                id=rule.id,
                name=clean_text(rule.name),
                keyword=keyword,
                function=conventions.identifier(f"{keyword}_{rule.id}"),
                location=rule.location or "*",
                framework=clean_text(rule.framework),
                severity=rule.severity,
            )
        )
    return tuple(views)


__all__ = [
    "ComponentView",
    "EntityView",
    "FieldView",
    "FlowView",
    "OperationView",
    "RelationView",
    "RuleView",
    "StepView",
    "artifact_path",
    "clean_text",
    "component_view",
    "entity_view",
    "field_views",
    "flow_views",
    "operation_views",
    "rule_views",
]
