"""Loading and structural checking of specification documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from ..errors import SchemaVersionUnsupported, SpecInvalid
from .model import (
    SUPPORTED_SCHEMA_VERSIONS,
    ArchitectureComponent,
    ArchitectureDescription,
    AuthRequirement,
    ComplianceRule,
    ComplianceRules,
    Constraint,
    Entity,
    Field,
    FieldType,
    Flow,
    FlowStep,
    Index,
    Layer,
    Relationship,
    RuleImplementation,
    SpecMetadata,
    Specification,
    StepType,
    Trigger,
    ValidationRule,
)
from .naming import identifier_key


def load_specification(path: Path) -> Specification:
    """Read a JSON or YAML specification document from disk."""
    path = Path(path).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecInvalid(f"Unable to read specification {path}: {exc}") from exc

    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SpecInvalid(f"Failed to parse {path.name}: {exc}") from exc
    else:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SpecInvalid(f"Failed to parse {path.name}: {exc}") from exc
    return parse_specification(document)


def parse_specification(document: Any) -> Specification:
    """Build a :class:`Specification` from a decoded document.

    The schema version is checked first so an unknown version is rejected
    before any other interpretation of the document.
    """
    if not isinstance(document, Mapping):
        raise SpecInvalid("Specification document must be a mapping at the root")

    version = document.get("version")
    if not isinstance(version, str) or version not in SUPPORTED_SCHEMA_VERSIONS:
        raise SchemaVersionUnsupported(version, SUPPORTED_SCHEMA_VERSIONS)

    problems: List[str] = []
    metadata = _parse_metadata(document.get("metadata"), problems)

    entities_raw = document.get("entities", [])
    flows_raw = document.get("flows", [])
    if not isinstance(entities_raw, list):
        problems.append("entities must be a list")
        entities_raw = []
    if not isinstance(flows_raw, list):
        problems.append("flows must be a list")
        flows_raw = []

    entities = tuple(
        entity
        for index, raw in enumerate(entities_raw)
        if (entity := _parse_entity(raw, index, problems)) is not None
    )
    flows = tuple(
        flow
        for index, raw in enumerate(flows_raw)
        if (flow := _parse_flow(raw, index, problems)) is not None
    )
    architecture = _parse_architecture(document.get("architecture"), problems)
    compliance = _parse_compliance(document.get("compliance"), problems)

    if problems or metadata is None:
        raise SpecInvalid("Specification document is malformed: " + "; ".join(problems), problems)

    return Specification(
        metadata=metadata,
        schema_version=version,
        entities=entities,
        flows=flows,
        architecture=architecture,
        compliance=compliance,
    )


def find_structural_errors(spec: Specification) -> List[str]:
    """Return referential problems that make generation for any target impossible."""
    errors: List[str] = []

    seen: set[str] = set()
    for entity in spec.entities:
        if entity.id in seen:
            errors.append(f"Duplicate entity id '{entity.id}'")
        seen.add(entity.id)
    errors.extend(_name_problems("Entity", [(entity.id, entity.name) for entity in spec.entities]))
    errors.extend(_name_problems("Flow", [(flow.id, flow.name) for flow in spec.flows]))
    errors.extend(
        _name_problems(
            "Component", [(component.id, component.name) for component in spec.architecture.components]
        )
    )
    for entity in spec.entities:
        errors.extend(
            _name_problems(f"Entity '{entity.id}' field", [(field.id, field.id) for field in entity.fields])
        )

    for entity in spec.entities:
        for relationship in entity.relationships:
            if spec.entity(relationship.target_entity) is None:
                errors.append(
                    f"Entity '{entity.id}' relationship '{relationship.name}' references "
                    f"unknown entity '{relationship.target_entity}'"
                )
        for constraint in entity.constraints:
            for name in constraint.fields:
                if entity.field_named(name) is None:
                    errors.append(
                        f"Entity '{entity.id}' constraint '{constraint.name}' references unknown field '{name}'"
                    )
        for index in entity.indexes:
            for name in index.fields:
                if entity.field_named(name) is None:
                    errors.append(
                        f"Entity '{entity.id}' index '{index.name}' references unknown field '{name}'"
                    )

    for flow in spec.flows:
        step_ids = {step.id for step in flow.steps}
        for step in flow.steps:
            for next_id in step.next_steps:
                if next_id not in step_ids:
                    errors.append(
                        f"Flow '{flow.id}' step '{step.id}' continues to unknown step '{next_id}'"
                    )
            if step.entity and spec.entity(step.entity) is None:
                errors.append(
                    f"Flow '{flow.id}' step '{step.id}' references unknown entity '{step.entity}'"
                )

    component_ids = {component.id for component in spec.architecture.components}
    for component in spec.architecture.components:
        for dependency in component.dependencies:
            if dependency not in component_ids:
                errors.append(
                    f"Component '{component.id}' depends on unknown component '{dependency}'"
                )

    for rule in spec.compliance.rules:
        if rule.location not in ("*", "") and spec.entity(rule.location) is None:
            errors.append(f"Compliance rule '{rule.id}' targets unknown entity '{rule.location}'")

    return errors


def _name_problems(kind: str, named: Sequence[tuple[str, str]]) -> List[str]:
    """Names that yield no identifier, or the same identifiers (and file paths) as an earlier name."""
    problems: List[str] = []
    claimed: Dict[str, str] = {}
    for element_id, name in named:
        label = f"{kind} '{element_id}'" if name == element_id else f"{kind} '{element_id}' name '{name}'"
        key = identifier_key(name)
        if not key:
            problems.append(f"{label} has no ASCII letters or digits to build identifiers from")
            continue
        if key in claimed:
            problems.append(f"{label} collides with '{claimed[key]}' as identifier '{key}'")
            continue
        claimed[key] = element_id
    return problems


# ----------------------------------------------------------------------
# Section parsers


def _parse_metadata(raw: Any, problems: List[str]) -> Optional[SpecMetadata]:
    data = _as_dict(raw)
    name = _as_str(data.get("name"))
    if not name:
        problems.append("metadata.name is required")
        return None
    return SpecMetadata(
        name=name,
        description=_as_str(data.get("description")) or "",
        version=_as_str(data.get("version")) or "1.0.0",
        tags=tuple(_as_str_list(data.get("tags"))),
        platforms=tuple(_as_str_list(data.get("platforms"))),
    )


def _parse_entity(raw: Any, index: int, problems: List[str]) -> Optional[Entity]:
    data = _as_dict(raw)
    entity_id = _as_str(data.get("id"))
    name = _as_str(data.get("name"))
    if not entity_id or not name:
        problems.append(f"Entity {index}: id and name are required")
        return None
    fields_raw = data.get("fields", [])
    if not isinstance(fields_raw, list):
        problems.append(f"Entity {index}: fields must be a list")
        fields_raw = []

    fields: List[Field] = []
    for position, field_raw in enumerate(fields_raw):
        field_data = _as_dict(field_raw)
        field_id = _as_str(field_data.get("id")) or _as_str(field_data.get("name"))
        field_type = _as_enum(FieldType, field_data.get("type"))
        if not field_id:
            problems.append(f"Entity '{entity_id}' field {position}: id or name is required")
            continue
        if field_type is None:
            problems.append(
                f"Entity '{entity_id}' field '{field_id}': unknown type {field_data.get('type')!r}"
            )
            continue
        fields.append(
            Field(
                id=field_id,
                name=_as_str(field_data.get("name")) or field_id,
                type=field_type,
                required=_as_bool(field_data.get("required")) or False,
                unique=_as_bool(field_data.get("unique")) or False,
                default=_freeze(field_data.get("defaultValue", field_data.get("default"))),
                validation=tuple(
                    ValidationRule(
                        type=_as_str(rule.get("type")) or "custom",
                        value=_freeze(rule.get("value")),
                        message=_as_str(rule.get("message")) or "",
                    )
                    for rule in map(_as_dict, _as_list(field_data.get("validation")))
                ),
            )
        )

    relationships = tuple(
        Relationship(
            id=_as_str(rel.get("id")) or _as_str(rel.get("name")) or f"rel{position}",
            name=_as_str(rel.get("name")) or _as_str(rel.get("id")) or f"rel{position}",
            type=_as_str(rel.get("type")) or "one-to-many",
            target_entity=_as_str(_first(rel, "targetEntity", "target_entity")) or "",
            on_delete=_as_str(_first(rel, "onDelete", "on_delete")),
        )
        for position, rel in enumerate(map(_as_dict, _as_list(data.get("relationships"))))
    )
    constraints = tuple(
        Constraint(
            id=_as_str(item.get("id")) or f"constraint{position}",
            name=_as_str(item.get("name")) or _as_str(item.get("id")) or f"constraint{position}",
            type=_as_str(item.get("type")) or "check",
            fields=tuple(_as_str_list(item.get("fields"))),
            expression=_as_str(item.get("expression")),
        )
        for position, item in enumerate(map(_as_dict, _as_list(data.get("constraints"))))
    )
    indexes = tuple(
        Index(
            id=_as_str(item.get("id")) or f"index{position}",
            name=_as_str(item.get("name")) or _as_str(item.get("id")) or f"index{position}",
            fields=tuple(_as_str_list(item.get("fields"))),
            unique=_as_bool(item.get("unique")) or False,
        )
        for position, item in enumerate(map(_as_dict, _as_list(data.get("indexes"))))
    )
    return Entity(
        id=entity_id,
        name=name,
        description=_as_str(data.get("description")) or "",
        fields=tuple(fields),
        relationships=relationships,
        constraints=constraints,
        indexes=indexes,
    )


def _parse_flow(raw: Any, index: int, problems: List[str]) -> Optional[Flow]:
    data = _as_dict(raw)
    flow_id = _as_str(data.get("id"))
    name = _as_str(data.get("name"))
    if not flow_id or not name:
        problems.append(f"Flow {index}: id and name are required")
        return None
    steps_raw = data.get("steps", [])
    if not isinstance(steps_raw, list):
        problems.append(f"Flow '{flow_id}': steps must be a list")
        steps_raw = []

    steps: List[FlowStep] = []
    for position, step_raw in enumerate(steps_raw):
        step_data = _as_dict(step_raw)
        step_id = _as_str(step_data.get("id")) or _as_str(step_data.get("name"))
        step_type = _as_enum(StepType, step_data.get("type"))
        if not step_id:
            problems.append(f"Flow '{flow_id}' step {position}: id or name is required")
            continue
        if step_type is None:
            problems.append(
                f"Flow '{flow_id}' step '{step_id}': unknown type {step_data.get('type')!r}"
            )
            continue
        config = _as_dict(step_data.get("config"))
        steps.append(
            FlowStep(
                id=step_id,
                name=_as_str(step_data.get("name")) or step_id,
                type=step_type,
                entity=_as_str(
                    _first(step_data, "entity") or _first(config, "entity", "targetEntity")
                ),
                next_steps=tuple(_as_str_list(_first(step_data, "nextSteps", "next_steps"))),
            )
        )

    triggers = tuple(
        Trigger(
            id=_as_str(item.get("id")) or f"trigger{position}",
            type=_as_str(item.get("type")) or "http",
            config=tuple(
                sorted(
                    (str(key), str(value))
                    for key, value in _as_dict(item.get("config")).items()
                    if isinstance(value, (str, int, float, bool))
                )
            ),
        )
        for position, item in enumerate(map(_as_dict, _as_list(data.get("triggers"))))
    )
    auth = tuple(
        AuthRequirement(
            role=_as_str(item.get("role")) or "user",
            permissions=tuple(_as_str_list(item.get("permissions"))),
        )
        for item in map(_as_dict, _as_list(data.get("auth")))
    )
    return Flow(
        id=flow_id,
        name=name,
        description=_as_str(data.get("description")) or "",
        type=_as_str(data.get("type")) or "custom",
        steps=tuple(steps),
        triggers=triggers,
        auth=auth,
    )


def _parse_architecture(raw: Any, problems: List[str]) -> ArchitectureDescription:
    data = _as_dict(raw)
    if not data:
        return ArchitectureDescription()
    layers = []
    for item in _as_list(data.get("layers")):
        if isinstance(item, str):
            layers.append(Layer(name=item))
            continue
        layer_data = _as_dict(item)
        name = _as_str(layer_data.get("name")) or _as_str(layer_data.get("id"))
        if name:
            layers.append(Layer(name=name, description=_as_str(layer_data.get("description")) or ""))

    components: List[ArchitectureComponent] = []
    for position, item in enumerate(map(_as_dict, _as_list(data.get("components")))):
        component_id = _as_str(item.get("id")) or _as_str(item.get("name"))
        if not component_id:
            problems.append(f"Architecture component {position}: id or name is required")
            continue
        components.append(
            ArchitectureComponent(
                id=component_id,
                name=_as_str(item.get("name")) or component_id,
                type=_as_str(item.get("type")) or "service",
                layer=_as_str(item.get("layer")) or "",
                responsibilities=tuple(_as_str_list(item.get("responsibilities"))),
                dependencies=tuple(_as_str_list(item.get("dependencies"))),
            )
        )
    return ArchitectureDescription(
        pattern=_as_str(data.get("pattern")) or "layered",
        layers=tuple(layers),
        components=tuple(components),
    )


def _parse_compliance(raw: Any, problems: List[str]) -> ComplianceRules:
    data = _as_dict(raw)
    if not data:
        return ComplianceRules()
    frameworks: List[str] = []
    for item in _as_list(data.get("frameworks")):
        if isinstance(item, str):
            frameworks.append(item)
        else:
            name = _as_str(_as_dict(item).get("name")) or _as_str(_as_dict(item).get("id"))
            if name:
                frameworks.append(name)

    rules: List[ComplianceRule] = []
    for position, item in enumerate(map(_as_dict, _as_list(data.get("rules")))):
        rule_id = _as_str(item.get("id"))
        implementation_data = _as_dict(item.get("implementation"))
        implementation = _as_enum(
            RuleImplementation, implementation_data.get("type", item.get("implementation"))
        )
        if not rule_id:
            problems.append(f"Compliance rule {position}: id is required")
            continue
        if implementation is None:
            problems.append(f"Compliance rule '{rule_id}': unknown implementation type")
            continue
        rules.append(
            ComplianceRule(
                id=rule_id,
                name=_as_str(item.get("name")) or rule_id,
                implementation=implementation,
                framework=_as_str(item.get("framework")) or "",
                description=_as_str(item.get("description")) or "",
                severity=_as_str(item.get("severity")) or "medium",
                location=_as_str(implementation_data.get("location", item.get("location"))) or "*",
            )
        )
    return ComplianceRules(frameworks=tuple(frameworks), rules=tuple(rules))


# ----------------------------------------------------------------------
# Coercion helpers


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _freeze(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, dict):
        return tuple(sorted((str(key), _freeze(item)) for key, item in value.items()))
    return value


def _as_enum(enum_type: Any, value: Any) -> Any:
    if not isinstance(value, str):
        return None
    try:
        return enum_type(value.strip().lower())
    except ValueError:
        return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["find_structural_errors", "load_specification", "parse_specification"]
