"""Platform-agnostic specification records.

A :class:`Specification` is pure data. Every record is a frozen dataclass that
holds tuples rather than lists so a snapshot handed to the orchestrator cannot
change underneath concurrently running target tasks.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

SUPPORTED_SCHEMA_VERSIONS: Tuple[str, ...] = ("0.1.0",)


class FieldType(str, Enum):
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    EMAIL = "email"
    URL = "url"
    FILE = "file"
    IMAGE = "image"
    JSON = "json"
    UUID = "uuid"
    ENUM = "enum"
    REFERENCE = "reference"


class TypeFamily(str, Enum):
    """Coarse shape of a value; two types in one family round-trip without loss."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TEMPORAL = "temporal"
    JSON = "json"
    ANY = "any"


FIELD_TYPE_FAMILIES: Dict[FieldType, TypeFamily] = {
    FieldType.STRING: TypeFamily.STRING,
    FieldType.TEXT: TypeFamily.STRING,
    FieldType.EMAIL: TypeFamily.STRING,
    FieldType.URL: TypeFamily.STRING,
    FieldType.FILE: TypeFamily.STRING,
    FieldType.IMAGE: TypeFamily.STRING,
    FieldType.UUID: TypeFamily.STRING,
    FieldType.ENUM: TypeFamily.STRING,
    FieldType.REFERENCE: TypeFamily.STRING,
    FieldType.INTEGER: TypeFamily.NUMBER,
    FieldType.FLOAT: TypeFamily.NUMBER,
    FieldType.BOOLEAN: TypeFamily.BOOLEAN,
    FieldType.DATE: TypeFamily.TEMPORAL,
    FieldType.DATETIME: TypeFamily.TEMPORAL,
    FieldType.TIME: TypeFamily.TEMPORAL,
    FieldType.JSON: TypeFamily.JSON,
}


class StepType(str, Enum):
    FORM = "form"
    API_CALL = "api-call"
    DATA_TRANSFORM = "data-transform"
    VALIDATION = "validation"
    AUTH_CHECK = "auth-check"
    NOTIFICATION = "notification"
    REDIRECT = "redirect"
    CONDITIONAL = "conditional"
    LOOP = "loop"


class RuleImplementation(str, Enum):
    VALIDATION = "validation"
    TRANSFORMATION = "transformation"
    ENCRYPTION = "encryption"
    ACCESS_CONTROL = "access-control"


@dataclass(frozen=True)
class ValidationRule:
    type: str
    value: Any = None
    message: str = ""


@dataclass(frozen=True)
class Field:
    id: str
    name: str
    type: FieldType
    required: bool = False
    unique: bool = False
    default: Any = None
    validation: Tuple[ValidationRule, ...] = ()

    @property
    def family(self) -> TypeFamily:
        return FIELD_TYPE_FAMILIES[self.type]


@dataclass(frozen=True)
class Relationship:
    id: str
    name: str
    type: str
    target_entity: str
    on_delete: Optional[str] = None


@dataclass(frozen=True)
class Constraint:
    id: str
    name: str
    type: str
    fields: Tuple[str, ...] = ()
    expression: Optional[str] = None


@dataclass(frozen=True)
class Index:
    id: str
    name: str
    fields: Tuple[str, ...] = ()
    unique: bool = False


@dataclass(frozen=True)
class Entity:
    id: str
    name: str
    description: str = ""
    fields: Tuple[Field, ...] = ()
    relationships: Tuple[Relationship, ...] = ()
    constraints: Tuple[Constraint, ...] = ()
    indexes: Tuple[Index, ...] = ()

    def field_named(self, name: str) -> Optional[Field]:
        for item in self.fields:
            if item.id == name or item.name == name:
                return item
        return None


@dataclass(frozen=True)
class FlowStep:
    id: str
    name: str
    type: StepType
    entity: Optional[str] = None
    next_steps: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Trigger:
    id: str
    type: str
    config: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class AuthRequirement:
    role: str
    permissions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Flow:
    id: str
    name: str
    description: str = ""
    type: str = "custom"
    steps: Tuple[FlowStep, ...] = ()
    triggers: Tuple[Trigger, ...] = ()
    auth: Tuple[AuthRequirement, ...] = ()


@dataclass(frozen=True)
class Layer:
    name: str
    description: str = ""


@dataclass(frozen=True)
class ArchitectureComponent:
    id: str
    name: str
    type: str = "service"
    layer: str = ""
    responsibilities: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ArchitectureDescription:
    pattern: str = "layered"
    layers: Tuple[Layer, ...] = ()
    components: Tuple[ArchitectureComponent, ...] = ()


@dataclass(frozen=True)
class ComplianceRule:
    id: str
    name: str
    implementation: RuleImplementation
    framework: str = ""
    description: str = ""
    severity: str = "medium"
    location: str = "*"

    def applies_to(self, entity_id: str) -> bool:
        return self.location in ("*", "", entity_id)


@dataclass(frozen=True)
class ComplianceRules:
    frameworks: Tuple[str, ...] = ()
    rules: Tuple[ComplianceRule, ...] = ()


@dataclass(frozen=True)
class SpecMetadata:
    name: str
    description: str = ""
    version: str = "1.0.0"
    tags: Tuple[str, ...] = ()
    platforms: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Specification:
    """Root aggregate of one platform-agnostic application description."""

    metadata: SpecMetadata
    schema_version: str = SUPPORTED_SCHEMA_VERSIONS[0]
    entities: Tuple[Entity, ...] = ()
    flows: Tuple[Flow, ...] = ()
    architecture: ArchitectureDescription = field(default_factory=ArchitectureDescription)
    compliance: ComplianceRules = field(default_factory=ComplianceRules)

    def entity(self, ref: str) -> Optional[Entity]:
        for entity in self.entities:
            if entity.id == ref or entity.name == ref:
                return entity
        return None

    @property
    def requires_auth(self) -> bool:
        return any(flow.auth for flow in self.flows)

    def fingerprint(self) -> str:
        payload = json.dumps(asdict(self), sort_keys=True, default=str)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


__all__ = [
    "ArchitectureComponent",
    "ArchitectureDescription",
    "AuthRequirement",
    "ComplianceRule",
    "ComplianceRules",
    "Constraint",
    "Entity",
    "FIELD_TYPE_FAMILIES",
    "Field",
    "FieldType",
    "Flow",
    "FlowStep",
    "Index",
    "Layer",
    "Relationship",
    "RuleImplementation",
    "SUPPORTED_SCHEMA_VERSIONS",
    "SpecMetadata",
    "Specification",
    "StepType",
    "Trigger",
    "TypeFamily",
    "ValidationRule",
]
