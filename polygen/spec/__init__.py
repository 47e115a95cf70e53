"""Specification model and document loading."""

from .loader import find_structural_errors, load_specification, parse_specification
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
    TypeFamily,
    ValidationRule,
)

__all__ = [
    "ArchitectureComponent",
    "ArchitectureDescription",
    "AuthRequirement",
    "ComplianceRule",
    "ComplianceRules",
    "Constraint",
    "Entity",
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
    "find_structural_errors",
    "load_specification",
    "parse_specification",
]
