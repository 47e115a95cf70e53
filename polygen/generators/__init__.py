"""Per-target code generation."""

from .generator import ARTIFACT_CAPABILITIES, Generator, map_features, required_capabilities
from .templates import DEFAULT_TEMPLATE_SET, TemplateLibrary, template_set_for

__all__ = [
    "ARTIFACT_CAPABILITIES",
    "DEFAULT_TEMPLATE_SET",
    "Generator",
    "TemplateLibrary",
    "map_features",
    "required_capabilities",
    "template_set_for",
]
