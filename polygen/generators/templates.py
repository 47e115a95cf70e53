"""Template-set selection and jinja2 environment for generated artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Sequence

from jinja2 import BaseLoader, Environment, FileSystemLoader, Template, TemplateNotFound

from ..errors import TransientGenerationError
from ..targets.catalog import Framework
from .conventions import camel_case, kebab_case, pascal_case, snake_case

DEFAULT_TEMPLATE_SET = "react"
TEMPLATES_DIR = Path(__file__).with_name("templates")


def template_set_for(framework: Framework) -> str:
    """Map every framework onto a template set; unmapped ones use the web default."""
    match framework:
        case Framework.REACT:
            return "react"
        case Framework.VUE:
            return "vue"
        case Framework.ANGULAR:
            return "angular"
        case Framework.IOS_SWIFT:
            return "ios_swift"
        case Framework.ANDROID_KOTLIN:
            return "android_kotlin"
        case Framework.NODEJS:
            return "nodejs"
        case Framework.PYTHON:
            return "python"
        case Framework.JAVA:
            return "java"
        case _:
            return DEFAULT_TEMPLATE_SET


def has_template_set(framework: Framework) -> bool:
    return template_set_for(framework) != DEFAULT_TEMPLATE_SET or framework == Framework.REACT


@dataclass(frozen=True)
class ResolvedTemplate:
    template: Template
    name: str
    fell_back: bool


class TemplateLibrary:
    """Loads artifact templates, degrading to the default set when one is absent."""

    def __init__(
        self,
        template_dirs: Sequence[Path] | None = None,
        *,
        loader: BaseLoader | None = None,
    ) -> None:
        if loader is None:
            directories = [str(path) for path in (template_dirs or ())]
            directories.append(str(TEMPLATES_DIR))
            loader = FileSystemLoader(directories)
        self._env = Environment(
            loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True
        )
        self._env.filters.update(
            {
                "camel": camel_case,
                "pascal": pascal_case,
                "snake": snake_case,
                "kebab": kebab_case,
            }
        )
        self._cache: Dict[str, Template] = {}

    def resolve(self, template_set: str, kind: str) -> ResolvedTemplate:
        name = f"{template_set}/{kind}.j2"
        template = self._load(name)
        if template is not None:
            return ResolvedTemplate(template=template, name=name, fell_back=False)
        default_name = f"{DEFAULT_TEMPLATE_SET}/{kind}.j2"
        template = self._load(default_name)
        if template is None:
            raise TransientGenerationError(f"Default template '{default_name}' is unavailable")
        return ResolvedTemplate(template=template, name=default_name, fell_back=True)

    def render(self, name: str, **context: object) -> str:
        template = self._load(name)
        if template is None:
            raise TransientGenerationError(f"Template '{name}' is unavailable")
        return template.render(**context)

    def _load(self, name: str) -> Template | None:
        cached = self._cache.get(name)
        if cached is not None:
            return cached
        try:
            template = self._env.get_template(name)
        except TemplateNotFound:
            return None
        except OSError as exc:
            raise TransientGenerationError(f"Failed to read template '{name}': {exc}") from exc
        self._cache[name] = template
        return template


__all__ = [
    "DEFAULT_TEMPLATE_SET",
    "ResolvedTemplate",
    "TEMPLATES_DIR",
    "TemplateLibrary",
    "has_template_set",
    "template_set_for",
]
