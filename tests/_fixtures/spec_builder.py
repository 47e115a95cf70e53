"""Helper utilities for assembling specification documents in tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, List

import yaml

from polygen.spec import Specification, parse_specification


class SpecBuilder:
    """Fluent builder for specification documents (the decoded JSON/YAML form)."""

    def __init__(self, name: str = "Sample App") -> None:
        self._document: Dict[str, Any] = {
            "version": "0.1.0",
            "metadata": {"name": name, "version": "1.0.0"},
            "entities": [],
            "flows": [],
        }

    def entity(
        self,
        entity_id: str,
        fields: List[Dict[str, Any]],
        *,
        name: str | None = None,
        relationships: List[Dict[str, Any]] | None = None,
    ) -> "SpecBuilder":
        entry: Dict[str, Any] = {
            "id": entity_id,
            "name": name or entity_id.capitalize(),
            "fields": fields,
        }
        if relationships:
            entry["relationships"] = relationships
        self._document["entities"].append(entry)
        return self

    def flow(
        self,
        flow_id: str,
        steps: List[Dict[str, Any]],
        *,
        name: str | None = None,
        auth: List[Dict[str, Any]] | None = None,
    ) -> "SpecBuilder":
        entry: Dict[str, Any] = {"id": flow_id, "name": name or flow_id.replace("_", " ").title(), "steps": steps}
        if auth:
            entry["auth"] = auth
        self._document["flows"].append(entry)
        return self

    def component(self, component_id: str, *, dependencies: List[str] | None = None) -> "SpecBuilder":
        architecture = self._document.setdefault("architecture", {"pattern": "layered", "components": []})
        architecture["components"].append(
            {
                "id": component_id,
                "name": component_id.replace("_", " ").title(),
                "dependencies": dependencies or [],
            }
        )
        return self

    def rule(
        self,
        rule_id: str,
        implementation: str,
        *,
        location: str = "*",
        severity: str = "medium",
    ) -> "SpecBuilder":
        compliance = self._document.setdefault("compliance", {"rules": []})
        compliance["rules"].append(
            {
                "id": rule_id,
                "name": rule_id.replace("-", " ").capitalize(),
                "severity": severity,
                "implementation": {"type": implementation, "location": location},
            }
        )
        return self

    def version(self, value: Any) -> "SpecBuilder":
        self._document["version"] = value
        return self

    def document(self) -> Dict[str, Any]:
        """Return a deep copy of the document built so far."""
        return copy.deepcopy(self._document)

    def build(self) -> Specification:
        return parse_specification(self.document())

    def write(self, path: Path) -> Path:
        """Write the document as YAML or JSON depending on ``path``'s suffix."""
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix in {".yaml", ".yml"}:
            path.write_text(yaml.safe_dump(self.document(), sort_keys=False), encoding="utf-8")
        else:
            path.write_text(json.dumps(self.document(), indent=2), encoding="utf-8")
        return path


def user_spec() -> SpecBuilder:
    """The smallest useful specification: one User entity with two fields."""
    return SpecBuilder("Users").entity(
        "user",
        [
            {"id": "id", "name": "ID", "type": "uuid", "required": True},
            {"id": "email", "name": "Email", "type": "string", "required": True},
        ],
        name="User",
    )


def todo_spec() -> SpecBuilder:
    """A specification exercising every section: entities, flows, components and rules."""
    return (
        SpecBuilder("Todo App")
        .entity(
            "user",
            [
                {"id": "id", "name": "ID", "type": "uuid", "required": True},
                {"id": "email", "name": "Email", "type": "email", "required": True},
            ],
            name="User",
        )
        .entity(
            "todo",
            [
                {"id": "id", "name": "ID", "type": "uuid", "required": True},
                {"id": "title", "name": "Title", "type": "string", "required": True},
                {"id": "done", "name": "Done", "type": "boolean"},
                {"id": "dueDate", "name": "Due Date", "type": "date"},
            ],
            name="Todo",
            relationships=[{"id": "owner", "name": "owner", "type": "one-to-one", "targetEntity": "user"}],
        )
        .flow(
            "create_todo",
            [
                {"id": "show_form", "type": "form", "config": {"entity": "todo"}, "nextSteps": ["save"]},
                {"id": "save", "type": "api-call", "nextSteps": ["notify"]},
                {"id": "notify", "type": "notification"},
            ],
            auth=[{"role": "member"}],
        )
        .component("todo_service", dependencies=["todo_repository"])
        .component("todo_repository")
        .rule("encrypt-email", "encryption", location="user", severity="high")
        .rule("owner-access", "access-control", location="todo")
    )


__all__ = ["SpecBuilder", "todo_spec", "user_spec"]
