"""The six validation axes applied to every generation result."""

from __future__ import annotations

import ast
import json
import tomllib
import xml.etree.ElementTree as ElementTree
from typing import Iterable, List, Optional, Tuple

from ..generators.contracts import RULE_KEYWORDS, entity_subject, flow_subject, step_handler
from ..generators.conventions import canonical_name
from ..generators.generator import required_capabilities
from ..models import AxisOutcome, Contract, Dimension, ValidationDetail
from .base import ValidationContext, outcome

_PAIRS = {")": "(", "]": "[", "}": "{"}
# Confidence weight for checks that only look at bracket structure.
_HEURISTIC_WEIGHT = 0.8


def _bracket_problem(text: str) -> Optional[str]:
    stack: List[str] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        for char in line:
            if char in "([{":
                stack.append(char)
            elif char in _PAIRS:
                if not stack or stack[-1] != _PAIRS[char]:
                    return f"unbalanced '{char}' on line {line_number}"
                stack.pop()
    if stack:
        return f"{len(stack)} unclosed bracket(s)"
    return None


def _parse_problem(fmt: str, text: str) -> Tuple[Optional[str], bool]:
    """Return (problem, exact) for one document; ``exact`` is False for heuristic checks."""
    try:
        match fmt:
            case "python":
                ast.parse(text)
            case "json":
                json.loads(text)
            case "toml":
                tomllib.loads(text)
            case "xml":
                ElementTree.fromstring(text)
            case "text":
                return None, True
            case _:
                return _bracket_problem(text), False
    except SyntaxError as exc:
        return f"line {exc.lineno}: {exc.msg}", True
    except json.JSONDecodeError as exc:
        return f"line {exc.lineno}: {exc.msg}", True
    except tomllib.TOMLDecodeError as exc:
        return str(exc), True
    except ElementTree.ParseError as exc:
        return str(exc), True
    return None, True


class SyntaxValidator:
    """Parse every artifact and configuration file with the strictest parser available."""

    name = "syntax"

    def validate(self, context: ValidationContext) -> AxisOutcome:
        bundle = context.result.output
        documents: List[Tuple[str, str, str]] = [
            (artifact.path, artifact.language, artifact.content)
            for artifact in bundle.files
        ]
        documents.extend((item.path, item.format, item.content) for item in bundle.configuration)

        details: List[ValidationDetail] = []
        satisfied = 0
        exact = 0
        for path, fmt, text in documents:
            problem, strict = _parse_problem(fmt, text)
            exact += int(strict)
            if problem is None:
                satisfied += 1
                details.append(ValidationDetail(path, "parsed", True))
            else:
                details.append(ValidationDetail(path, problem, False, "critical"))

        weight = 1.0
        if documents:
            weight = (exact + (len(documents) - exact) * _HEURISTIC_WEIGHT) / len(documents)
        return outcome(
            self.name,
            details,
            checked=len(documents),
            satisfied=satisfied,
            empty_evidence="no files emitted",
            weight=weight,
        )


def _emitted(context: ValidationContext, dimension: Dimension, subject: str) -> Tuple[Optional[Contract], str]:
    """Emitted contract for ``subject`` and the content of the artifact carrying it."""
    for artifact in context.result.output.files:
        for contract in artifact.contracts:
            if contract.dimension == dimension and contract.subject == subject:
                return contract, artifact.content
    return None, ""


class SemanticsValidator:
    """Model fields keep the declared type family and required flag."""

    name = "semantics"

    def validate(self, context: ValidationContext) -> AxisOutcome:
        details: List[ValidationDetail] = []
        checked = 0
        satisfied = 0
        for entity in context.spec.entities:
            subject = entity_subject(entity)
            contract, content = _emitted(context, Dimension.DATA_MODELS, subject)
            for spec_field in entity.fields:
                checked += 1
                label = f"{entity.name}.{spec_field.id}"
                element = None
                if contract is not None:
                    wanted = canonical_name(spec_field.id)
                    element = next(
                        (item for item in contract.elements if canonical_name(item.name) == wanted), None
                    )
                if element is None:
                    details.append(ValidationDetail(label, "field not emitted", False, "critical"))
                    continue
                problems = []
                if element.name not in content:
                    problems.append(f"'{element.name}' absent from model source")
                if element.family != spec_field.family:
                    family = element.family.value if element.family else "unknown"
                    problems.append(f"type family {family}, expected {spec_field.family.value}")
                if element.required != spec_field.required:
                    problems.append(f"required={element.required}, expected {spec_field.required}")
                if problems:
                    details.append(ValidationDetail(label, "; ".join(problems), False, "warning"))
                else:
                    satisfied += 1
                    details.append(ValidationDetail(label, f"emitted as {element.native_type}", True))
        return outcome(
            self.name, details, checked=checked, satisfied=satisfied, empty_evidence="no fields declared"
        )


class BusinessLogicValidator:
    """Every flow step has a handler in the generated page."""

    name = "business_logic"

    def validate(self, context: ValidationContext) -> AxisOutcome:
        details: List[ValidationDetail] = []
        checked = 0
        satisfied = 0
        for flow in context.spec.flows:
            contract, content = _emitted(context, Dimension.BUSINESS_LOGIC, flow_subject(flow))
            for step in flow.steps:
                checked += 1
                label = f"{flow.name}/{step.id}"
                wanted = step_handler(step)
                element = None
                if contract is not None:
                    element = next(
                        (item for item in contract.elements if canonical_name(item.name) == wanted), None
                    )
                if element is not None and element.name in content:
                    satisfied += 1
                    details.append(ValidationDetail(label, f"handled by {element.name}", True))
                else:
                    details.append(ValidationDetail(label, f"no handler for step '{step.id}'", False, "critical"))
        return outcome(
            self.name, details, checked=checked, satisfied=satisfied, empty_evidence="no flow steps declared"
        )


class PlatformComplianceValidator:
    """Required capabilities are declared by the target and exercised by its output."""

    name = "platform_compliance"

    def validate(self, context: ValidationContext) -> AxisOutcome:
        declared = context.target.capabilities
        exercised = {cap for artifact in context.result.output.files for cap in artifact.capabilities}
        required = required_capabilities(context.spec)
        details: List[ValidationDetail] = []
        satisfied = 0
        for capability in required:
            problems = []
            if capability not in declared:
                problems.append(f"{context.target.id} declares no feature providing '{capability}'")
            if capability not in exercised:
                problems.append(f"no artifact exercises '{capability}'")
            if problems:
                details.append(ValidationDetail(capability, "; ".join(problems), False, "critical"))
            else:
                satisfied += 1
                details.append(ValidationDetail(capability, "declared and exercised", True))
        return outcome(
            self.name,
            details,
            checked=len(required),
            satisfied=satisfied,
            empty_evidence="no capabilities required",
        )


# Metrics where a higher value is worse; execution speed is the exception.
_COST_METRICS = ("compilation_time", "output_size", "memory_usage", "startup_time")


class PerformanceValidator:
    """Estimated metrics stay within the configured tolerance of the target baseline."""

    name = "performance"

    def validate(self, context: ValidationContext) -> AxisOutcome:
        tolerance = context.performance_tolerance
        baseline = context.target.baseline
        measured = context.result.performance
        details: List[ValidationDetail] = []
        satisfied = 0
        for metric in _COST_METRICS:
            limit = getattr(baseline, metric) * (1 + tolerance)
            value = getattr(measured, metric)
            if value <= limit:
                satisfied += 1
                details.append(ValidationDetail(metric, f"{value:g} within limit {limit:g}", True))
            else:
                details.append(ValidationDetail(metric, f"{value:g} exceeds limit {limit:g}", False, "warning"))
        floor = baseline.execution_speed * (1 - tolerance)
        if measured.execution_speed >= floor:
            satisfied += 1
            details.append(ValidationDetail("execution_speed", f"{measured.execution_speed:g} above {floor:g}", True))
        else:
            details.append(
                ValidationDetail("execution_speed", f"{measured.execution_speed:g} below {floor:g}", False, "warning")
            )
        return outcome(
            self.name,
            details,
            checked=len(_COST_METRICS) + 1,
            satisfied=satisfied,
            empty_evidence="no metrics",
        )


def _rule_reflected(rule_id: str, keyword: str, contents: Iterable[str]) -> bool:
    return any(rule_id in text and keyword in text for text in contents)


class SecurityValidator:
    """Each compliance rule is enforced by at least one artifact."""

    name = "security"

    def validate(self, context: ValidationContext) -> AxisOutcome:
        contents = [artifact.content for artifact in context.result.output.files]
        details: List[ValidationDetail] = []
        satisfied = 0
        for rule in context.spec.compliance.rules:
            keyword = RULE_KEYWORDS[rule.implementation]
            if _rule_reflected(rule.id, keyword, contents):
                satisfied += 1
                details.append(ValidationDetail(rule.id, f"enforced via {keyword}", True))
            else:
                severity = "critical" if rule.severity in ("high", "critical") else "warning"
                details.append(ValidationDetail(rule.id, f"no artifact enforces '{keyword}'", False, severity))
        return outcome(
            self.name,
            details,
            checked=len(context.spec.compliance.rules),
            satisfied=satisfied,
            empty_evidence="no compliance rules declared",
        )


__all__ = [
    "BusinessLogicValidator",
    "PerformanceValidator",
    "PlatformComplianceValidator",
    "SecurityValidator",
    "SemanticsValidator",
    "SyntaxValidator",
]
