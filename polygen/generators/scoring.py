"""Business-logic preservation scoring from compared contracts."""

from __future__ import annotations

from typing import Sequence

from ..models import Artifact, BusinessLogicPreservationScore, Score
from .contracts import ContractComparison


def trace_marker(source: str) -> str:
    return f"@source {source}"


def score_preservation(
    comparison: ContractComparison, artifacts: Sequence[Artifact]
) -> BusinessLogicPreservationScore:
    elements = sum(comparison.elements.values())
    varied = sum(comparison.varied.values())
    matched = sum(comparison.matched.values())
    applicable = [item for item in comparison.coverage if item.applicable]
    covered = sum(item.covered for item in applicable)
    subjects = sum(item.total for item in applicable)
    traced = sum(1 for artifact in artifacts if trace_marker(artifact.source) in artifact.content)

    # With nothing declared nothing can diverge, but nothing is covered either.
    consistency = 1.0 - varied / elements if elements else 1.0
    completeness = covered / subjects if subjects else 0.0
    accuracy = matched / elements if elements else 0.0
    traceability = traced / len(artifacts) if artifacts else 0.0

    return BusinessLogicPreservationScore(
        consistency=Score(consistency, (f"{varied} of {elements} declared elements varied",)),
        completeness=Score(
            completeness, (f"{covered} of {subjects} declared contracts produced an artifact",)
        ),
        accuracy=Score(accuracy, (f"{matched} of {elements} elements match in type and requiredness",)),
        traceability=Score(traceability, (f"{traced} of {len(artifacts)} artifacts carry a trace marker",)),
        dimension_accuracy={
            dimension: comparison.accuracy(dimension) for dimension in comparison.elements
        },
    )


__all__ = ["score_preservation", "trace_marker"]
