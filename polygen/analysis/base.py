"""Base class for cross-target analyzers."""

from abc import ABC, abstractmethod
from typing import Generic, Sequence, TypeVar

from ..models import GenerationResult

ReportT = TypeVar("ReportT")


class Analyzer(ABC, Generic[ReportT]):
    """Contract for analyzers that aggregate every result of one run."""

    name: str = ""

    @abstractmethod
    def analyze(self, results: Sequence[GenerationResult]) -> ReportT:
        """Aggregate results without mutating them; the same input yields the same report."""
