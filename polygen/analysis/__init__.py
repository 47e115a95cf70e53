"""Cross-target analyzers over the results of one run."""

from .base import Analyzer
from .consistency import ConsistencyAnalyzer
from .optimization import OptimizationAnalyzer, improvement_percent

__all__ = ["Analyzer", "ConsistencyAnalyzer", "OptimizationAnalyzer", "improvement_percent"]
