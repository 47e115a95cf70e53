"""Persistence helpers."""

from .report_cache import ReportCache

__all__ = ["ReportCache"]
