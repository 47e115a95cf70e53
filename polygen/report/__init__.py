"""Evidence report construction and rendering."""

from .builder import build_report
from .render import render_markdown, report_to_dict, report_to_json

__all__ = ["build_report", "render_markdown", "report_to_dict", "report_to_json"]
